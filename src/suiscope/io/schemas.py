from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict

from suiscope.core.models import (
    AddressView,
    ClassificationResult,
    NetworkStats,
    ObjectView,
    SearchEntry,
    SearchResultEnvelope,
    TransactionView,
)


def _dec_to_str(x: Decimal) -> str:
    # keep as string for JSON precision safety
    return format(x, "f")


def classification_to_dict(c: ClassificationResult) -> Dict[str, Any]:
    return {"kind": c.kind.value, "confidence": c.confidence}


def _payload_to_dict(payload: Any) -> Dict[str, Any]:
    if isinstance(payload, TransactionView):
        return {
            "digest": payload.digest,
            "status": payload.status,
            "sender": payload.sender,
            "timestamp_ms": payload.timestamp_ms,
            "computation_cost": payload.computation_cost,
            "raw": payload.raw,
        }
    if isinstance(payload, AddressView):
        return {
            "address": payload.address,
            "balance_sui": _dec_to_str(payload.balance_sui),
            "balance": payload.balance,
            "transactions": payload.transactions,
            "objects": payload.objects,
        }
    if isinstance(payload, ObjectView):
        return {
            "object_id": payload.object_id,
            "type": payload.type,
            "owner_kind": payload.owner_kind,
            "owner": payload.owner,
            "version": payload.version,
            "raw": payload.raw,
        }
    raise TypeError(f"Unsupported payload: {type(payload).__name__}")


def entry_to_dict(e: SearchEntry) -> Dict[str, Any]:
    return {
        "kind": e.kind.value,
        "relevance": e.relevance,
        "payload": _payload_to_dict(e.payload),
    }


def envelope_to_dict(env: SearchResultEnvelope) -> Dict[str, Any]:
    return {
        "query": env.query,
        "entries": [entry_to_dict(e) for e in env.entries],
        "total_count": env.total_count,
    }


def stats_to_dict(s: NetworkStats) -> Dict[str, Any]:
    return {
        "total_transactions": s.total_transactions,
        "epoch": s.epoch,
        "reference_gas_price": s.reference_gas_price,
        "validator_count": s.validator_count,
    }
