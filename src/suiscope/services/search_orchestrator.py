from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional

from suiscope.config.settings import ADDRESS_OBJECT_LIMIT, ADDRESS_TX_LIMIT, SUI_COIN_TYPE
from suiscope.core.enums import EntityKind, SearchState
from suiscope.core.errors import RpcError
from suiscope.core.models import (
    AddressView,
    ClassificationResult,
    ObjectView,
    SearchEntry,
    SearchResultEnvelope,
    Suggestion,
    TransactionView,
)
from suiscope.ports.sui_data_port import SuiDataPort, empty_page, zero_balance
from suiscope.services.entity_classifier import EntityClassifier

logger = logging.getLogger(__name__)

ProgressFn = Callable[[str, Dict[str, Any]], None]

RELEVANCE = 100
PREFIX_SEARCH_MIN_LEN = 6
SUGGEST_MIN_LEN = 3
SUGGEST_KIND_MIN_LEN = 8

_SUGGESTION_LABELS = {
    EntityKind.TRANSACTION: "Transaction",
    EntityKind.ADDRESS: "Address",
    EntityKind.OBJECT: "Object",
}


def _sub(obj: Any, key: str) -> Dict[str, Any]:
    value = obj.get(key) if isinstance(obj, dict) else None
    return value if isinstance(value, dict) else {}


def _text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _noop_progress(event: str, data: Dict[str, Any]) -> None:
    return None


class SearchOrchestrator:
    """
    Turns one pasted string into a search result envelope.

    - Classifies the input, then issues only the lookups that kind needs
    - Address lookups (balance, recent transactions, owned objects) run
      concurrently and each one may fail on its own
    - A digest or object id that is not on chain yields an empty
      envelope, not an exception
    """

    def __init__(self, chain: SuiDataPort, classifier: Optional[EntityClassifier] = None) -> None:
        self.chain = chain
        self.classifier = classifier or EntityClassifier()

    def search(self, query: str, on_progress: Optional[ProgressFn] = None) -> SearchResultEnvelope:
        progress = on_progress or _noop_progress
        trimmed = (query or "").strip()

        progress(SearchState.CLASSIFYING.value, {"query": trimmed})
        try:
            classification = self.classifier.classify(trimmed)
        except Exception as exc:
            progress(SearchState.FAILED.value, {"query": trimmed, "message": str(exc)})
            raise

        progress(
            SearchState.DISPATCHING.value,
            {"query": trimmed, "kind": classification.kind.value, "confidence": classification.confidence},
        )
        entries = self._dispatch(trimmed, classification)

        progress(SearchState.MERGING.value, {"query": trimmed, "entries": len(entries)})
        envelope = SearchResultEnvelope(query=trimmed, entries=entries)

        progress(SearchState.DONE.value, {"query": trimmed, "total": envelope.total_count})
        return envelope

    def suggest(self, query: str) -> List[Suggestion]:
        trimmed = (query or "").strip()
        if len(trimmed) < SUGGEST_MIN_LEN:
            return []

        kind = self.classifier.classify(trimmed).kind
        if kind == EntityKind.UNKNOWN:
            return [Suggestion(text="0x" + trimmed, label="Address/Object")]
        if len(trimmed) >= SUGGEST_KIND_MIN_LEN:
            return [Suggestion(text=trimmed, label=_SUGGESTION_LABELS[kind])]
        return []

    # -------------------------
    # Dispatch per kind
    # -------------------------

    def _dispatch(self, query: str, classification: ClassificationResult) -> List[SearchEntry]:
        kind = classification.kind
        logger.info("search %r as %s (%.2f)", query, kind.value, classification.confidence)

        if kind == EntityKind.TRANSACTION:
            return self._search_transaction(query)
        if kind == EntityKind.ADDRESS:
            return self._search_address(query)
        if kind == EntityKind.OBJECT:
            return self._search_object(query)

        if len(query) >= PREFIX_SEARCH_MIN_LEN:
            # prefix matching needs an indexer; the node API cannot do it
            logger.debug("no prefix index for %r", query)
        return []

    def _search_transaction(self, digest: str) -> List[SearchEntry]:
        try:
            raw = self.chain.get_transaction(digest)
        except RpcError as exc:
            logger.info("transaction %s not available: %s", digest, exc)
            return []
        return [SearchEntry(kind=EntityKind.TRANSACTION, payload=self._transaction_view(digest, raw), relevance=RELEVANCE)]

    def _search_object(self, object_id: str) -> List[SearchEntry]:
        try:
            raw = self.chain.get_object(object_id)
        except RpcError as exc:
            logger.info("object %s not available: %s", object_id, exc)
            return []
        return [SearchEntry(kind=EntityKind.OBJECT, payload=self._object_view(object_id, raw), relevance=RELEVANCE)]

    def _search_address(self, address: str) -> List[SearchEntry]:
        with ThreadPoolExecutor(max_workers=3, thread_name_prefix="sui-address") as executor:
            balance_f = executor.submit(self.chain.get_balance, address)
            txs_f = executor.submit(self.chain.get_transactions_by_address, address, ADDRESS_TX_LIMIT)
            objects_f = executor.submit(self.chain.get_owned_objects, address, ADDRESS_OBJECT_LIMIT)

            view = AddressView(
                address=address,
                balance=self._settle(balance_f, "balance", address, lambda: zero_balance(SUI_COIN_TYPE)),
                transactions=self._settle(txs_f, "transactions", address, empty_page),
                objects=self._settle(objects_f, "objects", address, empty_page),
            )
        return [SearchEntry(kind=EntityKind.ADDRESS, payload=view, relevance=RELEVANCE)]

    @staticmethod
    def _settle(future: Future, part: str, address: str, default: Callable[[], Any]) -> Any:
        try:
            return future.result()
        except RpcError as exc:
            logger.warning("address %s %s lookup failed: %s", address, part, exc)
            return default()

    # -------------------------
    # View builders
    # -------------------------

    @staticmethod
    def _transaction_view(digest: str, raw: Dict[str, Any]) -> TransactionView:
        fields = raw if isinstance(raw, dict) else {}
        effects = _sub(fields, "effects")
        gas = _sub(effects, "gasUsed")
        tx_data = _sub(_sub(fields, "transaction"), "data")

        try:
            timestamp_ms = int(fields["timestampMs"]) if fields.get("timestampMs") is not None else None
        except (TypeError, ValueError):
            timestamp_ms = None
        try:
            computation_cost = int(gas.get("computationCost") or 0)
        except (TypeError, ValueError):
            computation_cost = 0

        return TransactionView(
            digest=_text(fields.get("digest")) or digest,
            status=_text(_sub(effects, "status").get("status")),
            sender=_text(tx_data.get("sender")),
            timestamp_ms=timestamp_ms,
            computation_cost=computation_cost,
            raw=raw,
        )

    @staticmethod
    def _object_view(object_id: str, raw: Dict[str, Any]) -> ObjectView:
        data = _sub(raw, "data")
        owner = data.get("owner")

        owner_kind: Optional[str] = None
        owner_id: Optional[str] = None
        if isinstance(owner, dict):
            for k in ("AddressOwner", "ObjectOwner", "Shared"):
                if k in owner:
                    owner_kind = k
                    owner_id = owner[k] if isinstance(owner[k], str) else None
                    break
        elif isinstance(owner, str):
            owner_kind = owner         # "Immutable"

        version = data.get("version")
        return ObjectView(
            object_id=_text(data.get("objectId")) or object_id,
            type=_text(data.get("type")),
            owner_kind=owner_kind,
            owner=owner_id,
            version=str(version) if version is not None else None,
            raw=raw,
        )
