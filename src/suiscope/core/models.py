from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from suiscope.config.settings import MIST_PER_SUI
from suiscope.core.enums import EntityKind


# Classification

@dataclass(frozen=True)
class ClassificationResult:
    """
    Entity kind a pasted string most likely names, with a 0..1 confidence.
    """

    kind: EntityKind
    confidence: float


# Entity views

@dataclass
class TransactionView:
    """
    One transaction block, with the fields a result card shows.
    """

    digest: str
    status: Optional[str]            # "success" | "failure" | None when effects are missing
    sender: Optional[str]
    timestamp_ms: Optional[int]
    computation_cost: int
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == "success"


@dataclass
class AddressView:
    """
    Balance, recent transactions and owned objects of one address.

    Each part is fetched on its own; a part that failed holds the
    client's empty value instead.
    """

    address: str
    balance: Dict[str, Any]
    transactions: Dict[str, Any]
    objects: Dict[str, Any]

    @property
    def balance_mist(self) -> int:
        try:
            return int(self.balance.get("totalBalance") or 0)
        except (TypeError, ValueError):
            return 0

    @property
    def balance_sui(self) -> Decimal:
        return Decimal(self.balance_mist) / Decimal(MIST_PER_SUI)


@dataclass
class ObjectView:
    """
    One on-chain object and who owns it.
    """

    object_id: str
    type: Optional[str]
    owner_kind: Optional[str]        # AddressOwner | ObjectOwner | Shared | Immutable
    owner: Optional[str]
    version: Optional[str]
    raw: Dict[str, Any] = field(default_factory=dict)


EntityPayload = Union[TransactionView, AddressView, ObjectView]


# Search results

@dataclass(frozen=True)
class SearchEntry:
    """
    A single search hit.
    """

    kind: EntityKind
    payload: EntityPayload
    relevance: int = 100


@dataclass
class SearchResultEnvelope:
    """
    Everything one search produced; empty entries is a valid answer.
    """

    query: str
    entries: List[SearchEntry] = field(default_factory=list)

    @property
    def total_count(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class Suggestion:

    text: str
    label: str


@dataclass(frozen=True)
class NetworkStats:

    total_transactions: Optional[int] = None
    epoch: Optional[str] = None
    reference_gas_price: Optional[str] = None
    validator_count: Optional[int] = None
