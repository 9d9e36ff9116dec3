from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from suiscope.config.settings import (
    ADDRESS_HISTORY_LIMIT,
    LATEST_TX_LIMIT,
    OWNED_OBJECTS_LIMIT,
    SUI_COIN_TYPE,
)
from suiscope.core.models import NetworkStats


class SuiDataPort(ABC):
    """
    Abstract Class for fetching Sui on-chain data for search.

    Entity lookups raise RpcError subclasses; listing lookups return an
    empty page / zero balance instead of raising.
    """

    # --- Entity lookups ---

    @abstractmethod
    def get_transaction(self, digest: str) -> Dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def get_object(self, object_id: str) -> Dict[str, Any]:
        raise NotImplementedError

    # --- Address aggregates ---

    @abstractmethod
    def get_balance(self, address: str, coin_type: str = SUI_COIN_TYPE) -> Dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def get_all_balances(self, address: str) -> List[Dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def get_owned_objects(self, address: str, limit: int = OWNED_OBJECTS_LIMIT) -> Dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def get_transactions_by_address(
        self,
        address: str,
        limit: int = ADDRESS_HISTORY_LIMIT,
    ) -> Dict[str, Any]:
        raise NotImplementedError

    # --- Network ---

    @abstractmethod
    def get_latest_transactions(self, limit: int = LATEST_TX_LIMIT) -> Dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def get_system_state(self) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def get_total_transaction_blocks(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def get_network_stats(self) -> NetworkStats:
        raise NotImplementedError


def empty_page() -> Dict[str, Any]:
    return {"data": [], "hasNextPage": False, "nextCursor": None}


def zero_balance(coin_type: str = SUI_COIN_TYPE) -> Dict[str, Any]:
    return {
        "coinType": coin_type,
        "coinObjectCount": 0,
        "totalBalance": "0",
        "lockedBalance": {},
    }


def network_stats_from(total: int, state: Optional[Dict[str, Any]]) -> NetworkStats:
    state = state or {}
    validators = state.get("activeValidators")
    return NetworkStats(
        total_transactions=total or None,
        epoch=str(state["epoch"]) if state.get("epoch") is not None else None,
        reference_gas_price=(
            str(state["referenceGasPrice"]) if state.get("referenceGasPrice") is not None else None
        ),
        validator_count=len(validators) if isinstance(validators, list) else None,
    )
