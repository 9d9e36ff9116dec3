from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, Sequence

import requests

from suiscope.config.settings import (
    ADDRESS_HISTORY_LIMIT,
    LATEST_TX_LIMIT,
    OWNED_OBJECTS_LIMIT,
    SUI_COIN_TYPE,
    SUI_RPC_TIMEOUT_SEC,
    SUI_RPC_URL,
)

from suiscope.adapters.chain.response_cache import ResponseCache
from suiscope.core.dto import RpcRequest, RpcResponse
from suiscope.core.errors import NotFoundError, ProtocolError, RpcError, TransportError
from suiscope.core.models import NetworkStats
from suiscope.ports.sui_data_port import SuiDataPort, empty_page, network_stats_from, zero_balance

logger = logging.getLogger(__name__)


_TX_DETAIL_OPTIONS = {
    "showInput": True,
    "showEffects": True,
    "showObjectChanges": True,
    "showBalanceChanges": True,
    "showEvents": True,
}

_TX_LIST_OPTIONS = {
    "showInput": True,
    "showEffects": True,
    "showObjectChanges": False,
    "showBalanceChanges": False,
    "showEvents": False,
}

_OBJECT_DETAIL_OPTIONS = {
    "showType": True,
    "showOwner": True,
    "showPreviousTransaction": True,
    "showDisplay": False,
    "showContent": True,
    "showBcs": False,
    "showStorageRebate": True,
}

_OWNED_OBJECT_OPTIONS = {
    "showType": True,
    "showOwner": True,
    "showPreviousTransaction": False,
    "showDisplay": False,
    "showContent": False,
    "showBcs": False,
    "showStorageRebate": False,
}

_NOT_FOUND_MARKERS = ("could not find", "not found", "notexists", "deleted")


def _present(result: Any) -> bool:
    return result is not None


def _tx_found(result: Any) -> bool:
    return isinstance(result, dict) and bool(result)


def _object_found(result: Any) -> bool:
    return isinstance(result, dict) and "error" not in result and result.get("data") is not None


class RpcClient(SuiDataPort):
    """
    JSON-RPC 2.0 client for a single Sui full node, with a response cache.

    Only successful results are cached. Transaction and object lookups
    raise; balance and listing lookups log the failure and return an
    empty value so a composite view can still render.
    """

    def __init__(
        self,
        base_url: str = SUI_RPC_URL,
        timeout_sec: float = SUI_RPC_TIMEOUT_SEC,
        cache: Optional[ResponseCache] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._base_url = base_url
        self._timeout = timeout_sec
        self._cache = cache if cache is not None else ResponseCache()
        self._session = session if session is not None else requests.Session()

        self._request_id = 0
        self._id_lock = threading.Lock()

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    def close(self) -> None:
        self._session.close()

    # ---------- internal ----------

    def _next_id(self) -> int:
        with self._id_lock:
            self._request_id += 1
            return self._request_id

    def call(self, method: str, params: Optional[Sequence[Any]] = None) -> Any:
        req = RpcRequest(id=self._next_id(), method=method, params=list(params or []))
        logger.debug("rpc %s id=%d", method, req.id)

        try:
            resp = self._session.post(
                self._base_url,
                json=req.to_body(),
                headers={"Content-Type": "application/json"},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"{method} failed: {e}") from e

        if not 200 <= resp.status_code < 300:
            raise TransportError(f"HTTP error! status: {resp.status_code}", status=resp.status_code)

        try:
            body = resp.json()
        except ValueError as e:
            raise ProtocolError(f"Invalid JSON-RPC response for {method}") from e
        if not isinstance(body, dict):
            raise ProtocolError(f"Invalid JSON-RPC response for {method}: {body!r}")

        rpc = RpcResponse.from_body(body)
        if rpc.is_error:
            raise ProtocolError(rpc.error_message or "API Error", code=rpc.error_code)
        return rpc.result

    def _cached(
        self,
        method: str,
        params: List[Any],
        cacheable: Callable[[Any], bool] = _present,
    ) -> Any:
        key = self._cache.key(method, params)
        hit = self._cache.get(key)
        if hit is not None:
            logger.debug("cache hit: %s", key)
            return hit

        result = self.call(method, params)
        if cacheable(result):
            self._cache.set(key, result)
        return result

    # ---------- entity lookups (raise) ----------

    def get_transaction(self, digest: str) -> Dict[str, Any]:
        try:
            result = self._cached(
                "sui_getTransactionBlock",
                [{"digest": digest, "options": _TX_DETAIL_OPTIONS}],
                cacheable=_tx_found,
            )
        except ProtocolError as e:
            if any(m in e.message.lower() for m in _NOT_FOUND_MARKERS):
                raise NotFoundError(f"Transaction not found: {digest}") from e
            raise
        if not _tx_found(result):
            raise NotFoundError(f"Transaction not found: {digest}")
        return result

    def get_object(self, object_id: str) -> Dict[str, Any]:
        result = self._cached(
            "sui_getObject",
            [object_id, _OBJECT_DETAIL_OPTIONS],
            cacheable=_object_found,
        )
        if not _object_found(result):
            raise NotFoundError(f"Object not found: {object_id}")
        return result

    # ---------- aggregates (degrade to empty values) ----------

    def get_balance(self, address: str, coin_type: str = SUI_COIN_TYPE) -> Dict[str, Any]:
        try:
            return self._cached("suix_getBalance", [address, coin_type]) or zero_balance(coin_type)
        except RpcError as e:
            logger.warning("Failed to get balance for %s: %s", address, e)
            return zero_balance(coin_type)

    def get_all_balances(self, address: str) -> List[Dict[str, Any]]:
        try:
            result = self._cached("suix_getAllBalances", [address])
        except RpcError as e:
            logger.warning("Failed to get all balances for %s: %s", address, e)
            return []
        return result if isinstance(result, list) else []

    def get_owned_objects(self, address: str, limit: int = OWNED_OBJECTS_LIMIT) -> Dict[str, Any]:
        try:
            return self._cached(
                "suix_getOwnedObjects",
                [address, {"filter": None, "options": _OWNED_OBJECT_OPTIONS}, None, limit],
            ) or empty_page()
        except RpcError as e:
            logger.warning("Failed to get owned objects for %s: %s", address, e)
            return empty_page()

    def get_transactions_by_address(
        self,
        address: str,
        limit: int = ADDRESS_HISTORY_LIMIT,
    ) -> Dict[str, Any]:
        options = dict(_TX_LIST_OPTIONS, showBalanceChanges=True)
        try:
            return self._cached(
                "suix_queryTransactionBlocks",
                [{"filter": {"FromOrToAddress": {"addr": address}}, "options": options}, None, limit, True],
            ) or empty_page()
        except RpcError as e:
            logger.warning("Failed to get transactions for %s: %s", address, e)
            return empty_page()

    query_transactions_by_address = get_transactions_by_address

    def get_latest_transactions(self, limit: int = LATEST_TX_LIMIT) -> Dict[str, Any]:
        try:
            return self._cached(
                "suix_queryTransactionBlocks",
                [{"filter": None, "options": _TX_LIST_OPTIONS}, None, limit, True],
            ) or empty_page()
        except RpcError as e:
            logger.warning("Failed to get latest transactions: %s", e)
            return empty_page()

    # ---------- network ----------

    def get_system_state(self) -> Optional[Dict[str, Any]]:
        try:
            return self._cached("sui_getSystemState", [])
        except RpcError as e:
            logger.warning("Failed to get system state: %s", e)
            return None

    def get_total_transaction_blocks(self) -> int:
        try:
            result = self._cached("sui_getTotalTransactionBlocks", [])
        except RpcError as e:
            logger.warning("Failed to get total transaction blocks: %s", e)
            return 0
        try:
            return int(result)
        except (TypeError, ValueError):
            return 0

    def get_network_stats(self) -> NetworkStats:
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="sui-stats") as executor:
            total = executor.submit(self.get_total_transaction_blocks)
            state = executor.submit(self.get_system_state)
            return network_stats_from(total.result(), state.result())
