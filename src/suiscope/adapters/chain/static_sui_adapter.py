from suiscope.ports.sui_data_port import SuiDataPort, empty_page, network_stats_from, zero_balance
from suiscope.core.errors import NotFoundError
from suiscope.config.settings import SUI_COIN_TYPE
from typing import Any, Dict, List, Optional

class StaticSuiAdapter(SuiDataPort):
    def __init__(self,
                 transactions: Optional[Dict[str, Dict[str, Any]]] = None,
                 objects: Optional[Dict[str, Dict[str, Any]]] = None,
                 balances: Optional[Dict[str, List[Dict[str, Any]]]] = None,
                 owned_objects: Optional[Dict[str, List[Dict[str, Any]]]] = None,
                 system_state: Optional[Dict[str, Any]] = None,
                 ):
        self._txs = transactions or {}
        self._objects = {k.lower(): v for k, v in (objects or {}).items()}
        self._balances = {k.lower(): v for k, v in (balances or {}).items()}
        self._owned = {k.lower(): v for k, v in (owned_objects or {}).items()}
        self._state = system_state
        self.calls: List[str] = []

    def get_transaction(self, digest):
        self.calls.append("get_transaction")
        if digest not in self._txs:
            raise NotFoundError(f"Transaction not found: {digest}")
        return self._txs[digest]

    def get_object(self, object_id):
        self.calls.append("get_object")
        obj = self._objects.get(object_id.lower())
        if obj is None:
            raise NotFoundError(f"Object not found: {object_id}")
        return {"data": obj}

    def get_balance(self, address, coin_type = SUI_COIN_TYPE):
        self.calls.append("get_balance")
        for b in self._balances.get(address.lower(), []):
            if b.get("coinType") == coin_type:
                return b
        return zero_balance(coin_type)

    def get_all_balances(self, address):
        self.calls.append("get_all_balances")
        return list(self._balances.get(address.lower(), []))

    def get_owned_objects(self, address, limit = 50):
        self.calls.append("get_owned_objects")
        items = self._owned.get(address.lower(), [])
        if not items:
            return empty_page()
        return {"data": items[:limit], "hasNextPage": len(items) > limit, "nextCursor": None}

    def _involving(self, address):
        ad = address.lower()
        items = [
            t for t in self._txs.values()
            if ((t.get("transaction") or {}).get("data") or {}).get("sender", "").lower() == ad
            or ad in [r.lower() for r in t.get("recipients", [])]
        ]
        items.sort(key=lambda t: int(t.get("timestampMs") or 0), reverse=True)
        return items

    def get_transactions_by_address(self, address, limit = 20):
        self.calls.append("get_transactions_by_address")
        items = self._involving(address)
        if not items:
            return empty_page()
        return {"data": items[:limit], "hasNextPage": len(items) > limit, "nextCursor": None}

    def get_latest_transactions(self, limit = 10):
        self.calls.append("get_latest_transactions")
        items = sorted(self._txs.values(), key=lambda t: int(t.get("timestampMs") or 0), reverse=True)
        return {"data": items[:limit], "hasNextPage": len(items) > limit, "nextCursor": None}

    def get_system_state(self):
        self.calls.append("get_system_state")
        return self._state

    def get_total_transaction_blocks(self):
        self.calls.append("get_total_transaction_blocks")
        return len(self._txs)

    def get_network_stats(self):
        return network_stats_from(self.get_total_transaction_blocks(), self.get_system_state())
