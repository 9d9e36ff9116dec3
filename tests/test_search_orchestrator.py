import threading
import unittest

from suiscope.adapters.chain.response_cache import ResponseCache
from suiscope.adapters.chain.rpc_client import RpcClient
from suiscope.adapters.chain.static_sui_adapter import StaticSuiAdapter
from suiscope.core.enums import EntityKind
from suiscope.core.errors import TransportError
from suiscope.core.models import AddressView, ObjectView, TransactionView
from suiscope.services.entity_classifier import EntityClassifier
from suiscope.services.search_orchestrator import SearchOrchestrator

from fake_sui_node import (
    ADDRESS,
    DIGEST_B58,
    DIGEST_B64,
    OBJECT_ID,
    FakeSuiNode,
    balance,
    object_response,
    page,
    tx_block,
)


ADDRESS_METHODS = {"suix_getBalance", "suix_queryTransactionBlocks", "suix_getOwnedObjects"}


class SearchOrchestratorTests(unittest.TestCase):
    def _orchestrator(self, node: FakeSuiNode) -> SearchOrchestrator:
        client = RpcClient(base_url="http://node.test", cache=ResponseCache(), session=node)
        return SearchOrchestrator(chain=client)

    def test_empty_query_makes_no_calls(self) -> None:
        node = FakeSuiNode()
        svc = self._orchestrator(node)

        for query in ("", "   "):
            env = svc.search(query)
            self.assertEqual(env.entries, [])
            self.assertEqual(env.total_count, 0)
            self.assertEqual(env.query, "")
        self.assertEqual(node.requests, [])

    def test_unknown_query_makes_no_calls(self) -> None:
        node = FakeSuiNode()
        env = self._orchestrator(node).search("definitely not an id")

        self.assertEqual(env.total_count, 0)
        self.assertEqual(node.requests, [])

    def test_address_search_fans_out_to_three_lookups(self) -> None:
        node = FakeSuiNode(results={
            "suix_getBalance": balance("2500000000"),
            "suix_queryTransactionBlocks": page([tx_block()]),
            "suix_getOwnedObjects": page([object_response()["data"]]),
        })
        env = self._orchestrator(node).search(ADDRESS)

        self.assertEqual(len(node.requests), 3)
        self.assertEqual(set(node.methods), ADDRESS_METHODS)
        self.assertEqual(env.total_count, 1)

        entry = env.entries[0]
        self.assertEqual(entry.kind, EntityKind.ADDRESS)
        self.assertEqual(entry.relevance, 100)
        self.assertIsInstance(entry.payload, AddressView)
        self.assertEqual(entry.payload.address, ADDRESS)
        self.assertEqual(str(entry.payload.balance_sui), "2.5")
        self.assertEqual(len(entry.payload.transactions["data"]), 1)
        self.assertEqual(len(entry.payload.objects["data"]), 1)

    def test_address_lookups_run_concurrently(self) -> None:
        # each lookup blocks until all three are in flight
        barrier = threading.Barrier(3, timeout=5)

        def joined(result):
            def answer(params):
                barrier.wait()
                return result
            return answer

        node = FakeSuiNode(results={
            "suix_getBalance": joined(balance("2500000000")),
            "suix_queryTransactionBlocks": joined(page([tx_block()])),
            "suix_getOwnedObjects": joined(page([])),
        })
        env = self._orchestrator(node).search(ADDRESS)

        self.assertFalse(barrier.broken)
        self.assertEqual(env.total_count, 1)
        view = env.entries[0].payload
        self.assertEqual(view.balance_mist, 2500000000)
        self.assertEqual(len(view.transactions["data"]), 1)

    def test_address_limits_passed_to_node(self) -> None:
        node = FakeSuiNode(results={"suix_queryTransactionBlocks": page([]), "suix_getOwnedObjects": page([])})
        self._orchestrator(node).search(ADDRESS)

        by_method = {r["method"]: r["params"] for r in node.requests}
        self.assertEqual(by_method["suix_queryTransactionBlocks"][2], 5)
        self.assertEqual(by_method["suix_getOwnedObjects"][3], 10)

    def test_address_entry_survives_failed_sub_lookup(self) -> None:
        node = FakeSuiNode(
            results={
                "suix_queryTransactionBlocks": page([tx_block()]),
                "suix_getOwnedObjects": page([]),
            },
            errors={"suix_getBalance": (-32000, "balance service unavailable")},
        )
        env = self._orchestrator(node).search(ADDRESS)

        self.assertEqual(len(node.requests), 3)
        self.assertEqual(env.total_count, 1)
        view = env.entries[0].payload
        self.assertEqual(view.balance["totalBalance"], "0")
        self.assertEqual(view.balance_mist, 0)
        self.assertEqual(len(view.transactions["data"]), 1)

    def test_address_entry_survives_port_that_raises(self) -> None:
        class _FlakyBalance(StaticSuiAdapter):
            def get_balance(self, address, coin_type="0x2::sui::SUI"):
                raise TransportError("timeout")

        svc = SearchOrchestrator(chain=_FlakyBalance())
        env = svc.search(ADDRESS)

        self.assertEqual(env.total_count, 1)
        self.assertEqual(env.entries[0].payload.balance["totalBalance"], "0")

    def test_base64_digest_not_found_gives_empty_envelope(self) -> None:
        node = FakeSuiNode(errors={"sui_getTransactionBlock": (-32602, "Could not find the referenced transaction")})
        env = self._orchestrator(node).search(DIGEST_B64)

        self.assertEqual(node.methods, ["sui_getTransactionBlock"])
        self.assertEqual(env.entries, [])
        self.assertEqual(env.query, DIGEST_B64)

    def test_transaction_found(self) -> None:
        node = FakeSuiNode(results={"sui_getTransactionBlock": tx_block(status="failure")})
        env = self._orchestrator(node).search("  " + DIGEST_B58 + " ")

        self.assertEqual(env.query, DIGEST_B58)
        self.assertEqual(env.total_count, 1)
        tx = env.entries[0].payload
        self.assertIsInstance(tx, TransactionView)
        self.assertEqual(tx.digest, DIGEST_B58)
        self.assertEqual(tx.status, "failure")
        self.assertFalse(tx.succeeded)
        self.assertEqual(tx.sender, ADDRESS)
        self.assertEqual(tx.timestamp_ms, 1700000000000)
        self.assertEqual(tx.computation_cost, 750000)

    def test_malformed_transaction_fields_do_not_escape_search(self) -> None:
        node = FakeSuiNode(results={"sui_getTransactionBlock": {
            "digest": DIGEST_B58,
            "effects": "oops",
            "transaction": ["not", "a", "dict"],
            "timestampMs": "soon",
        }})
        env = self._orchestrator(node).search(DIGEST_B58)

        tx = env.entries[0].payload
        self.assertEqual(tx.digest, DIGEST_B58)
        self.assertIsNone(tx.status)
        self.assertIsNone(tx.sender)
        self.assertIsNone(tx.timestamp_ms)
        self.assertEqual(tx.computation_cost, 0)

    def test_malformed_object_fields_do_not_escape_search(self) -> None:
        node = FakeSuiNode(results={"sui_getObject": {"data": {"objectId": OBJECT_ID, "owner": 7, "type": ["x"]}}})
        env = self._orchestrator(node).search(OBJECT_ID)

        obj = env.entries[0].payload
        self.assertEqual(obj.object_id, OBJECT_ID)
        self.assertIsNone(obj.type)
        self.assertIsNone(obj.owner_kind)

    def test_transport_failure_on_transaction_gives_empty_envelope(self) -> None:
        env = self._orchestrator(FakeSuiNode(down=True)).search(DIGEST_B58)
        self.assertEqual(env.entries, [])

    def test_object_found(self) -> None:
        node = FakeSuiNode(results={"sui_getObject": object_response(owner={"Shared": {"initial_shared_version": 1}})})
        env = self._orchestrator(node).search(OBJECT_ID)

        self.assertEqual(node.methods, ["sui_getObject"])
        obj = env.entries[0].payload
        self.assertIsInstance(obj, ObjectView)
        self.assertEqual(obj.object_id, OBJECT_ID)
        self.assertEqual(obj.owner_kind, "Shared")
        self.assertIsNone(obj.owner)
        self.assertEqual(obj.version, "42")

    def test_object_not_found_gives_empty_envelope(self) -> None:
        node = FakeSuiNode(results={"sui_getObject": {"error": {"code": "notExists"}}})
        env = self._orchestrator(node).search(OBJECT_ID)
        self.assertEqual(env.total_count, 0)

    def test_repeated_search_is_served_from_cache(self) -> None:
        node = FakeSuiNode(results={
            "suix_getBalance": balance(),
            "suix_queryTransactionBlocks": page([]),
            "suix_getOwnedObjects": page([]),
        })
        svc = self._orchestrator(node)

        svc.search(ADDRESS)
        svc.search(ADDRESS)

        self.assertEqual(len(node.requests), 3)

    def test_progress_events_follow_state_machine(self) -> None:
        events = []
        svc = SearchOrchestrator(chain=StaticSuiAdapter(transactions={DIGEST_B58: tx_block()}))

        svc.search(DIGEST_B58, on_progress=lambda event, data: events.append(event))

        self.assertEqual(events, ["classifying", "dispatching", "merging", "done"])

    def test_classifier_failure_reports_failed_and_raises(self) -> None:
        class _Broken(EntityClassifier):
            def classify(self, text):
                raise RuntimeError("broken rules")

        events = []
        svc = SearchOrchestrator(chain=StaticSuiAdapter(), classifier=_Broken())

        with self.assertRaises(RuntimeError):
            svc.search("x", on_progress=lambda event, data: events.append(event))
        self.assertEqual(events, ["classifying", "failed"])

    def test_static_adapter_dispatch(self) -> None:
        chain = StaticSuiAdapter(
            transactions={DIGEST_B58: tx_block()},
            objects={OBJECT_ID: object_response()["data"]},
        )
        svc = SearchOrchestrator(chain=chain)

        self.assertEqual(svc.search(DIGEST_B58).entries[0].kind, EntityKind.TRANSACTION)
        self.assertEqual(svc.search(OBJECT_ID).entries[0].kind, EntityKind.OBJECT)
        self.assertEqual(svc.search(ADDRESS).entries[0].payload.transactions["data"][0]["digest"], DIGEST_B58)

    def test_suggest(self) -> None:
        svc = SearchOrchestrator(chain=StaticSuiAdapter())

        self.assertEqual(svc.suggest("ab"), [])
        self.assertEqual(svc.suggest("0x1234"), [])

        address = svc.suggest(ADDRESS)
        self.assertEqual([(s.label, s.text) for s in address], [("Address", ADDRESS)])

        unknown = svc.suggest("cafe")
        self.assertEqual([(s.label, s.text) for s in unknown], [("Address/Object", "0xcafe")])


if __name__ == "__main__":
    unittest.main()
