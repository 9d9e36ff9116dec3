from __future__ import annotations

import argparse
import datetime as dt
import json
import logging
import sys
import time
from typing import List, Optional

from suiscope.config import settings
from suiscope.core.enums import SearchState
from suiscope.core.models import AddressView, ObjectView, SearchResultEnvelope, TransactionView
from suiscope.io.schemas import classification_to_dict, envelope_to_dict, stats_to_dict
from suiscope.ports.sui_data_port import SuiDataPort
from suiscope.services.entity_classifier import EntityClassifier
from suiscope.services.search_orchestrator import SearchOrchestrator

from suiscope.adapters.chain.response_cache import ResponseCache
from suiscope.adapters.chain.rpc_client import RpcClient
from suiscope.adapters.chain.static_sui_adapter import StaticSuiAdapter


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="suiscope", description="Sui explorer search (transactions, addresses, objects)")
    p.add_argument("--rpc-url", default=settings.SUI_RPC_URL, help="Sui JSON-RPC endpoint")
    p.add_argument("--timeout", type=float, default=settings.SUI_RPC_TIMEOUT_SEC, help="HTTP timeout in seconds")
    p.add_argument("--cache-ttl-ms", type=int, default=settings.CACHE_TTL_MS, help="Response cache TTL in milliseconds")
    p.add_argument("--use-static", action="store_true", help="Use static adapter (dev/testing, no network)")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = p.add_subparsers(dest="command")

    s = sub.add_parser("search", help="Search a digest, address or object id")
    s.add_argument("query", help="Transaction digest, address or object id")
    s.add_argument("--json", action="store_true", help="Print the result envelope as JSON")

    c = sub.add_parser("classify", help="Show which entity kind a string looks like")
    c.add_argument("query")

    g = sub.add_parser("suggest", help="Autocomplete suggestions for a partial input")
    g.add_argument("query")

    latest = sub.add_parser("latest", help="Latest transactions on the network")
    latest.add_argument("--limit", type=int, default=settings.LATEST_TX_LIMIT, help="Number of transactions")

    sub.add_parser("stats", help="Network statistics")
    return p


def _short_id(value: Optional[str]) -> str:
    if not value:
        return ""
    if len(value) <= 14:
        return value
    return f"{value[:6]}...{value[-6:]}"


def _ts() -> str:
    return dt.datetime.now().strftime("%H:%M:%S")


def _make_progress_reporter(verbose: bool):
    start_time = time.time()

    def progress(event: str, data: dict) -> None:
        if event == SearchState.DISPATCHING.value:
            if verbose:
                print(f"[{_ts()}] Detected {data['kind']} ({round(data['confidence'] * 100)}% confidence)")
            return
        if event == SearchState.DONE.value:
            if verbose:
                elapsed = time.time() - start_time
                print(f"[{_ts()}] Done in {elapsed:.2f}s • {data['total']} result(s)")
            return
        if event == SearchState.FAILED.value:
            print(f"[{_ts()}] Error: {data.get('message', 'Unknown error')}", file=sys.stderr)

    return progress


def _print_envelope(env: SearchResultEnvelope) -> None:
    if not env.entries:
        print(f"No results for {env.query!r}")
        return
    for entry in env.entries:
        p = entry.payload
        if isinstance(p, TransactionView):
            print(f"Transaction {p.digest}")
            print(f"  status: {p.status or '-'}")
            print(f"  sender: {p.sender or '-'}")
            print(f"  computation cost: {p.computation_cost}")
        elif isinstance(p, AddressView):
            print(f"Address {p.address}")
            print(f"  balance: {format(p.balance_sui, 'f')} SUI")
            print(f"  recent transactions: {len(p.transactions.get('data') or [])}")
            print(f"  owned objects: {len(p.objects.get('data') or [])}")
        elif isinstance(p, ObjectView):
            print(f"Object {p.object_id}")
            print(f"  type: {p.type or '-'}")
            print(f"  owner: {p.owner_kind or '-'} {_short_id(p.owner)}".rstrip())
            print(f"  version: {p.version or '-'}")


def _build_chain(args: argparse.Namespace) -> SuiDataPort:
    if args.use_static:
        return StaticSuiAdapter()
    return RpcClient(
        base_url=args.rpc_url,
        timeout_sec=args.timeout,
        cache=ResponseCache(ttl_ms=args.cache_ttl_ms),
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        print("Missing command (search, classify, suggest, latest, stats)", file=sys.stderr)
        return 2

    classifier = EntityClassifier()

    if args.command == "classify":
        result = classifier.classify(args.query)
        print(json.dumps(dict(classification_to_dict(result), rule=classifier.rule_name(args.query))))
        return 0

    chain = _build_chain(args)
    orchestrator = SearchOrchestrator(chain=chain, classifier=classifier)
    adapter_label = "StaticSuiAdapter (dev/testing)" if args.use_static else f"RpcClient ({args.rpc_url})"
    if args.verbose:
        print(f"Adapter: {adapter_label}")

    try:
        if args.command == "search":
            if not args.query.strip():
                print("Empty query", file=sys.stderr)
                return 2
            env = orchestrator.search(args.query, on_progress=_make_progress_reporter(args.verbose))
            if args.json:
                print(json.dumps(envelope_to_dict(env), indent=2))
            else:
                _print_envelope(env)
            return 0

        if args.command == "suggest":
            for s in orchestrator.suggest(args.query):
                print(f"{s.label}: {s.text}")
            return 0

        if args.command == "latest":
            page = chain.get_latest_transactions(limit=args.limit)
            rows = page.get("data") or []
            if not rows:
                print("No transactions")
            for tx in rows:
                status = ((tx.get("effects") or {}).get("status") or {}).get("status", "-")
                print(f"{tx.get('digest', '')}  {status}  {tx.get('timestampMs') or '-'}")
            return 0

        if args.command == "stats":
            stats = chain.get_network_stats()
            print(json.dumps(stats_to_dict(stats), indent=2))
            return 0
    except Exception as exc:
        print(f"[{_ts()}] Error: {exc.__class__.__name__}: {exc}", file=sys.stderr)
        return 1
    finally:
        if isinstance(chain, RpcClient):
            chain.close()

    print(f"Unknown command: {args.command}", file=sys.stderr)
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
