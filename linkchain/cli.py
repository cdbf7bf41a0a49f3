"""linkchain.cli

Command line interface entry point for linkchain.

Design constraints:
- argparse-based.
- Lazy imports: do not import the server stack at parse time.

Two kinds of commands: ``run`` starts a node in this process; the rest talk to
an already running node over its control surface.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

EPILOG = "Longest valid chain wins. Nothing else is consulted."


@dataclass(frozen=True)
class CliContext:
    repo_root: Path


def _repo_root_from_cwd() -> Path:
    return Path.cwd()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linkchain",
        description="Hash-linked ledger replicated between peers.",
        epilog=EPILOG,
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit.",
    )

    sub = parser.add_subparsers(dest="command")

    p_run = sub.add_parser("run", help="Start a node (peer endpoint + control surface)")
    p_run.add_argument("--config", type=Path, default=None, help="YAML config file.")
    p_run.add_argument("--api-port", type=int, default=None)
    p_run.add_argument("--p2p-port", type=int, default=None)
    p_run.add_argument(
        "--peer",
        action="append",
        default=[],
        help="Peer to dial at startup (ws://host:port). Repeatable.",
    )

    p_gen = sub.add_parser("genesis", help="Compute a genesis hash for a data/timestamp pair")
    p_gen.add_argument("--data", required=True)
    p_gen.add_argument("--timestamp", type=float, required=True)

    sub.add_parser("status", help="Print resolved node configuration")

    for name, help_text in [
        ("blocks", "Print the chain of a running node"),
        ("peers", "List peers of a running node"),
    ]:
        p = sub.add_parser(name, help=help_text)
        _add_remote_args(p)

    p_mine = sub.add_parser("mine", help="Append payload data on a running node")
    p_mine.add_argument("data")
    _add_remote_args(p_mine)

    p_add = sub.add_parser("add-peer", help="Ask a running node to dial a peer")
    p_add.add_argument("peer")
    _add_remote_args(p_add)

    return parser


def _add_remote_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--url", default=None, help="Control surface base URL (default: from config).")
    p.add_argument("--token", default=None, help="Bearer token (default: from config).")


def _print_version() -> None:
    from linkchain import __version__

    print(f"linkchain v{__version__}")


def _load_config(ctx: CliContext, path: Path | None = None):
    from linkchain.core.config import Config

    if path is not None:
        return Config.from_yaml(path)
    return Config.from_repo_defaults(ctx.repo_root)


def _cmd_run(ctx: CliContext, args: argparse.Namespace) -> int:
    from linkchain.core.exceptions import ConfigError
    from linkchain.core.logs import configure_logging
    from linkchain.node import Node

    try:
        config = _load_config(ctx, args.config)
    except ConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    update: dict = {}
    if args.api_port is not None:
        update["api"] = config.api.model_copy(update={"port": args.api_port})
    if args.p2p_port is not None:
        update["p2p"] = config.p2p.model_copy(update={"port": args.p2p_port})
    if args.peer:
        update["peers"] = [*config.peers, *args.peer]
    if update:
        config = config.model_copy(update=update)

    configure_logging(config.logging)
    node = Node(config=config)
    try:
        asyncio.run(node.serve())
    except KeyboardInterrupt:
        pass
    return 0


def _cmd_genesis(ctx: CliContext, args: argparse.Namespace) -> int:
    from linkchain.core.hashing import compute_hash
    from linkchain.core.models import GENESIS_PREVIOUS_HASH

    print(compute_hash(0, GENESIS_PREVIOUS_HASH, args.timestamp, args.data))
    return 0


def _cmd_status(ctx: CliContext, args: argparse.Namespace) -> int:
    from linkchain.core.exceptions import ConfigError
    from linkchain.core.time import to_datetime

    try:
        config = _load_config(ctx)
    except ConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    genesis = config.genesis.block()
    print("linkchain status")
    print(f"- config: {ctx.repo_root / 'config'}")
    print(f"- control surface: http://{config.api.host}:{config.api.port}")
    print(f"- peer endpoint: ws://{config.p2p.host}:{config.p2p.port}")
    print(f"- initial peers: {', '.join(config.peers) or '(none)'}")
    print(f"- genesis: {genesis.hash} ({to_datetime(genesis.timestamp).isoformat()})")
    return 0


def _remote(ctx: CliContext, args: argparse.Namespace, call: Callable) -> int:
    import httpx

    from linkchain.core.client import ClientConfig, ControlClient

    config = _load_config(ctx)
    host = "127.0.0.1" if config.api.host in ("0.0.0.0", "") else config.api.host
    client_cfg = ClientConfig(
        base_url=args.url or f"http://{host}:{config.api.port}",
        auth_token=args.token if args.token is not None else config.api.auth_token,
    )

    async def _run():
        async with ControlClient(client_cfg) as client:
            return await call(client)

    try:
        result = asyncio.run(_run())
    except httpx.HTTPStatusError as e:
        print(f"error: {e.response.status_code} {e.response.text}", file=sys.stderr)
        return 1
    except httpx.HTTPError as e:
        print(f"error: cannot reach {client_cfg.base_url}: {e}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2))
    return 0


def _cmd_blocks(ctx: CliContext, args: argparse.Namespace) -> int:
    async def call(client):
        return [b.to_wire() for b in await client.blocks()]

    return _remote(ctx, args, call)


def _cmd_mine(ctx: CliContext, args: argparse.Namespace) -> int:
    async def call(client):
        return (await client.mine(args.data)).to_wire()

    return _remote(ctx, args, call)


def _cmd_peers(ctx: CliContext, args: argparse.Namespace) -> int:
    async def call(client):
        return await client.peers()

    return _remote(ctx, args, call)


def _cmd_add_peer(ctx: CliContext, args: argparse.Namespace) -> int:
    async def call(client):
        return await client.add_peer(args.peer)

    return _remote(ctx, args, call)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        _print_version()
        return 0

    if not args.command:
        parser.print_help()
        return 2

    ctx = CliContext(repo_root=_repo_root_from_cwd())

    dispatch: dict[str, Callable[[CliContext, argparse.Namespace], int]] = {
        "run": _cmd_run,
        "genesis": _cmd_genesis,
        "status": _cmd_status,
        "blocks": _cmd_blocks,
        "mine": _cmd_mine,
        "peers": _cmd_peers,
        "add-peer": _cmd_add_peer,
    }

    fn = dispatch.get(str(args.command))
    if fn is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 2

    return int(fn(ctx, args))


if __name__ == "__main__":
    raise SystemExit(main())
