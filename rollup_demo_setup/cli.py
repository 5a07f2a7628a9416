"""Initialize validators for a fresh local demo rollup."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from .config import Settings
from .errors import SetupError
from .orchestrator import setup_validators


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging verbosity (DEBUG, INFO, WARNING, ...).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init = subparsers.add_parser("init", help="initialize validators for a new rollup chain")
    init.add_argument(
        "--force",
        action="store_true",
        help="clear any existing state",
    )
    init.add_argument(
        "--validatorcount",
        type=int,
        default=1,
        help="number of validators to deploy in addition to the sequencer",
    )
    init.add_argument(
        "--blocktime",
        type=int,
        default=2,
        help="expected length of time between blocks, in seconds",
    )
    init.add_argument(
        "--eth-url",
        default=None,
        help="L1 JSON-RPC endpoint (defaults to ETH_URL or http://localhost:7545).",
    )
    init.add_argument(
        "--repo-root",
        default=None,
        help="Repository root containing packages/arb-bridge-eth and rollups/.",
    )
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        settings = Settings.from_env().with_overrides(eth_url=args.eth_url, repo_root=args.repo_root)
        result = setup_validators(args.validatorcount + 1, args.blocktime, args.force, settings=settings)
    except SetupError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(f"Created rollup {result.artifact.rollup_address}")
    print(f"Inbox:     {result.artifact.inbox_address}")
    print(f"Sequencer: {result.sequencer.address}")
    for proxy in result.proxies:
        print(f"validator{proxy.owning_validator_index} wallet: {proxy.proxy_address}")
    print(f"State written to {result.output_dir}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
