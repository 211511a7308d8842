"""Command-line interface for the yield aggregator."""
from __future__ import annotations

import argparse
import asyncio
import json
import sys

from .config import ORCA, RAYDIUM, load_config
from .logging_setup import configure_logging
from .models import YieldOpportunity
from .services.aggregator import YieldAggregator


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="yield-aggregator",
        description="Solana liquidity-pool yield aggregator",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    collect_parser = sub.add_parser("collect", help="Collect yield opportunities")
    collect_parser.add_argument(
        "--protocol",
        action="append",
        choices=[RAYDIUM, ORCA],
        default=None,
        help="Only run the given protocol (repeatable; default: all)",
    )
    collect_parser.add_argument(
        "--min-tvl",
        type=float,
        default=0.0,
        help="Drop opportunities below this TVL in USD",
    )
    collect_parser.add_argument(
        "--json",
        action="store_true",
        help="Print JSON instead of a table",
    )

    return parser


def format_table(opportunities: list[YieldOpportunity]) -> str:
    """Render opportunities as a fixed-width text table."""
    header = (
        f"{'ID':<28} {'PROTOCOL':<9} {'ASSET':<12} {'APY':>8} {'FEE':>8} "
        f"{'REWARD':>8} {'TVL':>16} {'RISK':>4} {'IL':>5}  REWARDS"
    )
    lines = [header, "-" * len(header)]
    for o in opportunities:
        lines.append(
            f"{o.id:<28} {o.protocol:<9} {o.asset:<12} "
            f"{o.total_apy * 100:>7.2f}% {o.fee_apy * 100:>7.2f}% "
            f"{o.reward_apy * 100:>7.2f}% {o.tvl_usd:>16,.2f} {o.risk_score:>4} "
            f"{o.impermanent_loss_risk:>5.2f}  {', '.join(o.rewards) or '-'}"
        )
    if not opportunities:
        lines.append("No opportunities found")
    return "\n".join(lines)


async def _run(args: argparse.Namespace) -> None:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = load_config(args.config)

    if args.command == "collect":
        aggregator = YieldAggregator(config, protocols=args.protocol)
        opportunities = await aggregator.collect_all(min_tvl=args.min_tvl)
        if args.json:
            print(json.dumps([o.to_dict() for o in opportunities], indent=2))
        else:
            print(format_table(opportunities))
    else:
        build_parser().print_help()
        sys.exit(1)


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    asyncio.run(_run(args))
