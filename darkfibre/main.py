from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Optional, Sequence

import httpx
import pydantic

from darkfibre.client import DarkfibreClient
from darkfibre.configuration.config import settings
from darkfibre.core.errors import DarkfibreError
from darkfibre.core.services.trade_service import TradeOptions
from darkfibre.core.structures.structures import BuyOptions, Priority, SellOptions, SwapMode, SwapOptions
from darkfibre.logging.logger import get_logger, init_logging

log = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def _add_trade_limits(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--slippage", type=float, default=0.01, help="slippage tolerance (default: 0.01 = 1%%)")
    parser.add_argument(
        "--priority",
        choices=[p.value for p in Priority],
        default=Priority.FAST.value,
        help="transaction priority (default: fast)",
    )
    parser.add_argument(
        "--max-price-impact",
        type=float,
        dest="max_price_impact",
        help="abort before signing above this price impact fraction (e.g. 0.05)",
    )
    parser.add_argument(
        "--max-priority-cost",
        type=float,
        dest="max_priority_cost",
        help="abort before signing above this priority fee in SOL (e.g. 0.005)",
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="darkfibre",
        description="Trade on the Darkfibre Solana DEX API from the command line",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  # one-time registration, prints the API key (store it!)
  darkfibre register

  darkfibre profile
  darkfibre buy --mint <MINT> --sol-amount 0.01 --slippage 0.05 --priority fast
  darkfibre sell --mint <MINT> --token-amount 1500 --max-price-impact 0.02
  darkfibre swap --input-mint SOL --output-mint <MINT> --amount 0.01 --swap-mode exactIn

credentials default to DARKFIBRE_API_KEY / DARKFIBRE_PRIVATE_KEY / DARKFIBRE_BASE_URL
        """,
    )
    parser.add_argument("--base-url", dest="base_url", default=settings.DARKFIBRE_BASE_URL, help="API base URL")
    parser.add_argument("--api-key", dest="api_key", default=settings.DARKFIBRE_API_KEY, help="API key")
    parser.add_argument(
        "--private-key",
        dest="private_key",
        default=settings.DARKFIBRE_PRIVATE_KEY,
        help="base58 wallet secret (32 or 64 bytes); prefer the environment variable",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("register", help="register the wallet and print a new API key")
    subparsers.add_parser("profile", help="show wallet, 30-day volume and fee tier")

    buy_parser = subparsers.add_parser("buy", help="buy a token with SOL")
    buy_parser.add_argument("--mint", required=True, help="token mint to buy")
    buy_parser.add_argument("--sol-amount", dest="sol_amount", type=float, required=True, help="SOL to spend")
    _add_trade_limits(buy_parser)

    sell_parser = subparsers.add_parser("sell", help="sell a token for SOL")
    sell_parser.add_argument("--mint", required=True, help="token mint to sell")
    sell_parser.add_argument("--token-amount", dest="token_amount", type=float, required=True,
                             help="tokens to sell")
    _add_trade_limits(sell_parser)

    swap_parser = subparsers.add_parser("swap", help="swap between two mints ('SOL' for native SOL)")
    swap_parser.add_argument("--input-mint", dest="input_mint", required=True)
    swap_parser.add_argument("--output-mint", dest="output_mint", required=True)
    swap_parser.add_argument("--amount", type=float, required=True, help="amount, interpreted by --swap-mode")
    swap_parser.add_argument(
        "--swap-mode",
        dest="swap_mode",
        choices=[m.value for m in SwapMode],
        default=SwapMode.EXACT_IN.value,
    )
    _add_trade_limits(swap_parser)

    return parser.parse_args(argv)


def _trade_limits(args: argparse.Namespace) -> dict:
    return {
        "slippage": args.slippage,
        "priority": args.priority,
        "max_price_impact": args.max_price_impact,
        "max_priority_cost": args.max_priority_cost,
    }


def _build_trade_options(args: argparse.Namespace) -> TradeOptions:
    if args.command == "buy":
        return BuyOptions(mint=args.mint, sol_amount=args.sol_amount, **_trade_limits(args))
    if args.command == "sell":
        return SellOptions(mint=args.mint, token_amount=args.token_amount, **_trade_limits(args))
    return SwapOptions(
        input_mint=args.input_mint,
        output_mint=args.output_mint,
        amount=args.amount,
        swap_mode=args.swap_mode,
        **_trade_limits(args),
    )


def _print_json(payload: dict) -> None:
    print(json.dumps(payload, indent=2))


async def run(args: argparse.Namespace) -> int:
    if not args.private_key:
        print("❌ Missing private key (--private-key or DARKFIBRE_PRIVATE_KEY).", file=sys.stderr)
        return EXIT_USAGE

    if args.command == "register":
        result = await DarkfibreClient.register(args.private_key, base_url=args.base_url)
        _print_json(result.to_payload())
        print("⚠️ The API key is only shown once. Store it securely now.", file=sys.stderr)
        return EXIT_OK

    if not args.api_key:
        print("❌ Missing API key (--api-key or DARKFIBRE_API_KEY). Run 'darkfibre register' first.",
              file=sys.stderr)
        return EXIT_USAGE

    options: Optional[TradeOptions] = None
    if args.command != "profile":
        # Only option construction maps to a usage error; response models fail later
        try:
            options = _build_trade_options(args)
        except pydantic.ValidationError as exc:
            print(f"❌ Invalid options: {exc}", file=sys.stderr)
            return EXIT_USAGE

    async with DarkfibreClient(
            api_key=args.api_key,
            private_key=args.private_key,
            base_url=args.base_url,
            timeout=settings.DARKFIBRE_HTTP_TIMEOUT_SECONDS,
    ) as client:
        if options is None:
            profile = await client.get_profile()
            _print_json(profile.to_payload())
            return EXIT_OK

        trade = {"buy": client.buy, "sell": client.sell, "swap": client.swap}[args.command]
        result = await trade(options)

    _print_json(result.to_payload())
    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    init_logging()
    args = parse_args(argv)
    try:
        return asyncio.run(run(args))
    except DarkfibreError as exc:
        log.debug("[DARKFIBRE][CLI] %s failed", args.command, exc_info=True)
        print(f"❌ {exc}", file=sys.stderr)
        return EXIT_FAILURE
    except (pydantic.ValidationError, ValueError) as exc:
        log.debug("[DARKFIBRE][CLI] %s response not understood", args.command, exc_info=True)
        print(f"❌ Could not parse the Darkfibre response for '{args.command}': {exc}", file=sys.stderr)
        if args.command in ("buy", "sell", "swap"):
            print("⚠️ The transaction may already have been submitted. Check the wallet before retrying.",
                  file=sys.stderr)
        return EXIT_FAILURE
    except httpx.HTTPStatusError as exc:
        log.debug("[DARKFIBRE][CLI] %s failed", args.command, exc_info=True)
        print(f"❌ HTTP {exc.response.status_code} from {exc.request.url}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
