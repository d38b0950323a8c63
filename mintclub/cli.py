"""Command line interface.

Usage:
    mintclub price HUNT
    mintclub route ETH USDC 0.1
    mintclub buy SIGNET 10 --max-cost 50
    mintclub swap ETH SIGNET 0.01 --slippage 2
    mintclub create Signet SIGNET HUNT --steps 500000:0.001,1000000:0.01
    mintclub balances
    mintclub serve
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from decimal import Decimal, InvalidOperation

import structlog

from mintclub.config import Settings
from mintclub.curves import CurveSteps, CurveType, generate_curve, parse_steps
from mintclub.errors import MintClubError
from mintclub.logging import configure_logging
from mintclub.models.token import TokenInfo
from mintclub.models.types import is_native
from mintclub.service import MintClub, OperationResult
from mintclub.tokens import JsonTokenStore

logger = structlog.get_logger()


def parse_amount(text: str, decimals: int = 18) -> int:
    """Convert a decimal string to base units.

    Raises:
        argparse.ArgumentTypeError: If text is not a positive decimal with at
            most `decimals` fractional digits
    """
    try:
        value = Decimal(text)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"Invalid amount: {text!r}") from None
    scaled = value.scaleb(decimals)
    if value <= 0 or scaled != scaled.to_integral_value():
        raise argparse.ArgumentTypeError(f"Invalid amount: {text!r}")
    return int(scaled)


def format_amount(amount: int, decimals: int = 18) -> str:
    """Base units to a trimmed decimal string."""
    return format(Decimal(amount).scaleb(-decimals).normalize(), "f")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mintclub", description="Mint Club client")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    parser.add_argument("--slippage", type=float, default=None, help="Slippage tolerance in percent")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("price", help="Price of one curve token")
    p.add_argument("token")

    p = sub.add_parser("resolve", help="Resolve a symbol to an address")
    p.add_argument("token")

    p = sub.add_parser("route", help="Best swap route")
    p.add_argument("token_in")
    p.add_argument("token_out")
    p.add_argument("amount")

    p = sub.add_parser("buy", help="Mint curve tokens with the reserve token")
    p.add_argument("token")
    p.add_argument("amount", help="Tokens to mint")
    p.add_argument("--max-cost", default=None)

    p = sub.add_parser("sell", help="Burn curve tokens for the reserve token")
    p.add_argument("token")
    p.add_argument("amount", help="Tokens to burn")
    p.add_argument("--min-refund", default=None)

    p = sub.add_parser("zap-buy", help="Buy a curve token with any token")
    p.add_argument("token")
    p.add_argument("input_token")
    p.add_argument("amount", help="Input token amount")
    p.add_argument("--min-tokens", default=None)
    p.add_argument("--path", default=None, help="token,fee,token[,fee,token...]")

    p = sub.add_parser("zap-sell", help="Sell a curve token for any token")
    p.add_argument("token")
    p.add_argument("output_token")
    p.add_argument("amount", help="Tokens to burn")
    p.add_argument("--min-output", default=None)
    p.add_argument("--path", default=None, help="token,fee,token[,fee,token...]")

    p = sub.add_parser("swap", help="Swap any two tokens, using the curve when possible")
    p.add_argument("token_in")
    p.add_argument("token_out")
    p.add_argument("amount")
    p.add_argument("--min-output", default=None)
    p.add_argument("--path", default=None, help="token,fee,token[,fee,token...]")

    p = sub.add_parser("send", help="Transfer ETH or a token")
    p.add_argument("token")
    p.add_argument("to")
    p.add_argument("amount")

    p = sub.add_parser("info", help="Token metadata and bond state")
    p.add_argument("token")

    p = sub.add_parser("balances", aliases=["wallet"], help="Wallet balances")
    p.add_argument("owner", nargs="?", default=None, help="Address (default: the signing account)")

    p = sub.add_parser("create", help="Create a curve token")
    p.add_argument("name")
    p.add_argument("symbol")
    p.add_argument("reserve_token")
    shape = p.add_mutually_exclusive_group(required=True)
    shape.add_argument("--steps", default=None, help="range:price,range:price,...")
    shape.add_argument("--curve", choices=[c.value for c in CurveType], default=None)
    p.add_argument("--max-supply", default=None, help="Whole tokens (with --curve)")
    p.add_argument("--initial-price", default=None, help="Reserve per token (with --curve)")
    p.add_argument("--final-price", default=None, help="Reserve per token (with --curve)")
    p.add_argument("--mint-royalty", type=int, default=0, help="Basis points")
    p.add_argument("--burn-royalty", type=int, default=0, help="Basis points")

    sub.add_parser("serve", help="Run the HTTP API")
    return parser


def _print_result(result: OperationResult) -> None:
    tx = result.tx
    receipt = tx.receipt
    block = receipt.block_number if receipt is not None else "?"
    if result.approval is not None:
        print(f"Approved: {result.approval.tx_hash}")
    if result.route is not None:
        print(f"Route: {result.route.description}")
    print(f"{result.action}: {tx.tx_hash} (block {block})")
    if result.expected_out is not None:
        print(f"Expected output: {result.expected_out}")
    if result.min_out is not None:
        print(f"Bound: {result.min_out}")


def _optional(text: str | None, decimals: int) -> int | None:
    return parse_amount(text, decimals) if text is not None else None


def _print_info(client: MintClub, info: TokenInfo) -> None:
    bond = info.bond
    reserve_decimals = client.decimals(bond.reserve_token)
    reserve_symbol = client.tokens.symbol(bond.reserve_token)
    print(f"{info.name} ({info.symbol}) {info.token}")
    print(f"Creator: {bond.creator}")
    print(f"Reserve: {reserve_symbol} {bond.reserve_token}")
    print(f"Reserve balance: {format_amount(bond.reserve_balance, reserve_decimals)}")
    print(
        f"Supply: {format_amount(info.total_supply, info.decimals)} / "
        f"{format_amount(info.max_supply, info.decimals)}"
    )
    print(f"Royalties: mint {bond.mint_royalty_bps / 100:g}% / burn {bond.burn_royalty_bps / 100:g}%")
    print(f"Steps: {len(info.steps)}")
    if info.price is not None:
        print(f"Price: {format_amount(info.price, reserve_decimals)} {reserve_symbol}")


def _curve_steps(args: argparse.Namespace, reserve_decimals: int) -> CurveSteps:
    if args.steps is not None:
        return parse_steps(args.steps, reserve_decimals)
    missing = [
        flag
        for flag, value in (
            ("--max-supply", args.max_supply),
            ("--initial-price", args.initial_price),
            ("--final-price", args.final_price),
        )
        if value is None
    ]
    if missing:
        raise argparse.ArgumentTypeError(f"--curve also needs {', '.join(missing)}")
    return generate_curve(
        args.curve,
        parse_amount(args.max_supply),
        args.initial_price,
        args.final_price,
        reserve_decimals,
    )


def run(args: argparse.Namespace, client: MintClub) -> int:
    """Execute one parsed command against a client."""
    if args.command == "resolve":
        print(client.resolve(args.token))
        return 0

    if args.command == "price":
        token = client.resolve(args.token)
        result = client.price(token)
        reserve_decimals = client.decimals(result.reserve_token)
        print(
            f"{client.tokens.symbol(token)}: {format_amount(result.price, reserve_decimals)} "
            f"{client.tokens.symbol(result.reserve_token)}"
        )
        print(f"Reserve balance: {format_amount(result.reserve_balance, reserve_decimals)}")
        print(
            f"Royalties: mint {result.mint_royalty_bps / 100:g}% / "
            f"burn {result.burn_royalty_bps / 100:g}%"
        )
        return 0

    if args.command == "route":
        token_in = client.resolve(args.token_in)
        token_out = client.resolve(args.token_out)
        amount = parse_amount(args.amount, client.decimals(token_in))
        route = client.quote_route(token_in, token_out, amount, include_pools=True)
        assert route.amount_out is not None
        print(f"Route: {route.description}")
        print(f"Expected: {format_amount(route.amount_out, client.decimals(token_out))}")
        print(f"Candidates evaluated: {route.candidates_evaluated}")
        return 0

    if args.command == "info":
        _print_info(client, client.info(client.resolve(args.token)))
        return 0

    if args.command in ("balances", "wallet"):
        owner = args.owner if args.owner is not None else client.account
        print(f"Wallet: {owner}")
        for entry in client.balances(owner):
            if entry.balance > 0 or is_native(entry.token):
                print(f"  {entry.symbol}: {format_amount(entry.balance, entry.decimals)}")
        return 0

    if args.command == "buy":
        token = client.resolve(args.token)
        bond = client.bond.require_bond(token)
        reserve_decimals = client.decimals(bond.reserve_token)
        result = client.buy(
            token, parse_amount(args.amount), _optional(args.max_cost, reserve_decimals)
        )
    elif args.command == "sell":
        token = client.resolve(args.token)
        bond = client.bond.require_bond(token)
        reserve_decimals = client.decimals(bond.reserve_token)
        result = client.sell(
            token, parse_amount(args.amount), _optional(args.min_refund, reserve_decimals)
        )
    elif args.command == "zap-buy":
        token = client.resolve(args.token)
        input_token = client.resolve(args.input_token)
        result = client.zap_buy(
            token,
            input_token,
            parse_amount(args.amount, client.decimals(input_token)),
            _optional(args.min_tokens, client.decimals(token)),
            args.path,
        )
    elif args.command == "zap-sell":
        token = client.resolve(args.token)
        output_token = client.resolve(args.output_token)
        result = client.zap_sell(
            token,
            parse_amount(args.amount, client.decimals(token)),
            output_token,
            _optional(args.min_output, client.decimals(output_token)),
            args.path,
        )
    elif args.command == "swap":
        token_in = client.resolve(args.token_in)
        token_out = client.resolve(args.token_out)
        result = client.smart_swap(
            token_in,
            token_out,
            parse_amount(args.amount, client.decimals(token_in)),
            _optional(args.min_output, client.decimals(token_out)),
            args.path,
        )
    elif args.command == "send":
        token = client.resolve(args.token)
        result = client.send(token, args.to, parse_amount(args.amount, client.decimals(token)))
    elif args.command == "create":
        reserve = client.resolve(args.reserve_token)
        steps = _curve_steps(args, client.decimals(client.network.to_swap_token(reserve)))
        result = client.create_token(
            args.name, args.symbol, reserve, steps, args.mint_royalty, args.burn_royalty
        )
        print(f"Token: {result.details['token']}")
    else:
        raise ValueError(f"Unknown command: {args.command}")

    _print_result(result)
    return 0


def build_client(settings: Settings) -> MintClub:
    """Web3-backed client that persists saved tokens to the configured file."""
    return MintClub.from_settings(settings, JsonTokenStore(settings.token_store_path))


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.command == "serve":
        from mintclub.api.main import run as serve

        serve()
        return 0

    settings = Settings.from_env()
    if args.slippage is not None:
        settings = replace(settings, slippage_bps=int(round(args.slippage * 100)))
    client = build_client(settings)

    try:
        return run(args, client)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))
    except MintClubError as e:
        logger.error("command_failed", command=args.command, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 1


if __name__ == "__main__":
    sys.exit(main())
