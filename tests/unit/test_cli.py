"""Tests for CLI amount handling and command dispatch."""

import argparse
from pathlib import Path

import pytest
from eth_abi import decode  # type: ignore[attr-defined]

from mintclub.cli import build_client, build_parser, format_amount, parse_amount, run
from mintclub.config import Settings
from mintclub.routing.quoter import MockQuoter
from mintclub.service import MintClub
from mintclub.tokens import JsonTokenStore
from tests.helpers import (
    BOND,
    CURVE_TOKEN,
    HUNT,
    ONE,
    OTHER_USER,
    TOKEN_A,
    USDC,
    USER,
    WETH,
    FakeChain,
    add_curve_token,
    set_mint_cost,
)


class TestAmounts:
    @pytest.mark.parametrize(
        ("text", "decimals", "expected"),
        [
            ("1", 18, ONE),
            ("0.1", 18, ONE // 10),
            ("1.5", 6, 1_500_000),
            ("0.000001", 6, 1),
        ],
    )
    def test_parse(self, text: str, decimals: int, expected: int) -> None:
        assert parse_amount(text, decimals) == expected

    @pytest.mark.parametrize("text", ["0", "-1", "abc", "0.0000001"])
    def test_parse_rejects(self, text: str) -> None:
        with pytest.raises(argparse.ArgumentTypeError):
            parse_amount(text, 6)

    def test_format(self) -> None:
        assert format_amount(ONE) == "1"
        assert format_amount(1_500_000, 6) == "1.5"
        assert format_amount(10**24) == "1000000"


class TestRun:
    def test_resolve(self, service: MintClub, capsys: pytest.CaptureFixture[str]) -> None:
        args = build_parser().parse_args(["resolve", "usdc"])
        assert run(args, service) == 0
        assert capsys.readouterr().out.strip() == USDC

    def test_price(self, service: MintClub, chain: FakeChain, capsys: pytest.CaptureFixture[str]) -> None:
        add_curve_token(chain, CURVE_TOKEN, HUNT)
        set_mint_cost(chain, 3 * ONE, 0)

        assert run(build_parser().parse_args(["price", CURVE_TOKEN]), service) == 0

        out = capsys.readouterr().out
        assert "3 HUNT" in out
        assert "mint 1% / burn 1.5%" in out

    def test_buy(self, service: MintClub, chain: FakeChain, capsys: pytest.CaptureFixture[str]) -> None:
        add_curve_token(chain, CURVE_TOKEN, HUNT)
        set_mint_cost(chain, 50 * ONE, ONE // 2)

        args = build_parser().parse_args(["buy", CURVE_TOKEN, "10", "--max-cost", "51"])
        assert run(args, service) == 0

        assert chain.sent_call("mint").args == (CURVE_TOKEN, 10 * ONE, 50 * ONE + ONE // 2, USER)
        out = capsys.readouterr().out
        assert "Approved:" in out
        assert "buy: 0x" in out

    def test_send_uses_token_decimals(self, service: MintClub, chain: FakeChain) -> None:
        args = build_parser().parse_args(["send", "USDC", OTHER_USER, "2.5"])
        run(args, service)
        assert chain.sent_call("transfer").args == (OTHER_USER, 2_500_000)

    def test_global_options(self) -> None:
        args = build_parser().parse_args(["-v", "--slippage", "2", "route", "ETH", "USDC", "0.1"])
        assert args.verbose
        assert args.slippage == 2.0
        assert args.command == "route"


class TestTokenDecimals:
    def test_send_reads_decimals_on_chain(self, service: MintClub, chain: FakeChain) -> None:
        chain.on_read(TOKEN_A, "decimals", 8)
        run(build_parser().parse_args(["send", TOKEN_A, OTHER_USER, "0.5"]), service)
        assert chain.sent_call("transfer").args == (OTHER_USER, 50_000_000)

    def test_swap_scales_input_by_token_decimals(
        self, service: MintClub, chain: FakeChain, quoter: MockQuoter
    ) -> None:
        chain.on_read(TOKEN_A, "decimals", 8)
        quoter.set_path_quote((TOKEN_A, WETH), (3000,), ONE // 10)

        run(build_parser().parse_args(["swap", TOKEN_A, "ETH", "0.5"]), service)

        _, inputs, _ = chain.sent_call("execute").args
        _, amount_in, _, _, _ = decode(["address", "uint256", "uint256", "bytes", "bool"], inputs[0])
        assert amount_in == 50_000_000

    def test_route_formats_output_decimals(
        self, service: MintClub, chain: FakeChain, quoter: MockQuoter, capsys: pytest.CaptureFixture[str]
    ) -> None:
        chain.on_read(TOKEN_A, "decimals", 8)
        quoter.set_path_quote((USDC, TOKEN_A), (3000,), 150_000_000)

        run(build_parser().parse_args(["route", "USDC", TOKEN_A, "2"]), service)

        assert "Expected: 1.5" in capsys.readouterr().out
        direct = [c for c in quoter.calls if c[0] == "path" and c[1].tokens == (USDC, TOKEN_A)]
        assert direct and all(amount == 2_000_000 for _, _, amount in direct)


class TestTokenCommands:
    def test_info(self, service: MintClub, chain: FakeChain, capsys: pytest.CaptureFixture[str]) -> None:
        add_curve_token(chain, CURVE_TOKEN, HUNT, reserve_balance=42 * ONE)
        chain.on_read(CURVE_TOKEN, "name", "Signal")
        chain.on_read(CURVE_TOKEN, "symbol", "SIG")
        chain.on_read(CURVE_TOKEN, "totalSupply", 100 * ONE)
        chain.on_read(BOND, "maxSupply", 1_000 * ONE)
        chain.on_read(BOND, "getSteps", [(1_000 * ONE, 2 * ONE)])
        set_mint_cost(chain, 2 * ONE, 0)

        assert run(build_parser().parse_args(["info", CURVE_TOKEN]), service) == 0

        out = capsys.readouterr().out
        assert "Signal (SIG)" in out
        assert "Supply: 100 / 1000" in out
        assert "Price: 2 HUNT" in out

    @pytest.mark.parametrize("command", ["balances", "wallet"])
    def test_balances_skip_empty_tokens(
        self, service: MintClub, chain: FakeChain, capsys: pytest.CaptureFixture[str], command: str
    ) -> None:
        chain.balances[USER] = ONE // 2
        chain.on_read(USDC, "balanceOf", 2_500_000)

        assert run(build_parser().parse_args([command]), service) == 0

        out = capsys.readouterr().out
        assert f"Wallet: {USER}" in out
        assert "ETH: 0.5" in out
        assert "USDC: 2.5" in out
        assert "HUNT" not in out

    def test_create_with_steps(
        self, service: MintClub, chain: FakeChain, capsys: pytest.CaptureFixture[str]
    ) -> None:
        chain.on_read(BOND, "creationFee", 0)
        chain.on_simulate(BOND, "createToken", "0x" + "ab" * 20)
        args = build_parser().parse_args(
            ["create", "Signal", "SIG", "USDC", "--steps", "500:0.5,1000:1", "--mint-royalty", "100"]
        )

        assert run(args, service) == 0

        _, bond_params = chain.sent_call("createToken").args
        assert bond_params == (100, 0, USDC, 1_000 * ONE, [500 * ONE, 1_000 * ONE], [500_000, 1_000_000])
        assert f"Token: 0x{'ab' * 20}" in capsys.readouterr().out

    def test_create_curve_needs_prices(self, service: MintClub) -> None:
        args = build_parser().parse_args(
            ["create", "Signal", "SIG", "HUNT", "--curve", "linear", "--max-supply", "1000"]
        )
        with pytest.raises(argparse.ArgumentTypeError, match="--initial-price, --final-price"):
            run(args, service)

    def test_create_needs_a_shape(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["create", "Signal", "SIG", "HUNT"])


class TestBuildClient:
    def test_persists_tokens_to_configured_file(self, tmp_path: Path) -> None:
        path = tmp_path / "tokens.json"
        settings = Settings(rpc_url="http://127.0.0.1:8545", token_store_path=path)

        client = build_client(settings)

        assert isinstance(client.token_store, JsonTokenStore)
        assert client.token_store.path == path
        assert client.executor is None
