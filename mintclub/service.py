"""Operation layer: buy, sell, zaps, swaps, price lookups and transfers.

MintClub composes the bond reader, route search, plan builder and
transaction executor. Read operations only need a ChainReader; anything
that sends a transaction also needs a ChainWriter.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import structlog

from mintclub.bond import UNIT, BondClient
from mintclub.chain.abis import BOND_ABI, ERC20_ABI, ROUTER_ABI, ZAP_ABI
from mintclub.chain.client import (
    ChainReader,
    ChainWriter,
    ContractCall,
    Web3ChainReader,
    Web3ChainWriter,
    connect,
)
from mintclub.chain.executor import DEFAULT_RECEIPT_TIMEOUT, TransactionExecutor, TxResult
from mintclub.config import DEFAULT_SLIPPAGE_BPS, NetworkConfig, Settings
from mintclub.curves import CurveSteps
from mintclub.errors import (
    InvalidArgument,
    MintClubError,
    NoRouteFound,
    PriceBoundExceeded,
)
from mintclub.models.bond import BondInfo, TokenPrice
from mintclub.models.plan import ExecutionPlan
from mintclub.models.route import Route
from mintclub.models.token import TokenBalance, TokenInfo
from mintclub.models.types import NATIVE, is_native, normalize_address
from mintclub.routing.codec import parse_user_path
from mintclub.routing.planner import PlanBuilder, min_output
from mintclub.routing.quoter import ChainQuoter, Quoter
from mintclub.routing.search import DEFAULT_MAX_WORKERS, DEFAULT_QUOTE_TIMEOUT, RouteFinder
from mintclub.tokens import InMemoryTokenStore, TokenResolver, TokenStore

logger = structlog.get_logger()


@dataclass
class OperationResult:
    """Outcome of a write operation.

    Attributes:
        action: buy, sell, zap_buy, zap_sell, swap, send or create
        tx: The confirmed main transaction
        amount_in: Amount spent (tokens, reserve or input token)
        expected_out: Quoted or simulated output, if known
        min_out: Bound the transaction enforced (max cost for buys)
        route: Swap route, for swaps and zaps
        approval: Approval transaction sent first, if one was needed
    """

    action: str
    tx: TxResult
    amount_in: int
    expected_out: int | None = None
    min_out: int | None = None
    route: Route | None = None
    approval: TxResult | None = None
    details: dict[str, Any] = field(default_factory=dict)


class MintClub:
    """Client for the bonding-curve protocol and its swap router.

    Args:
        reader: Read-only chain access
        network: Network constants
        writer: Signing chain access; None for a read-only client
        quoter: Quote client (defaults to the on-chain quoter)
        token_store: Where bought curve tokens are remembered
        slippage_bps: Default slippage tolerance
        quote_workers: Concurrent quote calls during route search
        quote_timeout: Bound on the whole route search fan-out
        receipt_timeout: Seconds to wait for each receipt
        clock: Time source for deadlines
    """

    def __init__(
        self,
        reader: ChainReader,
        network: NetworkConfig,
        *,
        writer: ChainWriter | None = None,
        quoter: Quoter | None = None,
        token_store: TokenStore | None = None,
        slippage_bps: int = DEFAULT_SLIPPAGE_BPS,
        quote_workers: int = DEFAULT_MAX_WORKERS,
        quote_timeout: float = DEFAULT_QUOTE_TIMEOUT,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
        clock: Callable[[], float] = time.time,
    ):
        self.reader = reader
        self.network = network
        self.writer = writer
        self.slippage_bps = slippage_bps
        self.quoter = quoter if quoter is not None else ChainQuoter(reader, network)
        self.finder = RouteFinder(self.quoter, network, quote_workers, quote_timeout)
        self.planner = PlanBuilder(network, clock)
        self.bond = BondClient(reader, network)
        self.tokens = TokenResolver(reader, self.bond, network)
        self.token_store = token_store if token_store is not None else InMemoryTokenStore()
        self.executor = (
            TransactionExecutor(reader, writer, receipt_timeout) if writer is not None else None
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, token_store: TokenStore | None = None
    ) -> MintClub:
        """Build a web3-backed client; writable when a private key is set."""
        w3 = connect(settings.effective_rpc_url, settings.rpc_timeout)
        writer = None
        if settings.private_key:
            writer = Web3ChainWriter(w3, settings.private_key, settings.network.chain_id)
        return cls(
            Web3ChainReader(w3),
            settings.network,
            writer=writer,
            token_store=token_store,
            slippage_bps=settings.slippage_bps,
            quote_workers=settings.quote_workers,
            quote_timeout=settings.quote_timeout,
            receipt_timeout=settings.receipt_timeout,
        )

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    def resolve(self, token: str) -> str:
        """Resolve an address or symbol (well-known or curve token)."""
        return self.tokens.resolve(token)

    def price(self, token: str) -> TokenPrice:
        """Price of one whole curve token in its reserve token."""
        return self.bond.price(token)

    def bond_of(self, token: str) -> BondInfo | None:
        """Bond record if token is a curve token. The native asset never is."""
        if is_native(token):
            return None
        return self.bond.get_bond_or_none(token)

    def decimals(self, token: str) -> int:
        """ERC-20 decimals of a token (18 for the native asset)."""
        return self.tokens.decimals(token)

    def info(self, token: str) -> TokenInfo:
        """ERC-20 metadata and bond state of a curve token.

        Raises:
            NotACurveToken: If token has no bond
        """
        bond = self.bond.require_bond(token)
        name = self.reader.read(ContractCall(bond.token, ERC20_ABI, "name"))
        total_supply = self.reader.read(ContractCall(bond.token, ERC20_ABI, "totalSupply"))

        price: int | None = None
        try:
            price = self.bond.mint_cost(bond.token, UNIT).reserve_amount
        except Exception as e:
            # Past max supply the bond refuses to quote
            logger.debug("price_unavailable", token=bond.token, error=str(e))

        return TokenInfo(
            token=bond.token,
            name=str(name),
            symbol=self.tokens.symbol(bond.token),
            decimals=self.tokens.decimals(bond.token),
            total_supply=int(total_supply),
            max_supply=self.bond.max_supply(bond.token),
            bond=bond,
            price=price,
            steps=self.bond.steps(bond.token),
        )

    def balances(self, owner: str | None = None) -> list[TokenBalance]:
        """Native balance plus every well-known and saved token.

        The owner defaults to the signing account. A token whose balance
        cannot be read is reported as zero.
        """
        if owner is None:
            owner = self.account
        owner = normalize_address(owner, validate=True)

        native = TokenBalance(
            NATIVE,
            self.tokens.symbol(NATIVE),
            self.tokens.decimals(NATIVE),
            self.reader.get_balance(owner),
        )
        result = [native]
        tokens = {t.address: t.symbol for t in self.network.tokens if not is_native(t.address)}
        for address, symbol in self.token_store.saved().items():
            tokens.setdefault(address, symbol)

        for address, symbol in tokens.items():
            try:
                call = ContractCall(address, ERC20_ABI, "balanceOf", (owner,))
                balance = int(self.reader.read(call))
            except Exception as e:
                logger.debug("balance_read_failed", token=address, owner=owner, error=str(e))
                balance = 0
            result.append(TokenBalance(address, symbol, self.tokens.decimals(address), balance))
        return result

    def quote_route(
        self, token_in: str, token_out: str, amount_in: int, *, include_pools: bool = False
    ) -> Route:
        """Best route between two tokens.

        Raises:
            NoRouteFound: If no candidate has a positive quote
        """
        route = self.finder.find_best_route(
            token_in, token_out, amount_in, include_pools=include_pools
        )
        if route is None:
            swap_in = self.network.to_swap_token(token_in)
            swap_out = self.network.to_swap_token(token_out)
            candidates = (
                0
                if swap_in == swap_out
                else len(self.finder.candidates(swap_in, swap_out, include_pools=include_pools))
            )
            raise NoRouteFound(token_in, token_out, amount_in, candidates)
        return route

    def resolve_route(
        self,
        token_in: str,
        token_out: str,
        amount_in: int,
        path: str | None = None,
        *,
        include_pools: bool = False,
    ) -> Route:
        """Manual path (quoted when possible) or the best searched route."""
        if path is None:
            return self.quote_route(token_in, token_out, amount_in, include_pools=include_pools)

        swap_path = parse_user_path(path)
        quoted = self.quoter.quote_path(swap_path, amount_in)
        if quoted is None or quoted <= 0:
            logger.warning("manual_path_unquoted", tokens=list(swap_path.tokens), fees=list(swap_path.fees))
            quoted = None
        return Route.manual(swap_path, quoted)

    def plan_swap(
        self,
        token_in: str,
        token_out: str,
        amount_in: int,
        min_out: int | None = None,
        path: str | None = None,
        recipient: str | None = None,
    ) -> tuple[Route, ExecutionPlan]:
        """Route and plan a plain router swap without sending anything.

        Singleton pools are only searched for native input.

        Raises:
            InvalidArgument: On bad input, or an unquoted manual path
                without an explicit minimum
            NoRouteFound: If the search finds nothing
        """
        token_in = normalize_address(token_in, validate=True)
        token_out = normalize_address(token_out, validate=True)
        if recipient is None:
            recipient = self.account
        route = self.resolve_route(
            token_in, token_out, amount_in, path, include_pools=is_native(token_in)
        )
        bound = min_output(route.amount_out, self.slippage_bps, min_out)
        plan = self.planner.build_swap_plan(route, token_in, token_out, amount_in, bound, recipient)
        return route, plan

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------

    def _require_executor(self) -> TransactionExecutor:
        if self.executor is None:
            raise MintClubError("A private key is required for this operation")
        return self.executor

    @property
    def account(self) -> str:
        """Signing address. Raises MintClubError on a read-only client."""
        return self._require_executor().sender

    def _remember(self, token: str) -> None:
        if self.token_store.has(token):
            return
        self.token_store.put(token, self.tokens.symbol(token))

    def _wraps_into(self, token: str, bond: BondInfo) -> bool:
        """True when token is native and the bond's reserve is its wrapped form."""
        return is_native(token) and bond.reserve_token == self.network.wrapped_native

    def buy(
        self,
        token: str,
        tokens_to_mint: int,
        max_cost: int | None = None,
        receiver: str | None = None,
    ) -> OperationResult:
        """Mint curve tokens, paying in the reserve token.

        Raises:
            NotACurveToken: If token has no bond
            PriceBoundExceeded: If the total cost exceeds max_cost
        """
        executor = self._require_executor()
        receiver = receiver or executor.sender
        bond = self.bond.require_bond(token)
        cost = self.bond.mint_cost(bond.token, tokens_to_mint)

        logger.info(
            "buy_quoted",
            token=bond.token,
            tokens=tokens_to_mint,
            reserve_amount=cost.reserve_amount,
            royalty=cost.royalty,
            total_cost=cost.total_cost,
        )
        if max_cost is not None and cost.total_cost > max_cost:
            raise PriceBoundExceeded(
                f"Cost {cost.total_cost} exceeds max cost {max_cost}", cost.total_cost, max_cost
            )

        approval = executor.ensure_approval(bond.reserve_token, self.network.bond, cost.total_cost)
        call = ContractCall(
            self.network.bond,
            BOND_ABI,
            "mint",
            (bond.token, tokens_to_mint, cost.total_cost, receiver),
        )
        tx = executor.execute(call)
        self._remember(bond.token)
        return OperationResult(
            action="buy",
            tx=tx,
            amount_in=cost.total_cost,
            expected_out=tokens_to_mint,
            min_out=cost.total_cost,
            approval=approval,
            details={"royalty": cost.royalty, "reserve_token": bond.reserve_token},
        )

    def sell(
        self,
        token: str,
        tokens_to_burn: int,
        min_refund: int | None = None,
        receiver: str | None = None,
    ) -> OperationResult:
        """Burn curve tokens for the reserve token.

        Raises:
            NotACurveToken: If token has no bond
            PriceBoundExceeded: If min_refund is above the quoted refund
        """
        executor = self._require_executor()
        receiver = receiver or executor.sender
        bond = self.bond.require_bond(token)
        refund = self.bond.burn_refund(bond.token, tokens_to_burn)

        logger.info(
            "sell_quoted",
            token=bond.token,
            tokens=tokens_to_burn,
            refund=refund.refund_amount,
            royalty=refund.royalty,
        )
        if min_refund is not None and min_refund > refund.refund_amount:
            raise PriceBoundExceeded(
                f"Refund {refund.refund_amount} is below min refund {min_refund}",
                refund.refund_amount,
                min_refund,
            )
        bound = min_output(refund.refund_amount, self.slippage_bps, min_refund)

        approval = executor.ensure_approval(bond.token, self.network.bond, tokens_to_burn)
        call = ContractCall(
            self.network.bond,
            BOND_ABI,
            "burn",
            (bond.token, tokens_to_burn, bound, receiver),
        )
        tx = executor.execute(call)
        return OperationResult(
            action="sell",
            tx=tx,
            amount_in=tokens_to_burn,
            expected_out=refund.refund_amount,
            min_out=bound,
            approval=approval,
            details={"royalty": refund.royalty, "reserve_token": bond.reserve_token},
        )

    def zap_buy(
        self,
        token: str,
        input_token: str,
        amount_in: int,
        min_tokens: int | None = None,
        path: str | None = None,
        receiver: str | None = None,
    ) -> OperationResult:
        """Swap input_token into the reserve and mint, in one transaction.

        The expected output comes from simulating zapMint; without an
        explicit min_tokens the bound is derived from it with slippage.
        Native input into a wrapped-native reserve only wraps, with no
        swap and no route.
        """
        executor = self._require_executor()
        receiver = receiver or executor.sender
        input_token = normalize_address(input_token, validate=True)
        bond = self.bond.require_bond(token)

        route: Route | None = None
        if self._wraps_into(input_token, bond):
            _reject_path(path)
            plan = self.planner.build_zap_wrap_plan(amount_in)
        elif self.network.to_swap_token(input_token) == bond.reserve_token:
            raise InvalidArgument("Input is already the reserve token; use buy instead")
        else:
            route = self.resolve_route(input_token, bond.reserve_token, amount_in, path)
            plan = self.planner.build_zap_mint_plan(
                route, input_token, bond.reserve_token, amount_in
            )
        approval = executor.ensure_requirement(plan.approval)

        def zap_call(bound: int) -> ContractCall:
            return ContractCall(
                self.network.zap,
                ZAP_ABI,
                "zapMint",
                (
                    bond.token,
                    NATIVE if is_native(input_token) else input_token,
                    amount_in,
                    bound,
                    plan.commands,
                    plan.inputs,
                    plan.deadline,
                    receiver,
                ),
                value=plan.value,
            )

        tokens_out, reserve_used = executor.simulate(zap_call(0))
        bound = min_output(int(tokens_out), self.slippage_bps, min_tokens)
        logger.info(
            "zap_buy_simulated",
            token=bond.token,
            input_token=input_token,
            amount_in=amount_in,
            route=plan.notes[0],
            tokens_out=int(tokens_out),
            reserve_used=int(reserve_used),
            min_tokens=bound,
        )

        tx = executor.execute(zap_call(bound))
        self._remember(bond.token)
        return OperationResult(
            action="zap_buy",
            tx=tx,
            amount_in=amount_in,
            expected_out=int(tokens_out),
            min_out=bound,
            route=route,
            approval=approval,
            details={"reserve_used": int(reserve_used)},
        )

    def zap_sell(
        self,
        token: str,
        tokens_to_burn: int,
        output_token: str,
        min_out: int | None = None,
        path: str | None = None,
        receiver: str | None = None,
    ) -> OperationResult:
        """Burn curve tokens and swap the refund into output_token, in one transaction.

        The embedded swap consumes exactly the quoted burn refund. Native
        output from a wrapped-native reserve only unwraps, with no swap and
        no route.
        """
        executor = self._require_executor()
        receiver = receiver or executor.sender
        output_token = normalize_address(output_token, validate=True)
        bond = self.bond.require_bond(token)

        unwrap_only = self._wraps_into(output_token, bond)
        if unwrap_only:
            _reject_path(path)
        elif self.network.to_swap_token(output_token) == bond.reserve_token:
            raise InvalidArgument("Output is already the reserve token; use sell instead")

        refund = self.bond.burn_refund(bond.token, tokens_to_burn)
        route: Route | None = None
        if not unwrap_only:
            route = self.resolve_route(bond.reserve_token, output_token, refund.refund_amount, path)

        def build(bound: int) -> ExecutionPlan:
            if route is None:
                return self.planner.build_zap_unwrap_plan(
                    bond.token, tokens_to_burn, bound, receiver
                )
            return self.planner.build_zap_burn_plan(
                route,
                bond.reserve_token,
                output_token,
                bond.token,
                tokens_to_burn,
                refund.refund_amount,
                bound,
                receiver,
            )

        def zap_call(plan: ExecutionPlan, bound: int) -> ContractCall:
            return ContractCall(
                self.network.zap,
                ZAP_ABI,
                "zapBurn",
                (
                    bond.token,
                    tokens_to_burn,
                    NATIVE if is_native(output_token) else output_token,
                    bound,
                    plan.commands,
                    plan.inputs,
                    plan.deadline,
                    receiver,
                ),
            )

        draft = build(0)
        approval = executor.ensure_requirement(draft.approval)
        output_amount, reserve_received = executor.simulate(zap_call(draft, 0))
        bound = min_output(int(output_amount), self.slippage_bps, min_out)
        logger.info(
            "zap_sell_simulated",
            token=bond.token,
            output_token=output_token,
            tokens=tokens_to_burn,
            refund=refund.refund_amount,
            route=draft.notes[0],
            output_amount=int(output_amount),
            min_out=bound,
        )

        plan = build(bound)
        tx = executor.execute(zap_call(plan, bound))
        return OperationResult(
            action="zap_sell",
            tx=tx,
            amount_in=tokens_to_burn,
            expected_out=int(output_amount),
            min_out=bound,
            route=route,
            approval=approval,
            details={"reserve_received": int(reserve_received)},
        )

    def swap(
        self,
        token_in: str,
        token_out: str,
        amount_in: int,
        min_out: int | None = None,
        path: str | None = None,
        receiver: str | None = None,
    ) -> OperationResult:
        """Plain router swap between two tokens."""
        executor = self._require_executor()
        route, plan = self.plan_swap(token_in, token_out, amount_in, min_out, path, receiver)

        logger.info(
            "swap_planned",
            token_in=token_in,
            token_out=token_out,
            amount_in=amount_in,
            route=route.description,
            expected_out=route.amount_out,
            min_out=plan.min_amount_out,
            commands=plan.commands.hex(),
        )
        approval = executor.ensure_requirement(plan.approval)
        call = ContractCall(
            plan.spender,
            ROUTER_ABI,
            "execute",
            (plan.commands, plan.inputs, plan.deadline),
            value=plan.value,
        )
        tx = executor.execute(call)
        return OperationResult(
            action="swap",
            tx=tx,
            amount_in=amount_in,
            expected_out=route.amount_out,
            min_out=plan.min_amount_out,
            route=route,
            approval=approval,
        )

    def smart_swap(
        self,
        token_in: str,
        token_out: str,
        amount_in: int,
        min_out: int | None = None,
        path: str | None = None,
        receiver: str | None = None,
    ) -> OperationResult:
        """Pick buy, zap-buy, sell, zap-sell or a plain swap for a token pair.

        Curve token output: buy when paying with the reserve token, else
        zap-buy. Curve token input: sell when receiving the reserve token,
        else zap-sell. Otherwise a plain router swap.
        """
        token_in = normalize_address(token_in, validate=True)
        token_out = normalize_address(token_out, validate=True)

        out_bond = self.bond_of(token_out)
        if out_bond is not None:
            if token_in == out_bond.reserve_token:
                tokens = self.bond.estimate_tokens_for_reserve(out_bond.token, amount_in)
                if tokens == 0:
                    raise InvalidArgument("Amount too small to mint any tokens")
                logger.info("smart_swap_route", kind="buy", tokens=tokens)
                return self.buy(out_bond.token, tokens, max_cost=amount_in, receiver=receiver)
            logger.info("smart_swap_route", kind="zap_buy")
            return self.zap_buy(out_bond.token, token_in, amount_in, min_out, path, receiver)

        in_bond = self.bond_of(token_in)
        if in_bond is not None:
            if token_out == in_bond.reserve_token:
                logger.info("smart_swap_route", kind="sell")
                return self.sell(in_bond.token, amount_in, min_out, receiver)
            logger.info("smart_swap_route", kind="zap_sell")
            return self.zap_sell(in_bond.token, amount_in, token_out, min_out, path, receiver)

        logger.info("smart_swap_route", kind="swap")
        return self.swap(token_in, token_out, amount_in, min_out, path, receiver)

    def send(self, token: str, to: str, amount: int) -> OperationResult:
        """Transfer native value or an ERC-20 token."""
        executor = self._require_executor()
        to = normalize_address(to, validate=True)
        if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
            raise InvalidArgument(f"Amount must be a positive integer, got {amount!r}")

        if is_native(token):
            tx = executor.send_value(to, amount)
        else:
            token = normalize_address(token, validate=True)
            tx = executor.execute(ContractCall(token, ERC20_ABI, "transfer", (to, amount)))
        return OperationResult(action="send", tx=tx, amount_in=amount, details={"to": to})

    def create_token(
        self,
        name: str,
        symbol: str,
        reserve_token: str,
        steps: CurveSteps,
        mint_royalty_bps: int = 0,
        burn_royalty_bps: int = 0,
    ) -> OperationResult:
        """Deploy a new curve token through the bond contract.

        The creation fee is read from the bond and attached as value. The
        new token's address comes from simulating createToken; its max
        supply is the last step range. Native ETH as the reserve means
        wrapped ETH.

        Raises:
            InvalidArgument: On an empty name or symbol, or royalties outside
                0..10000 bps
            SimulationReverted: If the bond rejects the parameters
        """
        executor = self._require_executor()
        if not name or not symbol:
            raise InvalidArgument("Token name and symbol are required")
        for royalty in (mint_royalty_bps, burn_royalty_bps):
            if not 0 <= royalty <= 10_000:
                raise InvalidArgument(f"Royalty must be within 0..10000 bps, got {royalty}")
        reserve_token = self.network.to_swap_token(normalize_address(reserve_token, validate=True))

        fee = self.bond.creation_fee()
        call = ContractCall(
            self.network.bond,
            BOND_ABI,
            "createToken",
            (
                (name, symbol),
                (
                    mint_royalty_bps,
                    burn_royalty_bps,
                    reserve_token,
                    steps.max_supply,
                    list(steps.ranges),
                    list(steps.prices),
                ),
            ),
            value=fee,
        )
        logger.info(
            "create_token",
            name=name,
            symbol=symbol,
            reserve_token=reserve_token,
            max_supply=steps.max_supply,
            steps=len(steps.ranges),
            creation_fee=fee,
        )

        tx = executor.execute(call)
        token = normalize_address(str(tx.simulated))
        self.token_store.put(token, symbol)
        return OperationResult(
            action="create",
            tx=tx,
            amount_in=fee,
            details={"token": token, "reserve_token": reserve_token, "creation_fee": fee},
        )


def _reject_path(path: str | None) -> None:
    if path is not None:
        raise InvalidArgument("No swap path is used when only wrapping or unwrapping")


__all__ = ["OperationResult", "MintClub"]
