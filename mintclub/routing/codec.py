"""Path and command encoding for the execution router.

Packed paths are address(20) | fee(3, big-endian) | address(20) | ...
Command payloads are standard ABI tuple encodings. Command codes are the
router's published opcodes; a wrong byte makes every transaction revert.
"""

from __future__ import annotations

from collections.abc import Sequence

from eth_abi import encode  # type: ignore[attr-defined]

from mintclub.errors import InvalidArgument
from mintclub.models.route import PoolKey, SwapPath
from mintclub.models.types import (
    NATIVE,
    address_bytes,
    is_native,
    is_valid_address,
    normalize_address,
)

# Execution router commands
V3_SWAP_EXACT_IN = 0x00
WRAP_ETH = 0x0B
UNWRAP_WETH = 0x0C
V4_SWAP = 0x10

# Singleton-pool router actions
V4_SWAP_EXACT_IN_SINGLE = 0x06
V4_SETTLE = 0x0B
V4_TAKE = 0x0E

# Router sentinel meaning "the router contract itself"
ADDRESS_THIS = "0x0000000000000000000000000000000000000002"

# TAKE with amount 0 takes the full open delta
OPEN_DELTA = 0

PATH_ADDRESS_SIZE = 20
PATH_FEE_SIZE = 3


def encode_path(tokens: Sequence[str], fees: Sequence[int]) -> bytes:
    """Encode a token/fee hop sequence into a packed path.

    Args:
        tokens: Token addresses, in swap order
        fees: Fee tier per hop (len(tokens) - 1 entries)

    Returns:
        Packed path bytes of length 20 + 23 * len(fees)

    Raises:
        InvalidArgument: On mismatched lengths, bad addresses or fees
    """
    path = SwapPath(tuple(tokens), tuple(fees))
    return encode_swap_path(path)


def encode_swap_path(path: SwapPath) -> bytes:
    """Encode an already validated SwapPath."""
    out = address_bytes(path.tokens[0])
    for fee, token in zip(path.fees, path.tokens[1:], strict=True):
        out += fee.to_bytes(PATH_FEE_SIZE, "big")
        out += address_bytes(token)
    return out


def encode_v3_swap_input(
    recipient: str,
    amount_in: int,
    amount_out_min: int,
    path: bytes | SwapPath,
    payer_is_user: bool,
) -> bytes:
    """ABI-encode an exact-input swap step: (address, uint256, uint256, bytes, bool)."""
    if isinstance(path, SwapPath):
        path = encode_swap_path(path)
    _require_uint(amount_in, "amount_in")
    _require_uint(amount_out_min, "amount_out_min")
    return encode(
        ["address", "uint256", "uint256", "bytes", "bool"],
        [address_bytes(recipient), amount_in, amount_out_min, bytes(path), payer_is_user],
    )


def encode_wrap_eth_input(amount: int, recipient: str = ADDRESS_THIS) -> bytes:
    """ABI-encode a wrap-native step: (address, uint256).

    The recipient defaults to the router itself so a following swap can
    spend the wrapped balance.
    """
    _require_uint(amount, "amount")
    return encode(["address", "uint256"], [address_bytes(recipient), amount])


def encode_unwrap_weth_input(recipient: str, amount_min: int) -> bytes:
    """ABI-encode an unwrap-native step: (address, uint256)."""
    _require_uint(amount_min, "amount_min")
    return encode(["address", "uint256"], [address_bytes(recipient), amount_min])


def encode_v4_swap_input(
    pool_key: PoolKey,
    zero_for_one: bool,
    amount_in: int,
    amount_out_min: int,
    recipient: str,
    payer_is_user: bool = False,
) -> bytes:
    """ABI-encode a singleton-pool exact-input swap.

    Actions: SWAP_EXACT_IN_SINGLE -> SETTLE -> TAKE(recipient, open delta).
    The payload is abi.encode(bytes actions, bytes[] params).
    """
    _require_uint(amount_in, "amount_in")
    _require_uint(amount_out_min, "amount_out_min")
    if amount_in >= 2**128 or amount_out_min >= 2**128:
        raise InvalidArgument("Singleton-pool amounts must fit in uint128")

    actions = bytes([V4_SWAP_EXACT_IN_SINGLE, V4_SETTLE, V4_TAKE])
    key = _pool_key_tuple(pool_key)

    # ExactInputSingleParams(PoolKey, bool, uint128, uint128, bytes hookData)
    swap_params = encode(
        ["((address,address,uint24,int24,address),bool,uint128,uint128,bytes)"],
        [(key, zero_for_one, amount_in, amount_out_min, b"")],
    )

    currency_in = pool_key.currency0 if zero_for_one else pool_key.currency1
    currency_out = pool_key.currency1 if zero_for_one else pool_key.currency0

    settle_params = encode(
        ["address", "uint256", "bool"],
        [address_bytes(currency_in), amount_in, payer_is_user],
    )
    take_params = encode(
        ["address", "address", "uint256"],
        [address_bytes(currency_out), address_bytes(recipient), OPEN_DELTA],
    )

    return encode(["bytes", "bytes[]"], [actions, [swap_params, settle_params, take_params]])


def encode_commands(commands: Sequence[int]) -> bytes:
    """Concatenate single-byte commands in execution order."""
    for command in commands:
        if not 0 <= command <= 0xFF:
            raise InvalidArgument(f"Command must be a single byte: {command}")
    return bytes(commands)


def sort_currencies(token_a: str, token_b: str) -> tuple[str, str]:
    """Sort two currencies for a pool key; the native sentinel sorts first."""
    a = normalize_address(token_a, validate=True)
    b = normalize_address(token_b, validate=True)
    if a == b:
        raise InvalidArgument(f"Pool currencies must differ: {a}")
    if a == NATIVE:
        return a, b
    if b == NATIVE:
        return b, a
    return (a, b) if int(a, 16) < int(b, 16) else (b, a)


def parse_user_path(text: str) -> SwapPath:
    """Parse a comma-separated "token,fee,token,fee,token" string.

    Raises:
        InvalidArgument: If a token field is not an address, a fee field is
            not a positive integer, or the counts don't alternate correctly.
    """
    parts = [part.strip() for part in text.split(",")]
    tokens: list[str] = []
    fees: list[int] = []

    for i, part in enumerate(parts):
        if i % 2 == 0:
            if not is_valid_address(part):
                raise InvalidArgument(f"Invalid token address at position {i}: {part!r}")
            if is_native(part):
                raise InvalidArgument(
                    f"Native asset at position {i}; use the wrapped-native address in paths"
                )
            tokens.append(part)
        else:
            try:
                fee = int(part)
            except ValueError as err:
                raise InvalidArgument(f"Invalid fee at position {i}: {part!r}") from err
            if fee <= 0:
                raise InvalidArgument(f"Invalid fee at position {i}: {part!r}")
            fees.append(fee)

    if len(tokens) != len(fees) + 1:
        raise InvalidArgument("Path format: token0,fee,token1,fee,token2,...")

    return SwapPath(tuple(tokens), tuple(fees))


def _pool_key_tuple(pool_key: PoolKey) -> tuple[bytes, bytes, int, int, bytes]:
    return (
        address_bytes(pool_key.currency0),
        address_bytes(pool_key.currency1),
        pool_key.fee,
        pool_key.tick_spacing,
        address_bytes(pool_key.hooks),
    )


def _require_uint(value: int, name: str) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidArgument(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0:
        raise InvalidArgument(f"{name} cannot be negative, got {value}")


__all__ = [
    "V3_SWAP_EXACT_IN",
    "WRAP_ETH",
    "UNWRAP_WETH",
    "V4_SWAP",
    "ADDRESS_THIS",
    "encode_path",
    "encode_swap_path",
    "encode_v3_swap_input",
    "encode_wrap_eth_input",
    "encode_unwrap_weth_input",
    "encode_v4_swap_input",
    "encode_commands",
    "sort_currencies",
    "parse_user_path",
]
