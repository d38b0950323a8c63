"""Minimal contract ABIs, just the functions this client calls."""


def _fn(
    name: str,
    inputs: list[tuple[str, str]],
    outputs: list[tuple[str, str]],
    mutability: str = "view",
) -> dict:
    return {
        "type": "function",
        "name": name,
        "stateMutability": mutability,
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "outputs": [{"name": n, "type": t} for n, t in outputs],
    }


BOND_ABI = [
    _fn(
        "tokenBond",
        [("token", "address")],
        [
            ("creator", "address"),
            ("mintRoyalty", "uint16"),
            ("burnRoyalty", "uint16"),
            ("createdAt", "uint40"),
            ("reserveToken", "address"),
            ("reserveBalance", "uint256"),
        ],
    ),
    _fn(
        "getReserveForToken",
        [("token", "address"), ("tokensToMint", "uint256")],
        [("reserveAmount", "uint256"), ("royalty", "uint256")],
    ),
    _fn(
        "getRefundForTokens",
        [("token", "address"), ("tokensToBurn", "uint256")],
        [("refundAmount", "uint256"), ("royalty", "uint256")],
    ),
    _fn(
        "mint",
        [
            ("token", "address"),
            ("tokensToMint", "uint256"),
            ("maxReserveAmount", "uint256"),
            ("receiver", "address"),
        ],
        [("tokensReceived", "uint256")],
        "nonpayable",
    ),
    _fn(
        "burn",
        [
            ("token", "address"),
            ("tokensToBurn", "uint256"),
            ("minRefund", "uint256"),
            ("receiver", "address"),
        ],
        [("refundAmount", "uint256")],
        "nonpayable",
    ),
    _fn("tokenImplementation", [], [("", "address")]),
    _fn("creationFee", [], [("", "uint256")]),
    _fn("maxSupply", [("token", "address")], [("", "uint128")]),
    {
        "type": "function",
        "name": "getSteps",
        "stateMutability": "view",
        "inputs": [{"name": "token", "type": "address"}],
        "outputs": [
            {
                "name": "",
                "type": "tuple[]",
                "components": [
                    {"name": "rangeTo", "type": "uint128"},
                    {"name": "price", "type": "uint128"},
                ],
            }
        ],
    },
    {
        "type": "function",
        "name": "createToken",
        "stateMutability": "payable",
        "inputs": [
            {
                "name": "tokenParam",
                "type": "tuple",
                "components": [
                    {"name": "name", "type": "string"},
                    {"name": "symbol", "type": "string"},
                ],
            },
            {
                "name": "bondParam",
                "type": "tuple",
                "components": [
                    {"name": "mintRoyalty", "type": "uint16"},
                    {"name": "burnRoyalty", "type": "uint16"},
                    {"name": "reserveToken", "type": "address"},
                    {"name": "maxSupply", "type": "uint128"},
                    {"name": "stepRanges", "type": "uint128[]"},
                    {"name": "stepPrices", "type": "uint128[]"},
                ],
            },
        ],
        "outputs": [{"name": "", "type": "address"}],
    },
]

ZAP_ABI = [
    _fn(
        "zapMint",
        [
            ("token", "address"),
            ("inputToken", "address"),
            ("inputAmount", "uint256"),
            ("minTokensOut", "uint256"),
            ("commands", "bytes"),
            ("inputs", "bytes[]"),
            ("deadline", "uint256"),
            ("receiver", "address"),
        ],
        [("tokensReceived", "uint256"), ("reserveUsed", "uint256")],
        "payable",
    ),
    _fn(
        "zapBurn",
        [
            ("token", "address"),
            ("tokensToBurn", "uint256"),
            ("outputToken", "address"),
            ("minOutputAmount", "uint256"),
            ("commands", "bytes"),
            ("inputs", "bytes[]"),
            ("deadline", "uint256"),
            ("receiver", "address"),
        ],
        [("outputAmount", "uint256"), ("reserveReceived", "uint256")],
        "nonpayable",
    ),
]

ROUTER_ABI = [
    _fn(
        "execute",
        [("commands", "bytes"), ("inputs", "bytes[]"), ("deadline", "uint256")],
        [],
        "payable",
    ),
]

# Multi-hop quoter; nonpayable, so it is always called as a simulation
QUOTER_ABI = [
    _fn(
        "quoteExactInput",
        [("path", "bytes"), ("amountIn", "uint256")],
        [
            ("amountOut", "uint256"),
            ("sqrtPriceX96AfterList", "uint160[]"),
            ("initializedTicksCrossedList", "uint32[]"),
            ("gasEstimate", "uint256"),
        ],
        "nonpayable",
    ),
]

POOL_QUOTER_ABI = [
    {
        "type": "function",
        "name": "quoteExactInputSingle",
        "stateMutability": "nonpayable",
        "inputs": [
            {
                "name": "params",
                "type": "tuple",
                "components": [
                    {
                        "name": "poolKey",
                        "type": "tuple",
                        "components": [
                            {"name": "currency0", "type": "address"},
                            {"name": "currency1", "type": "address"},
                            {"name": "fee", "type": "uint24"},
                            {"name": "tickSpacing", "type": "int24"},
                            {"name": "hooks", "type": "address"},
                        ],
                    },
                    {"name": "zeroForOne", "type": "bool"},
                    {"name": "exactAmount", "type": "uint128"},
                    {"name": "hookData", "type": "bytes"},
                ],
            }
        ],
        "outputs": [
            {"name": "deltaAmounts", "type": "int128[]"},
            {"name": "sqrtPriceX96After", "type": "uint160"},
            {"name": "initializedTicksLoaded", "type": "uint32"},
        ],
    },
]

ERC20_ABI = [
    _fn("balanceOf", [("owner", "address")], [("", "uint256")]),
    _fn("allowance", [("owner", "address"), ("spender", "address")], [("", "uint256")]),
    _fn("approve", [("spender", "address"), ("amount", "uint256")], [("", "bool")], "nonpayable"),
    _fn("transfer", [("to", "address"), ("amount", "uint256")], [("", "bool")], "nonpayable"),
    _fn("decimals", [], [("", "uint8")]),
    _fn("name", [], [("", "string")]),
    _fn("symbol", [], [("", "string")]),
    _fn("totalSupply", [], [("", "uint256")]),
]

__all__ = [
    "BOND_ABI",
    "ZAP_ABI",
    "ROUTER_ABI",
    "QUOTER_ABI",
    "POOL_QUOTER_ABI",
    "ERC20_ABI",
]
