# Minimal ABIs for the CrocSwap contracts used by the planners.

_SWAP_INPUTS = [
    {"type": "address", "name": "base"},
    {"type": "address", "name": "quote"},
    {"type": "uint256", "name": "poolIdx"},
    {"type": "bool", "name": "isBuy"},
    {"type": "bool", "name": "inBaseQty"},
    {"type": "uint128", "name": "qty"},
    {"type": "uint16", "name": "tip"},
    {"type": "uint128", "name": "limitPrice"},
    {"type": "uint128", "name": "minOut"},
    {"type": "uint8", "name": "reserveFlags"},
]


ABI_CROC_DEX = [
    {
        "name": "swap",
        "inputs": _SWAP_INPUTS,
        "outputs": [{"type": "int128", "name": "baseFlow"}, {"type": "int128", "name": "quoteFlow"}],
        "stateMutability": "payable",
        "type": "function",
    },
    {
        "name": "userCmd",
        "inputs": [{"type": "uint16", "name": "callpath"}, {"type": "bytes", "name": "cmd"}],
        "outputs": [{"type": "bytes"}],
        "stateMutability": "payable",
        "type": "function",
    },
]

# CrocSwapRouter / CrocSwapRouterBypass expose the same swap signature.
ABI_CROC_ROUTER = [ABI_CROC_DEX[0]]

ABI_CROC_QUERY = [
    {
        "name": "queryPrice",
        "inputs": [{"type": "address", "name": "base"}, {"type": "address", "name": "quote"}, {"type": "uint256", "name": "poolIdx"}],
        "outputs": [{"type": "uint128"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "name": "queryCurveTick",
        "inputs": [{"type": "address", "name": "base"}, {"type": "address", "name": "quote"}, {"type": "uint256", "name": "poolIdx"}],
        "outputs": [{"type": "int24"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "name": "querySurplus",
        "inputs": [{"type": "address", "name": "owner"}, {"type": "address", "name": "token"}],
        "outputs": [{"type": "uint128", "name": "surplus"}],
        "stateMutability": "view",
        "type": "function",
    },
]

ABI_CROC_IMPACT = [
    {
        "name": "calcImpact",
        "inputs": [
            {"type": "address", "name": "base"},
            {"type": "address", "name": "quote"},
            {"type": "uint256", "name": "poolIdx"},
            {"type": "bool", "name": "isBuy"},
            {"type": "bool", "name": "inBaseQty"},
            {"type": "uint128", "name": "qty"},
            {"type": "uint16", "name": "poolTip"},
            {"type": "uint128", "name": "limitPrice"},
        ],
        "outputs": [
            {"type": "int128", "name": "baseFlow"},
            {"type": "int128", "name": "quoteFlow"},
            {"type": "uint128", "name": "finalPrice"},
        ],
        "stateMutability": "view",
        "type": "function",
    },
]

ABI_ERC20 = [
    {"name": "decimals", "outputs": [{"type": "uint8"}], "inputs": [], "stateMutability": "view", "type": "function"},
    {"name": "symbol", "outputs": [{"type": "string"}], "inputs": [], "stateMutability": "view", "type": "function"},
]
