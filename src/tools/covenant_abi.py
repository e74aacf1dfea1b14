"""
Covenant protocol ABI (only the functions and events the strategy tools use).
"""

# Nested state snapshot carried by the Mint, Redeem and Swap events
_LEX_PARAMS_COMPONENTS = [
    {"internalType": "uint256", "name": "baseTokenSupply", "type": "uint256"},
    {"internalType": "uint256", "name": "aTokenSupply", "type": "uint256"},
    {"internalType": "uint256", "name": "zTokenSupply", "type": "uint256"},
    {"internalType": "uint256", "name": "baseTokenPrice", "type": "uint256"},
    {"internalType": "uint256", "name": "debtNotionalPrice", "type": "uint256"},
]

_EVENT_PRICE_INPUTS = [
    {
        "indexed": False,
        "internalType": "struct LEXParams",
        "name": "lexState",
        "type": "tuple",
        "components": _LEX_PARAMS_COMPONENTS,
    },
    {"indexed": False, "internalType": "uint256", "name": "aTokenPrice", "type": "uint256"},
    {"indexed": False, "internalType": "uint256", "name": "zTokenPrice", "type": "uint256"},
]

# SwapType enum: 0 = exact amount in
SWAP_TYPE_EXACT_IN = 0

COVENANT_ABI = [
    # Events
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "uint256", "name": "marketId", "type": "uint256"},
            {"indexed": False, "internalType": "uint256", "name": "baseAmountIn", "type": "uint256"},
            {"indexed": True, "internalType": "address", "name": "sender", "type": "address"},
            {"indexed": True, "internalType": "address", "name": "receiver", "type": "address"},
            {"indexed": False, "internalType": "uint256", "name": "aTokenAmountOut", "type": "uint256"},
            {"indexed": False, "internalType": "uint256", "name": "zTokenAmountOut", "type": "uint256"},
        ] + _EVENT_PRICE_INPUTS,
        "name": "Mint",
        "type": "event"
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "uint256", "name": "marketId", "type": "uint256"},
            {"indexed": False, "internalType": "uint256", "name": "aTokenAmountIn", "type": "uint256"},
            {"indexed": False, "internalType": "uint256", "name": "zTokenAmountIn", "type": "uint256"},
            {"indexed": True, "internalType": "address", "name": "sender", "type": "address"},
            {"indexed": True, "internalType": "address", "name": "receiver", "type": "address"},
            {"indexed": False, "internalType": "uint256", "name": "amountOut", "type": "uint256"},
        ] + _EVENT_PRICE_INPUTS,
        "name": "Redeem",
        "type": "event"
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "uint256", "name": "marketId", "type": "uint256"},
            {"indexed": False, "internalType": "address", "name": "tokenAddressIn", "type": "address"},
            {"indexed": False, "internalType": "address", "name": "tokenAddressOut", "type": "address"},
            {"indexed": False, "internalType": "uint256", "name": "amountIn", "type": "uint256"},
            {"indexed": False, "internalType": "uint256", "name": "amountOut", "type": "uint256"},
            {"indexed": True, "internalType": "address", "name": "sender", "type": "address"},
            {"indexed": True, "internalType": "address", "name": "receiver", "type": "address"},
        ] + _EVENT_PRICE_INPUTS,
        "name": "Swap",
        "type": "event"
    },
    # Views
    {
        "inputs": [
            {"internalType": "uint256", "name": "marketId", "type": "uint256"},
            {"internalType": "bool", "name": "getRawState", "type": "bool"}
        ],
        "name": "getLexState",
        "outputs": [
            {
                "components": [
                    {"internalType": "uint256", "name": "targetLTV", "type": "uint256"},
                    {"internalType": "uint256", "name": "currentLTV", "type": "uint256"},
                    {"internalType": "uint256", "name": "balancedDebtPriceDiscount", "type": "uint256"},
                    {"internalType": "uint256", "name": "currentDebtPriceDiscount", "type": "uint256"}
                ],
                "internalType": "struct LexState",
                "name": "lexState",
                "type": "tuple"
            }
        ],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "getTotalMarkets",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [{"internalType": "uint256", "name": "marketId", "type": "uint256"}],
        "name": "getMarketConfig",
        "outputs": [
            {
                "components": [
                    {"internalType": "contract IERC20", "name": "baseToken", "type": "address"},
                    {"internalType": "contract IERC20", "name": "quoteToken", "type": "address"},
                    {"internalType": "contract ISynthToken", "name": "aToken", "type": "address"},
                    {"internalType": "contract ISynthToken", "name": "zToken", "type": "address"},
                    {"internalType": "contract IPriceOracle", "name": "oracle", "type": "address"},
                    {"internalType": "contract ILiquidExchangeModel", "name": "liquidExchangeModel", "type": "address"},
                    {"internalType": "uint256", "name": "duration", "type": "uint256"}
                ],
                "internalType": "struct MarketConfig",
                "name": "",
                "type": "tuple"
            }
        ],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [
            {"internalType": "uint256", "name": "marketId", "type": "uint256"},
            {"internalType": "bool", "name": "getRawState", "type": "bool"}
        ],
        "name": "getMarketState",
        "outputs": [
            {
                "components": [
                    {"internalType": "uint256", "name": "baseTokenSupply", "type": "uint256"},
                    {"internalType": "uint256", "name": "updateTimestamp", "type": "uint256"},
                    {"internalType": "uint256", "name": "baseTokenPrice", "type": "uint256"},
                    {"internalType": "uint256", "name": "debtNotionalPrice", "type": "uint256"},
                    {"internalType": "bool", "name": "unlocked", "type": "bool"}
                ],
                "internalType": "struct MarketState",
                "name": "",
                "type": "tuple"
            }
        ],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [
            {"internalType": "uint256", "name": "marketId", "type": "uint256"},
            {"internalType": "uint256", "name": "baseAmountIn", "type": "uint256"}
        ],
        "name": "previewMint",
        "outputs": [
            {"internalType": "uint256", "name": "aTokenAmountOut", "type": "uint256"},
            {"internalType": "uint256", "name": "zTokenAmountOut", "type": "uint256"},
            {"internalType": "uint256", "name": "afterDiscountPrice", "type": "uint256"}
        ],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [
            {"internalType": "uint256", "name": "marketId", "type": "uint256"},
            {"internalType": "address", "name": "assetIn", "type": "address"},
            {"internalType": "address", "name": "assetOut", "type": "address"},
            {"internalType": "uint256", "name": "amountSpecified", "type": "uint256"},
            {"internalType": "enum SwapType", "name": "swapType", "type": "uint8"}
        ],
        "name": "previewSwap",
        "outputs": [
            {"internalType": "uint256", "name": "amountCalc", "type": "uint256"},
            {"internalType": "uint256", "name": "afterDiscountPrice", "type": "uint256"}
        ],
        "stateMutability": "view",
        "type": "function"
    },
    # Mutating functions
    {
        "inputs": [
            {
                "components": [
                    {"internalType": "uint256", "name": "marketId", "type": "uint256"},
                    {"internalType": "uint256", "name": "baseAmountIn", "type": "uint256"},
                    {"internalType": "address", "name": "onBehalfOf", "type": "address"},
                    {"internalType": "address", "name": "to", "type": "address"},
                    {"internalType": "uint256", "name": "minATokenAmountOut", "type": "uint256"},
                    {"internalType": "uint256", "name": "minZTokenAmountOut", "type": "uint256"}
                ],
                "internalType": "struct MintParams",
                "name": "mintParams",
                "type": "tuple"
            }
        ],
        "name": "mint",
        "outputs": [
            {"internalType": "uint256", "name": "aTokenAmountOut", "type": "uint256"},
            {"internalType": "uint256", "name": "zTokenAmountOut", "type": "uint256"}
        ],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "inputs": [
            {
                "components": [
                    {"internalType": "uint256", "name": "marketId", "type": "uint256"},
                    {"internalType": "uint256", "name": "aTokenAmountIn", "type": "uint256"},
                    {"internalType": "uint256", "name": "zTokenAmountIn", "type": "uint256"},
                    {"internalType": "address", "name": "onBehalfOf", "type": "address"},
                    {"internalType": "address", "name": "to", "type": "address"},
                    {"internalType": "uint256", "name": "minAmountOut", "type": "uint256"}
                ],
                "internalType": "struct RedeemParams",
                "name": "redeemParams",
                "type": "tuple"
            }
        ],
        "name": "redeem",
        "outputs": [{"internalType": "uint256", "name": "amountOut", "type": "uint256"}],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "inputs": [
            {
                "components": [
                    {"internalType": "uint256", "name": "marketId", "type": "uint256"},
                    {"internalType": "address", "name": "assetIn", "type": "address"},
                    {"internalType": "address", "name": "assetOut", "type": "address"},
                    {"internalType": "address", "name": "onBehalfOf", "type": "address"},
                    {"internalType": "address", "name": "to", "type": "address"},
                    {"internalType": "uint256", "name": "amount", "type": "uint256"},
                    {"internalType": "uint256", "name": "amountLimit", "type": "uint256"},
                    {"internalType": "enum SwapType", "name": "swapType", "type": "uint8"}
                ],
                "internalType": "struct SwapParams",
                "name": "swapParams",
                "type": "tuple"
            }
        ],
        "name": "swap",
        "outputs": [{"internalType": "uint256", "name": "amount", "type": "uint256"}],
        "stateMutability": "nonpayable",
        "type": "function"
    }
]
