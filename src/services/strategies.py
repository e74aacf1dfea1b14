"""
Covenant position strategies and the decision table that picks one of them.
"""
from dataclasses import dataclass
from typing import Dict, Any
import math

from models.covenant import LexState
from utils.covenant_math import WAD

# Leverage above 150% of target is treated as high volatility
HIGH_DEVIATION_THRESHOLD = 1.5

# Debt rate (percent) above which holding zTokens is attractive
ATTRACTIVE_DEBT_RATE = 0.5

# Base token price (USD) under which buying leverage is suggested
LOW_BASE_PRICE_USD = 1500

# Debt rate is read as a 1e16-scaled percentage
DEBT_RATE_SCALE = 10**16


# Rationale templates are filled by format_rationale
STRATEGIES: Dict[str, Dict[str, Any]] = {
    "wait_and_monitor": {
        "id": "wait_and_monitor",
        "name": "Wait and Monitor",
        "rationale": (
            "The current leverage ({current_leverage:.1f}x) is significantly higher than the target "
            "({target_leverage:.1f}x), indicating high volatility. It's risky to take a leveraged position now. "
            "Consider waiting for the market to stabilize."
        ),
        "execution": None,
    },
    "hold_or_sell_debt": {
        "id": "hold_or_sell_debt",
        "name": "Hold Debt Position or Sell for Profit",
        "rationale": (
            "You hold {z_token_balance} {z_token_name} tokens, and the debt rate is attractive at {debt_rate:.2f}%. "
            "The debt token price has increased to {debt_token_price} USD, suggesting potential profits. "
            "You can either hold to continue earning yield or sell to lock in gains."
        ),
        "execution": "redeem_debt",
    },
    "buy_leveraged": {
        "id": "buy_leveraged",
        "name": "Buy Leveraged Tokens (Bullish Strategy)",
        "rationale": (
            "The {base_token_name} price is relatively low at {base_token_price} USD. "
            "If you're bullish on {base_token_name}, buying {a_token_name} tokens could yield significant gains "
            "if the price recovers. Be cautious of the current leverage ({current_leverage:.1f}x)."
        ),
        "execution": "mint",
    },
    "rebalance_portfolio": {
        "id": "rebalance_portfolio",
        "name": "Rebalance Portfolio",
        "rationale": (
            "You hold both {a_token_balance} {a_token_name} and {z_token_balance} {z_token_name} tokens. "
            "Given the current leverage ({current_leverage:.1f}x) and debt rate ({debt_rate:.2f}%), "
            "consider rebalancing: sell some {a_token_name} to reduce risk and hold {z_token_name} "
            "for stability and yield."
        ),
        "execution": "redeem_half_leveraged",
    },
    "accumulate_debt": {
        "id": "accumulate_debt",
        "name": "Hold or Accumulate Debt Tokens",
        "rationale": (
            "The debt rate ({debt_rate:.2f}%) is a stable return with lower risk compared to leveraged tokens. "
            "Consider accumulating {z_token_name} tokens to earn yield, especially if you're uncertain about "
            "{base_token_name}'s price direction."
        ),
        "execution": "mint",
    },
}


@dataclass(frozen=True)
class StrategySignals:
    current_leverage: float
    target_leverage: float
    debt_rate: float
    has_leveraged_position: bool
    has_debt_position: bool
    base_token_price: float

    @property
    def leverage_deviation(self) -> float:
        """Current leverage relative to target; a zero target is infinite unless current is zero too."""
        if self.target_leverage == 0:
            return math.inf if self.current_leverage > 0 else 0.0
        return self.current_leverage / self.target_leverage


def compute_signals(
    lex_state: LexState,
    a_token_balance: int,
    z_token_balance: int,
    base_token_price: float,
) -> StrategySignals:
    return StrategySignals(
        current_leverage=lex_state.current_ltv / WAD,
        target_leverage=lex_state.target_ltv / WAD,
        debt_rate=lex_state.current_debt_price_discount / DEBT_RATE_SCALE,
        has_leveraged_position=a_token_balance > 0,
        has_debt_position=z_token_balance > 0,
        base_token_price=base_token_price,
    )


def select_strategy(signals: StrategySignals) -> str:
    """Pick exactly one strategy id; the first matching rule wins."""
    if signals.leverage_deviation > HIGH_DEVIATION_THRESHOLD:
        return "wait_and_monitor"
    if signals.has_debt_position and signals.debt_rate > ATTRACTIVE_DEBT_RATE:
        return "hold_or_sell_debt"
    if not signals.has_leveraged_position and signals.base_token_price < LOW_BASE_PRICE_USD:
        return "buy_leveraged"
    if signals.has_leveraged_position and signals.has_debt_position:
        return "rebalance_portfolio"
    return "accumulate_debt"


def get_strategy(strategy_id: str) -> Dict[str, Any]:
    """Get a specific strategy by ID.

    Raises:
        ValueError: If strategy not found
    """
    if strategy_id not in STRATEGIES:
        raise ValueError(f"Strategy '{strategy_id}' not found")
    return STRATEGIES[strategy_id].copy()


def format_rationale(strategy_id: str, context: Dict[str, Any]) -> str:
    """Fill a strategy's rationale template.

    Args:
        strategy_id: The strategy ID
        context: signal values, formatted balances/prices and token names

    Returns:
        Rationale text
    """
    return get_strategy(strategy_id)["rationale"].format(**context)
