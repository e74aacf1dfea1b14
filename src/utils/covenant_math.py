"""
Fixed-point conversion and the derived position metrics shown by the Covenant tools.

All protocol amounts and prices are 18-decimal integers. LTV values are
basis-point encoded in the leverage/debt-rate reports and 1e18 encoded in
the strategy signals, matching how each report has always read them.
"""
from decimal import Decimal, InvalidOperation, ROUND_DOWN
from typing import Optional, Union
import math

WAD = 10**18
BASIS_POINTS = 10_000

# Gas estimates are padded by 20% before submission
GAS_BUFFER_NUMERATOR = 120
GAS_BUFFER_DENOMINATOR = 100

# Liquidation is assumed at 120% of the target LTV
LIQUIDATION_THRESHOLD_FACTOR = 1.2


def parse_units(amount: Union[str, int, float, Decimal], decimals: int = 18) -> int:
    """Convert a human-readable amount ("1.5") to integer base units.

    Raises:
        ValueError: if the amount is not a finite number.
    """
    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid amount: {amount!r}") from e

    if not value.is_finite():
        raise ValueError(f"Invalid amount: {amount!r}")

    scaled = (value * (Decimal(10) ** decimals)).to_integral_value(rounding=ROUND_DOWN)
    return int(scaled)


def format_units(value: int, decimals: int = 18) -> str:
    """Render integer base units as a plain decimal string without trailing zeros."""
    value = int(value)
    sign = "-" if value < 0 else ""
    whole, fraction = divmod(abs(value), 10**decimals)
    fraction_str = str(fraction).rjust(decimals, "0").rstrip("0")
    if fraction_str:
        return f"{sign}{whole}.{fraction_str}"
    return f"{sign}{whole}"


def to_float(value: int, decimals: int = 18) -> float:
    return float(format_units(value, decimals))


def pad_gas_limit(gas_estimate: int) -> int:
    """Apply the fixed 20% safety margin, rounding down."""
    return int(gas_estimate) * GAS_BUFFER_NUMERATOR // GAS_BUFFER_DENOMINATOR


def apply_slippage(expected_amount: int, slippage_tolerance: float) -> int:
    """Minimum acceptable output for an expected amount and a slippage percentage."""
    factor = Decimal(1) - Decimal(str(slippage_tolerance)) / Decimal(100)
    return int((Decimal(int(expected_amount)) * factor).to_integral_value(rounding=ROUND_DOWN))


def needs_approval(allowance: int, required_amount: int) -> bool:
    return int(allowance) < int(required_amount)


def leverage_ratio(current_ltv_bps: int) -> float:
    """Leverage = 1 / (1 - LTV), with LTV given in basis points."""
    current_ltv = int(current_ltv_bps) / BASIS_POINTS
    if current_ltv == 1:
        return math.inf
    return 1 / (1 - current_ltv)


def debt_rate_percent(current_debt_price_discount_bps: int) -> float:
    return int(current_debt_price_discount_bps) / BASIS_POINTS


def bps_to_percent(value_bps: int) -> float:
    """Basis-point value shown as a percentage label, rounded to 2 decimals."""
    return round(int(value_bps) / BASIS_POINTS, 2)


def user_ltv(a_token_value: float, z_token_value: float) -> float:
    if a_token_value > 0:
        return (z_token_value / a_token_value) * 100
    return 0.0


def liquidation_threshold(target_ltv: float) -> float:
    return target_ltv * LIQUIDATION_THRESHOLD_FACTOR


def risk_level(user_ltv_pct: float, target_ltv_pct: float) -> str:
    threshold = liquidation_threshold(target_ltv_pct)
    if user_ltv_pct > threshold:
        return "High"
    if user_ltv_pct > target_ltv_pct:
        return "Moderate"
    return "Low"


def profit_loss(
    a_token_balance: float,
    base_token_price: float,
    z_token_balance: float,
    debt_notional_price: float,
    initial_base_amount: float,
) -> float:
    """Current position value minus the initial base investment, in USD."""
    position_value = a_token_balance * base_token_price - z_token_balance * debt_notional_price
    initial_value = initial_base_amount * base_token_price
    return position_value - initial_value


def profit_loss_percentage(profit_loss_usd: float, initial_value_usd: float) -> Optional[float]:
    if initial_value_usd == 0:
        return None
    return (profit_loss_usd / initial_value_usd) * 100


def split_allocation(balance: float, leveraged_percentage: float) -> tuple:
    """Split a balance into (leveraged, debt) portions."""
    leveraged_amount = (balance * leveraged_percentage) / 100
    return leveraged_amount, balance - leveraged_amount


def format_plain(value: float) -> str:
    """Shortest text for a float, without a trailing ".0" on whole numbers."""
    value = float(value)
    if math.isfinite(value) and value == int(value):
        return str(int(value))
    return repr(value)
