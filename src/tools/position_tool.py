"""
Position analytics for an address: base-token allocation, profit/loss and
liquidation risk. All of these are read-only.
"""
from typing import Any, Dict
import logging

from services.covenant_session import CovenantSession, normalize_address
from utils.covenant_math import (
    bps_to_percent,
    format_plain,
    format_units,
    liquidation_threshold,
    parse_units,
    profit_loss,
    profit_loss_percentage,
    risk_level,
    split_allocation,
    to_float,
    user_ltv,
)

logger = logging.getLogger(__name__)


async def _position_values(session: CovenantSession, owner: str, market_id: int):
    """Balances and prices of an address in one market, as floats."""
    market_config = await session.get_market_config(market_id)
    a_token_balance = await session.balance_of(market_config.a_token, owner)
    z_token_balance = await session.balance_of(market_config.z_token, owner)
    market_state = await session.get_market_state(market_id)

    return {
        "a_token_balance": to_float(a_token_balance),
        "z_token_balance": to_float(z_token_balance),
        "base_token_price": to_float(market_state.base_token_price),
        "debt_notional_price": to_float(market_state.debt_notional_price),
    }


def create_balance_allocation_tool(session: CovenantSession) -> Dict[str, Any]:
    async def check_weth_balance_and_allocate(address: str, leveragedPercentage: float = 60) -> str:
        try:
            owner = normalize_address(address)
            balance = await session.balance_of(session.base_token_address, owner)
            market_state = await session.get_market_state(session.market_id)

            formatted_balance = format_units(balance)
            leveraged_amount, debt_amount = split_allocation(float(formatted_balance), leveragedPercentage)

            return (
                f"WETH Balance for {address}: {formatted_balance} WETH\n"
                f"Current Prices:\n"
                f"- WETH Price: {format_units(market_state.base_token_price)} USD\n"
                f"- Debt Notional Price: {format_units(market_state.debt_notional_price)} USD\n"
                f"Suggested Allocation:\n"
                f"- Leveraged Trading (WETHX2): {format_plain(leveraged_amount)} WETH "
                f"({format_plain(leveragedPercentage)}%)\n"
                f"- Debt Position: {format_plain(debt_amount)} WETH ({format_plain(100 - leveragedPercentage)}%)"
            )
        except Exception as e:
            logger.error(f"Error checking WETH balance for {address}: {e}")
            return f"Failed to retrieve WETH balance or prices for address: {address}. Error: {e}"

    return {
        "tool": check_weth_balance_and_allocate,
        "metadata": {
            "name": "check-weth-balance-and-allocate",
            "description": "Check WETH balance on Monad testnet and suggest allocation for leveraged trading and debt",
            "parameters": {
                "address": "Your Monad testnet address",
                "leveragedPercentage": "Percentage of funds for leveraged trading (default: 60%)",
            },
        },
    }


def create_profit_loss_tool(session: CovenantSession) -> Dict[str, Any]:
    async def calculate_profit_loss(address: str, initialBaseAmount: str, marketId: int = 0) -> str:
        try:
            owner = normalize_address(address)
            initial_base_amount = to_float(parse_units(initialBaseAmount))
            values = await _position_values(session, owner, marketId)

            base_price = values["base_token_price"]
            a_token_value = values["a_token_balance"] * base_price
            z_token_value = values["z_token_balance"] * values["debt_notional_price"]
            position_value = a_token_value - z_token_value
            initial_value = initial_base_amount * base_price

            pl = profit_loss(
                values["a_token_balance"],
                base_price,
                values["z_token_balance"],
                values["debt_notional_price"],
                initial_base_amount,
            )
            pl_pct = profit_loss_percentage(pl, initial_value)
            pl_pct_text = "N/A" if pl_pct is None else f"{pl_pct:.2f}%"

            return (
                f"Profit/Loss for Market ID {marketId} (Address: {address}):\n"
                f"Initial Investment: {initialBaseAmount} base tokens "
                f"({initial_value:.2f} USD at {format_plain(base_price)} USD/token)\n"
                f"Current aToken Balance: {format_plain(values['a_token_balance'])} tokens ({a_token_value:.2f} USD)\n"
                f"Current zToken Balance: {format_plain(values['z_token_balance'])} tokens ({z_token_value:.2f} USD)\n"
                f"Current Position Value: {position_value:.2f} USD\n"
                f"Profit/Loss: {pl:.2f} USD ({pl_pct_text})\n"
                f"{'You are in profit!' if pl >= 0 else 'You are at a loss.'}"
            )
        except Exception as e:
            logger.error(f"Error calculating profit/loss for market {marketId}: {e}")
            return f"Failed to calculate profit/loss for Market ID {marketId}. Error: {e}"

    return {
        "tool": calculate_profit_loss,
        "metadata": {
            "name": "calculate-profit-loss",
            "description": "Calculate the profit or loss of your position in a market",
            "parameters": {
                "address": "Your Monad testnet address",
                "marketId": "Market ID to calculate for (default: 0)",
                "initialBaseAmount": "Initial amount of base token invested (e.g., 10 WETH)",
            },
        },
    }


def create_liquidation_risk_tool(session: CovenantSession) -> Dict[str, Any]:
    async def assess_liquidation_risk(address: str, marketId: int = 0) -> str:
        try:
            owner = normalize_address(address)
            values = await _position_values(session, owner, marketId)
            lex_state = await session.get_lex_state(marketId)

            a_token_value = values["a_token_balance"] * values["base_token_price"]
            z_token_value = values["z_token_balance"] * values["debt_notional_price"]
            position_ltv = user_ltv(a_token_value, z_token_value)

            target_ltv = bps_to_percent(lex_state.target_ltv)
            current_market_ltv = bps_to_percent(lex_state.current_ltv)
            threshold = liquidation_threshold(target_ltv)
            distance = threshold - position_ltv

            return (
                f"Liquidation Risk Assessment for Market ID {marketId} (Address: {address}):\n"
                f"aToken Value: {a_token_value:.2f} USD\n"
                f"zToken Value: {z_token_value:.2f} USD\n"
                f"User LTV: {position_ltv:.2f}%\n"
                f"Target LTV: {target_ltv:.2f}%\n"
                f"Current Market LTV: {current_market_ltv:.2f}%\n"
                f"Liquidation Threshold: {threshold:.2f}% (120% of target LTV)\n"
                f"Distance to Liquidation: {distance:.2f}% ({'Safe' if distance >= 0 else 'At Risk'})\n"
                f"Risk Level: {risk_level(position_ltv, target_ltv)}"
            )
        except Exception as e:
            logger.error(f"Error assessing liquidation risk for market {marketId}: {e}")
            return f"Failed to assess liquidation risk for Market ID {marketId}. Error: {e}"

    return {
        "tool": assess_liquidation_risk,
        "metadata": {
            "name": "assess-liquidation-risk",
            "description": "Assess the liquidation risk of your position in a market",
            "parameters": {
                "address": "Your Monad testnet address",
                "marketId": "Market ID to assess (default: 0)",
            },
        },
    }
