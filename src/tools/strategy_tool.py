"""
Strategy suggestion tool: reads a market and the caller's holdings, picks one
strategy from services.strategies and optionally executes it.
"""
from typing import Any, Dict, Optional
import logging

from models.covenant import MarketConfig
from services.covenant_session import CovenantSession, normalize_address
from services.covenant_workflow import mint_positions, redeem_positions
from services.strategies import compute_signals, format_rationale, get_strategy, select_strategy
from tools.trade_tool import fallback_note
from utils.covenant_math import apply_slippage, format_units, parse_units, to_float

logger = logging.getLogger(__name__)


async def _redeem_with_preview(
    session: CovenantSession,
    market_id: int,
    owner: str,
    market_config: MarketConfig,
    token_in: str,
    amount_in: int,
    slippage_tolerance: float,
):
    """Redeem one leg for base token, with the minimum out taken from previewSwap."""
    preview = await session.preview_swap(market_id, token_in, market_config.base_token, amount_in)
    min_amount_out = apply_slippage(preview.amount_calc, slippage_tolerance)

    a_amount = amount_in if token_in == market_config.a_token else 0
    z_amount = amount_in if token_in == market_config.z_token else 0
    return await redeem_positions(
        session, market_id, owner, market_config.base_token,
        market_config.a_token, market_config.z_token,
        a_amount, z_amount, min_amount_out,
    )


async def _mint_with_preview(
    session: CovenantSession,
    market_id: int,
    owner: str,
    market_config: MarketConfig,
    base_amount: int,
    slippage_tolerance: float,
):
    preview = await session.preview_mint(market_id, base_amount)
    return await mint_positions(
        session, market_id, owner, market_config.base_token,
        market_config.a_token, market_config.z_token, base_amount,
        apply_slippage(preview.a_token_amount_out, slippage_tolerance),
        apply_slippage(preview.z_token_amount_out, slippage_tolerance),
    )


async def execute_strategy(
    session: CovenantSession,
    strategy_id: str,
    market_id: int,
    owner: str,
    market_config: MarketConfig,
    names: Dict[str, str],
    slippage_tolerance: float,
    base_amount_to_invest: Optional[str],
) -> str:
    """Run the on-chain half of a strategy and describe what happened."""
    execution = get_strategy(strategy_id)["execution"]

    if execution is None:
        return ""

    if execution == "redeem_debt":
        amount = await session.balance_of(market_config.z_token, session.signer_address)
        outcome = await _redeem_with_preview(
            session, market_id, owner, market_config, market_config.z_token, amount, slippage_tolerance
        )
        return (
            f"Executed: Redeemed {format_units(amount)} {names['z_token']} for "
            f"{format_units(outcome.amounts['amountOut'])} {names['base_token']}.\n"
            f"Transaction Hash: {outcome.tx_hash}"
            f"{fallback_note(outcome)}"
        )

    if execution == "redeem_half_leveraged":
        amount = await session.balance_of(market_config.a_token, session.signer_address) // 2
        outcome = await _redeem_with_preview(
            session, market_id, owner, market_config, market_config.a_token, amount, slippage_tolerance
        )
        return (
            f"Executed: Redeemed {format_units(amount)} {names['a_token']} for "
            f"{format_units(outcome.amounts['amountOut'])} {names['base_token']}.\n"
            f"Transaction Hash: {outcome.tx_hash}"
            f"{fallback_note(outcome)}"
        )

    # Both mint strategies need an explicit amount
    if not base_amount_to_invest:
        purpose = "bullish" if strategy_id == "buy_leveraged" else "debt accumulation"
        raise ValueError(
            f"Please provide baseAmountToInvest to execute the {purpose} strategy (e.g., '1.0' WETH)."
        )

    outcome = await _mint_with_preview(
        session, market_id, owner, market_config, parse_units(base_amount_to_invest), slippage_tolerance
    )
    suffix = " to accumulate debt tokens" if strategy_id == "accumulate_debt" else ""
    return (
        f"Executed: Minted {format_units(outcome.amounts['aTokenAmountOut'])} {names['a_token']} and "
        f"{format_units(outcome.amounts['zTokenAmountOut'])} {names['z_token']} using "
        f"{base_amount_to_invest} {names['base_token']}{suffix}.\n"
        f"Transaction Hash: {outcome.tx_hash}"
        f"{fallback_note(outcome)}"
    )


def create_strategy_tool(session: CovenantSession) -> Dict[str, Any]:
    async def suggest_strategy(
        address: str,
        marketId: int,
        execute: bool = False,
        slippageTolerance: float = 1,
        baseAmountToInvest: Optional[str] = None,
    ) -> str:
        try:
            owner = normalize_address(address)
            market_config = await session.get_market_config(marketId)
            market_state = await session.get_market_state(marketId)
            lex_state = await session.get_lex_state(marketId)

            balances = {
                "a_token": await session.balance_of(market_config.a_token, owner),
                "z_token": await session.balance_of(market_config.z_token, owner),
            }
            names = {
                "base_token": await session.token_label(market_config.base_token),
                "a_token": await session.token_label(market_config.a_token),
                "z_token": await session.token_label(market_config.z_token),
            }

            signals = compute_signals(
                lex_state,
                balances["a_token"],
                balances["z_token"],
                to_float(market_state.base_token_price),
            )
            strategy_id = select_strategy(signals)
            strategy = get_strategy(strategy_id)
            logger.info(f"Strategy for {owner} on market {marketId}: {strategy['name']}")

            base_token_price = format_units(market_state.base_token_price)
            debt_token_price = format_units(market_state.debt_notional_price)
            a_token_balance = format_units(balances["a_token"])
            z_token_balance = format_units(balances["z_token"])

            rationale = format_rationale(strategy_id, {
                "current_leverage": signals.current_leverage,
                "target_leverage": signals.target_leverage,
                "debt_rate": signals.debt_rate,
                "base_token_price": base_token_price,
                "debt_token_price": debt_token_price,
                "a_token_balance": a_token_balance,
                "z_token_balance": z_token_balance,
                "base_token_name": names["base_token"],
                "a_token_name": names["a_token"],
                "z_token_name": names["z_token"],
            })

            execution_result = ""
            if execute:
                execution_result = await execute_strategy(
                    session, strategy_id, marketId, owner, market_config,
                    names, slippageTolerance, baseAmountToInvest,
                )

            report = (
                f"Market Analysis for Market ID {marketId}:\n"
                f"Base Token: {names['base_token']} ({market_config.base_token})\n"
                f"aToken (Leverage): {names['a_token']} ({market_config.a_token})\n"
                f"zToken (Debt): {names['z_token']} ({market_config.z_token})\n"
                f"Base Token Price: {base_token_price} USD\n"
                f"Debt Token Price: {debt_token_price} USD\n"
                f"Current Leverage: {signals.current_leverage:.1f}x\n"
                f"Target Leverage: {signals.target_leverage:.1f}x\n"
                f"Debt Rate: {signals.debt_rate:.2f}%\n"
                f"Your Holdings:\n"
                f"- {names['a_token']}: {a_token_balance} tokens\n"
                f"- {names['z_token']}: {z_token_balance} tokens\n\n"
                f"Recommended Strategy: {strategy['name']}\n"
                f"Rationale: {rationale}\n"
            )
            if execution_result:
                report += f"{execution_result}\n"
            return report
        except Exception as e:
            logger.error(f"Error suggesting strategy: {e}")
            return f"Failed to suggest strategy for Market ID {marketId}. Error: {e}"

    return {
        "tool": suggest_strategy,
        "metadata": {
            "name": "suggest-strategy",
            "description": (
                "Suggest and optionally execute the best strategy based on market details "
                "and user holdings on Covenant Finance"
            ),
            "parameters": {
                "address": "Your Monad testnet address",
                "marketId": "Market ID to analyze",
                "execute": "Set to true to execute the recommended strategy",
                "slippageTolerance": "Slippage tolerance percentage for transactions (default: 1%)",
                "baseAmountToInvest": "Amount of base token to invest for bullish strategy (e.g., '1.0' WETH)",
            },
        },
    }
