"""
State-changing Covenant tools: mint, swap on the internal exchange,
sentiment rebalance and exit.

Every submission goes through services.covenant_workflow, so approvals,
gas padding and event extraction behave the same for all of them.
"""
from decimal import Decimal
from typing import Any, Dict, Optional
import logging

from models.covenant import TransactionOutcome
from services.covenant_session import CovenantSession, normalize_address
from services.covenant_workflow import mint_positions, redeem_positions, swap_tokens
from utils.covenant_math import apply_slippage, format_units, parse_units

logger = logging.getLogger(__name__)

PAST_TENSE = {"buy": "bought", "sell": "sold"}


def fallback_note(outcome: TransactionOutcome) -> str:
    """Extra report line when amounts came from balances instead of the event."""
    if outcome.from_event:
        return ""
    return "\nNote: event data unavailable; amounts shown are post-transaction balances."


def _parse_trade_amounts(amount: str, amount_limit: str):
    try:
        if Decimal(str(amount).strip() or "nan") <= 0:
            raise ValueError
        amount_wei = parse_units(amount)
    except (ArithmeticError, ValueError):
        raise ValueError("Invalid amount. Please provide a positive number as a string (e.g., '1.0').") from None

    try:
        if Decimal(str(amount_limit).strip() or "nan") < 0:
            raise ValueError
        amount_limit_wei = parse_units(amount_limit)
    except (ArithmeticError, ValueError):
        raise ValueError("Invalid amountLimit. Please provide a non-negative number as a string (e.g., '0').") from None

    return amount_wei, amount_limit_wei


def create_mint_tool(session: CovenantSession) -> Dict[str, Any]:
    async def mint_positions_tool(
        address: str,
        marketId: int,
        amount: str,
        minATokenAmountOut: Optional[str] = None,
        minZTokenAmountOut: Optional[str] = None,
        slippageTolerance: float = 1,
    ) -> str:
        try:
            owner = normalize_address(address)
            market_config = await session.get_market_config(marketId)

            market_state = await session.get_market_state(marketId)
            if not market_state.unlocked:
                raise ValueError(f"Market ID {marketId} is locked. Minting is not allowed.")

            base_amount = parse_units(amount)
            base_balance = await session.balance_of(market_config.base_token, session.signer_address)
            if base_balance < base_amount:
                raise ValueError(
                    f"Insufficient base token balance. Required: {amount}, Available: {format_units(base_balance)}"
                )

            preview = await session.preview_mint(marketId, base_amount)
            min_a_token_out = (
                parse_units(minATokenAmountOut) if minATokenAmountOut
                else apply_slippage(preview.a_token_amount_out, slippageTolerance)
            )
            min_z_token_out = (
                parse_units(minZTokenAmountOut) if minZTokenAmountOut
                else apply_slippage(preview.z_token_amount_out, slippageTolerance)
            )

            outcome = await mint_positions(
                session,
                marketId,
                owner,
                market_config.base_token,
                market_config.a_token,
                market_config.z_token,
                base_amount,
                min_a_token_out,
                min_z_token_out,
            )

            return (
                f"Successfully minted tokens for Market ID {marketId}!\n"
                f"Base Token Deposited: {amount} tokens\n"
                f"Estimated aTokens: {format_units(preview.a_token_amount_out)}\n"
                f"Estimated zTokens: {format_units(preview.z_token_amount_out)}\n"
                f"Actual aTokens Received: {format_units(outcome.amounts['aTokenAmountOut'])}\n"
                f"Actual zTokens Received: {format_units(outcome.amounts['zTokenAmountOut'])}\n"
                f"aToken Price: {format_units(outcome.a_token_price)} USD\n"
                f"zToken Price: {format_units(outcome.z_token_price)} USD\n"
                f"After Discount Price: {format_units(preview.after_discount_price)} USD\n"
                f"Transaction Hash: {outcome.tx_hash}"
                f"{fallback_note(outcome)}"
            )
        except Exception as e:
            logger.error(f"Error minting positions: {e}")
            return f"Failed to mint positions for Market ID {marketId} for address: {address}. Error: {e}"

    return {
        "tool": mint_positions_tool,
        "metadata": {
            "name": "mint-positions",
            "description": "Mint aTokens and zTokens on Covenant Finance",
            "parameters": {
                "address": "Your Monad testnet address",
                "marketId": "Market ID to mint positions for",
                "amount": "Amount of base token to deposit for minting (e.g., '10' for 10 WETH)",
                "minATokenAmountOut": "Minimum aTokens to receive (optional; calculated if not provided)",
                "minZTokenAmountOut": "Minimum zTokens to receive (optional; calculated if not provided)",
                "slippageTolerance": "Slippage tolerance percentage (default: 1%)",
            },
        },
    }


def create_trade_tool(session: CovenantSession) -> Dict[str, Any]:
    async def trade_on_dex(address: str, token: str, action: str, amount: str, amountLimit: str = "0") -> str:
        try:
            amount_wei, amount_limit_wei = _parse_trade_amounts(amount, amountLimit)
            owner = normalize_address(address)
            addresses = await session.require_token_addresses()
            base_token = session.base_token_address

            if action == "buy":
                base_balance = await session.balance_of(base_token, session.signer_address)
                if base_balance < amount_wei:
                    raise ValueError(
                        f"Insufficient WETH balance. Required: {format_units(amount_wei)} WETH, "
                        f"Available: {format_units(base_balance)} WETH"
                    )

            traded_token = addresses.leveraged_token if token == "WETHX2" else addresses.debt_token
            asset_in, asset_out = (base_token, traded_token) if action == "buy" else (traded_token, base_token)
            logger.info(f"Trade {action} {token}: {asset_in} -> {asset_out} amount={amount_wei} limit={amount_limit_wei}")

            preview = await session.preview_swap(session.market_id, asset_in, asset_out, amount_wei)
            if not preview.amount_calc:
                raise ValueError("Failed to preview swap. The previewSwap call did not return the expected result.")

            outcome = await swap_tokens(
                session,
                session.market_id,
                owner,
                asset_in,
                asset_out,
                amount_wei,
                amount_limit_wei,
            )

            return (
                f"Estimated amount out: {format_units(preview.amount_calc)} tokens\n"
                f"Actual amount out: {format_units(outcome.amounts['amountOut'])} tokens\n"
                f"Successfully {PAST_TENSE[action]} {amount} {token} for address {address}.\n"
                f"Transaction Hash: {outcome.tx_hash}"
                f"{fallback_note(outcome)}"
            )
        except Exception as e:
            logger.error(f"Error trading on DEX: {e}")
            return f"Failed to trade {token} for address: {address}. Error: {e}"

    return {
        "tool": trade_on_dex,
        "metadata": {
            "name": "trade-on-dex",
            "description": "Check WETHX2 and debt token prices and execute trading on Covenant Finance's DEX",
            "parameters": {
                "address": "Your Monad testnet address",
                "token": "Token to trade (WETHX2 or Debt)",
                "action": "Action to perform (buy or sell)",
                "amount": "Amount of tokens to trade",
                "amountLimit": "Minimum amount to receive (buy) or maximum to spend (sell)",
            },
        },
    }


def create_rebalance_tool(session: CovenantSession) -> Dict[str, Any]:
    async def rebalance_market_sentiment(address: str, marketSentiment: str) -> str:
        try:
            owner = normalize_address(address)
            addresses = await session.require_token_addresses()
            base_token = session.base_token_address
            market_id = session.market_id

            leveraged_balance = await session.balance_of(addresses.leveraged_token, session.signer_address)
            debt_balance = await session.balance_of(addresses.debt_token, session.signer_address)

            if marketSentiment == "Bearish" and leveraged_balance > 0:
                redeemed = await redeem_positions(
                    session, market_id, owner, base_token,
                    addresses.leveraged_token, addresses.debt_token,
                    leveraged_balance, 0,
                )
                return (
                    f"Successfully redeemed {format_units(leveraged_balance)} WETHX2 for "
                    f"{format_units(redeemed.amounts['amountOut'])} WETH for bearish rebalance.\n"
                    f"Tx Hash: {redeemed.tx_hash}"
                    f"{fallback_note(redeemed)}"
                )

            if marketSentiment == "Bullish" and debt_balance > 0:
                redeemed = await redeem_positions(
                    session, market_id, owner, base_token,
                    addresses.leveraged_token, addresses.debt_token,
                    0, debt_balance,
                )
                if not redeemed.from_event:
                    raise ValueError(
                        f"Redeem event not found in transaction receipt {redeemed.tx_hash}. "
                        f"Debt tokens were redeemed but nothing was minted."
                    )
                base_received = redeemed.amounts["amountOut"]
                minted = await mint_positions(
                    session, market_id, owner, base_token,
                    addresses.leveraged_token, addresses.debt_token,
                    base_received,
                )
                return (
                    f"Successfully converted {format_units(debt_balance)} debt tokens to "
                    f"{format_units(minted.amounts['aTokenAmountOut'])} WETHX2 tokens for bullish rebalance.\n"
                    f"Redeem Tx Hash: {redeemed.tx_hash}\n"
                    f"Tx Hash: {minted.tx_hash}"
                    f"{fallback_note(minted)}"
                )

            missing = "No debt tokens available" if marketSentiment == "Bullish" else "No WETHX2 tokens available"
            return f"No action taken: {missing} for address {address}."
        except Exception as e:
            logger.error(f"Error rebalancing: {e}")
            return f"Failed to rebalance for address: {address}. Error: {e}"

    return {
        "tool": rebalance_market_sentiment,
        "metadata": {
            "name": "rebalance-market-sentiment",
            "description": (
                "Rebalance portfolio based on bullish or bearish WETH market sentiment. "
                "Bullish redeems all debt tokens and mints with the WETH received; "
                "Bearish redeems all WETHX2 tokens for WETH"
            ),
            "parameters": {
                "address": "Your Monad testnet address",
                "marketSentiment": "Your WETH market sentiment (Bullish or Bearish)",
            },
        },
    }


def create_exit_tool(session: CovenantSession) -> Dict[str, Any]:
    async def exit_positions(address: str, wethx2Amount: str, debtAmount: str, minAmountOut: str = "0") -> str:
        try:
            owner = normalize_address(address)
            addresses = await session.require_token_addresses()

            outcome = await redeem_positions(
                session,
                session.market_id,
                owner,
                session.base_token_address,
                addresses.leveraged_token,
                addresses.debt_token,
                parse_units(wethx2Amount),
                parse_units(debtAmount),
                parse_units(minAmountOut),
            )

            return (
                f"Successfully exited positions!\n"
                f"Redeemed {wethx2Amount} WETHX2 and {debtAmount} debt tokens for "
                f"{format_units(outcome.amounts['amountOut'])} WETH.\n"
                f"Address: {address}\n"
                f"Transaction Hash: {outcome.tx_hash}"
                f"{fallback_note(outcome)}"
            )
        except Exception as e:
            logger.error(f"Error exiting positions: {e}")
            return f"Failed to exit positions for address: {address}. Error: {e}"

    return {
        "tool": exit_positions,
        "metadata": {
            "name": "exit-positions",
            "description": "Redeem WETHX2 and debt tokens to WETH",
            "parameters": {
                "address": "Your Monad testnet address",
                "wethx2Amount": "Amount of WETHX2 to redeem",
                "debtAmount": "Amount of debt tokens to redeem",
                "minAmountOut": "Minimum WETH to receive",
            },
        },
    }
