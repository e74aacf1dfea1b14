"""
Market-level Covenant tools: token address discovery, market listing and the
leverage/debt-rate snapshot.
"""
from typing import Any, Dict
import logging

from services.covenant_session import CovenantSession
from utils.covenant_math import debt_rate_percent, format_units, leverage_ratio

logger = logging.getLogger(__name__)


def create_initialize_token_addresses_tool(session: CovenantSession) -> Dict[str, Any]:
    async def initialize_token_addresses() -> str:
        """Refresh the session's WETHX2 (aToken) and debt token (zToken) addresses."""
        try:
            addresses = await session.refresh_token_addresses()
            return (
                f"Successfully fetched token addresses:\n"
                f"WETHX2 Address: {addresses.leveraged_token}\n"
                f"Debt Token Address: {addresses.debt_token}"
            )
        except Exception as e:
            logger.error(f"Error initializing token addresses: {e}")
            return f"Failed to fetch token addresses. Error: {e}"

    return {
        "tool": initialize_token_addresses,
        "metadata": {
            "name": "initialize-token-addresses",
            "description": "Fetch WETHX2 and debt token addresses for the market",
            "parameters": {},
        },
    }


def create_fetch_leverage_tool(session: CovenantSession) -> Dict[str, Any]:
    async def fetch_leverage_and_debt_rate(marketId: int = 0) -> str:
        try:
            lex_state = await session.get_lex_state(marketId)
            market_state = await session.get_market_state(marketId)

            ratio = leverage_ratio(lex_state.current_ltv)
            debt_rate = debt_rate_percent(lex_state.current_debt_price_discount)

            return (
                f"Market Data for Market ID {marketId}:\n"
                f"Current Leverage Ratio (WETHX2): {ratio:.2f}x\n"
                f"Current Debt Rate: {debt_rate:.2f}%\n"
                f"WETH Price: {format_units(market_state.base_token_price)} USD\n"
                f"Debt Notional Price: {format_units(market_state.debt_notional_price)} USD"
            )
        except Exception as e:
            logger.error(f"Error fetching leverage for market {marketId}: {e}")
            return f"Failed to fetch leverage and debt rate for market {marketId}. Error: {e}"

    return {
        "tool": fetch_leverage_and_debt_rate,
        "metadata": {
            "name": "fetch-leverage-and-debt-rate",
            "description": "Fetch the current leverage ratio of WETHX2 and the debt rate for the market",
            "parameters": {
                "marketId": "Market ID to fetch data for (default: 0)",
            },
        },
    }


async def _describe_market(session: CovenantSession, market_id: int) -> str:
    market_config = await session.get_market_config(market_id)
    market_state = await session.get_market_state(market_id)

    base_name = await session.token_label(market_config.base_token)
    quote_name = await session.token_label(market_config.quote_token)
    a_token_name = await session.token_label(market_config.a_token)
    z_token_name = await session.token_label(market_config.z_token)

    return (
        f"Market ID: {market_id}\n"
        f"Base Token: {base_name} ({market_config.base_token})\n"
        f"Quote Token: {quote_name} ({market_config.quote_token})\n"
        f"aToken (Leverage): {a_token_name} ({market_config.a_token})\n"
        f"zToken (Debt): {z_token_name} ({market_config.z_token})\n"
        f"Oracle: {market_config.oracle}\n"
        f"Liquid Exchange Model: {market_config.liquid_exchange_model}\n"
        f"Debt Duration: {market_config.duration} seconds\n"
        f"Unlocked: {str(market_state.unlocked).lower()}\n"
        f"Base Token Price: {format_units(market_state.base_token_price)} USD\n"
        f"Debt Notional Price: {format_units(market_state.debt_notional_price)} USD"
    )


def create_list_markets_tool(session: CovenantSession) -> Dict[str, Any]:
    async def list_markets() -> str:
        """List every Covenant market; markets that fail to load are skipped."""
        try:
            total_markets = await session.get_total_markets()

            markets = []
            for market_id in range(total_markets):
                try:
                    markets.append(await _describe_market(session, market_id))
                except Exception as e:
                    logger.warning(f"Failed to fetch details for Market ID {market_id}: {e}")

            if not markets:
                return "No markets found."

            body = "\n\n".join(markets)
            return f"Available Markets (Total: {len(markets)}):\n{body}"
        except Exception as e:
            logger.error(f"Error listing markets: {e}")
            return f"Failed to list markets. Error: {e}"

    return {
        "tool": list_markets,
        "metadata": {
            "name": "list-markets",
            "description": "List available markets on Covenant Finance",
            "parameters": {},
        },
    }
