from unittest.mock import AsyncMock

import pytest

from conftest import A_TOKEN, Z_TOKEN, make_lex_state, make_market_config
from tools.market_tool import (
    create_fetch_leverage_tool,
    create_initialize_token_addresses_tool,
    create_list_markets_tool,
)


@pytest.mark.asyncio
async def test_fetch_leverage_report(session):
    session.get_lex_state.return_value = make_lex_state(current_ltv=5000, current_debt_price_discount=1500)
    tool = create_fetch_leverage_tool(session)["tool"]

    result = await tool(marketId=0)

    assert result == (
        "Market Data for Market ID 0:\n"
        "Current Leverage Ratio (WETHX2): 2.00x\n"
        "Current Debt Rate: 0.15%\n"
        "WETH Price: 2000 USD\n"
        "Debt Notional Price: 1 USD"
    )


@pytest.mark.asyncio
async def test_fetch_leverage_error_text(session):
    session.get_lex_state.side_effect = ConnectionError("rpc down")
    tool = create_fetch_leverage_tool(session)["tool"]

    result = await tool(marketId=3)

    assert result == "Failed to fetch leverage and debt rate for market 3. Error: rpc down"


@pytest.mark.asyncio
async def test_initialize_token_addresses(session):
    tool_config = create_initialize_token_addresses_tool(session)

    result = await tool_config["tool"]()

    assert tool_config["metadata"]["name"] == "initialize-token-addresses"
    assert result == (
        "Successfully fetched token addresses:\n"
        f"WETHX2 Address: {A_TOKEN}\n"
        f"Debt Token Address: {Z_TOKEN}"
    )
    assert session.token_addresses.leveraged_token == A_TOKEN


@pytest.mark.asyncio
async def test_initialize_token_addresses_failure(session):
    session.get_market_config.side_effect = ConnectionError("timeout")
    tool = create_initialize_token_addresses_tool(session)["tool"]

    result = await tool()

    assert result.startswith("Failed to fetch token addresses. Error: Failed to fetch token addresses: timeout")


class TestListMarkets:
    @pytest.mark.asyncio
    async def test_failed_markets_are_skipped(self, session):
        session.get_total_markets.return_value = 2
        session.get_market_config = AsyncMock(side_effect=[make_market_config(), RuntimeError("bad market")])
        tool = create_list_markets_tool(session)["tool"]

        result = await tool()

        assert result.startswith("Available Markets (Total: 1):\nMarket ID: 0\n")
        assert f"aToken (Leverage): WETHX2 ({A_TOKEN})" in result
        assert "Debt Duration: 2592000 seconds" in result
        assert "Unlocked: true" in result
        assert "Market ID: 1" not in result

    @pytest.mark.asyncio
    async def test_unknown_token_names(self, session):
        session.token_label = AsyncMock(return_value="Unknown")
        tool = create_list_markets_tool(session)["tool"]

        result = await tool()

        assert "Base Token: Unknown (" in result

    @pytest.mark.asyncio
    async def test_no_markets(self, session):
        session.get_total_markets.return_value = 0
        tool = create_list_markets_tool(session)["tool"]

        assert await tool() == "No markets found."

    @pytest.mark.asyncio
    async def test_total_markets_failure(self, session):
        session.get_total_markets.side_effect = ConnectionError("rpc down")
        tool = create_list_markets_tool(session)["tool"]

        assert await tool() == "Failed to list markets. Error: rpc down"
