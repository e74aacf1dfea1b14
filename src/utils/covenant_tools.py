"""
Covenant tool registry: input schemas and LangChain tool wrappers.
"""
from typing import Callable, List, Literal, Optional, Type
import inspect
from pydantic import BaseModel, Field
from langchain_core.tools import StructuredTool
from services.covenant_session import CovenantSession
from tools.market_tool import (
    create_fetch_leverage_tool,
    create_initialize_token_addresses_tool,
    create_list_markets_tool,
)
from tools.position_tool import (
    create_balance_allocation_tool,
    create_liquidation_risk_tool,
    create_profit_loss_tool,
)
from tools.trade_tool import create_exit_tool, create_mint_tool, create_rebalance_tool, create_trade_tool
from tools.strategy_tool import create_strategy_tool
from config import logger


# Input schemas for tools
class NoInput(BaseModel):
    pass


class BalanceAllocationInput(BaseModel):
    address: str = Field(description="Your Monad testnet address")
    leveragedPercentage: float = Field(
        default=60, ge=0, le=100,
        description="Percentage of funds for leveraged trading (default: 60%)"
    )


class MarketInput(BaseModel):
    marketId: int = Field(default=0, description="Market ID to fetch data for (default: 0)")


class MintInput(BaseModel):
    address: str = Field(description="Your Monad testnet address")
    marketId: int = Field(description="Market ID to mint positions for")
    amount: str = Field(description="Amount of base token to deposit for minting (e.g., '10' for 10 WETH)")
    minATokenAmountOut: Optional[str] = Field(
        default=None, description="Minimum aTokens to receive (optional; calculated if not provided)"
    )
    minZTokenAmountOut: Optional[str] = Field(
        default=None, description="Minimum zTokens to receive (optional; calculated if not provided)"
    )
    slippageTolerance: float = Field(default=1, description="Slippage tolerance percentage (default: 1%)")


class TradeInput(BaseModel):
    address: str = Field(description="Your Monad testnet address")
    token: Literal["WETHX2", "Debt"] = Field(description="Token to trade (WETHX2 or Debt)")
    action: Literal["buy", "sell"] = Field(description="Action to perform (buy or sell)")
    amount: str = Field(description="Amount of tokens to trade")
    amountLimit: str = Field(
        default="0", description="Minimum amount to receive (buy) or maximum to spend (sell)"
    )


class RebalanceInput(BaseModel):
    address: str = Field(description="Your Monad testnet address")
    marketSentiment: Literal["Bullish", "Bearish"] = Field(description="Your WETH market sentiment")


class ExitInput(BaseModel):
    address: str = Field(description="Your Monad testnet address")
    wethx2Amount: str = Field(description="Amount of WETHX2 to redeem")
    debtAmount: str = Field(description="Amount of debt tokens to redeem")
    minAmountOut: str = Field(default="0", description="Minimum WETH to receive")


class ProfitLossInput(BaseModel):
    address: str = Field(description="Your Monad testnet address")
    marketId: int = Field(default=0, description="Market ID to calculate for (default: 0)")
    initialBaseAmount: str = Field(description="Initial amount of base token invested (e.g., 10 WETH)")


class LiquidationRiskInput(BaseModel):
    address: str = Field(description="Your Monad testnet address")
    marketId: int = Field(default=0, description="Market ID to assess (default: 0)")


class StrategyInput(BaseModel):
    address: str = Field(description="Your Monad testnet address")
    marketId: int = Field(description="Market ID to analyze")
    execute: bool = Field(default=False, description="Set to true to execute the recommended strategy")
    slippageTolerance: float = Field(
        default=1, description="Slippage tolerance percentage for transactions (default: 1%)"
    )
    baseAmountToInvest: Optional[str] = Field(
        default=None, description="Amount of base token to invest for bullish strategy (e.g., '1.0' WETH)"
    )


def create_langchain_tool(
    func: Callable,
    name: Optional[str] = None,
    description: Optional[str] = None,
    args_schema: Optional[Type[BaseModel]] = None,
) -> StructuredTool:
    """Wrap a tool function as a StructuredTool, as a coroutine when it is async."""
    tool_name = name or func.__name__
    kwargs: dict = {
        "name": tool_name,
        "description": description or func.__doc__ or f"Tool for {tool_name}",
        "args_schema": args_schema,
    }
    if inspect.iscoroutinefunction(func):
        return StructuredTool.from_function(coroutine=func, **kwargs)
    return StructuredTool.from_function(func=func, **kwargs)


# (tool builder, input schema), in the order the tools are published
TOOL_BUILDERS = [
    (create_initialize_token_addresses_tool, NoInput),
    (create_balance_allocation_tool, BalanceAllocationInput),
    (create_fetch_leverage_tool, MarketInput),
    (create_mint_tool, MintInput),
    (create_trade_tool, TradeInput),
    (create_rebalance_tool, RebalanceInput),
    (create_exit_tool, ExitInput),
    (create_list_markets_tool, NoInput),
    (create_profit_loss_tool, ProfitLossInput),
    (create_liquidation_risk_tool, LiquidationRiskInput),
    (create_strategy_tool, StrategyInput),
]


def create_covenant_langchain_tools(session: CovenantSession) -> List[StructuredTool]:
    """Create all Covenant LangChain tools.

    Args:
        session: The Covenant session every tool reads from and signs with

    Returns:
        List of LangChain StructuredTool objects
    """
    tools = []

    for builder, args_schema in TOOL_BUILDERS:
        tool_config = builder(session)
        metadata = tool_config["metadata"]

        tools.append(create_langchain_tool(
            func=tool_config["tool"],
            name=metadata["name"],
            description=metadata["description"],
            args_schema=args_schema
        ))

    logger.info(f"Created {len(tools)} Covenant tools for signer {session.signer_address}")
    return tools
