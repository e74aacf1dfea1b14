"""
Per-process Covenant context.

A CovenantSession bundles the chain executor, the protocol contract and the
default market. It also owns the discovered leveraged/debt token address
slots, which are only replaced by an explicit refresh.
"""
from typing import Any, Dict, List, Optional
from web3 import Web3
from web3.logs import DISCARD
import logging

from config import (
    COVENANT_ADDRESS,
    DEFAULT_MARKET_ID,
    ERC20_ABI,
    WETH_ADDRESS,
    SignerConfig,
    load_signer_config,
)
from models.covenant import (
    LexState,
    MarketConfig,
    MarketState,
    MintPreview,
    SwapPreview,
    TokenAddresses,
)
from tools.covenant_abi import COVENANT_ABI, SWAP_TYPE_EXACT_IN
from tools.tool_executor import ToolExecutor
from utils.covenant_math import needs_approval

logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def normalize_address(address: str) -> str:
    """Checksum a user supplied address.

    Raises:
        ValueError: if the value is not a 20-byte hex address.
    """
    if not isinstance(address, str) or not Web3.is_address(address):
        raise ValueError(f"Invalid address: {address}")
    return Web3.to_checksum_address(address)


class CovenantSession:
    def __init__(
        self,
        executor: ToolExecutor,
        covenant_address: str = COVENANT_ADDRESS,
        base_token_address: str = WETH_ADDRESS,
        market_id: int = DEFAULT_MARKET_ID,
    ):
        self.executor = executor
        self.covenant_address = Web3.to_checksum_address(covenant_address)
        self.base_token_address = Web3.to_checksum_address(base_token_address)
        self.market_id = market_id
        self.covenant = executor.contract(self.covenant_address, COVENANT_ABI)
        self.token_addresses: Optional[TokenAddresses] = None

    @classmethod
    def from_config(cls, signer_config: Optional[SignerConfig] = None) -> "CovenantSession":
        """Build a session from the environment; raises ConfigurationError when unset."""
        signer_config = signer_config or load_signer_config()
        executor = ToolExecutor(signer_config.rpc_url, signer_config.private_key)
        logger.info(f"Covenant session ready for signer {executor.address} on chain {signer_config.chain_id}")
        return cls(executor)

    @property
    def signer_address(self) -> str:
        return self.executor.address

    # Protocol views

    async def get_market_config(self, market_id: int) -> MarketConfig:
        raw = await self.covenant.functions.getMarketConfig(market_id).call()
        return MarketConfig.from_call(raw)

    async def get_market_state(self, market_id: int) -> MarketState:
        raw = await self.covenant.functions.getMarketState(market_id, False).call()
        return MarketState.from_call(raw)

    async def get_lex_state(self, market_id: int) -> LexState:
        raw = await self.covenant.functions.getLexState(market_id, False).call()
        return LexState.from_call(raw)

    async def get_total_markets(self) -> int:
        return int(await self.covenant.functions.getTotalMarkets().call())

    async def preview_mint(self, market_id: int, base_amount: int) -> MintPreview:
        a_out, z_out, price = await self.covenant.functions.previewMint(market_id, base_amount).call()
        return MintPreview(
            a_token_amount_out=int(a_out),
            z_token_amount_out=int(z_out),
            after_discount_price=int(price),
        )

    async def preview_swap(
        self,
        market_id: int,
        asset_in: str,
        asset_out: str,
        amount: int,
        swap_type: int = SWAP_TYPE_EXACT_IN,
    ) -> SwapPreview:
        amount_calc, price = await self.covenant.functions.previewSwap(
            market_id, asset_in, asset_out, amount, swap_type
        ).call()
        return SwapPreview(amount_calc=int(amount_calc), after_discount_price=int(price))

    # ERC20 helpers

    def erc20(self, token_address: str):
        return self.executor.contract(token_address, ERC20_ABI)

    async def balance_of(self, token_address: str, owner: str) -> int:
        return int(await self.erc20(token_address).functions.balanceOf(owner).call())

    async def allowance(self, token_address: str, owner: Optional[str] = None) -> int:
        owner = owner or self.signer_address
        return int(await self.erc20(token_address).functions.allowance(owner, self.covenant_address).call())

    async def token_label(self, token_address: str) -> str:
        """Display name of a token: name, then symbol, then "Unknown"."""
        token = self.erc20(token_address)
        try:
            return await token.functions.name().call()
        except Exception as name_error:
            logger.warning(f"Failed to fetch name for token {token_address}: {name_error}")
        try:
            return await token.functions.symbol().call()
        except Exception as symbol_error:
            logger.warning(f"Failed to fetch symbol for token {token_address}: {symbol_error}")
        return "Unknown"

    # Address slots

    async def refresh_token_addresses(self) -> TokenAddresses:
        """Re-read the default market's aToken/zToken and store them on the session."""
        try:
            market_config = await self.get_market_config(self.market_id)
        except Exception as e:
            raise ValueError(f"Failed to fetch token addresses: {e}") from e

        if market_config.a_token in ("", ZERO_ADDRESS) or market_config.z_token in ("", ZERO_ADDRESS):
            raise ValueError("Failed to fetch token addresses: Failed to fetch valid token addresses")

        self.token_addresses = TokenAddresses(
            leveraged_token=market_config.a_token,
            debt_token=market_config.z_token,
        )
        logger.info(
            f"Token addresses for market {self.market_id}: "
            f"leveraged={self.token_addresses.leveraged_token} debt={self.token_addresses.debt_token}"
        )
        return self.token_addresses

    async def require_token_addresses(self) -> TokenAddresses:
        if self.token_addresses is None:
            return await self.refresh_token_addresses()
        return self.token_addresses

    # Transactions

    async def approve(self, token_address: str, amount: int) -> str:
        approve_fn = self.erc20(token_address).functions.approve(self.covenant_address, amount)
        tx_hash, _ = await self.executor.transact(approve_fn)
        logger.info(f"Approved {amount} of {token_address} for {self.covenant_address}: {tx_hash}")
        return tx_hash

    async def ensure_allowance(self, token_address: str, amount: int) -> Optional[str]:
        """Approve exactly `amount` if the signer's current allowance is lower.

        Returns the approval transaction hash, or None when nothing was sent.
        """
        current = await self.allowance(token_address)
        if not needs_approval(current, amount):
            logger.debug(f"Allowance {current} of {token_address} already covers {amount}")
            return None
        return await self.approve(token_address, amount)

    def decode_events(self, event_name: str, receipt: Any) -> List[Dict[str, Any]]:
        """Decode all `event_name` logs from a receipt; foreign logs are dropped."""
        event = getattr(self.covenant.events, event_name)()
        return [dict(log["args"]) for log in event.process_receipt(receipt, errors=DISCARD)]
