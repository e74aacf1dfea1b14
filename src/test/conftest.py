"""Shared fixtures: a CovenantSession whose chain access is fully mocked."""
from unittest.mock import AsyncMock, MagicMock

import pytest
from web3 import Web3

from models.covenant import LexState, MarketConfig, MarketState, MintPreview, SwapPreview
from services.covenant_session import CovenantSession

WAD = 10**18

USER = "0x1111111111111111111111111111111111111111"
SIGNER = "0x2222222222222222222222222222222222222222"
BASE_TOKEN = Web3.to_checksum_address("0xB5a30b0FDc5EA94A52fDc42e3E9760Cb8449Fb37")
A_TOKEN = Web3.to_checksum_address("0xaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa")
Z_TOKEN = Web3.to_checksum_address("0xbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb")

TOKEN_NAMES = {BASE_TOKEN: "WETH", A_TOKEN: "WETHX2", Z_TOKEN: "WETH-DEBT"}


def make_market_config(**overrides) -> MarketConfig:
    values = dict(
        base_token=BASE_TOKEN,
        quote_token="0x3333333333333333333333333333333333333333",
        a_token=A_TOKEN,
        z_token=Z_TOKEN,
        oracle="0x4444444444444444444444444444444444444444",
        liquid_exchange_model="0x5555555555555555555555555555555555555555",
        duration=2592000,
    )
    values.update(overrides)
    return MarketConfig(**values)


def make_market_state(**overrides) -> MarketState:
    values = dict(
        base_token_supply=100 * WAD,
        update_timestamp=1700000000,
        base_token_price=2000 * WAD,
        debt_notional_price=WAD,
        unlocked=True,
    )
    values.update(overrides)
    return MarketState(**values)


def make_lex_state(**overrides) -> LexState:
    values = dict(
        target_ltv=5000,
        current_ltv=5000,
        balanced_debt_price_discount=0,
        current_debt_price_discount=1500,
    )
    values.update(overrides)
    return LexState(**values)


def balances(mapping):
    """side_effect for session.balance_of keyed by token address."""
    async def balance_of(token_address, owner):
        return mapping.get(token_address, 0)
    return balance_of


def balances_by_owner(mapping):
    """side_effect for session.balance_of keyed by owner, then token address."""
    async def balance_of(token_address, owner):
        return mapping.get(owner, {}).get(token_address, 0)
    return balance_of


@pytest.fixture()
def executor():
    executor = MagicMock()
    executor.address = SIGNER
    executor.transact = AsyncMock(return_value=("0x" + "ab" * 32, {"status": 1, "logs": []}))
    return executor


@pytest.fixture()
def bare_session(executor) -> CovenantSession:
    """Session with real helper methods over a mocked executor."""
    return CovenantSession(executor, base_token_address=BASE_TOKEN)


@pytest.fixture()
def session(bare_session) -> CovenantSession:
    """Session with every chain read replaced by a mock."""
    s = bare_session
    s.get_market_config = AsyncMock(return_value=make_market_config())
    s.get_market_state = AsyncMock(return_value=make_market_state())
    s.get_lex_state = AsyncMock(return_value=make_lex_state())
    s.get_total_markets = AsyncMock(return_value=1)
    s.balance_of = AsyncMock(side_effect=balances({}))
    s.token_label = AsyncMock(side_effect=lambda address: TOKEN_NAMES.get(address, "Unknown"))
    s.preview_mint = AsyncMock(return_value=MintPreview(
        a_token_amount_out=WAD, z_token_amount_out=1000 * WAD, after_discount_price=WAD
    ))
    s.preview_swap = AsyncMock(return_value=SwapPreview(amount_calc=WAD, after_discount_price=WAD))
    s.ensure_allowance = AsyncMock(return_value=None)
    s.decode_events = MagicMock(return_value=[])
    return s
