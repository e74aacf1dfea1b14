"""
Read-only mirrors of Covenant protocol structs and the outcome of a submitted transaction.
"""
from typing import Dict, List, Sequence
from pydantic import BaseModel


class MarketConfig(BaseModel):
    base_token: str
    quote_token: str
    a_token: str
    z_token: str
    oracle: str
    liquid_exchange_model: str
    duration: int

    @classmethod
    def from_call(cls, raw: Sequence) -> "MarketConfig":
        # tuple order must match the getMarketConfig ABI
        return cls(
            base_token=raw[0],
            quote_token=raw[1],
            a_token=raw[2],
            z_token=raw[3],
            oracle=raw[4],
            liquid_exchange_model=raw[5],
            duration=int(raw[6]),
        )


class MarketState(BaseModel):
    base_token_supply: int
    update_timestamp: int
    base_token_price: int
    debt_notional_price: int
    unlocked: bool

    @classmethod
    def from_call(cls, raw: Sequence) -> "MarketState":
        return cls(
            base_token_supply=int(raw[0]),
            update_timestamp=int(raw[1]),
            base_token_price=int(raw[2]),
            debt_notional_price=int(raw[3]),
            unlocked=bool(raw[4]),
        )


class LexState(BaseModel):
    target_ltv: int
    current_ltv: int
    balanced_debt_price_discount: int
    current_debt_price_discount: int

    @classmethod
    def from_call(cls, raw: Sequence) -> "LexState":
        return cls(
            target_ltv=int(raw[0]),
            current_ltv=int(raw[1]),
            balanced_debt_price_discount=int(raw[2]),
            current_debt_price_discount=int(raw[3]),
        )


class MintPreview(BaseModel):
    a_token_amount_out: int
    z_token_amount_out: int
    after_discount_price: int


class SwapPreview(BaseModel):
    amount_calc: int
    after_discount_price: int


class TokenAddresses(BaseModel):
    """Leveraged (aToken) and debt (zToken) token addresses of a market."""
    leveraged_token: str
    debt_token: str


class TransactionOutcome(BaseModel):
    tx_hash: str
    amounts: Dict[str, int]
    a_token_price: int = 0
    z_token_price: int = 0
    from_event: bool = True
    approval_tx_hashes: List[str] = []
