"""
Approve -> estimate -> submit -> confirm -> extract, shared by every mutating tool.

When the expected event is missing from the receipt (or lacks a field), the
amounts are read back from the output token balances and prices from the
market state. Those balances are absolute post-call balances, not deltas,
so a caller that already held the token sees its whole balance reported.
"""
from typing import Dict, Iterable, Tuple
import logging

from models.covenant import TransactionOutcome
from services.covenant_session import CovenantSession
from tools.covenant_abi import SWAP_TYPE_EXACT_IN

logger = logging.getLogger(__name__)


async def execute_protocol_call(
    session: CovenantSession,
    contract_function,
    *,
    market_id: int,
    event_name: str,
    fallback_balances: Dict[str, str],
    owner: str,
    approvals: Iterable[Tuple[str, int]] = (),
) -> TransactionOutcome:
    """Run one state-changing Covenant call end to end.

    Args:
        contract_function: bound covenant contract function (mint/swap/redeem)
        event_name: event expected in the receipt
        fallback_balances: event field -> token whose balance substitutes it
        owner: account whose balances are read by the fallback
        approvals: (token, amount) pairs that must be allowed before the call
    """
    approval_hashes = []
    for token_address, amount in approvals:
        approval_tx = await session.ensure_allowance(token_address, amount)
        if approval_tx:
            approval_hashes.append(approval_tx)

    tx_hash, receipt = await session.executor.transact(contract_function)

    fields = list(fallback_balances)
    events = session.decode_events(event_name, receipt)
    if events and all(field in events[0] for field in fields):
        args = events[0]
        return TransactionOutcome(
            tx_hash=tx_hash,
            amounts={field: int(args[field]) for field in fields},
            a_token_price=int(args.get("aTokenPrice", 0)),
            z_token_price=int(args.get("zTokenPrice", 0)),
            from_event=True,
            approval_tx_hashes=approval_hashes,
        )

    if events:
        logger.warning(
            f"{event_name} event does not contain expected arguments ({', '.join(fields)}). "
            f"Fetching balances as fallback (absolute balances, not deltas)."
        )
    else:
        logger.warning(
            f"{event_name} event not found in transaction receipt {tx_hash}. "
            f"Fetching balances as fallback (absolute balances, not deltas)."
        )

    amounts = {}
    for field, token_address in fallback_balances.items():
        amounts[field] = await session.balance_of(token_address, owner)

    market_state = await session.get_market_state(market_id)
    return TransactionOutcome(
        tx_hash=tx_hash,
        amounts=amounts,
        a_token_price=market_state.base_token_price,
        z_token_price=market_state.debt_notional_price,
        from_event=False,
        approval_tx_hashes=approval_hashes,
    )


async def mint_positions(
    session: CovenantSession,
    market_id: int,
    owner: str,
    base_token: str,
    a_token: str,
    z_token: str,
    base_amount: int,
    min_a_token_out: int = 0,
    min_z_token_out: int = 0,
) -> TransactionOutcome:
    mint_params = (market_id, base_amount, owner, owner, min_a_token_out, min_z_token_out)
    logger.info(f"Minting market {market_id}: base={base_amount} minA={min_a_token_out} minZ={min_z_token_out}")
    return await execute_protocol_call(
        session,
        session.covenant.functions.mint(mint_params),
        market_id=market_id,
        event_name="Mint",
        fallback_balances={
            "aTokenAmountOut": a_token,
            "zTokenAmountOut": z_token,
        },
        owner=owner,
        approvals=[(base_token, base_amount)],
    )


async def swap_tokens(
    session: CovenantSession,
    market_id: int,
    owner: str,
    asset_in: str,
    asset_out: str,
    amount: int,
    amount_limit: int = 0,
    swap_type: int = SWAP_TYPE_EXACT_IN,
) -> TransactionOutcome:
    swap_params = (market_id, asset_in, asset_out, owner, owner, amount, amount_limit, swap_type)
    logger.info(f"Swapping market {market_id}: {asset_in} -> {asset_out} amount={amount} limit={amount_limit}")
    return await execute_protocol_call(
        session,
        session.covenant.functions.swap(swap_params),
        market_id=market_id,
        event_name="Swap",
        fallback_balances={"amountOut": asset_out},
        owner=owner,
        approvals=[(asset_in, amount)],
    )


async def redeem_positions(
    session: CovenantSession,
    market_id: int,
    owner: str,
    base_token: str,
    a_token: str,
    z_token: str,
    a_token_amount: int,
    z_token_amount: int,
    min_amount_out: int = 0,
) -> TransactionOutcome:
    approvals = []
    if a_token_amount > 0:
        approvals.append((a_token, a_token_amount))
    if z_token_amount > 0:
        approvals.append((z_token, z_token_amount))

    redeem_params = (market_id, a_token_amount, z_token_amount, owner, owner, min_amount_out)
    logger.info(f"Redeeming market {market_id}: a={a_token_amount} z={z_token_amount} minOut={min_amount_out}")
    return await execute_protocol_call(
        session,
        session.covenant.functions.redeem(redeem_params),
        market_id=market_id,
        event_name="Redeem",
        fallback_balances={"amountOut": base_token},
        owner=owner,
        approvals=approvals,
    )
