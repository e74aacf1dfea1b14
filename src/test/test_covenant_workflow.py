from unittest.mock import AsyncMock

import pytest

from conftest import A_TOKEN, BASE_TOKEN, USER, WAD, Z_TOKEN, balances, make_market_state
from services.covenant_workflow import mint_positions, redeem_positions, swap_tokens

TX_HASH = "0x" + "ab" * 32

MINT_EVENT = {
    "aTokenAmountOut": 2 * WAD,
    "zTokenAmountOut": 3 * WAD,
    "aTokenPrice": 11 * WAD,
    "zTokenPrice": 12 * WAD,
}


async def _mint(session, amount=WAD):
    return await mint_positions(session, 0, USER, BASE_TOKEN, A_TOKEN, Z_TOKEN, amount, 1, 2)


class TestEventExtraction:
    @pytest.mark.asyncio
    async def test_amounts_and_prices_come_from_event(self, session):
        session.decode_events.return_value = [MINT_EVENT]

        outcome = await _mint(session)

        assert outcome.tx_hash == TX_HASH
        assert outcome.from_event is True
        assert outcome.amounts == {"aTokenAmountOut": 2 * WAD, "zTokenAmountOut": 3 * WAD}
        assert (outcome.a_token_price, outcome.z_token_price) == (11 * WAD, 12 * WAD)
        session.balance_of.assert_not_awaited()
        session.decode_events.assert_called_once_with("Mint", {"status": 1, "logs": []})

    @pytest.mark.asyncio
    async def test_missing_event_falls_back_to_balances(self, session):
        session.decode_events.return_value = []
        session.balance_of.side_effect = balances({A_TOKEN: 7 * WAD, Z_TOKEN: 9 * WAD})
        session.get_market_state.return_value = make_market_state(
            base_token_price=1800 * WAD, debt_notional_price=WAD // 2
        )

        outcome = await _mint(session)

        assert outcome.from_event is False
        assert outcome.amounts == {"aTokenAmountOut": 7 * WAD, "zTokenAmountOut": 9 * WAD}
        assert outcome.a_token_price == 1800 * WAD
        assert outcome.z_token_price == WAD // 2
        session.get_market_state.assert_awaited_once_with(0)

    @pytest.mark.asyncio
    async def test_event_without_expected_fields_falls_back(self, session):
        session.decode_events.return_value = [{"aTokenAmountOut": WAD}]
        session.balance_of.side_effect = balances({A_TOKEN: 4 * WAD, Z_TOKEN: 5 * WAD})

        outcome = await _mint(session)

        assert outcome.from_event is False
        assert outcome.amounts["zTokenAmountOut"] == 5 * WAD

    @pytest.mark.asyncio
    async def test_fallback_reports_absolute_balance(self, session):
        # An account already holding 10 aTokens sees 10 + minted, not the minted delta
        session.balance_of.side_effect = balances({A_TOKEN: 12 * WAD, Z_TOKEN: 0})

        outcome = await _mint(session)

        assert outcome.amounts["aTokenAmountOut"] == 12 * WAD


class TestApprovals:
    @pytest.mark.asyncio
    async def test_mint_approves_base_token_before_submitting(self, session, executor):
        calls = []
        session.ensure_allowance = AsyncMock(side_effect=lambda token, amount: calls.append("approve") or "0xapp")
        executor.transact.side_effect = lambda fn: calls.append("transact") or (TX_HASH, {"status": 1})

        outcome = await _mint(session, amount=5 * WAD)

        assert calls == ["approve", "transact"]
        session.ensure_allowance.assert_awaited_once_with(BASE_TOKEN, 5 * WAD)
        assert outcome.approval_tx_hashes == ["0xapp"]

    @pytest.mark.asyncio
    async def test_redeem_only_approves_non_zero_legs(self, session):
        session.decode_events.return_value = [{"amountOut": WAD}]

        await redeem_positions(session, 0, USER, BASE_TOKEN, A_TOKEN, Z_TOKEN, 0, 2 * WAD)

        session.ensure_allowance.assert_awaited_once_with(Z_TOKEN, 2 * WAD)

    @pytest.mark.asyncio
    async def test_approval_failure_aborts_before_submission(self, session, executor):
        session.ensure_allowance = AsyncMock(side_effect=RuntimeError("approve reverted"))

        with pytest.raises(RuntimeError, match="approve reverted"):
            await _mint(session)

        executor.transact.assert_not_awaited()


class TestCallParameters:
    @pytest.mark.asyncio
    async def test_swap_params_tuple(self, session):
        session.decode_events.return_value = [{"amountOut": WAD}]

        outcome = await swap_tokens(session, 0, USER, BASE_TOKEN, A_TOKEN, 3 * WAD, WAD)

        session.covenant.functions.swap.assert_called_once_with(
            (0, BASE_TOKEN, A_TOKEN, USER, USER, 3 * WAD, WAD, 0)
        )
        assert outcome.amounts == {"amountOut": WAD}

    @pytest.mark.asyncio
    async def test_mint_params_tuple(self, session):
        session.decode_events.return_value = [MINT_EVENT]

        await _mint(session, amount=4 * WAD)

        session.covenant.functions.mint.assert_called_once_with((0, 4 * WAD, USER, USER, 1, 2))

    @pytest.mark.asyncio
    async def test_redeem_fallback_reads_base_token(self, session):
        session.balance_of.side_effect = balances({BASE_TOKEN: 6 * WAD})

        outcome = await redeem_positions(session, 0, USER, BASE_TOKEN, A_TOKEN, Z_TOKEN, WAD, 0, 0)

        assert outcome.amounts == {"amountOut": 6 * WAD}
        session.covenant.functions.redeem.assert_called_once_with((0, WAD, 0, USER, USER, 0))
