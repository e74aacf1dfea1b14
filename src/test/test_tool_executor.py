from unittest.mock import AsyncMock, MagicMock

import pytest

from config import ConfigurationError
from tools.tool_executor import ToolExecutor, TransactionFailedError

PRIVATE_KEY = "0x" + "11" * 32


async def _value(value):
    return value


@pytest.fixture()
def executor():
    executor = ToolExecutor("http://localhost:8545", PRIVATE_KEY)
    w3 = MagicMock()
    w3.eth.get_transaction_count = AsyncMock(return_value=7)
    w3.eth.gas_price = _value(10**9)
    w3.eth.account.sign_transaction.return_value = MagicMock(raw_transaction=b"\x01\x02")
    w3.eth.send_raw_transaction = AsyncMock(return_value=b"\x12" * 32)
    w3.eth.wait_for_transaction_receipt = AsyncMock(return_value={"status": 1, "blockNumber": 5})
    executor.w3 = w3
    return executor


@pytest.fixture()
def contract_function():
    fn = MagicMock()
    fn.fn_name = "mint"
    fn.estimate_gas = AsyncMock(return_value=100_000)
    fn.build_transaction = AsyncMock(return_value={"data": "0x"})
    return fn


@pytest.mark.asyncio
async def test_transact_pads_gas_and_returns_prefixed_hash(executor, contract_function):
    tx_hash, receipt = await executor.transact(contract_function)

    assert tx_hash == "0x" + "12" * 32
    assert receipt["status"] == 1
    contract_function.estimate_gas.assert_awaited_once_with({"from": executor.address})
    contract_function.build_transaction.assert_awaited_once_with({
        "from": executor.address,
        "nonce": 7,
        "gas": 120_000,
        "gasPrice": 10**9,
    })
    executor.w3.eth.send_raw_transaction.assert_awaited_once_with(b"\x01\x02")


@pytest.mark.asyncio
async def test_failed_receipt_raises(executor, contract_function):
    executor.w3.eth.wait_for_transaction_receipt = AsyncMock(return_value={"status": 0, "blockNumber": 5})

    with pytest.raises(TransactionFailedError) as exc_info:
        await executor.transact(contract_function)

    assert exc_info.value.tx_hash == "0x" + "12" * 32


@pytest.mark.asyncio
async def test_explicit_gas_limit_skips_estimate(executor, contract_function):
    await executor.send_transaction(contract_function, gas_limit=50_000)

    contract_function.estimate_gas.assert_not_awaited()
    assert contract_function.build_transaction.await_args.args[0]["gas"] == 50_000


def test_account_derived_from_key():
    executor = ToolExecutor("http://localhost:8545", PRIVATE_KEY)
    assert executor.address.startswith("0x")
    assert len(executor.address) == 42


@pytest.mark.parametrize("bad_key", ["0xzz", "0x1234"])
def test_malformed_key_is_a_configuration_error(bad_key):
    with pytest.raises(ConfigurationError, match="PRIVATE_KEY is not a valid private key"):
        ToolExecutor("http://localhost:8545", bad_key)
