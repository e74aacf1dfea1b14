"""
Thin async gateway to the chain: contract handles, signed submission and receipts.

Every state-changing call goes through the same path:
estimate gas -> pad by 20% -> build -> sign -> submit -> wait for the receipt.
"""
from typing import Any, List, Optional, Tuple
from web3 import AsyncWeb3, AsyncHTTPProvider, Web3
from eth_account import Account
import logging

from config import ConfigurationError
from utils.covenant_math import pad_gas_limit

logger = logging.getLogger(__name__)


class TransactionFailedError(Exception):
    """A submitted transaction was mined with a failing status."""

    def __init__(self, tx_hash: str, message: Optional[str] = None):
        self.tx_hash = tx_hash
        super().__init__(message or f"Transaction {tx_hash} reverted")


class ToolExecutor:
    """Holds the RPC client and signing account used by every tool."""

    def __init__(self, rpc_url: str, private_key: str):
        self.rpc_url = rpc_url
        self.w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))
        try:
            self.account = Account.from_key(private_key)
        except Exception as e:
            raise ConfigurationError(f"PRIVATE_KEY is not a valid private key: {e}") from e

    @property
    def address(self) -> str:
        return self.account.address

    def contract(self, address: str, abi: List[dict]):
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)

    async def estimate_gas_limit(self, contract_function) -> int:
        gas_estimate = await contract_function.estimate_gas({'from': self.account.address})
        gas_limit = pad_gas_limit(gas_estimate)
        logger.info(f"Gas estimate: {gas_estimate}, gas limit: {gas_limit}")
        return gas_limit

    async def send_transaction(self, contract_function, gas_limit: Optional[int] = None) -> str:
        """Sign and submit a contract call; returns the 0x-prefixed transaction hash."""
        if gas_limit is None:
            gas_limit = await self.estimate_gas_limit(contract_function)

        nonce = await self.w3.eth.get_transaction_count(self.account.address, 'pending')
        gas_price = await self.w3.eth.gas_price

        transaction = await contract_function.build_transaction({
            'from': self.account.address,
            'nonce': nonce,
            'gas': gas_limit,
            'gasPrice': gas_price,
        })

        signed_txn = self.w3.eth.account.sign_transaction(transaction, self.account.key)
        tx_hash = await self.w3.eth.send_raw_transaction(signed_txn.raw_transaction)
        tx_hash_hex = Web3.to_hex(tx_hash)

        logger.info(f"Submitted {contract_function.fn_name} transaction: {tx_hash_hex}")
        return tx_hash_hex

    async def wait_for_receipt(self, tx_hash: str) -> Any:
        receipt = await self.w3.eth.wait_for_transaction_receipt(tx_hash)
        if receipt["status"] != 1:
            raise TransactionFailedError(tx_hash)
        logger.info(f"Transaction {tx_hash} included in block {receipt['blockNumber']}")
        return receipt

    async def transact(self, contract_function) -> Tuple[str, Any]:
        """Submit a call and block until it is included."""
        tx_hash = await self.send_transaction(contract_function)
        receipt = await self.wait_for_receipt(tx_hash)
        return tx_hash, receipt
