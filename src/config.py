import sys
import logging
import os
from dataclasses import dataclass
from dotenv import load_dotenv

# Configure basic logging (stdout is reserved for the MCP stdio transport)
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s %(levelname)-8s %(name)-10s | %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
    stream=sys.stderr
)

# Create logger instance
logger = logging.getLogger()

# ENV_FILE lets a host point at a .env outside the working directory
load_dotenv(os.getenv("ENV_FILE") or None)

SERVER_NAME = "covenant-finance-strategy"
SERVER_VERSION = "0.0.1"

MONAD_TESTNET_CHAIN_ID = 10143

# Chain configuration
CHAIN_CONFIG = {
    MONAD_TESTNET_CHAIN_ID: {
        "name": "Monad Testnet",
        "rpc_url": os.getenv("MONAD_RPC_URL", "https://testnet-rpc.monad.xyz"),
        "native_currency": {"symbol": "MON", "name": "Monad", "decimals": 18},
        "explorer": "https://testnet.monadexplorer.com/tx/{tx_hash}",
    }
}

# RPC endpoints configuration (derived from CHAIN_CONFIG)
RPC_ENDPOINTS = {
    chain_id: config["rpc_url"]
    for chain_id, config in CHAIN_CONFIG.items()
}

# Covenant protocol deployment on Monad testnet
COVENANT_ADDRESS = os.getenv("COVENANT_ADDRESS", "0x1d30392503203dd42f5516B32dACA6b2e11F71d7")

# Base token (WETH) of the default market
WETH_ADDRESS = os.getenv("WETH_ADDRESS", "0xB5a30b0FDc5EA94A52fDc42e3E9760Cb8449Fb37")

# Market 0 is the WETHX2 market
DEFAULT_MARKET_ID = 0

# Every Covenant token uses 18 decimals
TOKEN_DECIMALS = 18

# ERC20 ABI for balance, allowance, approval and display-name calls
ERC20_ABI = [
    {
        "inputs": [{"internalType": "address", "name": "account", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [
            {"internalType": "address", "name": "owner", "type": "address"},
            {"internalType": "address", "name": "spender", "type": "address"}
        ],
        "name": "allowance",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [
            {"internalType": "address", "name": "spender", "type": "address"},
            {"internalType": "uint256", "name": "amount", "type": "uint256"}
        ],
        "name": "approve",
        "outputs": [{"internalType": "bool", "name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "name",
        "outputs": [{"internalType": "string", "name": "", "type": "string"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "symbol",
        "outputs": [{"internalType": "string", "name": "", "type": "string"}],
        "stateMutability": "view",
        "type": "function"
    }
]


class ConfigurationError(Exception):
    """Raised when the signing key or RPC settings are missing or malformed."""


@dataclass(frozen=True)
class SignerConfig:
    private_key: str
    rpc_url: str
    chain_id: int = MONAD_TESTNET_CHAIN_ID


def load_signer_config(chain_id: int = MONAD_TESTNET_CHAIN_ID) -> SignerConfig:
    """Read the signing key and RPC endpoint from the environment.

    Raises:
        ConfigurationError: if PRIVATE_KEY is absent or not 0x-prefixed,
            or no RPC endpoint is known for the chain.
    """
    private_key = os.getenv("PRIVATE_KEY")
    if not private_key:
        raise ConfigurationError("PRIVATE_KEY not found in environment")

    if not private_key.startswith("0x"):
        raise ConfigurationError("PRIVATE_KEY must start with 0x")

    rpc_url = RPC_ENDPOINTS.get(chain_id)
    if not rpc_url:
        raise ConfigurationError(f"RPC URL not found for chain ID: {chain_id}")

    return SignerConfig(private_key=private_key, rpc_url=rpc_url, chain_id=chain_id)
