"""
Network configuration for deployments.

Settings come from the environment (optionally via a ``.env`` file):

    SEPOLIA_RPC_URL                RPC endpoint for Sepolia
    PRIVATE_KEY                    deployer key for remote networks
    ETHERSCAN_API_KEY              block explorer key for verification
    NFT_MARKET_LOCALHOST_RPC_URL   override for the local node URL
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from web3 import EthereumTesterProvider, Web3

from .exceptions import ConfigurationError

load_dotenv()

SEPOLIA_CHAIN_ID = 11155111
HARDHAT_CHAIN_ID = 31337


@dataclass(frozen=True)
class NetworkConfig:
    """
    Connection and deployment settings for one network.

    Attributes:
        name: Network name as passed on the command line
        chain_id: Expected chain id, or None to accept whatever the node reports
        rpc_url_env: Environment variable holding the RPC URL (None for the
            in-process test chain)
        default_rpc_url: URL used when the environment variable is unset
        block_confirmations: Blocks to wait for after deployment
    """

    name: str
    chain_id: Optional[int]
    rpc_url_env: Optional[str] = None
    default_rpc_url: Optional[str] = None
    block_confirmations: int = 1

    @property
    def in_process(self) -> bool:
        return self.rpc_url_env is None and self.default_rpc_url is None

    @property
    def rpc_url(self) -> Optional[str]:
        if self.in_process:
            return None
        url = os.getenv(self.rpc_url_env) if self.rpc_url_env else None
        return url or self.default_rpc_url


NETWORKS = {
    "hardhat": NetworkConfig(name="hardhat", chain_id=None),
    "localhost": NetworkConfig(
        name="localhost",
        chain_id=HARDHAT_CHAIN_ID,
        rpc_url_env="NFT_MARKET_LOCALHOST_RPC_URL",
        default_rpc_url="http://127.0.0.1:8545",
    ),
    "sepolia": NetworkConfig(
        name="sepolia",
        chain_id=SEPOLIA_CHAIN_ID,
        rpc_url_env="SEPOLIA_RPC_URL",
        block_confirmations=6,
    ),
}


def get_network(name: str) -> NetworkConfig:
    """
    Look up a network by name.

    Raises:
        ValueError: If the network is not known
    """
    try:
        return NETWORKS[name]
    except KeyError:
        available = ", ".join(NETWORKS)
        raise ValueError(f"Unknown network: {name}. Available networks: {available}") from None


def connect(network: NetworkConfig) -> Web3:
    """
    Open a Web3 connection for a network.

    The in-process network uses web3's EthereumTesterProvider, which needs
    the ``eth-tester`` extra installed.

    Raises:
        ConfigurationError: If no RPC URL is configured or the node is unreachable
    """
    if network.in_process:
        return Web3(EthereumTesterProvider())

    rpc_url = network.rpc_url
    if not rpc_url:
        raise ConfigurationError(f"{network.rpc_url_env} must be set to deploy to {network.name}")

    w3 = Web3(Web3.HTTPProvider(rpc_url))
    if not w3.is_connected():
        raise ConfigurationError(f"Failed to connect to {network.name} at {rpc_url}")

    return w3


def get_private_key() -> Optional[str]:
    """Deployer private key from the environment, if any."""
    return os.getenv("PRIVATE_KEY") or None


def get_etherscan_api_key() -> Optional[str]:
    """Block explorer API key from the environment, if any."""
    return os.getenv("ETHERSCAN_API_KEY") or None
