"""
NFTMarket deployment and interaction tooling

Provides the NFTMarket contract source, compilation into Hardhat-style
artifacts, a web3.py wrapper for the marketplace calls, and the deployment
pipeline (deploy, wait for confirmations, verify on the block explorer).
"""

__version__ = "1.0.0"

from .artifacts.loader import (
    get_abi,
    get_bytecode,
    load_artifact,
    get_contract_metadata
)
from .artifacts.compiler import compile_contract, ensure_artifact

from .contracts.nft_market import NFTMarketContract, NFTTransferEvent, TransactionResult
from .deploy import DeploymentResult, deploy_nft_market, verify, wait_for_confirmations
from .exceptions import (
    NFTMarketError,
    ConfigurationError,
    MarketCallError,
    DeploymentError,
    VerificationError,
)

__all__ = [
    'get_abi',
    'get_bytecode',
    'load_artifact',
    'get_contract_metadata',
    'compile_contract',
    'ensure_artifact',
    'NFTMarketContract',
    'NFTTransferEvent',
    'TransactionResult',
    'DeploymentResult',
    'deploy_nft_market',
    'verify',
    'wait_for_confirmations',
    'NFTMarketError',
    'ConfigurationError',
    'MarketCallError',
    'DeploymentError',
    'VerificationError',
]
