"""
NFTMarket deployment pipeline.

compile -> deploy -> (Sepolia only) wait for block confirmations -> verify

Run through scripts/deploy.py:

    python scripts/deploy.py --network <network-name>
"""

import argparse
import asyncio
import sys
import time
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union, Dict, Any

from eth_account import Account
from loguru import logger
from web3 import Web3

from .artifacts.compiler import ensure_artifact
from .contracts.nft_market import NFTMarketContract, Sender
from .exceptions import ConfigurationError, DeploymentError
from .networks import (
    NETWORKS,
    NetworkConfig,
    SEPOLIA_CHAIN_ID,
    connect,
    get_etherscan_api_key,
    get_network,
    get_private_key,
)
from .verification import EtherscanVerifier


@dataclass
class DeploymentResult:
    """Outcome of a deployment run."""

    address: str
    tx_hash: str
    chain_id: int
    verified: bool = False
    market: Optional[NFTMarketContract] = field(default=None, repr=False)


def wait_for_confirmations(
    w3: Web3,
    tx_hash,
    confirmations: int,
    poll_interval: float = 2.0,
    timeout: float = 600,
):
    """
    Block until a transaction is buried under enough blocks.

    The block containing the transaction counts as the first confirmation.

    Args:
        w3: Web3 instance
        tx_hash: Transaction to wait for
        confirmations: Required number of confirmations
        poll_interval: Seconds between block number checks
        timeout: Seconds before giving up, receipt wait included

    Returns:
        The transaction receipt

    Raises:
        DeploymentError: If the confirmations do not arrive in time
    """
    deadline = time.monotonic() + timeout
    receipt = w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)

    while True:
        confirmed = w3.eth.block_number - receipt['blockNumber'] + 1
        if confirmed >= confirmations:
            return receipt
        if time.monotonic() >= deadline:
            raise DeploymentError(
                f"Timed out after {timeout}s with {confirmed}/{confirmations} confirmations"
            )
        time.sleep(poll_interval)


def verify(
    contract_address: str,
    args: Sequence[Any],
    artifact: Optional[Dict[str, Any]] = None,
    verifier: Optional[EtherscanVerifier] = None,
    chain_id: int = SEPOLIA_CHAIN_ID,
) -> bool:
    """
    Verify a deployed contract on the block explorer.

    Verification problems never fail the deployment: an "already verified"
    answer is reported as success, anything else is logged.

    Returns:
        True if the source is verified (now or previously)
    """
    logger.info("Verifying contract ⏳")
    try:
        if artifact is None:
            artifact = ensure_artifact(NFTMarketContract.CONTRACT_NAME)
        if verifier is None:
            verifier = EtherscanVerifier(get_etherscan_api_key(), chain_id)
        asyncio.run(verifier.verify_source(contract_address, artifact, args))
        return True
    except Exception as e:
        if "already verified" in str(e).lower():
            logger.info("Already Verified!")
            return True
        logger.error(f"Verification failed: {e}")
        return False


def resolve_deployer(network: NetworkConfig, w3: Web3) -> Sender:
    """
    Pick the deploying account.

    Remote networks sign locally with PRIVATE_KEY; the in-process and local
    node networks fall back to the node's first unlocked account.

    Raises:
        ConfigurationError: If no account is available
    """
    private_key = get_private_key()
    if private_key and not network.in_process:
        return Account.from_key(private_key)

    if network.chain_id != SEPOLIA_CHAIN_ID:
        accounts = w3.eth.accounts
        if accounts:
            return accounts[0]

    raise ConfigurationError(f"PRIVATE_KEY must be set to deploy to {network.name}")


def deploy_nft_market(
    network: Union[str, NetworkConfig] = "hardhat",
    w3: Optional[Web3] = None,
    account: Optional[Sender] = None,
    artifact: Optional[Dict[str, Any]] = None,
    verifier: Optional[EtherscanVerifier] = None,
) -> DeploymentResult:
    """
    Deploy NFTMarket and, on Sepolia, wait for confirmations and verify it.

    Args:
        network: Network name or config
        w3: Existing connection (opened from the network config if omitted)
        account: Deployer (resolved from the environment if omitted)
        artifact: Compiled artifact (loaded or compiled if omitted)
        verifier: Verification client (built from ETHERSCAN_API_KEY if omitted)

    Raises:
        ConfigurationError: If the node's chain id does not match the network
        DeploymentError: If the deployment transaction fails
    """
    if isinstance(network, str):
        network = get_network(network)
    if w3 is None:
        w3 = connect(network)
    if account is None:
        account = resolve_deployer(network, w3)
    if artifact is None:
        artifact = ensure_artifact(NFTMarketContract.CONTRACT_NAME)

    chain_id = w3.eth.chain_id
    if network.chain_id is not None and chain_id != network.chain_id:
        raise ConfigurationError(
            f"Connected to chain {chain_id} but {network.name} expects {network.chain_id}"
        )

    logger.info("Deploying contract ⏳")
    market = NFTMarketContract.deploy(w3, account, artifact=artifact)
    tx_hash = Web3.to_hex(market.deploy_receipt['transactionHash'])

    logger.success("Contract deployed successfully ✅")
    logger.info(f"Contract address : {market.address}")

    result = DeploymentResult(address=market.address, tx_hash=tx_hash, chain_id=chain_id, market=market)

    if chain_id == SEPOLIA_CHAIN_ID:
        logger.info("Waiting for block confirmations ⏳")
        wait_for_confirmations(w3, tx_hash, network.block_confirmations)
        result.verified = verify(
            market.address, [], artifact=artifact, verifier=verifier, chain_id=chain_id
        )

    return result


def configure_logging(level: str = "INFO"):
    """Send log output to stderr in the project's format."""
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level=level,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command line entry point; returns the process exit status."""
    parser = argparse.ArgumentParser(description="Deploy the NFTMarket contract")
    parser.add_argument(
        "--network",
        default="hardhat",
        choices=sorted(NETWORKS),
        help="Network to deploy to (default: hardhat, an in-process test chain)",
    )
    parser.add_argument("--log-level", default="INFO", help="Log level (default: INFO)")
    args = parser.parse_args(argv)

    configure_logging(args.log_level)

    try:
        deploy_nft_market(args.network)
    except Exception as e:
        logger.error(f"Deployment failed: {e}")
        return 1

    return 0
