"""
Shared fixtures

Contract tests run against an in-process eth-tester chain. They use the
stored NFTMarket artifact when one exists and otherwise compile the bundled
source with py-solc-x, caching the result. They are skipped only when
neither an artifact nor the pinned solc release is available.
"""

import pytest
from eth_account import Account
from web3 import Web3, EthereumTesterProvider

from nft_market.artifacts.compiler import artifact_output_dir, compile_contract, ensure_solc
from nft_market.artifacts.loader import load_artifact
from nft_market.contracts.nft_market import NFTMarketContract

TOKEN_URI = "https://github.com/rohitroy-github"


@pytest.fixture(scope="session")
def solc():
    """Installed solc version; skips when the compiler cannot be installed"""
    try:
        return ensure_solc()
    except Exception as e:
        pytest.skip(f"Solidity compiler unavailable: {e}")


@pytest.fixture(scope="session")
def artifact(request):
    """NFTMarket artifact, compiled and cached on first use if none is stored"""
    try:
        return load_artifact("NFTMarket")
    except FileNotFoundError:
        request.getfixturevalue("solc")
    return compile_contract("NFTMarket", output_dir=artifact_output_dir())


@pytest.fixture
def w3():
    """Fresh in-process chain"""
    return Web3(EthereumTesterProvider())


@pytest.fixture
def accounts(w3):
    """Prefunded test accounts"""
    return w3.eth.accounts


@pytest.fixture
def owner(accounts):
    """Deployer and contract owner"""
    return accounts[0]


@pytest.fixture
def buyer(accounts):
    """Second account, never the contract owner"""
    return accounts[1]


@pytest.fixture
def market(w3, owner, artifact):
    """NFTMarket deployed by the owner account"""
    return NFTMarketContract.deploy(w3, owner, artifact=artifact)


@pytest.fixture
def create_nft(market, owner):
    """Mint a token to the owner and return its id"""
    def _create(token_uri=TOKEN_URI, sender=None):
        return market.create_nft(token_uri, sender or owner).token_id
    return _create


@pytest.fixture
def create_and_list_nft(market, owner, create_nft):
    """Mint a token to the owner, list it and return its id"""
    def _create_and_list(price, token_uri=TOKEN_URI):
        token_id = create_nft(token_uri)
        market.list_nft(token_id, price, owner)
        return token_id
    return _create_and_list


@pytest.fixture
def local_account(w3, owner):
    """Funded account that signs its own transactions"""
    account = Account.create()
    tx_hash = w3.eth.send_transaction({
        'from': owner,
        'to': account.address,
        'value': Web3.to_wei(10, 'ether'),
    })
    w3.eth.wait_for_transaction_receipt(tx_hash)
    return account
