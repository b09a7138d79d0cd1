"""
NFTMarket contract wrapper for deployment and interaction.

This module provides a high-level interface for deploying the NFTMarket
contract and driving its marketplace calls (mint, list, buy, cancel,
withdraw) through web3.py.
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List, Tuple, Union

from eth_account.signers.local import LocalAccount
from loguru import logger
from web3 import Web3
from web3.exceptions import ContractLogicError
from web3.logs import DISCARD

from ..artifacts.loader import get_abi, load_artifact
from ..exceptions import DeploymentError, MarketCallError

Sender = Union[str, LocalAccount]

REVERT_PREFIX = "execution reverted"

REVERT_ERRORS = (ContractLogicError,)
try:
    # The in-process test chain reports reverts with its own exception type
    from eth_tester.exceptions import TransactionFailed
except ImportError:
    pass
else:
    REVERT_ERRORS += (TransactionFailed,)


@dataclass(frozen=True)
class NFTTransferEvent:
    """Decoded ``NFTTransfer(tokenID, from, to, tokenURI, price)`` event."""

    token_id: int
    from_address: str
    to_address: str
    token_uri: str
    price: int


@dataclass
class TransactionResult:
    """Outcome of a mined marketplace transaction."""

    tx_hash: str
    receipt: Any
    transfers: List[NFTTransferEvent] = field(default_factory=list)

    @property
    def token_id(self) -> Optional[int]:
        """Token id reported by the last NFTTransfer event, if any."""
        if not self.transfers:
            return None
        return self.transfers[-1].token_id

    @property
    def gas_cost(self) -> int:
        """Wei paid for gas by the sender of this transaction."""
        return self.receipt['gasUsed'] * self.receipt['effectiveGasPrice']


def sender_address(sender: Sender) -> str:
    """Checksummed address for a plain address or a local account."""
    if isinstance(sender, LocalAccount):
        return sender.address
    return Web3.to_checksum_address(sender)


def revert_reason(error: Exception) -> str:
    """
    Extract the contract's revert string from a web3 error.

    "execution reverted: NFTMarket: Incorrect price !" becomes
    "NFTMarket: Incorrect price !".
    """
    message = getattr(error, 'message', None)
    if not message:
        message = str(error.args[0]) if error.args else str(error)

    if message.startswith(REVERT_PREFIX):
        stripped = message[len(REVERT_PREFIX):].lstrip(': ').strip()
        return stripped or message
    return message


def send_transaction(
    w3: Web3,
    call,
    sender: Sender,
    value: int = 0,
    timeout: int = 120,
    label: Optional[str] = None,
):
    """
    Send a contract function or constructor call and wait for its receipt.

    Node-managed accounts (plain addresses) go through ``transact``; local
    accounts have the transaction built, signed locally and sent raw.

    Args:
        w3: Web3 instance
        call: Bound contract function or constructor
        sender: Address or LocalAccount paying for the transaction
        value: Wei attached to the call
        timeout: Seconds to wait for the receipt
        label: Name used in errors and logs

    Returns:
        Tuple of (transaction hash hex string, receipt)

    Raises:
        MarketCallError: If the call reverts
    """
    params = {'from': sender_address(sender)}
    if value:
        params['value'] = value

    try:
        if isinstance(sender, LocalAccount):
            params['nonce'] = w3.eth.get_transaction_count(sender.address)
            tx = call.build_transaction(params)
            signed = sender.sign_transaction(tx)
            tx_hash = w3.eth.send_raw_transaction(signed.raw_transaction)
        else:
            tx_hash = call.transact(params)
    except REVERT_ERRORS as e:
        raise MarketCallError(revert_reason(e), label) from e

    receipt = w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
    if receipt['status'] != 1:
        raise MarketCallError("transaction reverted", label)

    return Web3.to_hex(tx_hash), receipt


class NFTMarketContract:
    """
    Wrapper for NFTMarket contract deployment and interaction.

    NFTMarket is an ERC-721 collection with a built-in fixed-price market:
    listed tokens are held by the contract, buyers pay the exact listing
    price, the seller receives 95% and the remaining 5% accrues to the
    contract until the owner withdraws it.
    """

    CONTRACT_NAME = "NFTMarket"
    SELLER_SHARE_PERCENT = 95

    def __init__(self, w3: Web3, address: str, abi: Optional[list] = None):
        """
        Bind the wrapper to a deployed contract.

        Args:
            w3: Web3 instance
            address: Deployed contract address
            abi: Contract ABI (defaults to the bundled artifact's ABI)
        """
        self.w3 = w3
        self.abi = abi if abi is not None else get_abi(self.CONTRACT_NAME)
        self.address = Web3.to_checksum_address(address)
        self.contract = w3.eth.contract(address=self.address, abi=self.abi)
        self.deploy_receipt = None

    @classmethod
    def deploy(
        cls,
        w3: Web3,
        sender: Sender,
        artifact: Optional[Dict[str, Any]] = None,
        timeout: int = 300,
    ) -> "NFTMarketContract":
        """
        Deploy a new NFTMarket contract.

        Args:
            w3: Web3 instance
            sender: Deployer; becomes the contract owner
            artifact: Compiled artifact (defaults to the bundled one)
            timeout: Seconds to wait for the deployment receipt

        Returns:
            Wrapper bound to the new address, with ``deploy_receipt`` set

        Raises:
            DeploymentError: If the constructor reverts or no address is returned
        """
        if artifact is None:
            artifact = load_artifact(cls.CONTRACT_NAME)

        factory = w3.eth.contract(abi=artifact['abi'], bytecode=artifact['bytecode'])

        try:
            tx_hash, receipt = send_transaction(
                w3, factory.constructor(), sender, timeout=timeout, label="constructor"
            )
        except MarketCallError as e:
            raise DeploymentError(f"Deployment reverted: {e.reason}") from e

        if not receipt.get('contractAddress'):
            raise DeploymentError(f"No contract address in receipt for {tx_hash}")

        logger.debug(f"{cls.CONTRACT_NAME} deployed by {tx_hash} (gas used {receipt['gasUsed']})")

        market = cls(w3, receipt['contractAddress'], abi=artifact['abi'])
        market.deploy_receipt = receipt
        return market

    # Transactions

    def create_nft(self, token_uri: str, sender: Sender) -> TransactionResult:
        """
        Mint a new token to the sender.

        Args:
            token_uri: Metadata URI stored for the token
            sender: Minter and initial owner

        Returns:
            TransactionResult; ``token_id`` holds the minted id
        """
        return self._transact("createNFT", sender, token_uri)

    def list_nft(self, token_id: int, price: int, sender: Sender) -> TransactionResult:
        """
        List a token for sale; the contract takes custody until sold or canceled.

        Args:
            token_id: Token to list
            price: Asking price in wei (the contract rejects 0)
            sender: Token owner

        Raises:
            ValueError: If price is negative
            MarketCallError: If the contract rejects the listing
        """
        if price < 0:
            raise ValueError("Price cannot be negative")

        return self._transact("listNFT", sender, token_id, price)

    def buy_nft(self, token_id: int, sender: Sender, value: int) -> TransactionResult:
        """
        Buy a listed token.

        Args:
            token_id: Listed token
            sender: Buyer
            value: Wei sent; must equal the listing price exactly

        Raises:
            ValueError: If value is negative
            MarketCallError: If the token is not listed or the value is wrong
        """
        if value < 0:
            raise ValueError("Value cannot be negative")

        return self._transact("buyNFT", sender, token_id, value=value)

    def cancel_listing(self, token_id: int, sender: Sender) -> TransactionResult:
        """Return a listed token to its seller. Only the seller may cancel."""
        return self._transact("cancelListing", sender, token_id)

    def withdraw_funds(self, sender: Sender) -> TransactionResult:
        """Send the accumulated fees to the contract owner. Owner only."""
        return self._transact("withdrawFunds", sender)

    # Views

    def token_uri(self, token_id: int) -> str:
        return self._call("tokenURI", token_id)

    def owner_of(self, token_id: int) -> str:
        return self._call("ownerOf", token_id)

    def owner(self) -> str:
        return self._call("owner")

    def balance(self) -> int:
        """Ether held by the contract, in wei."""
        return self.w3.eth.get_balance(self.address)

    # Events

    def nft_transfers(self, receipt) -> List[NFTTransferEvent]:
        """
        Decode the NFTTransfer events in a receipt.

        Logs from other events (ERC-721 Transfer, Approval) are skipped.
        """
        events = self.contract.events.NFTTransfer().process_receipt(receipt, errors=DISCARD)
        return [
            NFTTransferEvent(
                token_id=event['args']['tokenID'],
                from_address=event['args']['from'],
                to_address=event['args']['to'],
                token_uri=event['args']['tokenURI'],
                price=event['args']['price'],
            )
            for event in events
        ]

    @classmethod
    def split_sale_price(cls, price: int) -> Tuple[int, int]:
        """
        Split a sale price the way the contract does.

        Args:
            price: Sale price in wei

        Returns:
            Tuple of (seller profit, market fee); the seller's share is
            rounded down and the fee takes the remainder
        """
        if price < 0:
            raise ValueError("Price cannot be negative")

        seller_profit = (price * cls.SELLER_SHARE_PERCENT) // 100
        return seller_profit, price - seller_profit

    def _transact(self, function_name: str, sender: Sender, *args, value: int = 0) -> TransactionResult:
        call = getattr(self.contract.functions, function_name)(*args)
        tx_hash, receipt = send_transaction(
            self.w3, call, sender, value=value, label=function_name
        )
        logger.debug(f"{function_name}{args} mined in block {receipt['blockNumber']}: {tx_hash}")
        return TransactionResult(tx_hash=tx_hash, receipt=receipt, transfers=self.nft_transfers(receipt))

    def _call(self, function_name: str, *args):
        try:
            return getattr(self.contract.functions, function_name)(*args).call()
        except REVERT_ERRORS as e:
            raise MarketCallError(revert_reason(e), function_name) from e
