"""Contract wrappers for deployment and interaction."""
from .nft_market import NFTMarketContract, NFTTransferEvent, TransactionResult

__all__ = ["NFTMarketContract", "NFTTransferEvent", "TransactionResult"]
