"""Exception hierarchy for NFTMarket tooling."""

from typing import Optional


class NFTMarketError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(NFTMarketError):
    """Raised when a network or environment setting is missing or invalid."""


class MarketCallError(NFTMarketError):
    """
    Raised when a contract call or transaction is reverted.

    Attributes:
        reason: Revert string reported by the contract (e.g.
            "NFTMarket: Incorrect price !"), or the raw node message when the
            revert carried no reason.
    """

    def __init__(self, reason: str, function_name: Optional[str] = None):
        self.reason = reason
        self.function_name = function_name
        if function_name:
            super().__init__(f"{function_name} reverted: {reason}")
        else:
            super().__init__(reason)


class DeploymentError(NFTMarketError):
    """Raised when a deployment transaction fails or times out."""


class VerificationError(NFTMarketError):
    """Raised when the block explorer rejects a source verification request."""
