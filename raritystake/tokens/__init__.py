"""
Token contracts used by RarityStaking

Provides:
  - FungibleToken / NonFungibleToken : capability interfaces
  - ERC20Token                       : in-memory reward / raffle token
  - ERC721Token                      : in-memory NFT collection
"""

from .interfaces import FungibleToken, NonFungibleToken
from .erc20 import (
    ERC20Token,
    ERC20TransferEvent,
    ERC20ApprovalEvent,
    ERC20Error,
    InsufficientBalanceError,
    InsufficientAllowanceError,
)
from .erc721 import (
    ERC721Token,
    ERC721TransferEvent,
    ERC721ApprovalEvent,
    ERC721Error,
    NonexistentTokenError,
    TransferNotAuthorizedError,
)

__all__ = [
    "FungibleToken",
    "NonFungibleToken",
    "ERC20Token",
    "ERC20TransferEvent",
    "ERC20ApprovalEvent",
    "ERC20Error",
    "InsufficientBalanceError",
    "InsufficientAllowanceError",
    "ERC721Token",
    "ERC721TransferEvent",
    "ERC721ApprovalEvent",
    "ERC721Error",
    "NonexistentTokenError",
    "TransferNotAuthorizedError",
]
