"""
Token capability interfaces.

The staking contract only talks to its collaborators through these, so any
ERC-20 / ERC-721 implementation (in-memory, RPC-backed, ...) can be injected.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any


class FungibleToken(ABC):
    """Subset of ERC-20 the staking contract relies on."""

    address: str
    symbol: str

    @abstractmethod
    def balance_of(self, address: str) -> Decimal:
        ...

    @abstractmethod
    async def transfer(self, sender: str, recipient: str, amount: Decimal) -> Any:
        ...


class NonFungibleToken(ABC):
    """Subset of ERC-721 the staking contract relies on."""

    address: str
    symbol: str

    @abstractmethod
    def exists(self, token_id: int) -> bool:
        ...

    @abstractmethod
    def owner_of(self, token_id: int) -> str:
        ...

    @abstractmethod
    def get_approved(self, token_id: int) -> str:
        ...

    @abstractmethod
    def is_approved_for_all(self, owner: str, operator: str) -> bool:
        ...

    @abstractmethod
    async def transfer_from(
        self,
        operator: str,
        sender: str,
        recipient: str,
        token_id: int,
    ) -> Any:
        ...
