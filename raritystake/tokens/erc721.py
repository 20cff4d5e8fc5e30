"""
In-memory ERC-721 collection.

Stands in for the staked NFT collection: sequential ids starting at
``start_token_id`` (0 by default, as with ERC721A), open batch mint, per-token
and operator approvals, and operator-driven ``transferFrom``.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Set, Tuple

from ..constants import NULL_ADDRESS
from ..crypto.address import normalize_address
from ..logger import get_logger
from .interfaces import NonFungibleToken

logger = get_logger(__name__)


class ERC721Error(Exception):
    """Base exception for ERC-721 operations."""


class NonexistentTokenError(ERC721Error):
    def __init__(self, token_id: int):
        self.token_id = token_id
        super().__init__(f"Token #{token_id} does not exist")


class TransferNotAuthorizedError(ERC721Error):
    """Raised when the operator is neither owner, approved, nor an approved operator."""


@dataclass(frozen=True)
class ERC721TransferEvent:
    token_symbol: str
    sender: str
    recipient: str
    token_id: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Transfer",
            "token": self.token_symbol,
            "from": self.sender,
            "to": self.recipient,
            "tokenId": self.token_id,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class ERC721ApprovalEvent:
    token_symbol: str
    owner: str
    operator: str
    token_id: int = -1        # -1 for ApprovalForAll
    approved: bool = True
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        if self.token_id < 0:
            return {
                "event": "ApprovalForAll",
                "token": self.token_symbol,
                "owner": self.owner,
                "operator": self.operator,
                "approved": self.approved,
                "timestamp": self.timestamp,
            }
        return {
            "event": "Approval",
            "token": self.token_symbol,
            "owner": self.owner,
            "approved": self.operator,
            "tokenId": self.token_id,
            "timestamp": self.timestamp,
        }


class ERC721Token(NonFungibleToken):
    """
    Non-fungible token with ERC-721 semantics.

        - owner_of(token_id) → address
        - balance_of(owner) → int
        - approve(caller, approved, token_id)
        - set_approval_for_all(owner, operator, approved)
        - transfer_from(operator, sender, recipient, token_id)
        - mint(recipient, quantity) → [token_id, ...]
    """

    def __init__(self, name: str, symbol: str, address: str, start_token_id: int = 0):
        if not name:
            raise ERC721Error("Token name cannot be empty")
        if not symbol:
            raise ERC721Error("Token symbol cannot be empty")

        self.name = name
        self.symbol = symbol
        self.address = normalize_address(address)
        self.start_token_id = start_token_id
        self._next_token_id = start_token_id

        self._owners: Dict[int, str] = {}
        self._token_approvals: Dict[int, str] = {}
        self._operator_approvals: Set[Tuple[str, str]] = set()  # (owner, operator)
        self._events: List[Any] = []

        logger.info(f"ERC-721 deployed: {symbol} ({name}) at {self.address}")

    # ── Read-only views ───────────────────────────────────────────────

    @property
    def total_supply(self) -> int:
        return len(self._owners)

    def exists(self, token_id: int) -> bool:
        return token_id in self._owners

    def owner_of(self, token_id: int) -> str:
        owner = self._owners.get(token_id)
        if owner is None:
            raise NonexistentTokenError(token_id)
        return owner

    def balance_of(self, owner: str) -> int:
        owner = normalize_address(owner)
        return sum(1 for o in self._owners.values() if o == owner)

    def tokens_of_owner(self, owner: str) -> List[int]:
        owner = normalize_address(owner)
        return sorted(tid for tid, o in self._owners.items() if o == owner)

    def get_approved(self, token_id: int) -> str:
        self.owner_of(token_id)
        return self._token_approvals.get(token_id, NULL_ADDRESS)

    def is_approved_for_all(self, owner: str, operator: str) -> bool:
        return (normalize_address(owner), normalize_address(operator)) in self._operator_approvals

    @property
    def events(self) -> List[Any]:
        return list(self._events)

    def _is_approved_or_owner(self, operator: str, token_id: int) -> bool:
        owner = self.owner_of(token_id)
        return (
            operator == owner
            or self._token_approvals.get(token_id) == operator
            or (owner, operator) in self._operator_approvals
        )

    # ── Mutations ─────────────────────────────────────────────────────

    async def mint(self, recipient: str, quantity: int) -> List[int]:
        """Mint *quantity* sequential ids to *recipient*."""
        recipient = normalize_address(recipient)
        if quantity <= 0:
            raise ERC721Error("Mint quantity must be positive")
        if recipient == NULL_ADDRESS:
            raise ERC721Error("Cannot mint to the null address")

        minted = list(range(self._next_token_id, self._next_token_id + quantity))
        for token_id in minted:
            self._owners[token_id] = recipient
            self._events.append(
                ERC721TransferEvent(self.symbol, NULL_ADDRESS, recipient, token_id)
            )
        self._next_token_id += quantity

        logger.debug(f"Mint: {quantity} {self.symbol} → {recipient} (#{minted[0]}..#{minted[-1]})")
        return minted

    async def approve(self, caller: str, approved: str, token_id: int) -> ERC721ApprovalEvent:
        caller = normalize_address(caller)
        approved = normalize_address(approved)
        owner = self.owner_of(token_id)

        if approved == owner:
            raise ERC721Error("Approval to current owner")
        if caller != owner and not self.is_approved_for_all(owner, caller):
            raise TransferNotAuthorizedError(
                f"{caller} is not owner nor approved for all of token #{token_id}"
            )

        self._token_approvals[token_id] = approved
        event = ERC721ApprovalEvent(self.symbol, owner, approved, token_id)
        self._events.append(event)
        return event

    async def set_approval_for_all(
        self,
        owner: str,
        operator: str,
        approved: bool,
    ) -> ERC721ApprovalEvent:
        owner = normalize_address(owner)
        operator = normalize_address(operator)
        if owner == operator:
            raise ERC721Error("Approve to caller")

        if approved:
            self._operator_approvals.add((owner, operator))
        else:
            self._operator_approvals.discard((owner, operator))

        event = ERC721ApprovalEvent(self.symbol, owner, operator, approved=approved)
        self._events.append(event)
        logger.debug(f"ApprovalForAll: {owner} → {operator} = {approved} ({self.symbol})")
        return event

    async def transfer_from(
        self,
        operator: str,
        sender: str,
        recipient: str,
        token_id: int,
    ) -> ERC721TransferEvent:
        operator = normalize_address(operator)
        sender = normalize_address(sender)
        recipient = normalize_address(recipient)

        if self.owner_of(token_id) != sender:
            raise TransferNotAuthorizedError(
                f"Transfer of token #{token_id} from incorrect owner {sender}"
            )
        if recipient == NULL_ADDRESS:
            raise ERC721Error("Cannot transfer to the null address")
        if not self._is_approved_or_owner(operator, token_id):
            raise TransferNotAuthorizedError(
                f"{operator} is not owner nor approved for token #{token_id}"
            )

        self._token_approvals.pop(token_id, None)
        self._owners[token_id] = recipient

        event = ERC721TransferEvent(self.symbol, sender, recipient, token_id)
        self._events.append(event)
        logger.debug(f"Transfer: {sender} → {recipient} {self.symbol} #{token_id}")
        return event

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "symbol": self.symbol,
            "address": self.address,
            "totalSupply": self.total_supply,
            "nextTokenId": self._next_token_id,
        }

    def __repr__(self) -> str:
        return f"<ERC721Token {self.symbol} supply={self.total_supply}>"
