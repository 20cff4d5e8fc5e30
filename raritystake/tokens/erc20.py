"""
In-memory ERC-20 token.

Stands in for the reward token and the Nexus raffle token:
  - ERC-20 interface (transfer, approve, transferFrom, balanceOf)
  - Open mint, as on the test token contracts
  - Event log of every transfer / approval
"""

import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Tuple

from ..constants import NULL_ADDRESS, TOKEN_DECIMALS
from ..crypto.address import normalize_address
from ..logger import get_logger
from .interfaces import FungibleToken

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  EXCEPTIONS
# ══════════════════════════════════════════════════════════════════════

class ERC20Error(Exception):
    """Base exception for ERC-20 operations."""


class InsufficientBalanceError(ERC20Error):
    """Raised when sender balance is too low."""


class InsufficientAllowanceError(ERC20Error):
    """Raised when spender allowance is too low."""


# ══════════════════════════════════════════════════════════════════════
#  EVENTS
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ERC20TransferEvent:
    """Emitted on every transfer and mint (mints come from the null address)."""
    token_symbol: str
    sender: str
    recipient: str
    amount: Decimal
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Transfer",
            "token": self.token_symbol,
            "from": self.sender,
            "to": self.recipient,
            "amount": str(self.amount),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class ERC20ApprovalEvent:
    token_symbol: str
    owner: str
    spender: str
    amount: Decimal
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Approval",
            "token": self.token_symbol,
            "owner": self.owner,
            "spender": self.spender,
            "amount": str(self.amount),
            "timestamp": self.timestamp,
        }


# ══════════════════════════════════════════════════════════════════════
#  TOKEN
# ══════════════════════════════════════════════════════════════════════

class ERC20Token(FungibleToken):
    """
    Fungible token with ERC-20 semantics.

        - balance_of(address) → Decimal
        - transfer(sender, recipient, amount)
        - approve(owner, spender, amount)
        - transfer_from(spender, sender, recipient, amount)
        - mint(recipient, amount)

    Amounts are whole-token Decimals; ``decimals`` is informational.
    """

    def __init__(
        self,
        name: str,
        symbol: str,
        address: str,
        decimals: int = TOKEN_DECIMALS,
    ):
        if not name:
            raise ERC20Error("Token name cannot be empty")
        if not symbol:
            raise ERC20Error("Token symbol cannot be empty")
        if decimals < 0 or decimals > 18:
            raise ERC20Error(f"Decimals must be 0-18, got {decimals}")

        self.name = name
        self.symbol = symbol
        self.address = normalize_address(address)
        self.decimals = decimals
        self._total_supply = Decimal("0")

        self._balances: Dict[str, Decimal] = {}
        self._allowances: Dict[Tuple[str, str], Decimal] = {}  # (owner, spender)
        self._events: List[Any] = []

        logger.info(f"ERC-20 deployed: {symbol} ({name}) at {self.address}")

    # ── Read-only views ───────────────────────────────────────────────

    @property
    def total_supply(self) -> Decimal:
        return self._total_supply

    def balance_of(self, address: str) -> Decimal:
        return self._balances.get(normalize_address(address), Decimal("0"))

    def allowance(self, owner: str, spender: str) -> Decimal:
        key = (normalize_address(owner), normalize_address(spender))
        return self._allowances.get(key, Decimal("0"))

    @property
    def events(self) -> List[Any]:
        return list(self._events)

    # ── Core operations ───────────────────────────────────────────────

    async def mint(self, recipient: str, amount: Decimal) -> ERC20TransferEvent:
        """Mint *amount* to *recipient*. Unrestricted, like the test tokens."""
        recipient = normalize_address(recipient)
        if amount <= 0:
            raise ERC20Error("Mint amount must be positive")

        self._total_supply += amount
        self._balances[recipient] = self.balance_of(recipient) + amount

        event = ERC20TransferEvent(self.symbol, NULL_ADDRESS, recipient, amount)
        self._events.append(event)
        logger.debug(f"Mint: {amount} {self.symbol} → {recipient}")
        return event

    async def transfer(
        self,
        sender: str,
        recipient: str,
        amount: Decimal,
    ) -> ERC20TransferEvent:
        sender = normalize_address(sender)
        recipient = normalize_address(recipient)

        if amount <= 0:
            raise ERC20Error("Transfer amount must be positive")
        if sender == recipient:
            raise ERC20Error("Cannot transfer to self")
        if recipient == NULL_ADDRESS:
            raise ERC20Error("Cannot transfer to the null address")

        bal = self.balance_of(sender)
        if bal < amount:
            raise InsufficientBalanceError(
                f"{sender} balance {bal} < transfer amount {amount}"
            )

        self._balances[sender] = bal - amount
        self._balances[recipient] = self.balance_of(recipient) + amount

        event = ERC20TransferEvent(self.symbol, sender, recipient, amount)
        self._events.append(event)
        logger.debug(f"Transfer: {sender} → {recipient} {amount} {self.symbol}")
        return event

    async def approve(
        self,
        owner: str,
        spender: str,
        amount: Decimal,
    ) -> ERC20ApprovalEvent:
        owner = normalize_address(owner)
        spender = normalize_address(spender)

        if amount < 0:
            raise ERC20Error("Allowance amount cannot be negative")

        self._allowances[(owner, spender)] = amount

        event = ERC20ApprovalEvent(self.symbol, owner, spender, amount)
        self._events.append(event)
        logger.debug(f"Approve: {owner} → {spender} allowance={amount} {self.symbol}")
        return event

    async def transfer_from(
        self,
        spender: str,
        sender: str,
        recipient: str,
        amount: Decimal,
    ) -> ERC20TransferEvent:
        """Transfer on behalf of *sender* using spender's allowance."""
        spender = normalize_address(spender)
        sender = normalize_address(sender)

        allow = self.allowance(sender, spender)
        if allow < amount:
            raise InsufficientAllowanceError(
                f"Allowance {allow} < transfer amount {amount}"
            )

        event = await self.transfer(sender, recipient, amount)
        self._allowances[(sender, spender)] = allow - amount
        return event

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "symbol": self.symbol,
            "address": self.address,
            "decimals": self.decimals,
            "totalSupply": str(self._total_supply),
            "holders": len([b for b in self._balances.values() if b > 0]),
        }

    def __repr__(self) -> str:
        return f"<ERC20Token {self.symbol} supply={self._total_supply}>"
