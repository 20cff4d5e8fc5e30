"""
Stake ledger: per-token StakeRecords plus a per-owner index.

Pure state; authorization and custody are the contract's job. The two maps
are only changed together through ``add`` / ``remove`` so the index always
matches the records.
"""

from dataclasses import replace
from typing import Dict, List

from ..exceptions import AlreadyStakedError, NotStakedError
from .types import StakeRecord


class StakeLedger:
    """Owns the StakeRecord table and the owner → token ids index."""

    def __init__(self):
        self._records: Dict[int, StakeRecord] = {}
        self._user_index: Dict[str, List[int]] = {}

    # ── Queries ───────────────────────────────────────────────────────

    def is_staked(self, token_id: int) -> bool:
        return token_id in self._records

    def record(self, token_id: int) -> StakeRecord:
        """StakeRecord for *token_id*; a null-owner record when not staked."""
        return self._records.get(token_id) or StakeRecord(token_id=token_id)

    def user_staked(self, owner: str) -> List[int]:
        return list(self._user_index.get(owner, ()))

    @property
    def total_staked(self) -> int:
        return len(self._records)

    @property
    def staker_count(self) -> int:
        return len(self._user_index)

    # ── Mutations ─────────────────────────────────────────────────────

    def add(self, token_id: int, owner: str, timestamp: int) -> StakeRecord:
        if token_id in self._records:
            raise AlreadyStakedError(token_id)

        record = StakeRecord(
            token_id=token_id,
            owner=owner,
            staked_at=timestamp,
            last_claimed_at=timestamp,
        )
        self._records[token_id] = record
        self._user_index.setdefault(owner, []).append(token_id)
        return record

    def remove(self, token_id: int) -> StakeRecord:
        record = self._records.pop(token_id, None)
        if record is None:
            raise NotStakedError(token_id)

        ids = self._user_index[record.owner]
        ids.remove(token_id)
        if not ids:
            del self._user_index[record.owner]
        return record

    def mark_claimed(self, token_id: int, timestamp: int) -> StakeRecord:
        record = self._records.get(token_id)
        if record is None:
            raise NotStakedError(token_id)

        updated = replace(record, last_claimed_at=timestamp)
        self._records[token_id] = updated
        return updated
