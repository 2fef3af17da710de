from __future__ import annotations

from typing import Optional, Protocol

from .model import LeaveRequest


class LeaveRepository(Protocol):
    def get_by_id(self, leave_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def create(self, leave: LeaveRequest) -> int:
        raise NotImplementedError

    def update(self, leave: LeaveRequest) -> bool:
        raise NotImplementedError

    def decide(self, leave: LeaveRequest) -> bool:
        """Persist an approve/reject; only applies while the stored row is still pending."""

        raise NotImplementedError
