from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional, Protocol, Sequence

import requests

from ..core.constants import DEFAULT_DIRECTORY_TIMEOUT_SECONDS
from ..core.exceptions import DirectoryUnavailable
from .model import EmployeeSummary, RosterEntry

logger = logging.getLogger(__name__)


def _data_items(payload: Any, what: str) -> list:
    """`{"data": [ {...}, ... ]}` or DirectoryUnavailable."""
    if not isinstance(payload, dict):
        raise DirectoryUnavailable(f"{what}: unexpected response body")
    items = payload.get("data") or []
    if not isinstance(items, list) or not all(isinstance(item, Mapping) for item in items):
        raise DirectoryUnavailable(f"{what}: unexpected response body")
    return items


class EmployeeDirectory(Protocol):
    """Read-only view of the employee service used by this core."""

    def batch_lookup(self, ids: Iterable[str], *, auth_header: Optional[str] = None) -> dict[str, EmployeeSummary]:
        raise NotImplementedError

    def list_active(self) -> Sequence[RosterEntry]:
        raise NotImplementedError


class HttpEmployeeDirectory(EmployeeDirectory):
    """Client to communicate with the employee service API.

    Every call is bounded by `timeout`; any transport or HTTP error surfaces as
    DirectoryUnavailable so callers can decide how to degrade.
    """

    def __init__(
        self,
        base_url: str,
        *,
        service_key: Optional[str] = None,
        timeout: float = DEFAULT_DIRECTORY_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._service_key = service_key
        self._timeout = float(timeout)
        self._http = session or requests.Session()

    def _headers(self, auth_header: Optional[str] = None) -> dict:
        headers = {}
        if auth_header:
            headers["Authorization"] = auth_header
        if self._service_key:
            headers["X-Service-Key"] = self._service_key
        return headers

    def batch_lookup(self, ids: Iterable[str], *, auth_header: Optional[str] = None) -> dict[str, EmployeeSummary]:
        unique_ids = sorted({str(i) for i in ids if i})
        if not unique_ids:
            return {}

        try:
            response = self._http.post(
                f"{self._base_url}/api/employees/batch",
                json={"ids": unique_ids},
                headers=self._headers(auth_header),
                timeout=self._timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            raise DirectoryUnavailable(f"Employee lookup failed: {e}") from e

        employees = {}
        for item in _data_items(payload, "Employee lookup failed"):
            summary = EmployeeSummary.from_payload(item)
            employees[summary.id] = summary
        return employees

    def list_active(self) -> Sequence[RosterEntry]:
        try:
            response = self._http.get(
                f"{self._base_url}/api/employees/active",
                headers=self._headers(),
                timeout=self._timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            raise DirectoryUnavailable(f"Active roster fetch failed: {e}") from e

        roster = [RosterEntry.from_payload(item) for item in _data_items(payload, "Active roster fetch failed")]
        logger.debug("Fetched active roster (%d employees)", len(roster))
        return roster
