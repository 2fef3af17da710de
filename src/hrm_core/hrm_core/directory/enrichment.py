from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..core.exceptions import DirectoryUnavailable
from .client import EmployeeDirectory

logger = logging.getLogger(__name__)


def enrich_records(
    records: Sequence[dict],
    directory: EmployeeDirectory,
    *,
    auth_header: Optional[str] = None,
    key: str = "employee",
) -> list[dict]:
    """Replace the raw employee reference in each serialized record with display fields.

    Degraded mode: if the directory is unavailable the records are returned
    with the unresolved reference instead of failing the request.
    """

    ids = [str(r[key]) for r in records if r.get(key)]
    try:
        employees = directory.batch_lookup(ids, auth_header=auth_header)
    except DirectoryUnavailable as e:
        logger.warning("employee enrichment skipped: %s", e)
        return [dict(r) for r in records]

    out = []
    for r in records:
        item = dict(r)
        summary = employees.get(str(r.get(key)))
        if summary:
            item[key] = summary.to_dict()
        out.append(item)
    return out


def enrich_one(record: dict, directory: EmployeeDirectory, *, auth_header: Optional[str] = None) -> dict:
    return enrich_records([record], directory, auth_header=auth_header)[0]
