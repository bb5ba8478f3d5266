"""
Multi-Case Aggregator

Collects the records for a batch export, either by fetching ids or by
accepting case payloads directly. Caller order is preserved and ids that
do not resolve are dropped instead of failing the whole batch.
"""

import logging
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from .exceptions import ExportRequestError, InputNotFound
from .types import CaseBatch

logger = logging.getLogger(__name__)

FetchCase = Callable[[Any], Optional[Mapping[str, Any]]]


class MultiCaseAggregator:
    """
    Usage:
        aggregator = MultiCaseAggregator(fetch_full_case)
        batch = aggregator.collect(ids=[7, 3, 9])
    """

    def __init__(self, fetch_case: FetchCase):
        self.fetch_case = fetch_case

    def collect(self, ids: Optional[Sequence[Any]] = None, cases: Optional[Sequence[Any]] = None,
                list_only: bool = False) -> CaseBatch:
        """
        Build a CaseBatch.

        A non-empty id list takes precedence over payloads; an empty one
        falls through to `cases`.

        Raises:
            ExportRequestError: If ids or cases is not a list, or if both
                are missing or empty
        """
        for name, value in (('ids', ids), ('cases', cases)):
            if value is not None and not isinstance(value, (list, tuple)):
                raise ExportRequestError(f"'{name}' must be a list")

        if ids:
            records = self._fetch_all(ids)
        elif cases:
            records = [case for case in cases if isinstance(case, Mapping)]
            dropped = len(cases) - len(records)
            if dropped:
                logger.warning(f"Dropped {dropped} malformed case payload(s)")
        else:
            raise ExportRequestError("Provide a non-empty 'ids' or 'cases' list")

        logger.info(f"Collected {len(records)} case(s) for batch export")
        return CaseBatch(records=tuple(records), list_only=list_only)

    def _fetch_all(self, ids: Iterable[Any]):
        records = []
        for case_id in ids:
            try:
                record = self.fetch_case(case_id)
            except InputNotFound:
                record = None

            if record is None:
                logger.warning(f"Skipping case {case_id}: not found")
                continue
            records.append(record)
        return records
