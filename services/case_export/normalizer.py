"""
Case Normalizer

Turns a raw case record (a dict from the repository or a browser payload,
or a model instance) into a NormalizedCase that every renderer reads.

Rules:
    - Every canonical field resolves to one str, bool or None
    - Civil-status flags are tri-state: True, False or None
    - Dates are reduced to YYYY-MM-DD when they can be parsed
    - An explicit age wins; otherwise it is computed from the birthdate
    - Malformed child rows are skipped, never fatal

Usage:
    case = CaseNormalizer.normalize(record)
    case.get('first_name')
    case.rows('family_members')
"""

import json
import logging
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from .aliases import (
    CHILD_COLUMN_ALIASES,
    COLLECTION_ALIASES,
    FIELD_ALIASES,
    RECORD_ALIASES,
    FieldAliasResolver,
)
from .schema import BOOLEAN_FIELDS, CHILD_DATE_COLUMNS, DATE_FIELDS
from .transforms import compute_age, normalize_date, to_tri_state, transform_yes_no
from .types import NormalizedCase

logger = logging.getLogger(__name__)


class CaseNormalizer:
    """Builds NormalizedCase views. Stateless; never raises."""

    @classmethod
    def normalize(cls, record: Any, today: Optional[date] = None) -> NormalizedCase:
        """
        Normalize one raw case record.

        Args:
            record: Mapping or object holding case data (None is treated as empty)
            today: Reference date for age computation (defaults to today)

        Returns:
            NormalizedCase with fields, children, case_id and last_updated
        """
        if record is None:
            record = {}

        raw = FieldAliasResolver.resolve_fields(record, FIELD_ALIASES)
        fields = {name: cls._clean_field(name, value) for name, value in raw.items()}

        if not fields.get('age'):
            fields['age'] = compute_age(fields.get('birthdate'), today=today) or None

        last_updated = FieldAliasResolver.resolve(record, RECORD_ALIASES['last_updated'])
        if last_updated is not None:
            last_updated = str(normalize_date(last_updated))

        return NormalizedCase(
            fields=fields,
            children=cls.normalize_children(record),
            case_id=FieldAliasResolver.resolve(record, RECORD_ALIASES['case_id']),
            last_updated=last_updated,
            checklist=cls._normalize_checklist(
                FieldAliasResolver.resolve(record, RECORD_ALIASES['checklist'])
            ),
            name=cls._clean_text(FieldAliasResolver.resolve(record, RECORD_ALIASES['display_name'])),
        )

    @classmethod
    def normalize_children(cls, record: Any) -> Dict[str, List[Dict[str, Optional[str]]]]:
        """Resolve and normalize every child collection of a record."""
        children = {}
        for key, candidates in COLLECTION_ALIASES.items():
            rows = FieldAliasResolver.resolve(record, candidates)
            children[key] = cls._normalize_rows(key, rows)
        return children

    @classmethod
    def _normalize_rows(cls, key: str, rows: Any) -> List[Dict[str, Optional[str]]]:
        if rows is None:
            return []
        if isinstance(rows, (str, bytes, Mapping)) or not hasattr(rows, '__iter__'):
            logger.warning(f"Collection '{key}' is not a list, ignoring it")
            return []

        columns = CHILD_COLUMN_ALIASES[key]
        date_columns = CHILD_DATE_COLUMNS.get(key, frozenset())
        normalized = []

        for index, row in enumerate(rows):
            if not isinstance(row, Mapping):
                logger.warning(f"Skipping malformed row {index} in '{key}': {type(row).__name__}")
                continue

            values = {}
            for column, value in FieldAliasResolver.resolve_fields(row, columns).items():
                if column in date_columns and value is not None:
                    value = normalize_date(value)
                values[column] = cls._clean_text(value)
            normalized.append(values)

        return normalized

    @classmethod
    def _clean_field(cls, name: str, value: Any) -> Any:
        if name in BOOLEAN_FIELDS:
            return to_tri_state(value)
        if name in DATE_FIELDS and value is not None:
            value = normalize_date(value)
        return cls._clean_text(value)

    @staticmethod
    def _clean_text(value: Any) -> Optional[str]:
        """Coerce a resolved value to a stripped string (bools become Yes/No)."""
        if value is None:
            return None
        if isinstance(value, bool):
            return transform_yes_no(value)
        if isinstance(value, date):
            return str(normalize_date(value))
        text = str(value).strip()
        return text or None

    @staticmethod
    def _normalize_checklist(value: Any) -> List[Dict[str, Any]]:
        """Checklist entries as {text, timestamp}; stored JSON text is decoded."""
        if value is None:
            return []
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except ValueError:
                logger.warning("Checklist is not valid JSON, ignoring it")
                return []
        if not isinstance(value, list):
            return []

        entries = []
        for item in value:
            if isinstance(item, Mapping) and item.get('text'):
                entries.append({'text': str(item['text']), 'timestamp': item.get('timestamp')})
            elif isinstance(item, str) and item.strip():
                entries.append({'text': item.strip(), 'timestamp': None})
        return entries


normalize_case = CaseNormalizer.normalize
