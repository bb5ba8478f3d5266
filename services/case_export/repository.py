"""
Case Repository

Loads a case and all of its child collections for export. Every
collection is loaded before the record is returned, so renderers never
see a partially populated case.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import selectinload

from models import Case, db
from .exceptions import InputNotFound

logger = logging.getLogger(__name__)

# Relationship attribute -> payload key
COLLECTION_KEYS = {
    'family_members': 'familyMembers',
    'extended_family': 'extendedFamily',
    'educational_attainment': 'educationalAttainment',
    'sacramental_records': 'sacramentalRecords',
    'agencies': 'agencies',
    'life_skills': 'lifeSkills',
    'vital_signs': 'vitalSigns',
}


def fetch_full_case(case_id: Any) -> Optional[Dict[str, Any]]:
    """
    Load a case with its seven child collections.

    Returns:
        Plain dict of case columns plus camelCase collection keys,
        or None if no case has this id
    """
    try:
        case_id = int(case_id)
    except (TypeError, ValueError):
        return None

    options = [selectinload(getattr(Case, attr)) for attr in COLLECTION_KEYS]
    case = db.session.execute(
        db.select(Case).options(*options).filter_by(id=case_id)
    ).scalar_one_or_none()

    if case is None:
        return None

    record = case.to_dict()
    for attr, key in COLLECTION_KEYS.items():
        record[key] = [row.to_dict() for row in getattr(case, attr)]
    return record


def fetch_case_or_raise(case_id: Any) -> Dict[str, Any]:
    """Like fetch_full_case, but raises InputNotFound for unknown ids."""
    record = fetch_full_case(case_id)
    if record is None:
        logger.warning(f"Case not found: {case_id}")
        raise InputNotFound(f"Case {case_id} not found", case_id=case_id)
    return record
