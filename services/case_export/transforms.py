"""
Value Transforms

Small, total functions that turn raw case values into display strings.
None of them raise: unparseable input passes through unchanged (dates)
or collapses to an empty value (ages, booleans).

Transforms are registered by name so renderers can refer to them
declaratively (e.g. a CSV column spec of ('Birthdate', 'birthdate', 'date')).
"""

import logging
import re
from datetime import date, datetime
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

TransformFunc = Callable[[Any], str]

ISO_DATE_PATTERN = re.compile(r'^(\d{4})-(\d{2})-(\d{2})(?:[T\s].*)?$')
US_DATE_PATTERN = re.compile(r'^(\d{1,2})/(\d{1,2})/(\d{4})(?:\s.*)?$')

TRUE_STRINGS = {'true', 'yes', 'y', '1', 'on', 'checked'}
FALSE_STRINGS = {'false', 'no', 'n', '0', 'off', 'unchecked'}


def normalize_date(value: Any) -> Any:
    """
    Reduce a date-like value to YYYY-MM-DD.

    Examples:
        "2024-03-05T10:00:00Z" -> "2024-03-05"
        "2024-03-05"           -> "2024-03-05"
        "3/5/2024"             -> "2024-03-05"
        date(2024, 3, 5)       -> "2024-03-05"
        "sometime in March"    -> "sometime in March"
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str):
        return value

    text = value.strip()
    match = ISO_DATE_PATTERN.match(text)
    if match:
        return '-'.join(match.groups())

    match = US_DATE_PATTERN.match(text)
    if match:
        month, day, year = match.groups()
        return f"{year}-{int(month):02d}-{int(day):02d}"

    return value


def parse_date(value: Any) -> Optional[date]:
    """Parse a date-like value into a date, or None."""
    normalized = normalize_date(value)
    if not isinstance(normalized, str):
        return None
    try:
        return date.fromisoformat(normalized)
    except ValueError:
        return None


def compute_age(birthdate: Any, today: Optional[date] = None) -> str:
    """
    Age in whole years as of `today`.

    The birthday counts as reached on its month/day, so someone born
    2010-06-15 is 13 on 2024-06-14 and 14 on 2024-06-15.
    Returns "" when the birthdate is missing or unparseable.
    """
    born = parse_date(birthdate)
    if born is None:
        return ""

    today = today or date.today()
    age = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        age -= 1
    return str(age)


def to_tri_state(value: Any) -> Optional[bool]:
    """
    Coerce a checkbox-ish value to True, False or None (absent).

    Accepts booleans, 0/1 and common yes/no spellings.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return bool(value) if value in (0, 1) else None
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
    return None


def transform_yes_no(value: Any) -> str:
    """True -> "Yes", False -> "No", anything else -> ""."""
    state = to_tri_state(value)
    if state is None:
        return ""
    return "Yes" if state else "No"


def transform_date(value: Any) -> str:
    """Format a date as YYYY-MM-DD, passing unparseable text through."""
    if value is None:
        return ""
    return str(normalize_date(value))


def transform_date_medium(value: Any) -> str:
    """
    Format a date for summary tables.

    Examples:
        "2024-03-05" -> "Mar 05, 2024"
    """
    parsed = parse_date(value)
    if parsed is None:
        return "" if value is None else str(value)
    return parsed.strftime("%b %d, %Y")


def transform_flatten(value: Any) -> str:
    """Collapse line breaks into single spaces (for CSV cells)."""
    if value is None:
        return ""
    return re.sub(r'\s*[\r\n]+\s*', ' ', str(value)).strip()


def transform_none(value: Any) -> str:
    """No transformation - just convert to string."""
    if value is None:
        return ""
    return str(value)


# Registry of available transforms
TRANSFORMS: Dict[str, TransformFunc] = {
    'date': transform_date,
    'date_medium': transform_date_medium,
    'yes_no': transform_yes_no,
    'flatten': transform_flatten,
    'none': transform_none,
}


def get_transform(name: str) -> Optional[TransformFunc]:
    """Get a transform function by name."""
    return TRANSFORMS.get(name)


def apply_transform(value: Any, transform_name: Optional[str]) -> str:
    """
    Apply a named transform to a value.

    If transform_name is None or not found, returns str(value).
    """
    if value is None:
        return ""

    if not transform_name:
        return str(value)

    transform_func = get_transform(transform_name)
    if transform_func:
        return transform_func(value)

    logger.warning(f"Unknown transform: {transform_name}")
    return str(value)


def register_transform(name: str, func: TransformFunc) -> None:
    """Register a custom transform function."""
    TRANSFORMS[name] = func
    logger.debug(f"Registered transform: {name}")
