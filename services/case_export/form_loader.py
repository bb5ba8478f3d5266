"""
Form Schema Loader

Loads, validates, and caches fillable form schemas from YAML files.
A schema that references an unknown case field or has a malformed
widget fails loudly with ConfigurationError instead of silently
producing blank forms.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .exceptions import ConfigurationError
from .schema import BOOLEAN_FIELDS, CANONICAL_FIELDS
from .types import FieldKind, FormSchema

logger = logging.getLogger(__name__)

# Paths
FORMS_DIR = Path(__file__).parent / 'forms'
DEFAULT_FORM = FORMS_DIR / 'intake_form.yml'


class FormSchemaLoader:
    """
    Loader for fillable form schemas.

    Schemas are cached per path; the same FormSchema instance drives
    provisioning and filling.

    Usage:
        schema = FormSchemaLoader.load()
        schema.field_names()
    """

    _schemas: Dict[str, FormSchema] = {}

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> FormSchema:
        """
        Load and validate a form schema (cached).

        Args:
            path: YAML file path; defaults to the bundled intake form

        Raises:
            ConfigurationError: If the file is missing, unparseable or invalid
        """
        path = Path(path) if path else DEFAULT_FORM
        key = str(path.resolve())

        if key not in cls._schemas:
            cls._schemas[key] = cls._load_and_validate(path)
            logger.info(f"Loaded form schema '{cls._schemas[key].name}' "
                        f"({len(cls._schemas[key].fields)} fields) from {path.name}")

        return cls._schemas[key]

    @classmethod
    def clear_cache(cls) -> None:
        """Clear cached schemas (useful for testing)."""
        cls._schemas.clear()

    @classmethod
    def _load_and_validate(cls, path: Path) -> FormSchema:
        if not path.exists():
            raise ConfigurationError(f"Form schema not found: {path}")

        try:
            raw = yaml.safe_load(path.read_text())
        except yaml.YAMLError as e:
            raise ConfigurationError(f"{path.name}: invalid YAML - {e}", cause=e)

        errors = cls.validate(raw)
        if errors:
            error_msg = f"Form schema errors in {path.name}:\n" + "\n".join(f"  - {e}" for e in errors)
            logger.error(error_msg)
            raise ConfigurationError(error_msg)

        return FormSchema.from_dict(raw)

    @classmethod
    def validate(cls, raw: Any) -> List[str]:
        """
        Validate a parsed schema dict.

        Returns:
            List of error messages (empty when valid)
        """
        if not isinstance(raw, dict):
            return ["Schema must be a mapping with a 'fields' list"]

        fields = raw.get('fields')
        if not isinstance(fields, list) or not fields:
            return ["Schema must declare a non-empty 'fields' list"]

        errors = []
        seen = set()
        kinds = {k.value for k in FieldKind}

        for index, entry in enumerate(fields):
            if not isinstance(entry, dict):
                errors.append(f"fields[{index}]: must be a mapping")
                continue

            name = entry.get('name')
            label = f"fields[{index}] ({name})"

            if not isinstance(name, str) or not name:
                errors.append(f"fields[{index}]: missing 'name'")
                continue
            if name in seen:
                errors.append(f"{label}: duplicate field name")
            seen.add(name)

            if name not in CANONICAL_FIELDS:
                errors.append(f"{label}: not a known case field")

            kind = entry.get('kind', 'text')
            if kind not in kinds:
                errors.append(f"{label}: unknown kind '{kind}'")
            elif kind == FieldKind.CHECKBOX.value and name not in BOOLEAN_FIELDS:
                errors.append(f"{label}: checkbox widgets need a yes/no field")

            page = entry.get('page', 0)
            if not isinstance(page, int) or isinstance(page, bool) or page < 0:
                errors.append(f"{label}: 'page' must be a non-negative integer")

            errors.extend(cls._validate_rect(label, entry.get('rect')))

        return errors

    @staticmethod
    def _validate_rect(label: str, rect: Any) -> List[str]:
        if not isinstance(rect, list) or len(rect) != 4:
            return [f"{label}: 'rect' must be [x0, y0, x1, y1]"]
        if not all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in rect):
            return [f"{label}: 'rect' values must be numbers"]

        x0, y0, x1, y1 = rect
        if x1 <= x0 or y1 <= y0:
            return [f"{label}: 'rect' has no area"]
        return []
