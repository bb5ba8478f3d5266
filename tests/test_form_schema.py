"""
Form schema loading and validation tests.

Ensures the bundled intake form declaration matches the canonical case
fields, so a typo fails here rather than producing blank forms.

Run with: python -m pytest tests/test_form_schema.py -v
"""

import pytest

from services.case_export import ConfigurationError, FieldKind, FormSchemaLoader
from services.case_export.schema import BOOLEAN_FIELDS, CANONICAL_FIELDS


def valid_entry(**overrides):
    entry = {'name': 'first_name', 'kind': 'text', 'page': 0, 'rect': [10, 10, 100, 30]}
    entry.update(overrides)
    return entry


class TestBundledSchema:

    def test_loads(self):
        schema = FormSchemaLoader.load()
        assert schema.name == 'general-intake'
        assert len(schema.fields) >= 1

    def test_cached(self):
        assert FormSchemaLoader.load() is FormSchemaLoader.load()

    def test_field_names_are_canonical_and_unique(self):
        names = FormSchemaLoader.load().field_names()
        assert len(names) == len(set(names))
        assert set(names) <= CANONICAL_FIELDS

    def test_checkboxes_are_civil_status_flags(self):
        schema = FormSchemaLoader.load()
        checkboxes = {f.name for f in schema.fields if f.kind == FieldKind.CHECKBOX}
        assert checkboxes == BOOLEAN_FIELDS
        assert schema.get('married_in_church').is_checkbox
        assert not schema.get('first_name').is_checkbox

    def test_rects_fit_on_a4(self):
        for spec in FormSchemaLoader.load().fields:
            x0, y0, x1, y1 = spec.rect
            assert 0 <= x0 < x1 <= 595, spec.name
            assert 0 <= y0 < y1 <= 842, spec.name


class TestValidation:

    def test_valid_schema_has_no_errors(self):
        assert FormSchemaLoader.validate({'fields': [valid_entry()]}) == []

    def test_empty_fields_rejected(self):
        assert FormSchemaLoader.validate({'fields': []})
        assert FormSchemaLoader.validate(None)

    def test_unknown_field_name(self):
        errors = FormSchemaLoader.validate({'fields': [valid_entry(name='first_nmae')]})
        assert any('not a known case field' in e for e in errors)

    def test_duplicate_field_name(self):
        errors = FormSchemaLoader.validate({'fields': [valid_entry(), valid_entry()]})
        assert any('duplicate' in e for e in errors)

    def test_checkbox_requires_boolean_field(self):
        errors = FormSchemaLoader.validate({'fields': [valid_entry(kind='checkbox')]})
        assert any('yes/no' in e for e in errors)

    def test_bad_kind_page_and_rect(self):
        errors = FormSchemaLoader.validate({'fields': [
            valid_entry(kind='radio'),
            valid_entry(name='last_name', page=-1),
            valid_entry(name='sex', rect=[10, 10, 10, 30]),
            valid_entry(name='age', rect=[1, 2, 3]),
        ]})
        assert len(errors) == 4


class TestLoadErrors:

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            FormSchemaLoader.load(tmp_path / 'missing.yml')

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / 'broken.yml'
        path.write_text('fields: [unclosed')
        with pytest.raises(ConfigurationError):
            FormSchemaLoader.load(path)

    def test_invalid_schema(self, tmp_path):
        path = tmp_path / 'bad.yml'
        path.write_text('name: bad\nfields:\n  - {name: nope, kind: text, page: 0, rect: [0, 0, 10, 10]}\n')
        with pytest.raises(ConfigurationError) as exc_info:
            FormSchemaLoader.load(path)
        assert 'nope' in str(exc_info.value)

    def test_custom_schema(self, tmp_path):
        path = tmp_path / 'small.yml'
        path.write_text('name: small\nfields:\n  - {name: last_name, kind: text, page: 1, rect: [10, 10, 200, 30]}\n')
        schema = FormSchemaLoader.load(path)
        assert schema.name == 'small'
        assert schema.get('last_name').page == 1
        assert schema.get('last_name').rect == (10.0, 10.0, 200.0, 30.0)
