"""
Template provisioning and form filling tests.

Templates are generated into tmp_path with PyMuPDF; nothing is mocked
except where a test needs to force a race.

Run with: python -m pytest tests/test_form_filler.py -v
"""

import os
import threading
from unittest.mock import patch

import fitz  # PyMuPDF
import pytest

from services.case_export import (
    CaseNormalizer,
    FormSchemaLoader,
    ProvisionStatus,
    RenderFailed,
    TemplateFormFiller,
    TemplateNotFound,
    TemplateProvisioner,
)


def widget_names(path):
    doc = fitz.open(str(path))
    try:
        return sorted(w.field_name for page in doc for w in page.widgets())
    finally:
        doc.close()


def pdf_text(pdf_bytes):
    doc = fitz.open(stream=pdf_bytes, filetype='pdf')
    try:
        return '\n'.join(page.get_text() for page in doc)
    finally:
        doc.close()


def dark_pixels(pdf_bytes, rect, page=0):
    """Count near-black pixels inside a rect of the rendered page."""
    doc = fitz.open(stream=pdf_bytes, filetype='pdf')
    try:
        pix = doc[page].get_pixmap(clip=fitz.Rect(*rect), dpi=144, colorspace=fitz.csGRAY)
        return sum(1 for sample in pix.samples if sample < 128)
    finally:
        doc.close()


@pytest.fixture
def schema():
    return FormSchemaLoader.load()


class TestProvisioning:

    def test_creates_fillable_with_schema_fields(self, base_template, fillable_path, schema):
        result = TemplateProvisioner.ensure_fillable(str(base_template), str(fillable_path), schema)
        assert result.status == ProvisionStatus.CREATED
        assert result.is_usable
        assert widget_names(fillable_path) == sorted(schema.field_names())

    def test_second_call_is_a_no_op(self, base_template, fillable_path, schema):
        TemplateProvisioner.ensure_fillable(str(base_template), str(fillable_path), schema)
        first = fillable_path.read_bytes()

        result = TemplateProvisioner.ensure_fillable(str(base_template), str(fillable_path), schema)
        assert result.status == ProvisionStatus.EXISTS
        assert fillable_path.read_bytes() == first

    def test_base_missing(self, tmp_path, fillable_path, schema):
        result = TemplateProvisioner.ensure_fillable(str(tmp_path / 'missing.pdf'), str(fillable_path), schema)
        assert result.status == ProvisionStatus.BASE_MISSING
        assert not result.is_usable
        assert not fillable_path.exists()

    def test_unreadable_base_reports_failure(self, tmp_path, fillable_path, schema):
        base = tmp_path / 'GENERAL_INTAKEFORM.pdf'
        base.write_bytes(b'not a pdf')
        result = TemplateProvisioner.ensure_fillable(str(base), str(fillable_path), schema)
        assert result.status == ProvisionStatus.FAILED
        assert result.error is not None
        assert not fillable_path.exists()

    def test_concurrent_provisioning_yields_one_valid_template(self, base_template, fillable_path, schema, tmp_path):
        content = TemplateProvisioner.build_fillable(str(base_template), schema)
        results = []

        with patch.object(TemplateProvisioner, 'build_fillable', return_value=content):
            threads = [
                threading.Thread(target=lambda: results.append(
                    TemplateProvisioner.ensure_fillable(str(base_template), str(fillable_path), schema)
                ))
                for _ in range(8)
            ]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()

        assert len(results) == 8
        assert all(r.is_usable for r in results)
        assert widget_names(fillable_path) == sorted(schema.field_names())
        assert not [name for name in os.listdir(tmp_path) if name.startswith('.fillable-')]

    def test_publish_race_keeps_existing_template(self, base_template, fillable_path, schema):
        """A template published while we were building is not overwritten."""
        def build_and_lose_race(base_path, schema):
            fillable_path.write_bytes(b'published by another request')
            return b'our copy'

        with patch.object(TemplateProvisioner, 'build_fillable', side_effect=build_and_lose_race):
            result = TemplateProvisioner.ensure_fillable(str(base_template), str(fillable_path), schema)

        assert result.status == ProvisionStatus.EXISTS
        assert fillable_path.read_bytes() == b'published by another request'

    def test_widgets_on_later_pages_add_pages(self, tmp_path):
        base = tmp_path / 'one_page.pdf'
        doc = fitz.open()
        doc.new_page(width=595, height=842)
        doc.save(str(base))
        doc.close()

        schema_path = tmp_path / 'two_pages.yml'
        schema_path.write_text(
            'name: two-pages\nfields:\n'
            '  - {name: last_name, kind: text, page: 0, rect: [10, 10, 200, 30]}\n'
            '  - {name: assessment, kind: text, page: 1, rect: [10, 10, 200, 30]}\n'
        )
        content = TemplateProvisioner.build_fillable(str(base), FormSchemaLoader.load(schema_path))
        doc = fitz.open(stream=content, filetype='pdf')
        try:
            assert doc.page_count == 2
            assert [w.field_name for w in doc[1].widgets()] == ['assessment']
        finally:
            doc.close()


class TestFill:

    def test_fills_and_flattens(self, base_template, fillable_path, schema, sample_record):
        TemplateProvisioner.ensure_fillable(str(base_template), str(fillable_path), schema)
        case = CaseNormalizer.normalize(sample_record)

        pdf_bytes = TemplateFormFiller.fill(case, fillable_path.read_bytes(), schema)

        doc = fitz.open(stream=pdf_bytes, filetype='pdf')
        try:
            assert sum(1 for page in doc for _ in page.widgets()) == 0
        finally:
            doc.close()
        text = pdf_text(pdf_bytes)
        assert 'Delacruz' in text
        assert 'Catholic' in text

    def test_empty_values_left_blank(self, base_template, fillable_path, schema):
        TemplateProvisioner.ensure_fillable(str(base_template), str(fillable_path), schema)
        case = CaseNormalizer.normalize({'last_name': 'Cruz'})

        text = pdf_text(TemplateFormFiller.fill(case, fillable_path.read_bytes(), schema))
        assert 'Cruz' in text
        assert 'None' not in text

    def test_field_write_failure_is_skipped(self, base_template, fillable_path, schema, sample_record):
        TemplateProvisioner.ensure_fillable(str(base_template), str(fillable_path), schema)
        case = CaseNormalizer.normalize(sample_record)
        original = TemplateFormFiller._write_widget

        def flaky_write(widget, value):
            if widget.field_name == 'religion':
                original(widget, BrokenValue())
            else:
                original(widget, value)

        with patch.object(TemplateFormFiller, '_write_widget', side_effect=flaky_write):
            pdf_bytes = TemplateFormFiller.fill(case, fillable_path.read_bytes(), schema)

        text = pdf_text(pdf_bytes)
        assert 'Delacruz' in text
        assert 'Catholic' not in text

    def test_invalid_template_bytes(self):
        with pytest.raises(RenderFailed):
            TemplateFormFiller.fill(CaseNormalizer.normalize({}), b'not a pdf')

    def test_checked_box_has_more_ink_than_unchecked(self, base_template, fillable_path, schema):
        TemplateProvisioner.ensure_fillable(str(base_template), str(fillable_path), schema)
        template_bytes = fillable_path.read_bytes()
        rect = schema.get('married_in_church').rect

        checked = TemplateFormFiller.fill(CaseNormalizer.normalize({'marriedInChurch': True}), template_bytes, schema)
        unchecked = TemplateFormFiller.fill(CaseNormalizer.normalize({'marriedInChurch': False}), template_bytes, schema)
        assert dark_pixels(checked, rect) > 0
        assert dark_pixels(checked, rect) > dark_pixels(unchecked, rect)


class BrokenValue:
    """A value whose string conversion fails."""

    def __str__(self):
        raise ValueError('cannot render')


class TestRender:

    def test_provisions_then_fills(self, base_template, fillable_path, schema, sample_record):
        case = CaseNormalizer.normalize(sample_record)
        pdf_bytes = TemplateFormFiller.render(case, str(base_template), str(fillable_path), schema)
        assert fillable_path.exists()
        assert 'Delacruz' in pdf_text(pdf_bytes)

    def test_no_templates(self, tmp_path, schema):
        case = CaseNormalizer.normalize({})
        with pytest.raises(TemplateNotFound) as exc_info:
            TemplateFormFiller.render(case, str(tmp_path / 'a.pdf'), str(tmp_path / 'b.pdf'), schema)
        assert len(exc_info.value.paths) == 2

    def test_falls_back_to_overlay_without_widgets(self, base_template, fillable_path, schema, sample_record):
        case = CaseNormalizer.normalize(sample_record)
        with patch.object(TemplateProvisioner, 'ensure_fillable') as ensure:
            pdf_bytes = TemplateFormFiller.render(case, str(base_template), str(fillable_path), schema)

        ensure.assert_called_once()
        assert not fillable_path.exists()
        text = pdf_text(pdf_bytes)
        assert 'First Name: Juan' in text
        assert 'GENERAL INTAKE FORM' in text
