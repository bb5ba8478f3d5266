"""
Word document builder tests.

Documents are built with python-docx and read back with it.

Run with: python -m pytest tests/test_office_builder.py -v
"""

import io
from datetime import date

from docx import Document

from services.case_export import CaseNormalizer, OfficeDocumentBuilder
from services.case_export.office_builder import (
    CHECKED,
    LONG_PLACEHOLDER,
    PLACEHOLDER,
    UNCHECKED,
    checkbox,
    display_value,
)
from services.case_export.schema import CHILD_TABLES, FAMILY_TABLE, SACRAMENT_TABLE


GENERATED_ON = date(2024, 6, 15)


def read_docx(docx_bytes):
    return Document(io.BytesIO(docx_bytes))


def all_text(doc):
    parts = [p.text for p in doc.paragraphs]
    for table in doc.tables:
        for row in table.rows:
            for cell in row.cells:
                parts.append(cell.text)
    return '\n'.join(parts)


def find_table(doc, headers):
    for table in doc.tables:
        if [cell.text for cell in table.rows[0].cells] == headers:
            return table
    return None


def label_values(doc):
    """Label -> value for every two-column label/value row."""
    values = {}
    for table in doc.tables:
        for row in table.rows:
            cells = row.cells
            if len(cells) == 2 and cells[0].text.endswith(':'):
                values[cells[0].text[:-1]] = cells[1].text
    return values


class TestHelpers:

    def test_display_value(self):
        assert display_value('Juan') == 'Juan'
        assert display_value(None) == PLACEHOLDER
        assert display_value('  ') == PLACEHOLDER
        assert display_value(True) == 'Yes'
        assert display_value(None, long=True).count('\n') == 2

    def test_checkbox(self):
        assert checkbox(True) == CHECKED
        assert checkbox(False) == UNCHECKED
        assert checkbox(None) == UNCHECKED


class TestCaseReport:

    def build(self, record):
        case = CaseNormalizer.normalize(record)
        return read_docx(OfficeDocumentBuilder.build_case_report(case, generated_on=GENERATED_ON))

    def test_title_and_meta(self, sample_record):
        text = all_text(self.build(sample_record))
        assert 'CHILDREN IN CONFLICT WITH THE LAW (CICL)' in text
        assert 'COMPREHENSIVE CASE INTAKE REPORT' in text
        assert 'Case No.: 7' in text
        assert 'Date Generated: 2024-06-15' in text

    def test_values_and_placeholders(self, sample_record):
        values = label_values(self.build(sample_record))
        assert values['First Name'] == 'Juan'
        assert values['Religion'] == 'Catholic'
        assert values['Nickname'] == PLACEHOLDER
        assert values['Provincial Address'] == PLACEHOLDER

    def test_empty_narrative_gets_long_placeholder(self, sample_record):
        record = dict(sample_record, assessment='', recommendation='Continue home visits')
        values = label_values(self.build(record))
        assert values['Assessment'].split() == LONG_PLACEHOLDER.split()
        assert values['Recommendation'] == 'Continue home visits'

    def test_civil_status_glyphs(self, sample_record):
        text = all_text(self.build(sample_record))
        assert f'{CHECKED} Married in church' in text
        assert f'{UNCHECKED} Civil Marriage' in text
        assert f'{UNCHECKED} Separated' in text

    def test_child_tables_padded(self, sample_record):
        doc = self.build(sample_record)
        family = find_table(doc, FAMILY_TABLE.headers())
        assert family is not None
        assert len(family.rows) == 1 + FAMILY_TABLE.min_rows
        assert family.rows[1].cells[0].text == 'Ana Delacruz'
        assert family.rows[3].cells[0].text == ''

        sacraments = find_table(doc, SACRAMENT_TABLE.headers())
        assert sacraments.rows[1].cells[1].text == '2010-06-20'

    def test_rows_beyond_minimum_kept(self):
        record = {'familyMembers': [{'name': f'Member {i}'} for i in range(7)]}
        family = find_table(self.build(record), FAMILY_TABLE.headers())
        assert len(family.rows) == 8

    def test_every_child_table_present(self):
        doc = self.build({})
        for spec in CHILD_TABLES:
            table = find_table(doc, spec.headers())
            assert table is not None, spec.title
            assert len(table.rows) == 1 + spec.min_rows

    def test_checklist(self):
        record = {'checklist': [{'text': 'Home visit', 'timestamp': '2024-01-01'}]}
        text = all_text(self.build(record))
        assert f'{CHECKED} Home visit (2024-01-01)' in text

    def test_signature_block(self):
        text = all_text(self.build({}))
        assert 'Prepared by:' in text
        assert 'Noted by:' in text
        assert 'Social Worker' in text


class TestIntakeForm:

    def test_intake_form(self, sample_record):
        doc = read_docx(OfficeDocumentBuilder.build_intake_form(sample_record, generated_on=GENERATED_ON))
        text = all_text(doc)
        assert 'GENERAL INTAKE FORM' in text
        values = label_values(doc)
        assert values['First Name'] == 'Juan'
        assert values['Age'] != PLACEHOLDER
        assert values['Admission Month'] == PLACEHOLDER


class TestBatch:

    def cases(self):
        return [
            CaseNormalizer.normalize({'id': 7, 'first_name': 'Seven', 'case_type': 'Minor Offense'}),
            CaseNormalizer.normalize({'id': 3, 'first_name': 'Three'}),
            CaseNormalizer.normalize({'id': 9, 'first_name': 'Nine'}),
        ]

    def test_summary_table_in_order(self):
        doc = read_docx(OfficeDocumentBuilder.build_batch(self.cases()))
        summary = find_table(doc, ['Name', 'Age', 'Program', 'Last Updated'])
        assert [row.cells[0].text for row in summary.rows[1:]] == ['Seven', 'Three', 'Nine']
        assert summary.rows[1].cells[2].text == 'Minor Offense'
        assert 'All Cases' in all_text(doc)

    def test_full_batch_includes_case_sections(self):
        doc = read_docx(OfficeDocumentBuilder.build_batch(self.cases()))
        titles = [p.text for p in doc.paragraphs if p.text in ('Seven', 'Three', 'Nine')]
        assert titles == ['Seven', 'Three', 'Nine']

    def test_list_only(self):
        doc = read_docx(OfficeDocumentBuilder.build_batch(self.cases(), list_only=True))
        assert find_table(doc, FAMILY_TABLE.headers()) is None
        assert len(doc.tables) == 1
