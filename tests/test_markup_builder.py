"""
HTML report builder tests.

Run with: python -m pytest tests/test_markup_builder.py -v
"""

from datetime import datetime

from services.case_export import CaseNormalizer, MarkupDocumentBuilder


GENERATED = datetime(2024, 6, 15, 9, 30)


def build(record, **kwargs):
    return MarkupDocumentBuilder.build_case(CaseNormalizer.normalize(record), generated_at=GENERATED, **kwargs)


class TestCaseReport:

    def test_contains_values_and_brand(self, sample_record):
        html = build(sample_record)
        assert 'HOPETRACK' in html
        assert 'Generated 2024-06-15 09:30' in html
        assert 'Juan' in html
        assert 'Minor Offense' in html
        assert 'Truancy and petty theft.' in html

    def test_empty_fields_omitted(self, sample_record):
        html = build(sample_record)
        assert 'Nickname' not in html
        assert 'Provincial Address' not in html
        assert 'None' not in html

    def test_empty_section_omitted(self):
        html = build({'first_name': 'Juan'})
        assert 'Client Information' in html
        assert 'Referral' not in html
        assert 'Narrative' not in html

    def test_booleans_rendered_as_yes_no(self, sample_record):
        html = build(sample_record)
        assert 'Married in church' in html
        assert '>Yes<' in html
        assert '>No<' in html

    def test_values_are_escaped(self):
        html = build({'first_name': '<script>alert("x")</script>', 'assessment': 'A & B'})
        assert '<script>' not in html
        assert '&lt;script&gt;' in html
        assert 'A &amp; B' in html

    def test_child_tables(self, sample_record):
        html = build(sample_record)
        assert 'Ana Delacruz' in html
        assert 'Sacramental Records' in html
        assert '2010-06-20' in html
        assert 'No records' in html

    def test_deterministic_apart_from_stamp(self, sample_record):
        assert build(sample_record) == build(sample_record)


class TestBatch:

    def cases(self):
        return [
            CaseNormalizer.normalize({'id': 7, 'first_name': 'Seven', 'case_type': 'Minor Offense',
                                      'last_updated': '2024-03-05'}),
            CaseNormalizer.normalize({'id': 3, 'first_name': 'Three', 'program_type': 'Residential'}),
            CaseNormalizer.normalize({'id': 9, 'first_name': 'Nine'}),
        ]

    def test_summary_rows(self):
        rows = [MarkupDocumentBuilder.summary_row(case) for case in self.cases()]
        assert rows[0] == {'name': 'Seven', 'age': '', 'program': 'Minor Offense', 'last_updated': 'Mar 05, 2024'}
        assert rows[1]['program'] == 'Residential'
        assert rows[2]['program'] == ''

    def test_sections_in_input_order(self):
        html = MarkupDocumentBuilder.build_batch(self.cases(), generated_at=GENERATED)
        assert html.index('Seven') < html.index('Three') < html.index('Nine')
        assert html.count('class="case-block') == 3
        assert html.count('case-block page-break"') == 2

    def test_list_only_has_summary_only(self):
        html = MarkupDocumentBuilder.build_batch(self.cases(), list_only=True, generated_at=GENERATED)
        assert 'Summary (List)' in html
        assert 'class="case-block' not in html
        assert 'Seven' in html

    def test_empty_batch(self):
        html = MarkupDocumentBuilder.build_batch([], generated_at=GENERATED)
        assert 'No cases' in html
