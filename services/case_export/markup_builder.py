"""
Markup Document Builder

Builds print-ready HTML for one case or a batch of cases from the Jinja2
templates in ./templates. Autoescaping is always on, so every value
that reaches the page is HTML-escaped.

The output depends only on its inputs; two builds of the same case
differ at most in the "Generated" stamp.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .schema import BRAND, CHILD_TABLES, KEY_VALUE_SECTIONS, NARRATIVE_FIELDS, program_label
from .transforms import transform_date_medium, transform_yes_no
from .types import NormalizedCase

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / 'templates'

_ENV = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(enabled_extensions=('html',), default=True),
    trim_blocks=True,
    lstrip_blocks=True,
)

GeneratedAt = Optional[Union[datetime, str]]


def format_generated_at(generated_at: GeneratedAt = None) -> str:
    if generated_at is None:
        generated_at = datetime.now()
    if isinstance(generated_at, datetime):
        return generated_at.strftime('%Y-%m-%d %H:%M')
    return str(generated_at)


class MarkupDocumentBuilder:
    """
    HTML builder for case reports.

    Usage:
        html = MarkupDocumentBuilder.build_case(case)
        html = MarkupDocumentBuilder.build_batch(cases, list_only=True)
    """

    @classmethod
    def build_case(cls, case: NormalizedCase, generated_at: GeneratedAt = None) -> str:
        """Render the single-case report."""
        template = _ENV.get_template('case_report.html')
        return template.render(
            brand=BRAND,
            title=f"{BRAND} Case Report",
            generated_at=format_generated_at(generated_at),
            case=cls.case_context(case),
        )

    @classmethod
    def build_batch(cls, cases: Sequence[NormalizedCase], list_only: bool = False,
                    generated_at: GeneratedAt = None) -> str:
        """
        Render the batch report: a summary table, then (unless list_only)
        one section per case in input order.
        """
        template = _ENV.get_template('cases_summary.html')
        html = template.render(
            brand=BRAND,
            title=f"{BRAND} Cases Summary",
            generated_at=format_generated_at(generated_at),
            summary=[cls.summary_row(case) for case in cases],
            cases=[] if list_only else [cls.case_context(case) for case in cases],
            list_only=list_only,
        )
        logger.debug(f"Built batch markup for {len(cases)} case(s), list_only={list_only}")
        return html

    @staticmethod
    def summary_row(case: NormalizedCase) -> Dict[str, str]:
        return {
            'name': case.display_name,
            'age': case.get('age', ''),
            'program': program_label(case),
            'last_updated': transform_date_medium(case.last_updated),
        }

    @classmethod
    def case_context(cls, case: NormalizedCase) -> Dict[str, Any]:
        """Template context for one case: non-empty sections, tables, narrative."""
        sections = []
        for section in KEY_VALUE_SECTIONS:
            fields = cls._present_fields(case, section.fields)
            if fields:
                sections.append({'title': section.title, 'fields': fields})

        tables = []
        for spec in CHILD_TABLES:
            rows = [
                [row.get(column) or '' for column in spec.column_names()]
                for row in case.rows(spec.key)
            ]
            tables.append({'title': spec.title, 'headers': spec.headers(), 'rows': rows})

        return {
            'name': case.display_name,
            'case_id': case.case_id,
            'last_updated': case.last_updated,
            'sections': sections,
            'tables': tables,
            'narrative': cls._present_fields(case, NARRATIVE_FIELDS),
        }

    @staticmethod
    def _present_fields(case: NormalizedCase, fields) -> List[Dict[str, str]]:
        present = []
        for name, label in fields:
            value = case.fields.get(name)
            if isinstance(value, bool):
                value = transform_yes_no(value)
            if value is None or str(value).strip() == '':
                continue
            present.append({'label': label, 'value': str(value)})
        return present
