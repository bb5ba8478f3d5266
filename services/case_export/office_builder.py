"""
Office Document Builder

Builds Word (DOCX) case documents with python-docx.

Unlike the PDF and HTML renderers, printed forms keep every slot: an
empty value becomes an underscore rule the worker can fill in by hand,
and child tables are padded with blank rows to a minimum height.
"""

import io
import logging
from datetime import date
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Inches, Pt, RGBColor

from .normalizer import CaseNormalizer
from .schema import (
    ADDRESS_SECTION,
    AGENCY_TABLE,
    CASE_DETAILS_SECTION,
    CIVIL_STATUS_FIELDS,
    CLIENT_SECTION,
    EDUCATION_TABLE,
    EXTENDED_FAMILY_TABLE,
    FAMILY_TABLE,
    LIFE_SKILLS_TABLE,
    NARRATIVE_FIELDS,
    PARENT_SECTIONS,
    REFERRAL_SECTION,
    SACRAMENT_TABLE,
    VITAL_SIGNS_TABLE,
    program_label,
)
from .transforms import transform_date_medium, transform_yes_no
from .types import ChildTableSpec, NormalizedCase

logger = logging.getLogger(__name__)

PLACEHOLDER = "____________________"
LONG_PLACEHOLDER = "\n".join(["_" * 72] * 3)
CHECKED = "☑"
UNCHECKED = "☐"

PRIMARY_COLOR = RGBColor(0x29, 0x7D, 0xB9)
TEXT_COLOR = RGBColor(0x2D, 0x37, 0x48)

REPORT_TITLE = "CHILDREN IN CONFLICT WITH THE LAW (CICL)"
REPORT_SUBTITLE = "COMPREHENSIVE CASE INTAKE REPORT"
INTAKE_TITLE = "GENERAL INTAKE FORM"
BATCH_TITLE = "All Cases"

ROMAN_NUMERALS = ('I', 'II', 'III', 'IV', 'V', 'VI', 'VII', 'VIII', 'IX', 'X',
                  'XI', 'XII', 'XIII', 'XIV', 'XV', 'XVI', 'XVII', 'XVIII', 'XIX', 'XX')

# Field getter: canonical name -> value (str, bool or None)
Getter = Callable[[str], Any]


def display_value(value: Any, long: bool = False) -> str:
    """The literal value, or an underscore rule when it is empty."""
    if isinstance(value, bool):
        return transform_yes_no(value)
    if value is None or str(value).strip() == '':
        return LONG_PLACEHOLDER if long else PLACEHOLDER
    return str(value)


def checkbox(value: Any) -> str:
    """Checked glyph for True, unchecked for False or absent."""
    return CHECKED if value is True else UNCHECKED


class OfficeDocumentBuilder:
    """
    DOCX builder for case reports, intake forms and batch summaries.

    Usage:
        docx_bytes = OfficeDocumentBuilder.build_case_report(case)
        docx_bytes = OfficeDocumentBuilder.build_intake_form(record)
        docx_bytes = OfficeDocumentBuilder.build_batch(cases, list_only=False)
    """

    # =========================================================================
    # PUBLIC BUILDERS
    # =========================================================================

    @classmethod
    def build_case_report(cls, case: NormalizedCase, generated_on: Optional[date] = None) -> bytes:
        """Comprehensive case report for one case."""
        doc = cls._new_document()
        cls._add_title(doc, REPORT_TITLE, REPORT_SUBTITLE)
        cls._add_meta_row(doc, case, generated_on)
        cls._add_case_sections(doc, case)
        cls._add_signature_block(doc)
        logger.debug(f"Built case report DOCX for case {case.case_id}")
        return cls._to_bytes(doc)

    @classmethod
    def build_intake_form(cls, record: Mapping[str, Any], generated_on: Optional[date] = None) -> bytes:
        """
        Intake-form variant built from a raw record.

        The raw record supplies any value the normalizer does not know
        about; normalized values win wherever both exist.
        """
        case = CaseNormalizer.normalize(record)
        values = dict(record) if isinstance(record, Mapping) else {}
        values.update({name: value for name, value in case.fields.items() if value is not None})
        get = values.get

        doc = cls._new_document()
        cls._add_title(doc, REPORT_TITLE, INTAKE_TITLE)
        cls._add_meta_row(doc, case, generated_on)

        numbers = iter(ROMAN_NUMERALS)
        cls._add_section_header(doc, f"{next(numbers)}. IDENTIFYING INFORMATION")
        cls._add_label_value_table(doc, get, CLIENT_SECTION.fields + ADDRESS_SECTION.fields)

        cls._add_section_header(doc, f"{next(numbers)}. ADMISSION AND REFERRAL")
        cls._add_label_value_table(doc, get, CASE_DETAILS_SECTION.fields[:5] + REFERRAL_SECTION.fields)

        cls._add_section_header(doc, f"{next(numbers)}. PARENTS / GUARDIAN")
        for section in PARENT_SECTIONS:
            cls._add_subheader(doc, section.title)
            cls._add_label_value_table(doc, get, section.fields)
        cls._add_civil_status(doc, get)

        cls._add_section_header(doc, f"{next(numbers)}. FAMILY/HOUSEHOLD COMPOSITION")
        cls._add_child_table(doc, FAMILY_TABLE, case.rows(FAMILY_TABLE.key))

        cls._add_section_header(doc, f"{next(numbers)}. NARRATIVE")
        cls._add_label_value_table(doc, get, NARRATIVE_FIELDS, long=True)

        cls._add_signature_block(doc)
        return cls._to_bytes(doc)

    @classmethod
    def build_batch(cls, cases: Sequence[NormalizedCase], list_only: bool = False) -> bytes:
        """
        "All Cases" document: a summary table, then (unless list_only)
        every case report on its own page, in input order.
        """
        doc = cls._new_document()

        title = doc.add_paragraph()
        title.alignment = WD_ALIGN_PARAGRAPH.CENTER
        run = title.add_run(BATCH_TITLE)
        run.bold = True
        run.font.size = Pt(15)
        run.font.color.rgb = PRIMARY_COLOR

        table = doc.add_table(rows=1, cols=4)
        table.style = 'Table Grid'
        for cell, header in zip(table.rows[0].cells, ('Name', 'Age', 'Program', 'Last Updated')):
            cls._write_cell(cell, header, bold=True)
        for case in cases:
            cells = table.add_row().cells
            cls._write_cell(cells[0], case.display_name)
            cls._write_cell(cells[1], case.get('age', ''))
            cls._write_cell(cells[2], program_label(case))
            cls._write_cell(cells[3], transform_date_medium(case.last_updated))

        if not list_only:
            for case in cases:
                doc.add_page_break()
                cls._add_title(doc, case.display_name, None)
                cls._add_case_sections(doc, case)

        logger.debug(f"Built batch DOCX for {len(cases)} case(s), list_only={list_only}")
        return cls._to_bytes(doc)

    # =========================================================================
    # SECTIONS
    # =========================================================================

    @classmethod
    def _add_case_sections(cls, doc, case: NormalizedCase) -> None:
        get = case.fields.get
        numbers = iter(ROMAN_NUMERALS)

        cls._add_section_header(doc, f"{next(numbers)}. CLIENT'S IDENTIFYING INFORMATION")
        cls._add_label_value_table(doc, get, CLIENT_SECTION.fields + ADDRESS_SECTION.fields)

        cls._add_section_header(doc, f"{next(numbers)}. REFERRAL AND CASE DETAILS")
        cls._add_label_value_table(doc, get, REFERRAL_SECTION.fields + CASE_DETAILS_SECTION.fields[:5])

        cls._add_section_header(doc, f"{next(numbers)}. FAMILY/HOUSEHOLD COMPOSITION")
        for section in PARENT_SECTIONS:
            cls._add_subheader(doc, section.title)
            cls._add_label_value_table(doc, get, section.fields)
        cls._add_civil_status(doc, get)
        for spec in (FAMILY_TABLE, EXTENDED_FAMILY_TABLE):
            cls._add_subheader(doc, spec.title)
            cls._add_child_table(doc, spec, case.rows(spec.key))

        cls._add_section_header(doc, f"{next(numbers)}. EDUCATIONAL AND SACRAMENTAL RECORDS")
        for spec in (EDUCATION_TABLE, SACRAMENT_TABLE):
            cls._add_subheader(doc, spec.title)
            cls._add_child_table(doc, spec, case.rows(spec.key))

        cls._add_section_header(doc, f"{next(numbers)}. AGENCIES/PERSONS PREVIOUSLY APPROACHED")
        cls._add_child_table(doc, AGENCY_TABLE, case.rows(AGENCY_TABLE.key))

        cls._add_section_header(doc, f"{next(numbers)}. BRIEF DESCRIPTION OF THE CLIENT UPON INTAKE")
        cls._add_label_value_table(doc, get, (
            ('client_description', 'Client'),
            ('parents_description', 'Parents/Relatives/Guardian'),
        ), long=True)

        for name, label in NARRATIVE_FIELDS:
            if name in ('client_description', 'parents_description'):
                continue
            cls._add_section_header(doc, f"{next(numbers)}. {label.upper()}")
            cls._add_label_value_table(doc, get, ((name, label),), long=True)

        cls._add_section_header(doc, f"{next(numbers)}. PROGRESS")
        cls._add_checklist(doc, case.checklist)

        for spec in (LIFE_SKILLS_TABLE, VITAL_SIGNS_TABLE):
            cls._add_section_header(doc, f"{next(numbers)}. {spec.title.upper()}")
            cls._add_child_table(doc, spec, case.rows(spec.key))

    @classmethod
    def _add_label_value_table(cls, doc, get: Getter, fields: Iterable[Tuple[str, str]],
                               long: bool = False) -> None:
        table = doc.add_table(rows=0, cols=2)
        table.style = 'Table Grid'
        for name, label in fields:
            cells = table.add_row().cells
            cls._write_cell(cells[0], f"{label}:", bold=True)
            cls._write_cell(cells[1], display_value(get(name), long=long))
            cells[0].width = Inches(2.2)
            cells[1].width = Inches(4.8)

    @classmethod
    def _add_child_table(cls, doc, spec: ChildTableSpec, rows: List[Mapping[str, Any]]) -> None:
        table = doc.add_table(rows=1, cols=len(spec.columns))
        table.style = 'Table Grid'
        for cell, header in zip(table.rows[0].cells, spec.headers()):
            cls._write_cell(cell, header, bold=True)

        for row in rows:
            cells = table.add_row().cells
            for cell, column in zip(cells, spec.column_names()):
                cls._write_cell(cell, row.get(column) or '')

        for _ in range(spec.min_rows - len(rows)):
            table.add_row()

    @classmethod
    def _add_civil_status(cls, doc, get: Getter) -> None:
        paragraph = doc.add_paragraph()
        paragraph.add_run("Civil Status of Parents: ").bold = True
        marks = [f"{checkbox(get(name))} {label}" for name, label in CIVIL_STATUS_FIELDS]
        paragraph.add_run("    ".join(marks))
        cls._add_label_value_table(doc, get, (('marriage_date_place', 'Date and Place of Marriage'),))

    @classmethod
    def _add_checklist(cls, doc, checklist: List[Mapping[str, Any]]) -> None:
        if not checklist:
            doc.add_paragraph(LONG_PLACEHOLDER)
            return
        for entry in checklist:
            text = entry['text']
            if entry.get('timestamp'):
                text = f"{text} ({entry['timestamp']})"
            doc.add_paragraph(f"{CHECKED} {text}")

    @classmethod
    def _add_signature_block(cls, doc) -> None:
        doc.add_paragraph()
        table = doc.add_table(rows=1, cols=2)
        for cell, (caption, role) in zip(table.rows[0].cells, (("Prepared by", "Social Worker"),
                                                               ("Noted by", "Supervisor"))):
            cls._write_cell(cell, f"{caption}:", bold=True)
            cell.add_paragraph("")
            cell.add_paragraph("________________________________")
            cell.add_paragraph(role)

    # =========================================================================
    # PRIMITIVES
    # =========================================================================

    @staticmethod
    def _new_document():
        doc = Document()
        for section in doc.sections:
            section.top_margin = Inches(0.5)
            section.bottom_margin = Inches(0.5)
            section.left_margin = Inches(0.6)
            section.right_margin = Inches(0.6)
        style = doc.styles['Normal']
        style.font.name = 'Calibri'
        style.font.size = Pt(10)
        return doc

    @staticmethod
    def _add_title(doc, title: str, subtitle: Optional[str]) -> None:
        paragraph = doc.add_paragraph()
        paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
        run = paragraph.add_run(title)
        run.bold = True
        run.font.size = Pt(14)
        run.font.color.rgb = PRIMARY_COLOR

        if subtitle:
            paragraph = doc.add_paragraph()
            paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
            run = paragraph.add_run(subtitle)
            run.bold = True
            run.font.size = Pt(12)
            run.font.color.rgb = TEXT_COLOR

    @classmethod
    def _add_meta_row(cls, doc, case: NormalizedCase, generated_on: Optional[date]) -> None:
        generated_on = generated_on or date.today()
        table = doc.add_table(rows=1, cols=2)
        case_id = case.case_id if case.case_id is not None else PLACEHOLDER
        cls._write_cell(table.rows[0].cells[0], f"Case No.: {case_id}")
        cls._write_cell(table.rows[0].cells[1], f"Date Generated: {generated_on.isoformat()}")

    @staticmethod
    def _add_section_header(doc, text: str) -> None:
        paragraph = doc.add_paragraph()
        paragraph.paragraph_format.space_before = Pt(12)
        run = paragraph.add_run(text)
        run.bold = True
        run.font.size = Pt(12)
        run.font.color.rgb = PRIMARY_COLOR

    @staticmethod
    def _add_subheader(doc, text: str) -> None:
        paragraph = doc.add_paragraph()
        paragraph.paragraph_format.space_before = Pt(6)
        paragraph.add_run(text).bold = True

    @staticmethod
    def _write_cell(cell, text: Any, bold: bool = False) -> None:
        paragraph = cell.paragraphs[0]
        run = paragraph.add_run(str(text))
        run.bold = bold

    @staticmethod
    def _to_bytes(doc) -> bytes:
        buffer = io.BytesIO()
        doc.save(buffer)
        return buffer.getvalue()
