"""
Case Exporter

Facade over the export pipeline. Each operation takes raw case records,
normalizes them, runs one renderer and returns a RenderedDocument ready
to be sent as an attachment.

Usage:
    exporter = CaseExporter(ExportSettings.from_config(current_app.config))
    document = exporter.case_pdf(record)
    document = exporter.batch_docx(batch)
"""

import logging
import os
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Mapping, Optional

from .aggregator import MultiCaseAggregator
from .converter import DocumentConverter
from .csv_export import CaseCsvExporter
from .exceptions import ExportRequestError
from .form_filler import TemplateFormFiller
from .form_loader import FormSchemaLoader
from .headless_renderer import HeadlessRenderer
from .markup_builder import MarkupDocumentBuilder
from .normalizer import CaseNormalizer
from .office_builder import OfficeDocumentBuilder
from .repository import fetch_case_or_raise, fetch_full_case
from .types import (
    CSV_MIMETYPE,
    DOCX_MIMETYPE,
    PDF_MIMETYPE,
    CaseBatch,
    NormalizedCase,
    PageOptions,
    RenderedDocument,
)

logger = logging.getLogger(__name__)


SAMPLE_CASE = {
    'first_name': 'Juan',
    'middle_name': 'D.',
    'last_name': 'Delacruz',
    'sex': 'Male',
    'birthdate': '2009-06-12',
    'status': 'In Intake',
    'religion': 'Catholic',
    'nationality': 'Filipino',
    'nickname': 'JD',
    'present_address': '123 Barangay Sto. Niño, Cebu City',
    'provincial_address': 'Sitio Bayabas, Danao, Cebu',
    'birthplace': 'Cebu City',
    'date_of_referral': '2025-10-01',
    'source_of_referral': 'Barangay Council',
    'relation_to_client': 'Community Officer',
    'address_and_tel': 'Barangay Hall, (032) 555-0123',
    'case_type': 'Minor Offense',
    'program_type': 'Residential',
    'assigned_house_parent': 'Maria Santos',
    'mother_name': 'Luz Delacruz',
    'father_name': 'Jose Delacruz',
    'guardian_name': 'Auntie Fe',
}


@dataclass(frozen=True)
class ExportSettings:
    """Paths, executables and time bounds used by the export pipeline."""
    template_dir: str
    base_template: str = 'GENERAL_INTAKEFORM.pdf'
    fillable_template: str = 'GENERAL_INTAKEFORM_fillable.pdf'
    soffice_path: str = 'soffice'
    no_sandbox: bool = False
    render_timeout_seconds: float = 60
    conversion_timeout_seconds: float = 120
    form_schema_path: Optional[str] = None

    @property
    def base_path(self) -> str:
        return os.path.join(self.template_dir, self.base_template)

    @property
    def fillable_path(self) -> str:
        return os.path.join(self.template_dir, self.fillable_template)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> 'ExportSettings':
        """Build settings from a Flask config mapping."""
        return cls(
            template_dir=config['CASE_TEMPLATE_DIR'],
            base_template=config.get('CASE_BASE_TEMPLATE', cls.base_template),
            fillable_template=config.get('CASE_FILLABLE_TEMPLATE', cls.fillable_template),
            soffice_path=config.get('SOFFICE_PATH', cls.soffice_path),
            no_sandbox=bool(config.get('RENDER_NO_SANDBOX', False)),
            render_timeout_seconds=float(config.get('RENDER_TIMEOUT_SECONDS', 60)),
            conversion_timeout_seconds=float(config.get('CONVERSION_TIMEOUT_SECONDS', 120)),
            form_schema_path=config.get('CASE_FORM_SCHEMA'),
        )


class CaseExporter:
    """Runs export operations for one request."""

    def __init__(self, settings: ExportSettings,
                 renderer: Optional[HeadlessRenderer] = None,
                 converter: Optional[DocumentConverter] = None,
                 fetch_case: Optional[Callable[[Any], Optional[Mapping[str, Any]]]] = None):
        self.settings = settings
        self.renderer = renderer or HeadlessRenderer(
            no_sandbox=settings.no_sandbox,
            timeout_seconds=settings.render_timeout_seconds,
        )
        self.converter = converter or DocumentConverter(
            soffice_path=settings.soffice_path,
            timeout_seconds=settings.conversion_timeout_seconds,
        )
        self.fetch_case = fetch_case or fetch_case_or_raise
        self.aggregator = MultiCaseAggregator(fetch_case or fetch_full_case)

    # =========================================================================
    # INPUT
    # =========================================================================

    def load_record(self, case_id: Any = None, payload: Any = None) -> Mapping[str, Any]:
        """
        Resolve the record for a single-case export.

        A payload wins over an id; raises InputNotFound for unknown ids
        and ExportRequestError when neither is usable.
        """
        if isinstance(payload, Mapping) and payload:
            return payload
        if case_id is not None:
            return self.fetch_case(case_id)
        raise ExportRequestError("Case data is required")

    def collect(self, ids=None, cases=None, list_only: bool = False) -> CaseBatch:
        return self.aggregator.collect(ids=ids, cases=cases, list_only=list_only)

    # =========================================================================
    # SINGLE CASE
    # =========================================================================

    def case_pdf(self, record: Mapping[str, Any], page_format: str = 'A4',
                 landscape: bool = False) -> RenderedDocument:
        """Styled case report rendered by headless Chromium."""
        case = CaseNormalizer.normalize(record)
        html = MarkupDocumentBuilder.build_case(case)
        options = PageOptions(format=page_format, landscape=landscape, header_title='Case Report')
        content = self.renderer.render(html, options)
        return RenderedDocument(content, PDF_MIMETYPE, self._filename('case', case, 'pdf'))

    def case_template_pdf(self, record: Mapping[str, Any]) -> RenderedDocument:
        """Intake form template filled with the case (or painted over, without fields)."""
        case = CaseNormalizer.normalize(record)
        schema = FormSchemaLoader.load(self.settings.form_schema_path)
        content = TemplateFormFiller.render(
            case, self.settings.base_path, self.settings.fillable_path, schema
        )
        return RenderedDocument(content, PDF_MIMETYPE, self._filename('case-template', case, 'pdf'))

    def case_docx(self, record: Mapping[str, Any]) -> RenderedDocument:
        case = CaseNormalizer.normalize(record)
        content = OfficeDocumentBuilder.build_case_report(case)
        return RenderedDocument(content, DOCX_MIMETYPE, self._filename('case-report', case, 'docx'))

    def intake_docx(self, record: Mapping[str, Any]) -> RenderedDocument:
        case = CaseNormalizer.normalize(record)
        content = OfficeDocumentBuilder.build_intake_form(record)
        return RenderedDocument(content, DOCX_MIMETYPE, self._filename('intake-form', case, 'docx'))

    def case_docx_pdf(self, record: Mapping[str, Any]) -> RenderedDocument:
        """Case report DOCX converted to PDF by LibreOffice."""
        case = CaseNormalizer.normalize(record)
        docx_bytes = OfficeDocumentBuilder.build_case_report(case)
        content = self.converter.docx_to_pdf(docx_bytes)
        return RenderedDocument(content, PDF_MIMETYPE, self._filename('case-report', case, 'pdf'))

    def case_csv(self, record: Mapping[str, Any]) -> RenderedDocument:
        case = CaseNormalizer.normalize(record)
        content = CaseCsvExporter.export([case])
        return RenderedDocument(content, CSV_MIMETYPE, self._filename('case', case, 'csv'))

    # =========================================================================
    # BATCH
    # =========================================================================

    def batch_pdf(self, batch: CaseBatch, page_format: str = 'A4', landscape: bool = False) -> RenderedDocument:
        cases = self._normalize_batch(batch)
        html = MarkupDocumentBuilder.build_batch(cases, list_only=batch.list_only)
        title = 'Cases Summary (List)' if batch.list_only else 'Cases Summary'
        options = PageOptions(format=page_format, landscape=landscape, header_title=title)
        content = self.renderer.render(html, options)
        return RenderedDocument(content, PDF_MIMETYPE, self._batch_filename(batch, 'pdf'))

    def batch_docx(self, batch: CaseBatch) -> RenderedDocument:
        cases = self._normalize_batch(batch)
        content = OfficeDocumentBuilder.build_batch(cases, list_only=batch.list_only)
        return RenderedDocument(content, DOCX_MIMETYPE, self._batch_filename(batch, 'docx'))

    def batch_csv(self, batch: CaseBatch) -> RenderedDocument:
        cases = self._normalize_batch(batch)
        content = CaseCsvExporter.export(cases)
        return RenderedDocument(content, CSV_MIMETYPE, f"cases-{date.today().isoformat()}.csv")

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _normalize_batch(batch: CaseBatch):
        return [CaseNormalizer.normalize(record) for record in batch.records]

    @staticmethod
    def _filename(kind: str, case: NormalizedCase, extension: str) -> str:
        suffix = case.case_id if case.case_id is not None else date.today().isoformat()
        return f"{kind}-{suffix}.{extension}"

    @staticmethod
    def _batch_filename(batch: CaseBatch, extension: str) -> str:
        kind = 'cases-list' if batch.list_only else 'cases-summary'
        return f"{kind}-{date.today().isoformat()}.{extension}"
