"""
Case Export System

Normalizes case records and renders them as filled PDF forms, styled
PDF reports, Word documents and CSV files.

Usage:
    from services.case_export import CaseExporter, ExportSettings

    exporter = CaseExporter(ExportSettings.from_config(app.config))
    record = exporter.load_record(case_id=7)
    document = exporter.case_pdf(record)
    send_file(io.BytesIO(document.content), mimetype=document.mimetype,
              as_attachment=True, download_name=document.filename)
"""

from .types import (
    CaseBatch,
    ChildTableSpec,
    FieldKind,
    FormFieldSpec,
    FormSchema,
    NormalizedCase,
    PageOptions,
    ProvisionResult,
    ProvisionStatus,
    RenderedDocument,
    SectionSpec,
)

from .exceptions import (
    CaseExportError,
    ConfigurationError,
    ConversionFailed,
    ExportRequestError,
    FieldWriteFailed,
    InputNotFound,
    RenderEngineUnavailable,
    RenderFailed,
    RenderTimeout,
    TemplateNotFound,
)

from .aliases import FIELD_ALIASES, FieldAliasResolver, resolve_alias, resolve_fields
from .normalizer import CaseNormalizer, normalize_case
from .transforms import TRANSFORMS, apply_transform, register_transform, normalize_date, compute_age
from .form_loader import FormSchemaLoader
from .provisioner import TemplateProvisioner
from .form_filler import TemplateFormFiller
from .overlay import OverlayFallbackRenderer
from .markup_builder import MarkupDocumentBuilder
from .headless_renderer import HeadlessRenderer
from .office_builder import OfficeDocumentBuilder
from .converter import DocumentConverter
from .aggregator import MultiCaseAggregator
from .csv_export import CaseCsvExporter
from .exporter import SAMPLE_CASE, CaseExporter, ExportSettings

__all__ = [
    # Types
    'CaseBatch',
    'ChildTableSpec',
    'FieldKind',
    'FormFieldSpec',
    'FormSchema',
    'NormalizedCase',
    'PageOptions',
    'ProvisionResult',
    'ProvisionStatus',
    'RenderedDocument',
    'SectionSpec',

    # Exceptions
    'CaseExportError',
    'ConfigurationError',
    'ConversionFailed',
    'ExportRequestError',
    'FieldWriteFailed',
    'InputNotFound',
    'RenderEngineUnavailable',
    'RenderFailed',
    'RenderTimeout',
    'TemplateNotFound',

    # Normalization
    'FIELD_ALIASES',
    'FieldAliasResolver',
    'resolve_alias',
    'resolve_fields',
    'CaseNormalizer',
    'normalize_case',
    'TRANSFORMS',
    'apply_transform',
    'register_transform',
    'normalize_date',
    'compute_age',

    # Rendering
    'FormSchemaLoader',
    'TemplateProvisioner',
    'TemplateFormFiller',
    'OverlayFallbackRenderer',
    'MarkupDocumentBuilder',
    'HeadlessRenderer',
    'OfficeDocumentBuilder',
    'DocumentConverter',
    'MultiCaseAggregator',
    'CaseCsvExporter',

    # Facade
    'SAMPLE_CASE',
    'CaseExporter',
    'ExportSettings',
]
