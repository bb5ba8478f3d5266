"""
Template Provisioner

Creates the fillable intake template from the blank base PDF by adding
one AcroForm widget per declared form field.

Provisioning is idempotent and safe to race: the fillable file is
written to a unique temp file in the target directory and renamed into
place, so concurrent first requests at worst write identical bytes twice.
"""

import logging
import os
import tempfile

import fitz  # PyMuPDF

from .types import FieldKind, FormSchema, ProvisionResult, ProvisionStatus

logger = logging.getLogger(__name__)


WIDGET_TYPES = {
    FieldKind.TEXT: fitz.PDF_WIDGET_TYPE_TEXT,
    FieldKind.CHECKBOX: fitz.PDF_WIDGET_TYPE_CHECKBOX,
}


class TemplateProvisioner:
    """
    Ensures a fillable template exists next to the base template.

    Usage:
        result = TemplateProvisioner.ensure_fillable(base_path, fillable_path, schema)
        if result.is_usable:
            ...
    """

    @classmethod
    def ensure_fillable(cls, base_path: str, fillable_path: str, schema: FormSchema) -> ProvisionResult:
        """
        Create the fillable template if it does not exist yet.

        Never raises for expected failures; a FAILED result carries the error.
        """
        if os.path.exists(fillable_path):
            return ProvisionResult(ProvisionStatus.EXISTS, fillable_path)

        if not os.path.exists(base_path):
            logger.warning(f"Base template missing, cannot provision: {base_path}")
            return ProvisionResult(ProvisionStatus.BASE_MISSING, fillable_path)

        tmp_path = None
        try:
            content = cls.build_fillable(base_path, schema)

            directory = os.path.dirname(os.path.abspath(fillable_path))
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix='.fillable-', suffix='.pdf', dir=directory)
            with os.fdopen(fd, 'wb') as handle:
                handle.write(content)

            # Another request may have published while we were building
            if os.path.exists(fillable_path):
                return ProvisionResult(ProvisionStatus.EXISTS, fillable_path)

            os.replace(tmp_path, fillable_path)
            tmp_path = None
            logger.info(f"Provisioned fillable template with {len(schema.fields)} fields: {fillable_path}")
            return ProvisionResult(ProvisionStatus.CREATED, fillable_path)

        except Exception as e:
            logger.error(f"Template provisioning failed: {e}")
            return ProvisionResult(ProvisionStatus.FAILED, fillable_path, error=e)

        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)

    @classmethod
    def build_fillable(cls, base_path: str, schema: FormSchema) -> bytes:
        """Return the base template's bytes with the schema's widgets added."""
        doc = fitz.open(base_path)
        try:
            for spec in schema.fields:
                while spec.page >= doc.page_count:
                    if doc.page_count:
                        last = doc[-1].rect
                        doc.new_page(width=last.width, height=last.height)
                    else:
                        doc.new_page()

                widget = fitz.Widget()
                widget.field_name = spec.name
                widget.field_type = WIDGET_TYPES[spec.kind]
                widget.rect = fitz.Rect(*spec.rect)
                if spec.kind == FieldKind.TEXT:
                    widget.text_fontsize = 0
                doc[spec.page].add_widget(widget)

            return doc.tobytes(garbage=3, deflate=True)
        finally:
            doc.close()
