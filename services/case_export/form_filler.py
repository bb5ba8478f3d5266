"""
Template Form Filler

Fills the intake template's AcroForm widgets from a NormalizedCase and
flattens the result so the values become page content.

Widgets are matched by name against canonical case fields. Empty values
leave their widget blank. A widget that cannot be written is logged and
skipped; it never fails the document.
"""

import logging
import os
from typing import Any

import fitz  # PyMuPDF

from .exceptions import FieldWriteFailed, RenderFailed, TemplateNotFound
from .overlay import OverlayFallbackRenderer
from .provisioner import TemplateProvisioner
from .schema import CANONICAL_FIELDS
from .transforms import transform_yes_no
from .types import FormSchema, NormalizedCase

logger = logging.getLogger(__name__)


class TemplateFormFiller:
    """
    Fills PDF templates.

    Usage:
        pdf_bytes = TemplateFormFiller.render(case, base_path, fillable_path, schema)
    """

    @classmethod
    def render(cls, case: NormalizedCase, base_path: str, fillable_path: str, schema: FormSchema) -> bytes:
        """
        Produce the filled template PDF for one case.

        Provisions the fillable template when needed, falls back to the
        base template, and paints an overlay when the chosen template
        has no usable form fields.

        Raises:
            TemplateNotFound: If neither template file exists
            RenderFailed: If the template cannot be opened as a PDF
        """
        result = TemplateProvisioner.ensure_fillable(base_path, fillable_path, schema)
        logger.debug(f"Template provisioning: {result.status.value}")

        if os.path.exists(fillable_path):
            template_path = fillable_path
        elif os.path.exists(base_path):
            template_path = base_path
        else:
            logger.error(f"No PDF template found at {fillable_path} or {base_path}")
            raise TemplateNotFound("PDF template not found", paths=[fillable_path, base_path])

        with open(template_path, 'rb') as handle:
            template_bytes = handle.read()

        if cls.count_fillable_widgets(template_bytes) == 0:
            logger.info(f"Template has no usable form fields, using overlay: {template_path}")
            return OverlayFallbackRenderer.render(case, template_bytes)

        return cls.fill(case, template_bytes, schema)

    @classmethod
    def fill(cls, case: NormalizedCase, template_bytes: bytes, schema: FormSchema = None) -> bytes:
        """
        Fill every widget whose name has a value in the case, then flatten.

        Pure with respect to its inputs: nothing is read from or written to disk.
        """
        doc = cls._open(template_bytes)
        allowed = set(schema.field_names()) if schema else None
        filled = 0

        try:
            for page in doc:
                for widget in page.widgets():
                    name = widget.field_name
                    if allowed is not None and name not in allowed:
                        continue

                    value = case.fields.get(name)
                    if value is None or value == '':
                        logger.debug(f"No value for field '{name}', leaving blank")
                        continue

                    try:
                        cls._write_widget(widget, value)
                        filled += 1
                    except FieldWriteFailed as e:
                        logger.warning(f"Skipping field '{e.field_name}': {e.cause}")

            doc.bake()
            logger.info(f"Filled {filled} template field(s)")
            return doc.tobytes(garbage=3, deflate=True)

        finally:
            doc.close()

    @classmethod
    def count_fillable_widgets(cls, template_bytes: bytes) -> int:
        """Number of widgets whose name is a canonical case field."""
        doc = cls._open(template_bytes)
        try:
            return sum(
                1
                for page in doc
                for widget in page.widgets()
                if widget.field_name in CANONICAL_FIELDS
            )
        finally:
            doc.close()

    @staticmethod
    def _write_widget(widget, value: Any) -> None:
        try:
            if widget.field_type == fitz.PDF_WIDGET_TYPE_CHECKBOX:
                if isinstance(value, bool):
                    on = widget.on_state()
                    widget.field_value = (on or True) if value else False
                else:
                    widget.field_value = False
            elif isinstance(value, bool):
                widget.field_value = transform_yes_no(value)
            else:
                widget.field_value = str(value)
            widget.update()
        except Exception as e:
            raise FieldWriteFailed(f"Could not write field {widget.field_name}",
                                   field_name=widget.field_name, cause=e)

    @staticmethod
    def _open(template_bytes: bytes):
        try:
            return fitz.open(stream=template_bytes, filetype='pdf')
        except Exception as e:
            logger.error(f"Template could not be opened: {e}")
            raise RenderFailed("PDF template could not be opened", cause=e)
