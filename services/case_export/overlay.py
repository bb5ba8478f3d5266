"""
Overlay Fallback Renderer

Paints case values directly onto a PDF when the template has no form
fields to fill: label/value pairs in a fixed two-column grid, then
narrative fields as bordered text boxes. Empty fields are skipped.
"""

import logging
from typing import List, Optional, Tuple

import fitz  # PyMuPDF

from .schema import KEY_VALUE_SECTIONS, NARRATIVE_FIELDS, PARENT_SECTIONS
from .transforms import transform_yes_no
from .types import NormalizedCase

logger = logging.getLogger(__name__)

LEFT_X = 40
RIGHT_X = 310
COLUMN_WIDTH = 250
LINE_STEP = 18
FONT_NAME = 'helv'
FONT_SIZE = 9
TOP_MARGIN = 50
BOTTOM_MARGIN = 40
BOX_PADDING = 4
A4_SIZE = (595, 842)


def text_width(text: str) -> float:
    return fitz.get_text_length(text, fontname=FONT_NAME, fontsize=FONT_SIZE)


def wrap_text(text: str, max_width: float) -> List[str]:
    """
    Greedy word wrap measured in Helvetica 9pt.

    Words are packed while the line fits; a word that does not fit
    starts a new line, and a single word wider than the column sits
    alone on its own line. Embedded line breaks are kept.
    """
    lines = []
    for paragraph in str(text).splitlines() or ['']:
        current = ''
        for word in paragraph.split():
            candidate = f"{current} {word}" if current else word
            if current and text_width(candidate) > max_width:
                lines.append(current)
                current = word
            else:
                current = candidate
        lines.append(current)
    return lines


class _PageCursor:
    """Tracks the drawing position and starts new pages on overflow."""

    def __init__(self, doc):
        self.doc = doc
        self.page = doc[0]
        self.y = TOP_MARGIN

    @property
    def bottom(self) -> float:
        return self.page.rect.height - BOTTOM_MARGIN

    def remaining(self) -> float:
        return self.bottom - self.y

    def new_page(self) -> None:
        rect = self.page.rect
        self.page = self.doc.new_page(width=rect.width, height=rect.height)
        self.y = TOP_MARGIN

    def reserve(self, height: float) -> float:
        """Return the top y for a block of `height`, moving to a new page if needed."""
        if height > self.remaining() and self.y > TOP_MARGIN:
            self.new_page()
        top = self.y
        self.y += height
        return top


class OverlayFallbackRenderer:
    """
    Renders a case as text painted over a template (or a blank A4 page).

    Usage:
        pdf_bytes = OverlayFallbackRenderer.render(case, template_bytes)
    """

    @classmethod
    def render(cls, case: NormalizedCase, template_bytes: Optional[bytes] = None) -> bytes:
        if template_bytes:
            doc = fitz.open(stream=template_bytes, filetype='pdf')
        else:
            doc = fitz.open()
        if doc.page_count == 0:
            doc.new_page(width=A4_SIZE[0], height=A4_SIZE[1])

        try:
            cursor = _PageCursor(doc)
            pairs = cls.collect_pairs(case)
            for index in range(0, len(pairs), 2):
                cls._draw_row(cursor, pairs[index:index + 2])

            for label, text in cls.collect_narratives(case):
                cls._draw_narrative(cursor, label, text)

            logger.info(f"Overlay rendered {len(pairs)} field(s) on {doc.page_count} page(s)")
            return doc.tobytes(garbage=3, deflate=True)
        finally:
            doc.close()

    @staticmethod
    def collect_pairs(case: NormalizedCase) -> List[Tuple[str, str]]:
        """Non-empty (label, value) pairs in grid order."""
        pairs = []
        seen = set()
        for section in KEY_VALUE_SECTIONS + PARENT_SECTIONS:
            for name, label in section.fields:
                if name in seen:
                    continue
                seen.add(name)
                value = case.fields.get(name)
                if isinstance(value, bool):
                    value = transform_yes_no(value)
                if value is None or value == '':
                    continue
                pairs.append((label, str(value)))
        return pairs

    @staticmethod
    def collect_narratives(case: NormalizedCase) -> List[Tuple[str, str]]:
        return [
            (label, str(case.fields[name]))
            for name, label in NARRATIVE_FIELDS
            if case.fields.get(name)
        ]

    @staticmethod
    def _draw_row(cursor: _PageCursor, pairs: List[Tuple[str, str]]) -> None:
        columns = [
            (x, wrap_text(f"{label}: {value}", COLUMN_WIDTH))
            for x, (label, value) in zip((LEFT_X, RIGHT_X), pairs)
        ]
        height = LINE_STEP * max(len(lines) for _, lines in columns)
        top = cursor.reserve(height)

        for x, lines in columns:
            for offset, line in enumerate(lines):
                baseline = top + offset * LINE_STEP + FONT_SIZE
                cursor.page.insert_text((x, baseline), line, fontname=FONT_NAME, fontsize=FONT_SIZE)

    @staticmethod
    def _draw_narrative(cursor: _PageCursor, label: str, text: str) -> None:
        box_width = RIGHT_X + COLUMN_WIDTH - LEFT_X
        lines = wrap_text(text, box_width - 2 * BOX_PADDING)

        # Keep the label with at least the first line of its box
        top = cursor.reserve(LINE_STEP)
        if cursor.remaining() < LINE_STEP + 2 * BOX_PADDING:
            cursor.new_page()
            top = cursor.reserve(LINE_STEP)
        cursor.page.insert_text((LEFT_X, top + FONT_SIZE), f"{label}:", fontname=FONT_NAME, fontsize=FONT_SIZE)

        while lines:
            fit = int((cursor.remaining() - 2 * BOX_PADDING) // LINE_STEP)
            if fit <= 0:
                if cursor.y > TOP_MARGIN:
                    cursor.new_page()
                    continue
                fit = 1
            chunk, lines = lines[:fit], lines[fit:]

            height = len(chunk) * LINE_STEP + 2 * BOX_PADDING
            top = cursor.reserve(height)
            rect = fitz.Rect(LEFT_X, top, LEFT_X + box_width, top + height)
            cursor.page.draw_rect(rect, color=(0.6, 0.6, 0.6), width=0.5)

            for offset, line in enumerate(chunk):
                baseline = top + BOX_PADDING + offset * LINE_STEP + FONT_SIZE
                cursor.page.insert_text((LEFT_X + BOX_PADDING, baseline), line,
                                        fontname=FONT_NAME, fontsize=FONT_SIZE)

        cursor.y += LINE_STEP / 2
