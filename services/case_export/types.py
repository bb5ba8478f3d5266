"""
Case Export Type Definitions

Dataclasses passed between the normalization and rendering stages.
Form schemas are immutable after loading; normalized cases and rendered
documents are built fresh per request and never persisted.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


PDF_MIMETYPE = 'application/pdf'
DOCX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.wordprocessingml.document'
CSV_MIMETYPE = 'text/csv'


class FieldKind(Enum):
    """Kinds of PDF form widgets the intake template declares."""
    TEXT = "text"
    CHECKBOX = "checkbox"


@dataclass(frozen=True)
class FormFieldSpec:
    """
    One declared form field.

    Attributes:
        name: Widget name, identical to a canonical case field name
        kind: Text box or checkbox
        page: Zero-based page index
        rect: (x0, y0, x1, y1) in PDF points, top-left origin
    """
    name: str
    kind: FieldKind
    page: int
    rect: Tuple[float, float, float, float]

    @property
    def is_checkbox(self) -> bool:
        return self.kind == FieldKind.CHECKBOX


@dataclass(frozen=True)
class FormSchema:
    """
    The declared field set of a fillable template.

    The same schema drives provisioning (which widgets to create) and
    filling (which widgets to look for).
    """
    name: str
    fields: Tuple[FormFieldSpec, ...]

    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def get(self, name: str) -> Optional[FormFieldSpec]:
        """Get a field spec by widget name."""
        return next((f for f in self.fields if f.name == name), None)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FormSchema':
        """
        Create a FormSchema from a parsed YAML dict.

        Assumes the dict was already validated by the loader.
        """
        fields = []
        for field_data in data.get('fields', []):
            fields.append(FormFieldSpec(
                name=field_data['name'],
                kind=FieldKind(field_data.get('kind', 'text')),
                page=int(field_data.get('page', 0)),
                rect=tuple(float(v) for v in field_data['rect'])
            ))

        return cls(name=data.get('name', 'form'), fields=tuple(fields))


@dataclass
class NormalizedCase:
    """
    A case with every canonical field resolved to one value.

    Attributes:
        fields: Canonical field name -> str, bool or None
        children: Collection key -> list of normalized row dicts
        case_id: Record identifier, when the case came from storage
        last_updated: YYYY-MM-DD (or the raw value when unparseable)
        checklist: Ordered {text, timestamp} entries
        name: Stored display name, when the record carries one
    """
    fields: Dict[str, Any] = field(default_factory=dict)
    children: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    case_id: Optional[Any] = None
    last_updated: Optional[str] = None
    checklist: List[Dict[str, Any]] = field(default_factory=list)
    name: Optional[str] = None

    def get(self, name: str, default: Any = None) -> Any:
        value = self.fields.get(name)
        return default if value is None else value

    def rows(self, collection: str) -> List[Dict[str, Any]]:
        """Get the normalized rows of a child collection (possibly empty)."""
        return self.children.get(collection, [])

    @property
    def full_name(self) -> str:
        """First, middle and last name joined by single spaces."""
        parts = [self.fields.get(k) for k in ('first_name', 'middle_name', 'last_name')]
        return ' '.join(str(p).strip() for p in parts if p)

    @property
    def display_name(self) -> str:
        """Full name, falling back to the stored name, nickname, then case id."""
        if self.full_name:
            return self.full_name
        if self.name:
            return self.name
        if self.fields.get('nickname'):
            return str(self.fields['nickname'])
        if self.case_id is not None:
            return f"Case {self.case_id}"
        return "Unnamed case"


@dataclass(frozen=True)
class PageOptions:
    """Page setup for headless PDF rendering."""
    format: str = 'A4'
    landscape: bool = False
    margin: Dict[str, str] = field(default_factory=lambda: {
        'top': '16mm',
        'right': '14mm',
        'bottom': '18mm',
        'left': '14mm',
    })
    display_header_footer: bool = True
    header_title: str = 'Case Report'


@dataclass
class RenderedDocument:
    """A finished artifact ready to be sent as an attachment."""
    content: bytes
    mimetype: str
    filename: str

    @property
    def size(self) -> int:
        return len(self.content)


class ProvisionStatus(Enum):
    """Outcome of a template provisioning attempt."""
    EXISTS = "exists"
    CREATED = "created"
    BASE_MISSING = "base_missing"
    FAILED = "failed"


@dataclass(frozen=True)
class ProvisionResult:
    """
    Result of TemplateProvisioner.ensure_fillable().

    `error` is only set for FAILED.
    """
    status: ProvisionStatus
    path: str
    error: Optional[Exception] = None

    @property
    def is_usable(self) -> bool:
        """True when a fillable template is on disk after the attempt."""
        return self.status in (ProvisionStatus.EXISTS, ProvisionStatus.CREATED)


@dataclass(frozen=True)
class CaseBatch:
    """Raw case records in caller order, plus the batch rendering mode."""
    records: Tuple[Dict[str, Any], ...]
    list_only: bool = False

    def __len__(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class SectionSpec:
    """A titled group of (field, label) pairs rendered as key/value rows."""
    title: str
    fields: Tuple[Tuple[str, str], ...]


@dataclass(frozen=True)
class ChildTableSpec:
    """
    Rendering layout of one child collection.

    Attributes:
        key: Collection key in NormalizedCase.children
        title: Section heading
        columns: Ordered (column, header) pairs
        min_rows: Rows a printed form always shows (padded with blanks)
    """
    key: str
    title: str
    columns: Tuple[Tuple[str, str], ...]
    min_rows: int = 3

    def column_names(self) -> List[str]:
        return [name for name, _ in self.columns]

    def headers(self) -> List[str]:
        return [header for _, header in self.columns]
