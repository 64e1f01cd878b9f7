"""
Case Data Model
Structures shared by extraction, review and document composition
"""

from dataclasses import dataclass, field, asdict
from typing import List, Optional, Union


RECURSO = 'RECURSO'
RESPOSTA = 'RESPOSTA'
CONCLUSION_TYPES = (RECURSO, RESPOSTA)


def text_field(data: dict, key: str, default: str = '') -> str:
    """A text field of client JSON; null counts as empty, other non-strings are rejected."""
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string")
    return value


@dataclass
class ConclusionItem:
    """Conclusions of one appeal (RECURSO) or of one response (RESPOSTA)."""
    type: str
    source: str
    content: str

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'ConclusionItem':
        item_type = text_field(data, 'type', RECURSO).strip().upper()
        if item_type not in CONCLUSION_TYPES:
            item_type = RECURSO
        return cls(
            type=item_type,
            source=text_field(data, 'source'),
            content=text_field(data, 'content'),
        )


@dataclass
class CaseData:
    """Everything extracted from the uploaded documents, editable before export."""
    report: str
    proven_facts: str
    unproven_facts: str
    decision_first_instance: str
    appeal_conclusions: List[ConclusionItem] = field(default_factory=list)

    def to_dict(self) -> dict:
        # camelCase keys are what the review client sends back
        return {
            'report': self.report,
            'provenFacts': self.proven_facts,
            'unprovenFacts': self.unproven_facts,
            'decisionFirstInstance': self.decision_first_instance,
            'appealConclusions': [c.to_dict() for c in self.appeal_conclusions],
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'CaseData':
        if not isinstance(data, dict):
            raise ValueError("Case data must be an object")

        conclusions = data.get('appealConclusions') or []
        if not isinstance(conclusions, list):
            raise ValueError("appealConclusions must be a list")
        for item in conclusions:
            if not isinstance(item, dict):
                raise ValueError("Each conclusion must be an object")

        return cls(
            report=text_field(data, 'report'),
            proven_facts=text_field(data, 'provenFacts'),
            unproven_facts=text_field(data, 'unprovenFacts'),
            decision_first_instance=text_field(data, 'decisionFirstInstance'),
            appeal_conclusions=[ConclusionItem.from_dict(c) for c in conclusions],
        )


@dataclass(frozen=True)
class UploadedDocument:
    path: str
    filename: str
    mime_type: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class AppealPair:
    """An appeal file and its (optional) response, as uploaded together."""
    id: str
    appeal: Optional[UploadedDocument] = None
    response: Optional[UploadedDocument] = None

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'appeal': self.appeal.to_dict() if self.appeal else None,
            'response': self.response.to_dict() if self.response else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'AppealPair':
        appeal = data.get('appeal')
        response = data.get('response')
        return cls(
            id=str(data['id']),
            appeal=UploadedDocument(**appeal) if appeal else None,
            response=UploadedDocument(**response) if response else None,
        )


@dataclass(frozen=True)
class DocumentPart:
    """One part of the model request: a binary document or plain text."""
    filename: str
    mime_type: str
    data: Optional[bytes] = None
    text: Optional[str] = None

    @property
    def is_binary(self) -> bool:
        return self.data is not None


# ---------------------------------------------------------------------------
# Block elements produced by the content segmenter
# ---------------------------------------------------------------------------

@dataclass
class Paragraph:
    text: str
    is_list_item: bool = False


@dataclass
class TableBlock:
    # Rows are not padded: each row keeps its own cell count
    rows: List[List[str]] = field(default_factory=list)


BlockElement = Union[Paragraph, TableBlock]


# ---------------------------------------------------------------------------
# Composer output
# ---------------------------------------------------------------------------

ALIGN_LEFT = 'left'
ALIGN_CENTER = 'center'
ALIGN_JUSTIFY = 'justify'


@dataclass(frozen=True)
class BlockStyle:
    heading_level: Optional[int] = None
    bold: bool = False
    italic: bool = False
    alignment: str = ALIGN_LEFT
    left_indent_cm: float = 0.0
    line_spacing: Optional[float] = None
    space_before_pt: int = 0
    space_after_pt: int = 0
    keep_with_next: bool = False
    color: Optional[str] = None


@dataclass
class StyledBlock:
    block: BlockElement
    style: BlockStyle = field(default_factory=BlockStyle)

    @property
    def is_table(self) -> bool:
        return isinstance(self.block, TableBlock)

    @property
    def is_heading(self) -> bool:
        return self.style.heading_level is not None
