from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class DetectionRequest:
    """Bounded buffer plus the optional content-type hint it arrived with."""

    data: bytes
    content_type: Optional[str] = None


@dataclass(frozen=True)
class ResolvedFormat:
    """Normalized check type; mime_type is only set when the classifier ran."""

    check_type: str
    mime_type: Optional[str] = None


@dataclass(frozen=True)
class DelimiterCandidate:
    delimiter: str
    probability: float


@dataclass(frozen=True)
class Occurrence:
    """All matches of one row. Offsets are [start, end) pairs per field."""

    line: int
    offsets: Tuple[Tuple[int, int], ...] = ()
    xpath: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'Line': self.line,
            'Offsets': [[start, end] for start, end in self.offsets],
            'XPath': self.xpath,
        }


@dataclass(frozen=True)
class DetectionReport:
    contains_dt: bool
    mime_type: Optional[str]
    check_type: Optional[str]
    read: int
    occurrences: Tuple[Occurrence, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        # "Occurence" is the established wire name
        return {
            'ContainsDT': self.contains_dt,
            'MimeType': self.mime_type,
            'CheckType': self.check_type,
            'Read': self.read,
            'Occurence': [o.to_dict() for o in self.occurrences],
        }
