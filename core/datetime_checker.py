"""
Detect datetime information in a bounded data buffer.

The buffer is classified (unless a content-type hint is given), normalized to
a check type and, for CSV, parsed record by record. Header cells are matched
against tokens that name a date or time, data cells against date/time shaped
values.
"""
import csv
import io
import logging
import re
from typing import BinaryIO, Iterator, List, Optional, Sequence, Tuple

from core.csv_delimiter_prober import CSVDelimiterProber, decode_buffer
from core.exceptions import DelimiterProbeError, RecordParseError
from core.models import DetectionReport, DetectionRequest, Occurrence, ResolvedFormat

logger = logging.getLogger(__name__)

# Default number of bytes inspected per check
CHECK_UP_TO = 8096

CSV_CHECK_TYPE = 'csv'

METADATA_DATETIME = re.compile(r'datum|zeit|datetime|timestamp', re.IGNORECASE)
VALUE_DATETIME = re.compile(
    r'[0-9]{1,2}\.[0-9]{1,2}\.[0-9]{4}|[0-9]{4}-[0-9]{1,2}|[0-9]{2}:[0-9]{2}'
    r'|jän|jan|feb|märz|apr|mai|jun|jul|aug|sep|okt|nov|dez',
    re.IGNORECASE,
)


def normalize_check_type(raw_type: str) -> str:
    """Map a raw MIME string onto the check type used to scan it."""
    check_type = raw_type.lower()
    if 'csv' in check_type or 'text' in check_type:
        return CSV_CHECK_TYPE
    return check_type


def read_bounded(stream: BinaryIO, limit: int) -> bytes:
    """Read at most ``limit`` bytes; fewer if the stream ends first."""
    chunks = []
    remaining = limit
    while remaining > 0:
        chunk = stream.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b''.join(chunks)


def scan_record(index: int, fields: Sequence[str]) -> Optional[Occurrence]:
    """Match one record; the first record is the header row."""
    pattern = METADATA_DATETIME if index == 0 else VALUE_DATETIME
    offsets: List[Tuple[int, int]] = []
    for value in fields:
        offsets.extend(m.span() for m in pattern.finditer(value))
    if not offsets:
        return None
    return Occurrence(line=index + 1, offsets=tuple(offsets))


def build_report(resolved: ResolvedFormat, read: int, occurrences: Sequence[Occurrence]) -> DetectionReport:
    occurrences = tuple(occurrences)
    return DetectionReport(
        contains_dt=len(occurrences) > 0,
        mime_type=resolved.mime_type,
        check_type=resolved.check_type,
        read=read,
        occurrences=occurrences,
    )


class DateTimeChecker:
    """Reusable detector holding one MIME classifier for its whole lifetime."""

    def __init__(self, limit: int = CHECK_UP_TO, classifier=None, prober: Optional[CSVDelimiterProber] = None):
        if limit <= 0:
            raise ValueError(f"limit must be positive, got {limit}")
        self.limit = limit
        if classifier is None:
            from core.mime_classifier import MimeClassifier
            classifier = MimeClassifier()
        self.classifier = classifier
        self.prober = prober or CSVDelimiterProber()

    def resolve_format(self, data: bytes, content_type: Optional[str] = None) -> ResolvedFormat:
        if content_type:
            return ResolvedFormat(check_type=normalize_check_type(content_type))

        # No content type given, autodetect
        mime_type = self.classifier.classify(data)
        logger.info(f"Autodetected content type: {mime_type}")
        return ResolvedFormat(check_type=normalize_check_type(mime_type), mime_type=mime_type)

    def scan(self, data: bytes) -> Tuple[int, Tuple[Occurrence, ...]]:
        """Parse a CSV buffer and return (records read, occurrences)."""
        text = decode_buffer(data)
        ranked = self.prober.probe(io.StringIO(text))
        if not ranked:
            raise DelimiterProbeError("Delimiter prober returned no candidates")
        delimiter = ranked[0].delimiter
        logger.debug(f"Using delimiter {delimiter!r} (probability {ranked[0].probability:.2f})")

        records = list(self._records(text, delimiter))
        occurrences = tuple(
            occurrence
            for occurrence in (scan_record(i, fields) for i, fields in enumerate(records))
            if occurrence is not None
        )
        return len(records), occurrences

    def check(self, request: DetectionRequest) -> DetectionReport:
        resolved = self.resolve_format(request.data, request.content_type)
        if resolved.check_type != CSV_CHECK_TYPE:
            logger.info(f"Check type {resolved.check_type!r} is not scanned")
            return build_report(resolved, 0, ())

        read, occurrences = self.scan(request.data)
        logger.info(f"Scanned {read} records, {len(occurrences)} with datetime information")
        return build_report(resolved, read, occurrences)

    def contains_datetime_bytes(self, data: bytes, content_type: Optional[str] = None) -> DetectionReport:
        if len(data) > self.limit:
            logger.debug(f"Truncating buffer from {len(data)} to {self.limit} bytes")
            data = data[:self.limit]
        return self.check(DetectionRequest(data=data, content_type=content_type))

    def contains_datetime_stream(self, stream: BinaryIO, content_type: Optional[str] = None) -> DetectionReport:
        data = read_bounded(stream, self.limit)
        return self.check(DetectionRequest(data=data, content_type=content_type))

    def close(self):
        close = getattr(self.classifier, 'close', None)
        if close is not None:
            close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @staticmethod
    def _records(text: str, delimiter: str) -> Iterator[List[str]]:
        reader = csv.reader(io.StringIO(text, newline=''), delimiter=delimiter, strict=False)
        try:
            for record in reader:
                # blank lines carry no fields and are not counted
                if record:
                    yield record
        except csv.Error as e:
            logger.error(f"CSV parsing failed at line {reader.line_num}: {e}")
            raise RecordParseError(f"line {reader.line_num}: {e}") from e


def contains_datetime_bytes(data: bytes, content_type: Optional[str] = None) -> DetectionReport:
    """One-shot check that opens and closes its own classifier."""
    with DateTimeChecker() as checker:
        return checker.contains_datetime_bytes(data, content_type)


def contains_datetime_reader(stream: BinaryIO, content_type: Optional[str] = None) -> DetectionReport:
    with DateTimeChecker() as checker:
        return checker.contains_datetime_stream(stream, content_type)
