"""
Core modules of the datetime check service.

This package contains the detection engine and the adapters it relies on, so
it can be used by both the HTTP endpoint and the command line.
"""

from .exceptions import (
    ClassificationError,
    DateTimeCheckError,
    DelimiterProbeError,
    RecordParseError,
)
from .models import DelimiterCandidate, DetectionReport, DetectionRequest, Occurrence, ResolvedFormat
from .csv_delimiter_prober import CSVDelimiterProber
from .datetime_checker import (
    CHECK_UP_TO,
    DateTimeChecker,
    contains_datetime_bytes,
    contains_datetime_reader,
)

__all__ = [
    'CHECK_UP_TO',
    'CSVDelimiterProber',
    'ClassificationError',
    'DateTimeChecker',
    'DateTimeCheckError',
    'DelimiterCandidate',
    'DelimiterProbeError',
    'DetectionReport',
    'DetectionRequest',
    'Occurrence',
    'RecordParseError',
    'ResolvedFormat',
    'contains_datetime_bytes',
    'contains_datetime_reader',
]
