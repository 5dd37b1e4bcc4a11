class DateTimeCheckError(Exception):
    """Base error for a failed datetime check."""


class ClassificationError(DateTimeCheckError):
    """The content type of the buffer could not be determined."""


class DelimiterProbeError(DateTimeCheckError):
    """No field delimiter could be probed for a CSV buffer."""


class RecordParseError(DateTimeCheckError):
    """The CSV records could not be read."""
