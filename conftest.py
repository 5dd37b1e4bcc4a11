import pytest

from core.datetime_checker import CHECK_UP_TO, DateTimeChecker


class StubClassifier:
    """Stands in for libmagic: returns a fixed MIME type and records calls."""

    def __init__(self, mime_type="text/plain", error=None):
        self.mime_type = mime_type
        self.error = error
        self.calls = []
        self.closed = False

    def classify(self, data):
        self.calls.append(data)
        if self.error is not None:
            raise self.error
        return self.mime_type

    def close(self):
        self.closed = True


@pytest.fixture
def stub_classifier():
    return StubClassifier()


@pytest.fixture
def make_checker():
    def _make(limit=CHECK_UP_TO, mime_type="text/plain", error=None, prober=None):
        classifier = StubClassifier(mime_type=mime_type, error=error)
        return DateTimeChecker(limit=limit, classifier=classifier, prober=prober)

    return _make
