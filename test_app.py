"""
Tests for the HTTP endpoint.
"""
import pytest

from app import create_app
from core.exceptions import ClassificationError

EXAMPLE_CSV = b"Name,Datum\nAlice,12.03.2020\nBob,not-a-date\n"


@pytest.fixture
def client_for(make_checker):
    def _client(enable_cors=False, **checker_kwargs):
        checker = make_checker(**checker_kwargs)
        app = create_app(checker=checker, enable_cors=enable_cors)
        app.config["TESTING"] = True
        return app.test_client(), checker

    return _client


def test_checkdatetime_with_content_type(client_for):
    client, checker = client_for()
    response = client.put("/checkdatetime", data=EXAMPLE_CSV, headers={"Content-Type": "text/csv"})

    assert response.status_code == 200
    report = response.get_json()["Response"]["Occurence"]
    assert report["ContainsDT"] is True
    assert report["MimeType"] is None
    assert report["CheckType"] == "csv"
    assert report["Read"] == 3
    assert report["Occurence"] == [
        {"Line": 1, "Offsets": [[0, 5]], "XPath": None},
        {"Line": 2, "Offsets": [[0, 10]], "XPath": None},
    ]
    assert checker.classifier.calls == []


def test_checkdatetime_autodetects_without_content_type(client_for):
    client, checker = client_for(mime_type="text/plain; charset=us-ascii")
    response = client.put("/checkdatetime", data=EXAMPLE_CSV)

    assert response.status_code == 200
    report = response.get_json()["Response"]["Occurence"]
    assert report["MimeType"] == "text/plain; charset=us-ascii"
    assert checker.classifier.calls == [EXAMPLE_CSV]


def test_negative_result_is_not_an_error(client_for):
    client, _ = client_for()
    response = client.put("/checkdatetime", data=b"", headers={"Content-Type": "application/octet-stream"})

    assert response.status_code == 200
    report = response.get_json()["Response"]["Occurence"]
    assert report == {
        "ContainsDT": False,
        "MimeType": None,
        "CheckType": "application/octet-stream",
        "Read": 0,
        "Occurence": [],
    }


def test_classification_failure_is_an_error(client_for):
    client, _ = client_for(error=ClassificationError("cannot classify"))
    response = client.put("/checkdatetime", data=b"\x00\x01\x02")

    assert response.status_code == 422
    assert "cannot classify" in response.get_json()["error"]


def test_body_is_bounded(client_for):
    client, _ = client_for(limit=10)
    response = client.put("/checkdatetime", data=b"Datum\n" + b"12.03.2020\n" * 100, headers={"Content-Type": "text/csv"})

    report = response.get_json()["Response"]["Occurence"]
    assert report["Read"] == 2
    assert [o["Line"] for o in report["Occurence"]] == [1]


def test_only_put_is_routed(client_for):
    client, _ = client_for()
    assert client.post("/checkdatetime", data=EXAMPLE_CSV).status_code == 405


def test_cors_headers(client_for):
    client, _ = client_for(enable_cors=True)
    preflight = client.options("/checkdatetime", headers={"Origin": "http://example.org"})

    assert preflight.status_code == 200
    assert preflight.headers["Access-Control-Allow-Origin"] == "http://example.org"
    assert preflight.headers["Access-Control-Allow-Methods"] == "PUT"
    assert preflight.headers["Access-Control-Allow-Headers"] == "Content-Type, Accept"

    response = client.put("/checkdatetime", data=EXAMPLE_CSV, headers={"Content-Type": "text/csv"})
    assert response.headers["Access-Control-Expose-Headers"] == "X-My-Header"


def test_no_cors_headers_by_default(client_for):
    client, _ = client_for()
    response = client.put("/checkdatetime", data=EXAMPLE_CSV, headers={"Content-Type": "text/csv"})
    assert "Access-Control-Allow-Origin" not in response.headers


def test_health(client_for):
    client, _ = client_for()
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json()["status"] == "healthy"


@pytest.mark.parametrize("value", ["abc", "0", "-5"])
def test_invalid_max_bytes_fails_at_startup(monkeypatch, value):
    monkeypatch.setenv("DTCHECK_MAX_BYTES", value)
    with pytest.raises(ValueError, match="DTCHECK_MAX_BYTES"):
        create_app()


def test_max_bytes_is_read_once_at_startup(monkeypatch):
    monkeypatch.setenv("DTCHECK_MAX_BYTES", "10")
    app = create_app()
    monkeypatch.setenv("DTCHECK_MAX_BYTES", "abc")

    assert app.config["DTCHECK_MAX_BYTES"] == 10
    assert create_app(max_bytes=42).config["DTCHECK_MAX_BYTES"] == 42


def test_default_checker_uses_configured_max_bytes(monkeypatch, stub_classifier):
    monkeypatch.setattr("core.mime_classifier.MimeClassifier", lambda: stub_classifier)
    app = create_app(max_bytes=6)
    client = app.test_client()

    response = client.put("/checkdatetime", data=b"Datum\n12.03.2020\n", headers={"Content-Type": "text/csv"})

    assert response.status_code == 200
    assert response.get_json()["Response"]["Occurence"]["Read"] == 1
    assert app.extensions["dtcheck"].limit == 6
