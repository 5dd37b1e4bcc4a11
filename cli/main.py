import argparse
import json
import logging
import os
import sys

import pandas as pd
import requests
from dotenv import load_dotenv

from core.datetime_checker import CHECK_UP_TO, DateTimeChecker, read_bounded
from core.exceptions import DateTimeCheckError

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_URL = "http://localhost:5000/checkdatetime"


def occurrences_frame(report) -> pd.DataFrame:
    """One row per matched offset: line, start, end."""
    rows = [
        {"line": occ.line, "start": start, "end": end}
        for occ in report.occurrences
        for start, end in occ.offsets
    ]
    return pd.DataFrame(rows, columns=["line", "start", "end"])


def print_report(report):
    print("Datetime check")
    print(f"- Check type: {report.check_type}")
    if report.mime_type:
        print(f"- MIME type: {report.mime_type} (autodetected)")
    print(f"- Records read: {report.read}")
    print(f"- Contains datetime: {'yes' if report.contains_dt else 'no'}")
    if report.occurrences:
        print("- Occurrences:")
        for occ in report.occurrences:
            spans = ", ".join(f"[{start}, {end}]" for start, end in occ.offsets)
            print(f"  line {occ.line}: {spans}")


def cmd_check(path: str, content_type=None, max_bytes: int = CHECK_UP_TO, as_json: bool = False, output=None) -> int:
    try:
        with DateTimeChecker(limit=max_bytes) as checker, open(path, "rb") as f:
            report = checker.contains_datetime_stream(f, content_type)
    except FileNotFoundError:
        print(f"File not found: {path}")
        return 1
    except (DateTimeCheckError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    if as_json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print_report(report)

    if output:
        occurrences_frame(report).to_csv(output, index=False)
        logger.info(f"Occurrences saved to {output}")
    return 0


def cmd_remote(path: str, url: str, content_type=None, max_bytes: int = CHECK_UP_TO) -> int:
    try:
        with open(path, "rb") as f:
            data = read_bounded(f, max_bytes)
    except FileNotFoundError:
        print(f"File not found: {path}")
        return 1

    headers = {"Content-Type": content_type} if content_type else {}
    logger.debug(f"PUT {len(data)} bytes to {url}")
    try:
        response = requests.put(url, data=data, headers=headers, timeout=30)
    except requests.exceptions.RequestException as e:
        print(f"Error: cannot reach {url}: {e}")
        return 1

    try:
        payload = response.json()
    except ValueError:
        print(f"Error: unexpected response ({response.status_code}): {response.text[:200]}")
        return 1

    if not response.ok:
        print(f"Error: {payload.get('error', response.reason)}")
        return 1

    print(json.dumps(payload, indent=2))
    return 0


def cmd_serve(host: str, port: int) -> int:
    from app import create_app

    try:
        app = create_app()
    except ValueError as e:
        print(f"Error: {e}")
        return 1
    app.run(host=host, port=port)
    return 0


def main(argv=None) -> int:
    # Load environment variables (DTCHECK_MAX_BYTES, DTCHECK_URL, PORT, etc.)
    load_dotenv()
    try:
        default_max_bytes = int(os.getenv("DTCHECK_MAX_BYTES", CHECK_UP_TO))
    except ValueError:
        print(f"Error: DTCHECK_MAX_BYTES must be an integer, got {os.getenv('DTCHECK_MAX_BYTES')!r}")
        return 1

    parser = argparse.ArgumentParser(description="Check data for datetime information")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="cmd")

    p_check = sub.add_parser("check", help="Check a local file")
    p_check.add_argument("path", help="Path to the data file")
    p_check.add_argument("--content-type", help="Content type hint (autodetected if omitted)")
    p_check.add_argument("--max-bytes", type=int, default=default_max_bytes, help=f"Bytes to inspect (default {default_max_bytes})")
    p_check.add_argument("--json", action="store_true", help="Emit the report as JSON")
    p_check.add_argument("--output", help="Optional path to save occurrence offsets as CSV")

    p_remote = sub.add_parser("remote", help="Check a local file with a running service")
    p_remote.add_argument("path", help="Path to the data file")
    p_remote.add_argument("--url", default=os.getenv("DTCHECK_URL", DEFAULT_SERVICE_URL), help="Service endpoint URL")
    p_remote.add_argument("--content-type", help="Content type hint (autodetected by the service if omitted)")
    p_remote.add_argument("--max-bytes", type=int, default=default_max_bytes, help="Bytes to send")

    p_serve = sub.add_parser("serve", help="Run the HTTP service")
    p_serve.add_argument("--host", default=os.getenv("HOSTNAME") or "0.0.0.0", help="Interface to bind")
    p_serve.add_argument("--port", type=int, default=int(os.getenv("PORT", 5000)), help="Port to listen on")

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(levelname)s %(message)s")

    if args.cmd == "check":
        return cmd_check(args.path, args.content_type, args.max_bytes, args.json, args.output)
    if args.cmd == "remote":
        return cmd_remote(args.path, args.url, args.content_type, args.max_bytes)
    if args.cmd == "serve":
        return cmd_serve(args.host, args.port)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
