#!/usr/bin/env python3
"""
RESTful service to check for the existence of datetime information in a data stream
"""
import atexit
import logging
import os
import threading
from datetime import datetime

from flask import Flask, jsonify, request

from core.datetime_checker import CHECK_UP_TO, DateTimeChecker
from core.exceptions import DateTimeCheckError

logger = logging.getLogger(__name__)

CORS_ALLOWED_HEADERS = 'Content-Type, Accept'
CORS_ALLOWED_METHODS = 'PUT'
CORS_EXPOSE_HEADERS = 'X-My-Header'


def max_bytes_from_env() -> int:
    raw = os.getenv('DTCHECK_MAX_BYTES', str(CHECK_UP_TO))
    try:
        max_bytes = int(raw)
    except ValueError:
        raise ValueError(f"DTCHECK_MAX_BYTES must be an integer, got {raw!r}") from None
    if max_bytes <= 0:
        raise ValueError(f"DTCHECK_MAX_BYTES must be positive, got {max_bytes}")
    return max_bytes


def create_app(checker=None, enable_cors=None, max_bytes=None):
    """Build the Flask app.

    Without an explicit checker one is opened on first use and kept for the
    life of the process, so the libmagic handle is not reopened per request.
    """
    app = Flask(__name__)
    if enable_cors is None:
        enable_cors = bool(os.getenv('ENABLE_CORS'))
    app.config['ENABLE_CORS'] = enable_cors
    app.config['DTCHECK_MAX_BYTES'] = max_bytes if max_bytes is not None else max_bytes_from_env()

    checker_lock = threading.Lock()
    app.extensions['dtcheck'] = checker

    def get_checker():
        with checker_lock:
            if app.extensions['dtcheck'] is None:
                default_checker = DateTimeChecker(limit=app.config['DTCHECK_MAX_BYTES'])
                atexit.register(default_checker.close)
                app.extensions['dtcheck'] = default_checker
            return app.extensions['dtcheck']

    @app.after_request
    def add_cors_headers(response):
        if app.config['ENABLE_CORS']:
            response.headers['Access-Control-Allow-Origin'] = request.headers.get('Origin', '*')
            response.headers['Access-Control-Allow-Headers'] = CORS_ALLOWED_HEADERS
            response.headers['Access-Control-Allow-Methods'] = CORS_ALLOWED_METHODS
            response.headers['Access-Control-Expose-Headers'] = CORS_EXPOSE_HEADERS
        return response

    @app.route('/checkdatetime', methods=['PUT'])
    def checkdatetime():
        """Check a request body for datetime information.

        The Content-Type header is used as the format hint. If it is missing or
        empty, the content type is autodetected.
        """
        content_type = request.headers.get('Content-Type')
        try:
            report = get_checker().contains_datetime_stream(request.stream, content_type)
        except DateTimeCheckError as e:
            logger.warning(f"Datetime check failed: {e}")
            return jsonify({'error': str(e)}), 422
        except Exception as e:
            logger.exception("Unexpected error during datetime check")
            return jsonify({'error': f'Check failed: {str(e)}'}), 500

        return jsonify({'Response': {'Occurence': report.to_dict()}})

    @app.route('/health')
    def health():
        return jsonify({'status': 'healthy', 'timestamp': datetime.now().isoformat()})

    return app


if __name__ == '__main__':
    from run_webapp import main

    main()
