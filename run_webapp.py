#!/usr/bin/env python3
"""
Simple script to run the datetime check service
"""
import logging
import os

from dotenv import load_dotenv


def main():
    load_dotenv()
    logging.basicConfig(
        level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from app import create_app

    port = int(os.getenv('PORT', 5000))
    hostname = os.getenv('HOSTNAME', '')
    app = create_app()

    print("🚀 Starting datetime check service")
    print(f"📊 PUT data to: http://{hostname or 'localhost'}:{port}/checkdatetime")
    if app.config['ENABLE_CORS']:
        print("⚠️  CORS enabled for all origins")
    print("🔧 Press Ctrl+C to stop the server\n")

    app.run(host=hostname or '0.0.0.0', port=port)


if __name__ == '__main__':
    main()
