#!/usr/bin/env python3
"""
Email Reminder - Main Entry Point

Runs the Flask web application. The reminder dispatcher runs inside the
same process unless DISPATCHER_ENABLED=false or --no-dispatcher is given.

Usage:
    python main.py
"""

import argparse
import dataclasses
import logging

from config.logging_config import setup_logging
from config.settings import load_settings

logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Email Reminder")

    parser.add_argument("--host", default=None, help="Web app host (default: HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Web app port (default: PORT or 3000)")
    parser.add_argument("--debug", action="store_true", help="Enable debug mode")
    parser.add_argument("--no-dispatcher", action="store_true",
                        help="Don't run the reminder dispatcher in this process")

    args = parser.parse_args()

    settings = load_settings()
    overrides = {}
    if args.host:
        overrides['host'] = args.host
    if args.port:
        overrides['port'] = args.port
    if args.no_dispatcher:
        overrides['dispatcher_enabled'] = False
    settings = dataclasses.replace(settings, **overrides)

    setup_logging(settings.log_level, settings.log_file)

    from webapp.app import create_app
    app = create_app(settings)
    logger.info(f"Server started on http://{settings.host}:{settings.port}")
    logger.info(f"Dispatcher: {'ON' if settings.dispatcher_enabled else 'OFF'}")
    # The reloader would start a second dispatcher in the child process
    app.run(host=settings.host, port=settings.port, debug=args.debug, use_reloader=False)

if __name__ == "__main__":
    main()
