"""
HTTP entry point for the shelter visit booking engine.

Serves the visitor and staff API with uvicorn on the configured host/port.

Usage:
    API server:         python main.py
    Override binding:   python main.py --host 0.0.0.0 --port 9000
"""

import argparse
import logging

from pawvisit.config import settings

logger = logging.getLogger(__name__)


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the pawvisit booking API.")
    parser.add_argument("--host", default=settings.api.host, help="Interface to bind.")
    parser.add_argument("--port", type=int, default=settings.api.port, help="Port to bind.")
    return parser.parse_args()


def main() -> None:
    import uvicorn

    from pawvisit.api import create_app

    args = _parse_args()
    logger.info("Starting %s on %s:%d", settings.app_name, args.host, args.port)
    uvicorn.run(create_app(), host=args.host, port=args.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
