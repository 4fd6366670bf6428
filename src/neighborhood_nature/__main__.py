"""Command-line entry point: ``python -m neighborhood_nature``."""

from __future__ import annotations

import argparse
from typing import Any, Dict, List, Optional

from .config import NatureConfig
from .server import create_server


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Run the Neighborhood Nature web application")
    ap.add_argument("--host", help="Interface to bind (default from config)")
    ap.add_argument("--port", type=int, help="Port to listen on (default from config)")
    ap.add_argument("--config", help="Path to a JSON config file")
    ap.add_argument("--database", help="SQLite database path")
    ap.add_argument("--observation-url", help="Observation API endpoint")
    ap.add_argument("--no-autocorrect", action="store_true", help="Disable feature autocorrect")
    ap.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = ap.parse_args(argv)

    overrides: Dict[str, Any] = {}
    if args.host:
        overrides['server_host'] = args.host
    if args.port is not None:
        overrides['server_port'] = args.port
    if args.database:
        overrides['database_path'] = args.database
    if args.observation_url:
        overrides['observation_api_url'] = args.observation_url
    if args.no_autocorrect:
        overrides['autocorrect_enabled'] = False
    if args.debug:
        overrides['debug_mode'] = True

    config = NatureConfig(config_file=args.config, overrides=overrides)
    server = create_server(config)
    server.serve_forever()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
