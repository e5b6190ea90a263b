"""
Entry point for running strava_mcp as a module.

Usage:
    python -m strava_mcp                    # Run with stdio transport
    python -m strava_mcp --http             # Run with HTTP transport
    python -m strava_mcp --http --port 9000 # Run HTTP on custom port
"""

import argparse
import logging

from strava_mcp import run


def main():
    parser = argparse.ArgumentParser(
        description="Strava MCP Server - OAuth-authenticated Strava API tools"
    )
    parser.add_argument(
        "--http",
        action="store_true",
        help="Use http transport instead of stdio"
    )
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host to bind to (default: 0.0.0.0)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8081,
        help="Port for HTTP transport (default: 8081)"
    )

    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    run("http" if args.http else "stdio", args.host, args.port)


if __name__ == "__main__":
    main()
