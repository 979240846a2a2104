"""Entry point for the netsift MCP server.

Run with: python -m netsift
Or via fastmcp: fastmcp run netsift.server:mcp

HTTP transport for remote access:
    python -m netsift --http --port 9000
"""

from __future__ import annotations

import argparse

from netsift.config import get_log_level
from netsift.utils.logging import setup_logging


def main() -> None:
    """Run the MCP server."""
    parser = argparse.ArgumentParser(description="netsift MCP server")
    parser.add_argument(
        "--http",
        action="store_true",
        help="Use HTTP transport instead of stdio (for remote access)",
    )
    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to bind HTTP server (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=9000,
        help="Port for HTTP transport (default: 9000)",
    )
    args = parser.parse_args()

    setup_logging(get_log_level())

    from netsift.server import mcp

    if args.http:
        mcp.run(transport="http", host=args.host, port=args.port)
    else:
        mcp.run()


if __name__ == "__main__":
    main()
