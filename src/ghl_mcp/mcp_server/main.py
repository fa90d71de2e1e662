"""Main entry point for MCP Server.

This script can be used to run the MCP server directly:

    python -m ghl_mcp.mcp_server.main
"""

import asyncio
import sys

from .server import create_server


async def main() -> None:
    """Main entry point for running the MCP server."""
    try:
        server = create_server()
    except ValueError as e:
        print(f"Failed to start server: {e}", file=sys.stderr)
        sys.exit(1)
    await server.start()


def run() -> None:
    """Console script entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nServer interrupted by user", file=sys.stderr)
        sys.exit(0)


if __name__ == "__main__":
    run()
