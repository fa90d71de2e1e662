#!/usr/bin/env python3
"""Convenience script to run the MCP server without installing it.

Usage:
    GHL_API_KEY=... GHL_LOCATION_ID=... python run_mcp_server.py
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from ghl_mcp.mcp_server.main import run


if __name__ == "__main__":
    run()
