"""
Configure the FastMCP server instance.

This module creates a shared `FastMCP` server named
``youtube_transcript``, configures logging and imports tool modules so
that their decorated functions are registered.

Logging goes to stderr because stdout carries the MCP stdio protocol.
Set the ``LOG_LEVEL`` environment variable (``DEBUG``, ``INFO``,
``WARNING`` ...) to change verbosity; the default is ``INFO``.

You typically do not run this module directly. Instead, use
``python main.py`` which imports the server and calls ``mcp.run()``.
"""

from __future__ import annotations

import logging
import os
import sys

from mcp.server.fastmcp import FastMCP


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def setup_logging() -> None:
    """Configure logging for the server process."""
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


setup_logging()

# Create the shared MCP server instance.
mcp = FastMCP("youtube_transcript")


# Import tools so that their decorators register functions with the
# server.  Use absolute imports rather than package-relative ones so
# that the code works when run from the project root.
# pylint: disable=unused-import
from tools import transcript_tools  # noqa: F401,E402
