"""Console entry point: serve the ``get_transcript`` tool over stdio.

Installed as the ``youtube-transcript-mcp`` script; ``python main.py``
works from a checkout too.  stdout carries the MCP protocol, so all
logging goes to stderr (see ``server.setup_logging``).
"""

from __future__ import annotations

from server import mcp  # type: ignore


def main() -> None:
    mcp.run()


if __name__ == "__main__":
    main()
