"""CLI entry point: python -m planetclicker.mcp [save_path]"""

from __future__ import annotations

import logging
import sys


def main() -> None:
    if len(sys.argv) > 2 or (len(sys.argv) == 2 and sys.argv[1] in ("-h", "--help")):
        print("Usage: python -m planetclicker.mcp [save_path]", file=sys.stderr)
        print("Without save_path the game is kept in memory only.", file=sys.stderr)
        sys.exit(1)

    # stdout carries the protocol; logs go to stderr
    logging.basicConfig(level=logging.WARNING, stream=sys.stderr)

    from planetclicker.config import GameConfig
    from planetclicker.mcp.server import create_server

    if len(sys.argv) == 2:
        server = create_server(GameConfig(save_path=sys.argv[1]), persistent=True)
    else:
        server = create_server()
    server.run(transport="stdio")


if __name__ == "__main__":
    main()
