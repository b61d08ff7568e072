"""GLM Coding Plan statusline.

Reads the session context the plugin host pipes in on stdin, fetches quota,
model and tool usage from the Z.ai / ZHIPU monitor API (cached for 5s) and
prints a two-line ANSI summary on stdout.
"""

import asyncio
import logging
import os
import select
import sys
import time
from pathlib import Path
from typing import BinaryIO, TextIO

from aggregator import fetch_usage
from cache import SnapshotCache
from config import load_api_config
from models import SessionContext
from render import format_output

log = logging.getLogger("statusline")

STDIN_TIMEOUT = 0.1  # seconds
READ_CHUNK = 65536
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def parse_session_context(raw: str) -> SessionContext:
    if not raw.strip():
        return SessionContext()
    try:
        return SessionContext.model_validate_json(raw)
    except ValueError as exc:
        log.debug("Ignoring unparsable session context: %s", exc)
        return SessionContext()


def read_session_context(stream: TextIO | BinaryIO | None = None, timeout: float = STDIN_TIMEOUT) -> SessionContext:
    """Read whatever the host writes to stdin within ``timeout`` seconds.

    The deadline covers the whole read, so a host that keeps stdin open
    cannot stall the status line.
    """
    stream = stream or sys.stdin
    chunks: list[bytes] = []
    try:
        if stream.isatty():
            return SessionContext()
        fd = stream.fileno()
        deadline = time.monotonic() + timeout
        while (remaining := deadline - time.monotonic()) > 0:
            ready, _, _ = select.select([fd], [], [], remaining)
            if not ready:
                break
            chunk = os.read(fd, READ_CHUNK)
            if not chunk:
                break
            chunks.append(chunk)
    except (OSError, ValueError) as exc:
        log.debug("Could not read stdin: %s", exc)
        return SessionContext()
    return parse_session_context(b"".join(chunks).decode("utf-8", errors="replace"))


def _configure_logging() -> None:
    level = os.getenv("STATUSLINE_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=level if level in LOG_LEVELS else "WARNING",
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    _configure_logging()
    session = read_session_context()
    config = load_api_config(project_dir=Path.cwd())
    result = asyncio.run(fetch_usage(config, SnapshotCache()))
    print(format_output(result, session))


if __name__ == "__main__":
    main()
