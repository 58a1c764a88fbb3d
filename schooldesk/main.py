"""Main application entry point: JSON-lines IPC over stdin/stdout.

Each input line is a request ``{"id": ..., "channel": "class:list", "args": [...]}``.
Each output line is the envelope plus the request id.
"""

import json
import logging
import sys
from typing import IO

from dotenv import load_dotenv

from schooldesk.ipc import IpcRouter

logger = logging.getLogger(__name__)


def handle_line(router: IpcRouter, line: str) -> dict:
    """Decode one request line, dispatch it and return the response object."""
    try:
        request = json.loads(line)
    except json.JSONDecodeError as e:
        return {"id": None, "ok": False, "message": f"Invalid request: {e.msg}"}

    if not isinstance(request, dict):
        return {"id": None, "ok": False, "message": "Invalid request: expected an object"}

    args = request.get("args") or []
    if not isinstance(args, list):
        args = [args]
    response = router.invoke(str(request.get("channel", "")), *args)
    return {"id": request.get("id"), **response}


def serve(router: IpcRouter, stdin: IO[str], stdout: IO[str]) -> int:
    """Answer requests until stdin closes. Returns the number handled."""
    handled = 0
    for line in stdin:
        line = line.strip()
        if not line:
            continue
        response = handle_line(router, line)
        stdout.write(json.dumps(response) + "\n")
        stdout.flush()
        handled += 1
    return handled


def main() -> None:
    """Configure logging and the database, then serve requests on stdio."""
    load_dotenv()

    from schooldesk.config import get_settings
    from schooldesk.controllers import create_router
    from schooldesk.db import SessionLocal, engine, init_db
    from schooldesk.logging import setup_logging

    settings = get_settings()
    setup_logging(settings.log_file, settings.log_level)

    init_db(engine)
    router = create_router(SessionLocal)
    logger.info("Serving %d IPC channels on stdio", len(router.channels()))
    handled = serve(router, sys.stdin, sys.stdout)
    logger.info("stdin closed after %d requests", handled)


if __name__ == "__main__":
    main()
