"""Serve the modeler REST API with uvicorn (``schema-modeler-server``).

The node store lives in the server process, so run a single worker; several
workers would each open their own copy of the snapshot file and overwrite one
another's saves.

Environment Variables:
    PORT (int): Listening port, 8000 when unset.
    MODELER_LOG_LEVEL (str): uvicorn log level, taken from :class:`ModelerConfig`.
    MODELER_STORE_PATH (str): Snapshot file that keeps the store across restarts.

Example:
    $ schema-modeler-server
    $ PORT=9000 MODELER_STORE_PATH=~/.cache/schema-modeler/store.json schema-modeler-server
"""

from __future__ import annotations

import os

import uvicorn

from .app import app
from .config import ModelerConfig


def main() -> None:
    """Start uvicorn on all interfaces with the configured port and log level."""
    config = ModelerConfig.from_env()
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
