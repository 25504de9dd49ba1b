"""Runtime configuration for the modeler.

Settings come from environment variables so the CLI, the REST server and
tests can share one mechanism:

        MODELER_STORE_PATH          JSON snapshot file for the node store
        MODELER_FETCH_TIMEOUT       Seconds to wait on each artifact fetch (default 30)
        MODELER_PERSIST_ARTIFACTS   Keep dependency artifacts after generation (default true)
        MODELER_LOG_LEVEL           Logging level name (default INFO)

Example:
        from schema_modeler.config import ModelerConfig

        config = ModelerConfig.from_env()
        config.fetch_timeout        # 30.0 unless overridden
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

logger = logging.getLogger(__name__)


@dataclass
class ModelerConfig:
    """Configuration for a :class:`~schema_modeler.modeler.Modeler`.

    Args:
        store_path: Snapshot file for the node store; ``None`` keeps the store
            in memory only.
        fetch_timeout: Timeout in seconds for each external fetch.
        persist_artifacts: Default for keeping artifacts after model generation.
        log_level: Logging level name used by the CLI and server.
    """

    store_path: Optional[Path] = None
    fetch_timeout: float = 30.0
    persist_artifacts: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ModelerConfig":
        """Build a config from environment variables.

        Invalid numeric values are ignored with a warning and the default kept.
        """
        env = os.environ if environ is None else environ
        config = cls()

        store_path = env.get("MODELER_STORE_PATH", "").strip()
        if store_path:
            config.store_path = Path(store_path).expanduser()

        timeout = env.get("MODELER_FETCH_TIMEOUT", "").strip()
        if timeout:
            try:
                config.fetch_timeout = float(timeout)
            except ValueError:
                logger.warning(f"Ignoring invalid MODELER_FETCH_TIMEOUT: {timeout}")

        persist = env.get("MODELER_PERSIST_ARTIFACTS", "").strip()
        if persist:
            config.persist_artifacts = persist.lower() == "true"

        level = env.get("MODELER_LOG_LEVEL", "").strip()
        if level:
            config.log_level = level.upper()

        return config
