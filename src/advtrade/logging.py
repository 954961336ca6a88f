from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(log_dir: Path | None = None, *, level: str | None = None) -> None:
    """Install console (and optionally rotating file) handlers on the root logger.

    Level comes from ``level`` or ``ADVTRADE_LOG_LEVEL`` (default INFO).
    """
    level_name = (level or os.environ.get("ADVTRADE_LOG_LEVEL", "INFO")).upper()
    resolved = getattr(logging, level_name, logging.INFO)

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    root = logging.getLogger()
    root.setLevel(resolved)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    console = logging.StreamHandler()
    console.setLevel(resolved)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / "advtrade.log",
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
        )
        file_handler.setLevel(resolved)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    # aiohttp access logs are noisy at INFO
    logging.getLogger("aiohttp").setLevel(max(resolved, logging.WARNING))
