"""
Logging setup
Console output plus optional rotating log file, configured from the [logging] section
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Handlers installed by setup_logging, replaced on reconfiguration
_handlers: List[logging.Handler] = []


def get_logger(name: str) -> logging.Logger:
    """Get a module logger"""
    return logging.getLogger(name)


def setup_logging(logging_config: Optional[Dict[str, Any]] = None) -> None:
    """Configure root logging

    Args:
        logging_config: The [logging] configuration section. Supported keys:
            level, log_dir, file_name, max_bytes, backup_count
    """
    cfg = logging_config or {}
    level_name = str(cfg.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    while _handlers:
        handler = _handlers.pop()
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    root.addHandler(console)
    _handlers.append(console)

    log_dir = cfg.get("log_dir")
    if log_dir:
        log_path = Path(log_dir).expanduser()
        log_path.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path / cfg.get("file_name", "gotasker.log"),
            maxBytes=int(cfg.get("max_bytes", 10 * 1024 * 1024)),
            backupCount=int(cfg.get("backup_count", 5)),
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        _handlers.append(file_handler)

    logging.getLogger(__name__).debug(
        f"✓ Logging configured (level={level_name}, log_dir={log_dir or '-'})"
    )
