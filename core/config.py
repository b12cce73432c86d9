"""Harvest configuration and environment setup.

This module provides centralized configuration for the PDF harvester,
including development mode detection and log handler installation.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Loggers whose records belong in the project log files rather than run-3p.log
_PROJECT_PREFIXES = ("core", "workflows", "scripts", "testing")


def is_dev_mode() -> bool:
    """Check if running in development mode.

    Returns:
        True if PDF_MODE is set to 'dev', False otherwise.
    """
    return os.getenv("PDF_MODE", "prod").lower() == "dev"


def get_log_dir() -> Path:
    """Directory that receives per-module log files."""
    return Path(os.getenv("PDF_LOG_DIR", "logs"))


class _ProjectFilter(logging.Filter):
    def __init__(self, project: bool):
        super().__init__()
        self.project = project

    def filter(self, record: logging.LogRecord) -> bool:
        is_project = record.name.split(".")[0] in _PROJECT_PREFIXES
        return is_project == self.project


def configure_logging(run_name: str | None = None, level: int | None = None) -> None:
    """Install module-dispatch and third-party file handlers on the root logger.

    Project modules log to ``<log dir>/<module>.log``; everything else goes to
    ``run-3p.log``. Dev mode lowers the threshold to DEBUG. When ``run_name``
    is given a new logging run is started, so each log file rotates on its
    first write.

    Handler installation is idempotent; calling again only starts a new run.
    """
    from core.logging import ModuleDispatchHandler, ThirdPartyHandler, start_run

    if run_name:
        start_run(run_name)

    root = logging.getLogger()
    if any(isinstance(h, (ModuleDispatchHandler, ThirdPartyHandler)) for h in root.handlers):
        return

    log_dir = get_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(_LOG_FORMAT)

    module_handler = ModuleDispatchHandler(log_dir)
    module_handler.setFormatter(formatter)
    module_handler.addFilter(_ProjectFilter(project=True))

    third_party_handler = ThirdPartyHandler(log_dir)
    third_party_handler.setFormatter(formatter)
    third_party_handler.addFilter(_ProjectFilter(project=False))

    root.addHandler(module_handler)
    root.addHandler(third_party_handler)

    if level is None:
        level = logging.DEBUG if is_dev_mode() else logging.INFO
    root.setLevel(level)
