"""Module-based logging with run-based rotation.

Each pipeline stage gets its own log file, rotated at run boundaries
(a CLI research job or a test module).

Usage:
    # At run entry points (scripts, tests):
    from core.config import configure_logging
    configure_logging("research-my-query")

    # In modules:
    import logging
    logger = logging.getLogger(__name__)
    logger.info("Goes to the stage's log file")

Log files are created in $PDF_LOG_DIR (default logs/):
    - logs/search.log, logs/ocr.log, logs/acquisition.log, ...
    - logs/run-3p.log (all third-party libraries)
    - logs/*.previous.log (previous run's logs)
"""

from core.logging.handlers import ModuleDispatchHandler, ThirdPartyHandler
from core.logging.run_manager import (
    MODULE_TO_LOG,
    end_run,
    get_current_run_id,
    module_to_log_name,
    start_run,
)

__all__ = [
    "start_run",
    "end_run",
    "get_current_run_id",
    "module_to_log_name",
    "ModuleDispatchHandler",
    "ThirdPartyHandler",
    "MODULE_TO_LOG",
]
