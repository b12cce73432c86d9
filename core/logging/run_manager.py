"""Run-based log rotation manager.

A "run" is one logical unit of work (a CLI research job or a test module).
The first record written to each module log inside a run rotates that file.

Usage:
    from core.logging import start_run, end_run

    start_run("research-quantum-error-correction")
    try:
        # ... do work ...
    finally:
        end_run()
"""

from contextvars import ContextVar

# ContextVars so concurrent async runs do not share rotation state
_current_run_id: ContextVar[str | None] = ContextVar("current_run_id", default=None)
_rotated_this_run: ContextVar[set[str] | None] = ContextVar("rotated_this_run", default=None)

# Module names never change, so resolution is cached across runs
_module_log_cache: dict[str, str] = {}

# Longest-prefix match from module path to log file name.
# Unmapped modules go to "misc.log".
MODULE_TO_LOG = {
    # Pipeline stages
    "core.search": "search",
    "core.acquisition": "acquisition",
    "core.extraction": "extraction",
    "core.ocr": "ocr",
    "core.ocr.engines": "ocr-engines",
    "core.stores": "stores",
    "core.documents": "documents",
    # Shared infrastructure
    "core.utils": "utils",
    "core.config": "config",
    "core.logging": "logging-internal",
    # Orchestration
    "workflows.pdf_research": "pdf-research",
    "workflows.shared": "workflows-shared",
    # Entry points
    "scripts": "scripts",
    "testing": "testing",
}

_SORTED_PREFIXES = sorted(MODULE_TO_LOG.keys(), key=len, reverse=True)


def start_run(run_id: str) -> None:
    """Signal start of a new run.

    Calling again resets rotation tracking, so every log rotates once more.

    Args:
        run_id: Unique identifier for this run (query slug, test module)
    """
    _current_run_id.set(run_id)
    _rotated_this_run.set(set())


def end_run() -> None:
    """Signal end of run.

    Rotation is driven by start_run(), so a missed end_run() is harmless.
    """
    _current_run_id.set(None)
    _rotated_this_run.set(None)


def get_current_run_id() -> str | None:
    """Get the current run ID, if any."""
    return _current_run_id.get()


def should_rotate(log_name: str) -> bool:
    """Return True the first time ``log_name`` is written during a run.

    Marks the log as rotated, so later calls in the same run return False.
    Outside a run this always returns False.
    """
    run_id = _current_run_id.get()
    rotated = _rotated_this_run.get()

    if run_id is None or rotated is None:
        return False

    if log_name in rotated:
        return False

    rotated.add(log_name)
    return True


def module_to_log_name(module_name: str) -> str:
    """Resolve a module path (``__name__``) to its log file name.

    Example:
        module_to_log_name("core.ocr.engines.claude") -> "ocr-engines"
    """
    if module_name not in _module_log_cache:
        _module_log_cache[module_name] = _compute_log_name(module_name)
    return _module_log_cache[module_name]


def _compute_log_name(module_name: str) -> str:
    for prefix in _SORTED_PREFIXES:
        if module_name == prefix or module_name.startswith(prefix + "."):
            return MODULE_TO_LOG[prefix]
    return "misc"
