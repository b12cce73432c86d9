"""Logging handlers that split project and third-party records into files.

ModuleDispatchHandler writes each project record to the file named by
MODULE_TO_LOG; ThirdPartyHandler collects everything else in run-3p.log.
Both rotate ``<name>.log`` to ``<name>.previous.log`` once per run.

File writes are synchronous. From async code this blocks the loop for a few
microseconds per record.
"""

import logging
from pathlib import Path
from typing import TextIO


def _rotate_log_file(log_dir: Path, log_name: str, stream: TextIO | None) -> TextIO:
    """Move ``<log_name>.log`` to ``<log_name>.previous.log`` and reopen.

    Closes ``stream`` first when given. Any older previous log is removed.
    """
    current = log_dir / f"{log_name}.log"
    previous = log_dir / f"{log_name}.previous.log"

    if stream:
        stream.close()

    if previous.exists():
        previous.unlink()
    if current.exists():
        current.rename(previous)

    return current.open("a", encoding="utf-8")


class ModuleDispatchHandler(logging.Handler):
    """Single handler that routes records to per-module log files.

    Streams are cached per log name instead of creating one FileHandler per
    module, which keeps the number of open handles small. Files are opened
    lazily on the first record.

    Usage:
        handler = ModuleDispatchHandler(Path("logs"))
        handler.setFormatter(logging.Formatter("%(asctime)s - %(message)s"))
        logging.getLogger().addHandler(handler)
    """

    def __init__(self, log_dir: Path):
        super().__init__()
        self.log_dir = log_dir
        self._streams: dict[str, TextIO] = {}

    def emit(self, record: logging.LogRecord) -> None:
        try:
            from core.logging.run_manager import module_to_log_name, should_rotate

            log_name = module_to_log_name(record.name)
            if should_rotate(log_name):
                self._streams[log_name] = _rotate_log_file(
                    self.log_dir, log_name, self._streams.pop(log_name, None)
                )

            stream = self._stream_for(log_name)
            stream.write(self.format(record) + "\n")
            stream.flush()
        except Exception:
            self.handleError(record)

    def _stream_for(self, log_name: str) -> TextIO:
        if log_name not in self._streams:
            path = self.log_dir / f"{log_name}.log"
            self._streams[log_name] = open(path, "a", encoding="utf-8")
        return self._streams[log_name]

    def close(self) -> None:
        """Close all cached streams."""
        self.acquire()
        try:
            for stream in self._streams.values():
                try:
                    stream.close()
                except OSError:
                    pass
            self._streams.clear()
        finally:
            self.release()
        super().close()


class ThirdPartyHandler(logging.FileHandler):
    """File handler for library logs (httpx, anthropic, pypdf, ...)."""

    LOG_NAME = "run-3p"

    def __init__(self, log_dir: Path, **kwargs):
        self.log_dir = log_dir
        super().__init__(
            log_dir / f"{self.LOG_NAME}.log", mode="a", encoding="utf-8", **kwargs
        )

    def emit(self, record: logging.LogRecord) -> None:
        try:
            from core.logging.run_manager import should_rotate

            if should_rotate(self.LOG_NAME):
                self.stream = _rotate_log_file(self.log_dir, self.LOG_NAME, self.stream)

            super().emit(record)
        except Exception:
            self.handleError(record)
