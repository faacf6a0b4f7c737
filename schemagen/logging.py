"""Logging utilities for schemagen commands.

Records emitted while an autogen entry is processed carry ``base_path`` and
``namespace`` attributes (see :func:`entry_logger`). Handlers installed by
:func:`configure_logging` render them as an ``[base_path namespace]`` tag so
failures can be traced back to their entry in CI logs.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, MutableMapping, Tuple

_LOGGER_NAME = "schemagen"
_CONSOLE_FORMAT = "[schemagen] %(levelname)s%(entry_tag)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s%(entry_tag)s: %(message)s"


class EntryLogAdapter(logging.LoggerAdapter):
    """Attach the base path and namespace of an autogen entry to every record."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


class EntryTagFilter(logging.Filter):
    """Render entry attributes into ``entry_tag``; untagged records get an empty tag."""

    def filter(self, record: logging.LogRecord) -> bool:
        base_path = getattr(record, "base_path", None)
        namespace = getattr(record, "namespace", None)
        if base_path and namespace:
            record.entry_tag = f" [{base_path} {namespace}]"
        elif base_path:
            record.entry_tag = f" [{base_path}]"
        else:
            record.entry_tag = ""
        return True


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the schemagen hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def entry_logger(logger: logging.Logger, base_path: str, namespace: str | None = None) -> EntryLogAdapter:
    """Wrap ``logger`` so its records are tagged with one autogen entry."""
    return EntryLogAdapter(logger, {"base_path": base_path, "namespace": namespace})


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the schemagen logger with console output and optional file sink."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.addFilter(EntryTagFilter())
    stream_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(stream_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        # File sink always records debug detail.
        file_handler.setLevel(logging.DEBUG)
        file_handler.addFilter(EntryTagFilter())
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)
        logger.setLevel(logging.DEBUG)

    return logger


__all__ = ["EntryLogAdapter", "EntryTagFilter", "configure_logging", "entry_logger", "get_logger"]
