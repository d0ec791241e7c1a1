"""
Log setup for the scoring and simulation engines.

JSON lines (default) or a compact text layout for terminals. Both carry the
DPR / session / scenario context that engine log calls attach via ``extra=``.
Everything goes to stderr so the CLI can keep stdout for its JSON result.
"""
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

# Attributes engine log calls attach through ``extra=``
CONTEXT_FIELDS = ("dpr_id", "session_id", "scenario", "function", "duration_ms")

PERF_LOGGER = "dpr-engine.perf"


def _context(record: logging.LogRecord) -> Dict[str, Any]:
    return {name: getattr(record, name) for name in CONTEXT_FIELDS if hasattr(record, name)}


class JSONFormatter(logging.Formatter):
    """One JSON object per line with engine context flattened into it."""

    def format(self, record):
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "source": f"{record.module}:{record.lineno}",
        }
        entry.update(_context(record))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class ContextTextFormatter(logging.Formatter):
    """``12:00:01 INFO    dpr-simulator: message [session_id=sim_... scenario=...]``"""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)-7s %(name)s: %(message)s", datefmt="%H:%M:%S")

    def format(self, record):
        line = super().format(record)
        context = _context(record)
        if context:
            line += " [" + " ".join(f"{k}={v}" for k, v in context.items()) + "]"
        return line


def setup_logging(level: str = "INFO", json_output: bool = True, perf: bool = False):
    """
    Install a single stderr handler on the root logger.

    Per-call timings from ``perf_monitor`` are held back at WARNING (slow
    calls only) unless ``perf`` is set.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if json_output else ContextTextFormatter())
    root.handlers = [handler]

    logging.getLogger(PERF_LOGGER).setLevel(logging.DEBUG if perf else logging.WARNING)
