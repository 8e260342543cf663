import logging
from typing import Any

LOG_EXTRA_FIELDS = (
    "origin",
    "method",
    "url",
    "status",
    "duration_ms",
    "attempt",
    "delay_ms",
    "auth",
    "cookie",
    "tool",
    "error",
)

# Above CRITICAL: nothing gets through.
SILENT = logging.CRITICAL + 10

LEVELS = {
    "silent": SILENT,
    "error": logging.ERROR,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


class LogfmtFormatter(logging.Formatter):
    """Small logfmt-style formatter that tolerates missing extras."""

    def format(self, record: logging.LogRecord) -> str:
        kv: list[str] = [
            f"ts={self.formatTime(record, '%Y-%m-%dT%H:%M:%S')}",
            f"level={record.levelname.lower()}",
            f"logger={record.name}",
        ]

        msg = record.getMessage()
        if msg:
            kv.append(f"event={self._fmt_val(msg)}")

        for key in LOG_EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is None:
                continue
            kv.append(f"{key}={self._fmt_val(val)}")

        if record.exc_info:
            kv.append(f"exc_type={record.exc_info[0].__name__}")

        return " ".join(kv)

    @staticmethod
    def _fmt_val(val: Any) -> str:
        if isinstance(val, (int, float, bool)):
            return str(val)
        s = str(val)
        if " " in s or "=" in s or '"' in s:
            s = '"' + s.replace('"', '\\"') + '"'
        return s


def resolve_level(level: str) -> int:
    """Map silent/error/info/debug (or a stdlib level name) to a logging level."""
    name = (level or "").strip().lower()
    if name in LEVELS:
        return LEVELS[name]
    value = logging.getLevelName(name.upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(level: str = "info") -> None:
    """Initialize root logging with logfmt output."""

    root = logging.getLogger()
    # Avoid duplicate handlers if called twice
    for h in list(root.handlers):
        root.removeHandler(h)

    # stderr keeps stdout free for the stdio transport
    handler = logging.StreamHandler()
    handler.setFormatter(LogfmtFormatter())
    root.addHandler(handler)
    root.setLevel(resolve_level(level))


__all__ = [
    "setup_logging",
    "resolve_level",
    "LogfmtFormatter",
    "LOG_EXTRA_FIELDS",
    "LEVELS",
    "SILENT",
]
