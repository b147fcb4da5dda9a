"""Shared logging utilities."""

from datetime import UTC, datetime
from pathlib import Path
from typing import Any

LOG_ROOT = Path.cwd() / "logs"
CLI_LOG_FILE = LOG_ROOT / "proxy.log"


def write_cli_log(
    level: str,
    message: str,
    **extra: Any,
) -> None:
    """Append a line to the rolling CLI log file."""
    CLI_LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")
    extra_str = " ".join(f"{k}={v}" for k, v in extra.items()) if extra else ""
    line = f"[{timestamp}] {level}: {message}"
    if extra_str:
        line += f" {extra_str}"
    line += "\n"
    with CLI_LOG_FILE.open("a") as f:
        f.write(line)


def clear_logs() -> None:
    """Truncate the CLI log file from a previous run."""
    if CLI_LOG_FILE.exists():
        CLI_LOG_FILE.write_text("")
