"""Shared protocol definitions."""

from pathlib import Path
from typing import Protocol


class RequestLogger(Protocol):
    """Protocol for request logging (console or Dashboard)."""

    def log_proxy(self, service: str, method: str, path: str, target: str) -> None: ...
    def log_capture(self, service: str, file_path: Path) -> None: ...
    def log_warning(self, message: str) -> None: ...
    def log_error(self, route: str, status: int, message: str) -> None: ...
