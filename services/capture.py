"""Persist upstream responses to disk for later inspection."""

import json
from datetime import datetime
from pathlib import Path

import httpx
from starlette.concurrency import run_in_threadpool

from core.exceptions import CaptureError
from core.protocols import RequestLogger
from core.request_types import CapturedResponse, PreparedRequest


def format_timestamp(moment: datetime | None = None) -> str:
    """Format a local timestamp with millisecond precision."""
    moment = moment or datetime.now()
    return f"{moment:%Y%m%d-%H%M%S}.{moment.microsecond // 1000:03d}"


def sanitize_path(path: str) -> str:
    """Turn a request path into a filename component."""
    return path.replace("/", "_") or "root"


def group_headers(headers: httpx.Headers) -> dict[str, list[str]]:
    """Collect multi-valued headers as name -> values."""
    grouped: dict[str, list[str]] = {}
    for key, value in headers.multi_items():
        grouped.setdefault(key, []).append(value)
    return grouped


class ResponseCapture:
    """Write captured responses as JSON artifacts in a directory."""

    def __init__(self, directory: Path, logger: RequestLogger) -> None:
        self.directory = Path(directory)
        self._logger = logger

    async def capture(
        self,
        prepared: PreparedRequest,
        status_code: int,
        headers: httpx.Headers,
        body: bytes,
    ) -> Path | None:
        """Persist a response, best effort.

        Failures are logged as warnings and never propagate.
        """
        record = CapturedResponse(
            service=prepared.service,
            path=prepared.request.capture_path,
            timestamp=format_timestamp(),
            status_code=status_code,
            headers=group_headers(headers),
            body=body,
        )
        try:
            file_path = await run_in_threadpool(self.save, record)
        except CaptureError as e:
            self._logger.log_warning(f"Failed to save response: {e}")
            return None
        self._logger.log_capture(prepared.service, file_path)
        return file_path

    def save(self, record: CapturedResponse) -> Path:
        """Write a record to a new file and return its path.

        Raises:
            CaptureError: if the directory or file cannot be written.
        """
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CaptureError(f"failed to create responses directory: {e}") from e

        try:
            payload = json.dumps(record.to_dict(), indent=2)
        except (TypeError, ValueError) as e:
            raise CaptureError(f"failed to marshal response: {e}") from e

        stem = f"{record.service}-{sanitize_path(record.path)}-{record.timestamp}"
        try:
            return self._write_new(stem, payload)
        except (OSError, ValueError) as e:
            raise CaptureError(f"failed to write response file: {e}") from e

    def _write_new(self, stem: str, payload: str) -> Path:
        """Create a file that did not exist yet, suffixing the name on collision."""
        attempt = 0
        while True:
            name = f"{stem}.json" if attempt == 0 else f"{stem}-{attempt}.json"
            file_path = self.directory / name
            try:
                with file_path.open("x", encoding="utf-8") as f:
                    f.write(payload)
                return file_path
            except FileExistsError:
                attempt += 1
