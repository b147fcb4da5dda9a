"""Line-oriented console output for the proxy."""

from pathlib import Path

from rich.console import Console
from rich.text import Text

from core.config import Config
from ui.log_utils import write_cli_log


def print_mappings(config: Config, console: Console) -> None:
    """Print the loaded service mappings."""
    console.print("Loaded proxy mappings:")
    for service, target in config.mappings.items():
        console.print(Text(f"  /{service} -> {target}"))
    if config.capture.enabled:
        console.print(
            Text(f"Responses will be saved to the '{config.capture.directory}' directory")
        )


class ConsoleLogger:
    """Request logger printing one line per event."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def log_proxy(self, service: str, method: str, path: str, target: str) -> None:
        """Log a request being forwarded upstream."""
        self.console.print(Text(f"Proxying request: {method} {path} -> {target}"))
        write_cli_log("PROXY", f"{method} {path} -> {target}", service=service)

    def log_capture(self, service: str, file_path: Path) -> None:
        """Log a persisted response artifact."""
        self.console.print(Text(f"Response saved to {file_path}", style="dim"))
        write_cli_log("CAPTURE", str(file_path), service=service)

    def log_warning(self, message: str) -> None:
        self.console.print(Text.assemble(("Warning: ", "yellow"), message))
        write_cli_log("WARNING", message)

    def log_error(self, route: str, status: int, message: str) -> None:
        self.console.print(Text.assemble(("[ERROR] ", "red"), f"{route} {status}: {message}"))
        write_cli_log("ERROR", message[:200], route=route, status=status)
