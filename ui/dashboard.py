"""Real-time CLI dashboard for proxy monitoring."""

from collections import Counter
from datetime import datetime
from pathlib import Path
from threading import Lock

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from ui.log_utils import write_cli_log

console = Console()


class RequestInfo:
    """Info about a single proxied request."""

    def __init__(self, service: str, method: str, path: str, target: str, timestamp: datetime):
        self.service = service
        self.method = method
        self.path = path[:60] + "..." if len(path) > 60 else path
        self.target = target
        self.timestamp = timestamp


class Dashboard:
    """Real-time dashboard showing mappings and recent traffic."""

    def __init__(self, config: Config):
        self.config = config
        self._lock = Lock()
        self._requests: list[RequestInfo] = []
        self._max_requests = 10
        self._request_count: Counter[str] = Counter()
        self._captured = 0
        self._errors: list[str] = []
        self._live: Live | None = None

    def start(self) -> "Dashboard":
        """Start the live dashboard."""
        self._live = Live(
            self._build_layout(),
            console=console,
            refresh_per_second=4,
            screen=False,
        )
        self._live.start()
        return self

    def stop(self) -> None:
        """Stop the live dashboard."""
        if self._live:
            self._live.stop()

    def log_proxy(self, service: str, method: str, path: str, target: str) -> None:
        """Log a request being forwarded upstream."""
        with self._lock:
            self._request_count[service] += 1
            info = RequestInfo(service, method, path, target, datetime.now())
            self._requests.insert(0, info)
            self._requests = self._requests[: self._max_requests]
            write_cli_log("PROXY", f"{method} {path} -> {target}", service=service)
            self._refresh()

    def log_capture(self, service: str, file_path: Path) -> None:
        """Log a persisted response artifact."""
        with self._lock:
            self._captured += 1
            write_cli_log("CAPTURE", str(file_path), service=service)
            self._refresh()

    def log_warning(self, message: str) -> None:
        """Log a non-fatal problem."""
        self._push_status(f"warning: {message}")
        write_cli_log("WARNING", message)

    def log_error(self, route: str, status: int, message: str) -> None:
        """Log an error."""
        self._push_status(f"{route} {status}: {message}")
        write_cli_log("ERROR", message[:200], route=route, status=status)

    def _push_status(self, line: str) -> None:
        with self._lock:
            truncated = line[:70] + "..." if len(line) > 70 else line
            self._errors.insert(0, truncated)
            self._errors = self._errors[:3]
            self._refresh()

    def _refresh(self) -> None:
        """Refresh the display."""
        if self._live:
            self._live.update(self._build_layout())

    def _build_layout(self) -> Layout:
        """Build the dashboard layout."""
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=5),
        )

        layout["body"].split_row(
            Layout(name="mappings", ratio=1),
            Layout(name="requests", ratio=2),
        )

        layout["header"].update(self._build_header())
        layout["mappings"].update(self._build_mappings_panel())
        layout["requests"].update(self._build_requests_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append("Prefix Proxy", style="bold cyan")
        stats.append("  |  ")
        stats.append(f"Requests: {sum(self._request_count.values())}", style="blue")
        stats.append("  |  ")
        if self.config.capture.enabled:
            stats.append(f"Captured: {self._captured}", style="magenta")
        else:
            stats.append("Capture off", style="dim")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.proxy.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_mappings_panel(self) -> Panel:
        """Build the service mapping table."""
        if self.config.mappings:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Service")
            table.add_column("Upstream", ratio=2)
            table.add_column("Hits", justify="right", width=6)
            for service, target in self.config.mappings.items():
                table.add_row(
                    Text(f"/{service}"),
                    Text(target),
                    str(self._request_count[service]),
                )
            content = table
        else:
            content = Text("No mappings configured", style="dim")

        return Panel(content, title="[blue]Mappings[/blue]", border_style="blue")

    def _build_requests_panel(self) -> Panel:
        """Build recent requests panel."""
        if self._requests:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Method", width=7)
            table.add_column("Path", ratio=1)
            table.add_column("Upstream", ratio=2)

            for req in self._requests:
                table.add_row(
                    req.timestamp.strftime("%H:%M:%S"),
                    req.method,
                    Text(req.path),
                    Text(req.target),
                )
            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(
            content, title="[magenta]Recent Requests[/magenta]", border_style="magenta"
        )

    def _build_footer(self) -> Panel:
        """Build footer with errors and help."""
        if self._errors:
            error_text = Text()
            for err in self._errors:
                error_text.append("! ", style="red bold")
                error_text.append(err + "\n", style="red")
            content = error_text
        else:
            content = Text(
                f"Send requests to http://localhost:{self.config.proxy.port}/<service>/<path>",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")
