"""CLI entry point for prefix-proxy."""

import sys
from datetime import datetime

from rich.console import Console
from rich.text import Text

from app import create_app
from core.config import CONFIG_FILE, load_config
from core.exceptions import ConfigurationError
from ui.console import ConsoleLogger, print_mappings
from ui.dashboard import Dashboard
from ui.log_utils import CLI_LOG_FILE, clear_logs, write_cli_log

console = Console()


def main():
    """Main CLI entry point."""
    args = sys.argv[1:]

    if "--help" in args or "-h" in args:
        _print_help()
        return

    if "--config" in args:
        console.print(f"[bold]Config:[/bold] {CONFIG_FILE.resolve()}")
        console.print(f"[bold]Log:[/bold] {CLI_LOG_FILE}")
        return

    try:
        config = load_config()
    except ConfigurationError as e:
        console.print(Text.assemble(("[ERROR]", "red"), f" Failed to load config: {e}"))
        sys.exit(1)

    if "--no-capture" in args:
        config = config.without_capture()

    print_mappings(config, console)
    if "--check" in args:
        return

    clear_logs()
    if "--dashboard" in args:
        dashboard = Dashboard(config)
        logger = dashboard
    else:
        dashboard = None
        logger = ConsoleLogger(console)

    import uvicorn

    app = create_app(config, logger)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.proxy.host,
        port=config.proxy.port,
        log_level="warning",
    )
    server = uvicorn.Server(uvicorn_config)

    console.print(f"Starting proxy server on {config.proxy.host}:{config.proxy.port}")
    if dashboard:
        dashboard.start()
    start_time = datetime.now()
    write_cli_log("STARTUP", "Proxy started", port=config.proxy.port)
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Proxy stopped", duration=str(duration))
        if dashboard:
            dashboard.stop()


def _print_help():
    """Print help message."""
    help_text = f"""
[bold cyan]Prefix Proxy[/bold cyan]

Routes /<service>/<path> to the upstream mapped for <service> in {CONFIG_FILE},
saving each upstream response as JSON for inspection.

[bold]Usage:[/bold]
    prefix-proxy                 Start with line output
    prefix-proxy --dashboard     Start with live dashboard
    prefix-proxy --no-capture    Forward without saving responses
    prefix-proxy --check         Validate config and print mappings
    prefix-proxy --config        Show config locations
    prefix-proxy --help          Show this help
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
