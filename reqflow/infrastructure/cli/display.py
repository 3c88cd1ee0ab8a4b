"""Console output for the reqflow CLI, rendered with rich.

Doubles as the Notifier implementation, so connection and rate-limit notices
show up inline while requests run.
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from rich.box import HEAVY, ROUNDED, SIMPLE
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from reqflow.domain.interfaces.notifier import Notifier, NoticeKind
from reqflow.domain.models.request import HttpResponse

logger = logging.getLogger(__name__)

NOTICE_STYLES: Dict[NoticeKind, str] = {
    NoticeKind.CONNECTION_LOST: "red",
    NoticeKind.CONNECTION_RESTORED: "green",
    NoticeKind.RATE_LIMITED: "yellow",
    NoticeKind.REQUEST_FAILED: "red",
}


class ConsoleDisplay(Notifier):
    """Renders responses, errors and notices using the rich library."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def notify(self, kind: NoticeKind, message: str) -> None:
        style = NOTICE_STYLES.get(kind, "blue")
        timestamp = datetime.now().strftime("%H:%M:%S")
        self.console.print(f"[dim]{timestamp}[/dim] [bold {style}]{message}[/bold {style}]")

    def display_response(self, response: HttpResponse, source: str = "network") -> None:
        """Shows status and body of a response.

        Args:
            response: The response to render.
            source: Where it came from ('network' or 'cache'), shown in the title.
        """
        status_style = "green" if response.ok else "red"
        title = f"[bold {status_style}]{response.status}[/bold {status_style}] [dim]({source})[/dim]"
        if isinstance(response.body, (dict, list)):
            body: Any = Syntax(json.dumps(response.body, indent=2, default=str), "json", word_wrap=True)
        else:
            body = Text(str(response.body) if response.body is not None else "<empty>")
        self.console.print(Panel(body, title=title, subtitle=response.url or "", box=ROUNDED, padding=(0, 1)))

    def display_error(self, error_message: str) -> None:
        panel = Panel(
            Text(error_message, style="white"),
            title="[bold red]Error[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_info(self, info_message: str) -> None:
        panel = Panel(
            Text(info_message, style="white"),
            title="[bold blue]Info[/bold blue]",
            border_style="blue",
            box=SIMPLE,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_config(self, settings: Dict[str, Any]) -> None:
        """Prints the effective orchestration settings as a two-column table."""
        table = Table(title="Orchestration settings", box=ROUNDED, show_header=True, header_style="bold cyan")
        table.add_column("Option", style="bold")
        table.add_column("Value")
        for name, value in settings.items():
            if isinstance(value, list) and value and isinstance(value[0], tuple):
                rendered = "\n".join(f"{prefix} = {seconds:g}s" for prefix, seconds in value)
            elif isinstance(value, list):
                rendered = "\n".join(str(item) for item in value) or "-"
            else:
                rendered = str(value)
            table.add_row(name, rendered)
        self.console.print(table)
