"""Console telemetry: status lines for the CLI, rendered with rich."""

from typing import Optional

from rich.console import Console
from rich.markup import escape


class ProjectTelemetry:
    """Implements TelemetryPort on a rich console."""

    def __init__(
        self,
        project_name: str,
        color: str,
        tagline: str,
        console: Optional[Console] = None,
    ) -> None:
        self.project_name = project_name
        self.color = color
        self.tagline = tagline
        self.console = console or Console(stderr=True)

    def handshake(self) -> None:
        self.console.print(f"[bold {self.color}]{self.project_name}[/] {self.tagline}", highlight=False)

    def step(self, message: str) -> None:
        self.console.print(f"[{self.color}]>>[/] {escape(message)}", highlight=False)

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]WARNING[/] {escape(message)}", highlight=False)

    def error(self, message: str) -> None:
        self.console.print(f"[bold red]ERROR[/] {escape(message)}", highlight=False)
