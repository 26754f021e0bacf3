# src/yamine/cli/formatter.py
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from yamine.core.models import RunPlan


class PreviewFormatter:
    """
    Renders the dry-run preview: which files would be combined, where the
    result would go and in which format. Nothing is read or written.
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def render_plan(self, plan: RunPlan):
        self.console.print(Panel.fit(
            "[bold cyan]yamine[/bold cyan] dry run\n"
            "[dim]Nothing will be written. Use --write or --std-out to combine.[/dim]",
            title="[bold white]Preview[/bold white]",
            border_style="cyan"
        ))

        table = Table(title="Input Files", show_header=True, header_style="bold magenta")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Path", style="cyan")
        table.add_column("Format")

        if plan.from_stdin:
            table.add_row("1", "<stdin>", "yaml")
        for position, source in enumerate(plan.files, 1):
            table.add_row(str(position), escape(source.name), source.format.value)

        self.console.print(table)
        self.console.print(f"[bold]Output:[/bold] {escape(plan.destination)}")
        self.console.print(f"[bold]Format:[/bold] {plan.encoding}")

        for note in plan.notes:
            self.console.print(f"[yellow]Note:[/yellow] {note}")
