"""Rich console output formatting."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from hashcc.models.records import (
    CompareResult,
    HashFailure,
    Outcome,
    VerificationDiagnostic,
    VerificationSummary,
)

_OUTCOME_STYLES = {
    Outcome.MATCHED: ("✅", "green", "OK"),
    Outcome.MISMATCHED: ("❌", "red", "FAILED"),
    Outcome.MISSING: ("⚠️", "yellow", "MISSING"),
    Outcome.INVALID_PATH: ("❌", "red", "INVALID PATH"),
    Outcome.ERROR: ("❌", "red", "ERROR"),
}


class RichOutput:
    """Rich console output formatting."""

    def __init__(self, console: Console | None = None, err_console: Console | None = None) -> None:
        """Initialize with Rich consoles.

        Args:
            console: Console for results (stdout).
            err_console: Console for diagnostics and summaries (stderr).
        """
        self.console = console or Console(emoji=False)
        self.err_console = err_console or Console(stderr=True, emoji=False)

    def print_diagnostic(self, diagnostic: VerificationDiagnostic, quiet: bool = False) -> None:
        """Display one verification outcome.

        Args:
            diagnostic: Outcome of a manifest line.
            quiet: Hide successful lines.
        """
        if quiet and diagnostic.outcome is Outcome.MATCHED:
            return

        icon, color, label = _OUTCOME_STYLES[diagnostic.outcome]
        target = diagnostic.path or f"line {diagnostic.line}"
        message = f"{icon} {escape(target)} [{color}]{label}[/{color}]"
        if diagnostic.detail and diagnostic.outcome is not Outcome.MATCHED:
            message += f" [dim]{escape(diagnostic.detail)}[/dim]"
        self.console.print(message, soft_wrap=True, highlight=False)

    def print_verification_summary(self, summary: VerificationSummary) -> None:
        """Display verification counts.

        Args:
            summary: Verification result.
        """
        status_color = "green" if summary.clean else "red"
        panel_content = (
            f"[bold]OK:[/bold] [green]{summary.ok}[/green]\n"
            f"[bold]Failed:[/bold] [red]{summary.failed}[/red]\n"
            f"[bold]Missing:[/bold] [yellow]{summary.missing}[/yellow]\n"
            f"[bold]Invalid path:[/bold] [red]{summary.invalid_path}[/red]\n"
            f"[bold]Errors:[/bold] [red]{summary.errors}[/red]"
        )
        self.err_console.print(
            Panel(
                panel_content,
                title=f"[{status_color}]Verification Summary[/{status_color}]",
                expand=False,
            )
        )
        self.err_console.print(
            f"Summary: OK={summary.ok} FAILED={summary.failed} MISSING={summary.missing} "
            f"INVALID_PATH={summary.invalid_path} ERROR={summary.errors}",
            highlight=False,
        )

    def print_compare_result(self, result: CompareResult) -> None:
        """Display the outcome of a single-file comparison.

        Args:
            result: Comparison result.
        """
        if result.matched:
            self.console.print("✅ [green]Hash matches![/green]")
        else:
            self.console.print("❌ [red]Hash does not match.[/red]")
            self.console.print(f"Expected: {result.expected}", highlight=False)
            self.console.print(f"Actual:   {result.actual}", highlight=False)

    def print_hash_failures(self, failures: list[HashFailure], limit: int = 20) -> None:
        """Display files that could not be hashed.

        Args:
            failures: Per-file failures.
            limit: Maximum entries to show.
        """
        if not failures:
            return
        self.err_console.print(f"\n[bold red]{len(failures)} file(s) could not be hashed:[/bold red]")
        for failure in failures[:limit]:
            self.err_console.print(
                f"  - {escape(failure.path)}: {escape(failure.error)}",
                soft_wrap=True,
                highlight=False,
            )
        if len(failures) > limit:
            self.err_console.print(f"[dim]... and {len(failures) - limit} more[/dim]")

    def print_error(self, message: str, details: str | None = None) -> None:
        """Display error message.

        Args:
            message: Error message.
            details: Optional additional details.
        """
        self.err_console.print(f"[bold red]Error:[/bold red] {escape(message)}", soft_wrap=True)
        if details:
            self.err_console.print(f"[dim]{escape(details)}[/dim]", soft_wrap=True)

    def print_success(self, message: str) -> None:
        """Display success message.

        Args:
            message: Success message.
        """
        self.err_console.print(f"[bold green]Success:[/bold green] {escape(message)}", soft_wrap=True)

    def print_warning(self, message: str) -> None:
        """Display warning message.

        Args:
            message: Warning message.
        """
        self.err_console.print(f"[bold yellow]Warning:[/bold yellow] {escape(message)}", soft_wrap=True)

    def create_progress_bar(self) -> Progress:
        """Create a Rich progress bar on stderr.

        Returns:
            Progress instance.
        """
        return Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TimeElapsedColumn(),
            console=self.err_console,
            transient=True,
        )
