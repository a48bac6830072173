import json
import typer
from typing import Any, List
from pydantic import BaseModel
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from convex_shell.utils.diagnostics import ShellDiagnostic

# Create a stderr console for logging
error_console = Console(stderr=True)

SEVERITY_ORDER = {
    "debug": 10,
    "info": 20,
    "success": 20,
    "warning": 30,
    "error": 40,
    "critical": 50,
}

class OutputFormatter:
    """
    Handles output formatting for the shell.
    Ensures separation of concerns between System Logs (stderr) and Data (stdout).
    """

    log_level: str = "INFO"

    @classmethod
    def configure(cls, log_level: str) -> None:
        cls.log_level = log_level.upper()

    @classmethod
    def is_enabled(cls, severity: str) -> bool:
        threshold = SEVERITY_ORDER.get(cls.log_level.lower(), SEVERITY_ORDER["info"])
        return SEVERITY_ORDER.get(severity, SEVERITY_ORDER["info"]) >= threshold

    @classmethod
    def log(cls, message: str, severity: str = "info") -> None:
        """
        Print system messages to stderr with color coding.
        """
        if not cls.is_enabled(severity):
            return

        style = "white"
        prefix = "[SHELL]"

        if severity == "debug":
            style = "dim"
        elif severity == "warning":
            style = "yellow"
        elif severity == "error":
            style = "red"
        elif severity == "critical":
            style = "bold red"
        elif severity == "success":
            style = "green"

        error_console.print(f"[{style}]{escape(prefix)} {escape(message)}[/{style}]")

    @staticmethod
    def print_diagnostics(diagnostics: List[ShellDiagnostic]) -> None:
        """
        Prints a table of function descriptors that were rejected.
        """
        if not diagnostics:
            return

        table = Table(title="Function Spec Diagnostics", border_style="red", header_style="bold red")
        table.add_column("Severity", style="bold")
        table.add_column("Code")
        table.add_column("Message")
        table.add_column("Function")

        for diag in diagnostics:
            color = "red"
            if diag.severity == "warning":
                color = "yellow"
            elif diag.severity == "critical":
                color = "bold red"

            table.add_row(
                f"[{color}]{diag.severity.upper()}[/{color}]",
                diag.error_code,
                escape(diag.message),
                escape(diag.identifier),
            )

        error_console.print(table)
        error_console.print() # spacing

    @staticmethod
    def print_data(data: Any) -> None:
        """
        Print a function result to stdout.
        Strings are echoed verbatim, everything else as indented JSON.
        """
        if isinstance(data, str):
            typer.echo(data)
            return

        def json_serializer(obj):
            if isinstance(obj, BaseModel):
                return obj.model_dump(mode='json', by_alias=True)
            # Looked up on the type: namespace nodes answer any attribute name.
            if callable(getattr(type(obj), "isoformat", None)):
                return obj.isoformat()
            return str(obj)

        try:
            output = json.dumps(data, indent=2, default=json_serializer)
            typer.echo(output)
        except (TypeError, ValueError) as e:
            OutputFormatter.log(f"JSON Serialization failed: {e}", severity="error")
            typer.echo(str(data))
