import sys
import typer
from pathlib import Path
from typing import Any, Dict, Optional
from prompt_toolkit import PromptSession

from convex_shell.cli.completion import NamespaceCompleter
from convex_shell.cli.formatter import OutputFormatter
from convex_shell.config.loader import CONFIG_FILE_NAME, load_config
from convex_shell.core.context import ShellContext
from convex_shell.core.namespace import FunctionLeaf, NamespaceNode
from convex_shell.utils.diagnostics import ShellError

EXIT_COMMAND = ".exit"

class ConvexShellREPL:
    def __init__(
        self,
        is_prod: bool = False,
        cli: Optional[Any] = None,
        config_path: Optional[Path] = None,
    ):
        self.is_prod = is_prod

        config_data = load_config(config_path or Path.cwd() / CONFIG_FILE_NAME)
        self.context = ShellContext(config_dict=config_data, is_prod=is_prod, cli=cli)
        OutputFormatter.configure(self.context.settings.log_level)

        self.namespace: Dict[str, Any] = {
            "update": self.update,
            "help": self.help,
        }
        self.prompt_session: Optional[PromptSession] = None

    def update(self) -> None:
        """
        Refresh the function list and rebind `api`/`internal`.
        Failures are reported by the fetcher and propagate to the caller.
        """
        self.context.update()
        self.namespace["api"] = self.context.api
        self.namespace["internal"] = self.context.internal
        OutputFormatter.log(
            "Ready! Type help() for usage information or use Tab for autocomplete.",
            severity="success",
        )

    def help(self) -> None:
        deployment_type = "PRODUCTION" if self.is_prod else "dev"
        typer.echo("\n=== Convex Shell Help ===\n")
        typer.echo(f"Deployment: {deployment_type} ({self.context.deployment_name})")
        typer.echo("\nAvailable commands:")
        typer.echo("  update()     - Refresh function list from Convex")
        typer.echo("  help()       - Show this help message")
        typer.echo("  .exit        - Exit the shell")
        typer.echo("\nAvailable objects:")
        typer.echo("  api          - Public functions")
        typer.echo("  internal     - Internal functions")

        for binding, title in (("api", "Public modules (api):"), ("internal", "Internal modules (internal):")):
            modules = self.context.modules(binding)
            if modules:
                typer.echo(f"\n{title}")
                for module in modules:
                    typer.echo(f"  {binding}.{module}")

        typer.echo("\nTips:")
        typer.echo("  - Use Tab for autocomplete")
        typer.echo("  - Type a function name to see its signature")
        typer.echo("  - Call functions with: functionName({'arg1': value1, ...}) or functionName(arg1=value1)")
        typer.echo("  - Example: internal.utils.actions.helloWorld({})")
        typer.echo("")

    def start(self) -> None:
        """
        Load the function list, then run the loop until `.exit` or EOF.
        A failing initial load propagates to the caller.
        """
        self.update()

        deployment_type = "PRODUCTION" if self.is_prod else "dev"
        OutputFormatter.log("Convex Shell - Interactive Function Explorer", severity="info")
        OutputFormatter.log(f"Deployment: {deployment_type}", severity="info")

        if sys.stdin.isatty():
            self.prompt_session = PromptSession(
                completer=NamespaceCompleter(self.context.roots),
                complete_while_typing=False,
            )

        while True:
            try:
                if self.prompt_session is not None:
                    command_line = self.prompt_session.prompt(self.context.prompt)
                else:
                    command_line = typer.prompt(
                        self.context.prompt.rstrip(), prompt_suffix=" ", default="", show_default=False
                    )

                if not command_line or not command_line.strip():
                    continue

                if not self.handle_line(command_line):
                    break

            except (KeyboardInterrupt, EOFError, typer.Abort):
                OutputFormatter.log("Goodbye!", severity="info")
                break

    def handle_line(self, line: str) -> bool:
        """
        Evaluate one line. Returns False to signal REPL exit, True to continue.
        """
        source = line.strip()
        if source == EXIT_COMMAND:
            OutputFormatter.log("Goodbye!", severity="info")
            return False

        try:
            result = self.evaluate(source)
        except ShellError:
            # Already reported with its captured stderr where it was raised.
            return True
        except Exception as e:
            OutputFormatter.log(f"{type(e).__name__}: {e}", severity="error")
            return True

        self.display(result)
        return True

    def evaluate(self, source: str) -> Any:
        """
        Evaluate an expression in the session namespace, falling back to
        executing it as a statement (e.g. `x = api.users.list()`).
        """
        try:
            code = compile(source, "<convex-shell>", "eval")
        except SyntaxError:
            code = compile(source, "<convex-shell>", "exec")
            exec(code, self.namespace)
            return None

        return eval(code, self.namespace)

    def display(self, result: Any) -> None:
        if result is None:
            return
        if isinstance(result, (FunctionLeaf, NamespaceNode)):
            typer.echo(repr(result))
            return
        OutputFormatter.print_data(result)
