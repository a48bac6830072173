import typer

from convex_shell.cli.repl import ConvexShellREPL
from convex_shell.utils.diagnostics import ShellError

EPILOG = """Examples:

  convex-shell              # Connect to dev deployment

  convex-shell --prod       # Connect to production deployment

Once in the shell: type help() for available commands, use Tab for autocomplete,
access functions via api.<path> or internal.<path>, type .exit to quit.
"""

app = typer.Typer(
    name="convex-shell",
    help="Convex Function Shell - Interactive REPL for Convex functions",
    add_completion=False,
    rich_markup_mode=None,
)


@app.command(
    epilog=EPILOG,
    context_settings={
        "help_option_names": ["-h", "--help"],
        "allow_extra_args": True,
        "ignore_unknown_options": True,
    },
)
def shell(
    ctx: typer.Context,
    prod: bool = typer.Option(False, "--prod", help="Connect to production deployment (default: dev)"),
):
    """
    Convex Function Shell - Interactive REPL for Convex functions.
    """
    repl = ConvexShellREPL(is_prod=prod)
    try:
        repl.start()
    except ShellError:
        raise typer.Exit(code=1)

if __name__ == "__main__":
    app()
