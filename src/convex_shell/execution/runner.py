import json
import shlex
import subprocess
from typing import Any, Dict, List, Optional, Sequence

from convex_shell.cli.formatter import OutputFormatter
from convex_shell.utils.diagnostics import FunctionInvocationError, SpecFetchError

DEFAULT_COMMAND: tuple[str, ...] = ("npx", "convex")


class ConvexCLI:
    """
    Synchronous wrapper around the external `convex` CLI.

    Every call blocks until the process exits. There is no timeout; a hung
    CLI hangs the caller.
    """

    def __init__(self, command: Optional[Sequence[str]] = None, prod: bool = False):
        self.command: List[str] = list(command or DEFAULT_COMMAND)
        self.prod = prod

    @property
    def deployment_args(self) -> List[str]:
        return ["--prod"] if self.prod else []

    def build_spec_command(self) -> List[str]:
        return [*self.command, "function-spec", *self.deployment_args]

    def build_run_command(self, run_path: str, args_json: str) -> List[str]:
        return [*self.command, "run", *self.deployment_args, run_path, args_json]

    def function_spec(self) -> str:
        """
        Run `function-spec` and return its stdout.
        Raises SpecFetchError if the process cannot be started or exits non-zero.
        """
        argv = self.build_spec_command()
        OutputFormatter.log(f"Running: {shlex.join(argv)}", severity="debug")
        try:
            return self._capture(argv)
        except subprocess.CalledProcessError as exc:
            raise SpecFetchError(str(exc), stderr=exc.stderr) from exc
        except OSError as exc:
            raise SpecFetchError(f"Unable to start '{argv[0]}': {exc}") from exc

    def run_function(self, run_path: str, args: Optional[Dict[str, Any]] = None) -> Any:
        """
        Run one function and return its result.

        Output that parses as JSON is returned decoded, anything else is
        returned as stripped text.
        """
        args_json = json.dumps(args or {})
        argv = self.build_run_command(run_path, args_json)
        OutputFormatter.log(f"Running: {shlex.join(argv)}", severity="info")

        try:
            output = self._capture(argv)
        except subprocess.CalledProcessError as exc:
            self._report_failure(str(exc), exc.stderr)
            raise FunctionInvocationError(str(exc), run_path=run_path, stderr=exc.stderr) from exc
        except OSError as exc:
            message = f"Unable to start '{argv[0]}': {exc}"
            self._report_failure(message, None)
            raise FunctionInvocationError(message, run_path=run_path) from exc

        try:
            return json.loads(output)
        except ValueError:
            return output.strip()

    def _report_failure(self, message: str, stderr: Optional[str]) -> None:
        OutputFormatter.log(f"Error running function: {message}", severity="error")
        if stderr:
            OutputFormatter.log(f"stderr: {stderr}", severity="error")

    def _capture(self, argv: List[str]) -> str:
        completed = subprocess.run(argv, capture_output=True, text=True)
        completed.check_returncode()
        return completed.stdout
