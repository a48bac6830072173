from typing import Optional
from pydantic import BaseModel

class ShellDiagnostic(BaseModel):
    """
    Standardized report for a function descriptor that could not be loaded.
    """
    identifier: str
    error_code: str
    message: str
    severity: str = "warning" # 'error', 'warning', 'critical'
    suggestion: Optional[str] = None

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message} (at {self.identifier})"

class ShellError(Exception):
    """
    Base class for failures of the external Convex CLI.
    Carries the captured stderr of the process, if any.
    """
    def __init__(self, message: str, stderr: Optional[str] = None):
        self.message = message
        self.stderr = stderr
        super().__init__(message)

class SpecFetchError(ShellError):
    """
    Raised when `function-spec` fails or does not return a usable document.
    """

class FunctionInvocationError(ShellError):
    """
    Raised when `run` fails for a function.
    """
    def __init__(self, message: str, run_path: Optional[str] = None, stderr: Optional[str] = None):
        self.run_path = run_path
        super().__init__(message, stderr=stderr)
