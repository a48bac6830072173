import json
from typing import Any, List, Protocol
from pydantic import BaseModel, Field, ValidationError

from convex_shell.cli.formatter import OutputFormatter
from convex_shell.core.models import VISIBILITY_KINDS, FunctionDescriptor, FunctionSpecDocument
from convex_shell.core.naming import extract_deployment_name
from convex_shell.utils.diagnostics import ShellDiagnostic, SpecFetchError


class SpecSource(Protocol):
    prod: bool

    def function_spec(self) -> str:
        ...


class FunctionSpecResult(BaseModel):
    url: str
    deployment_name: str
    functions: List[FunctionDescriptor] = Field(default_factory=list)
    skipped_count: int = 0
    total_count: int = 0
    diagnostics: List[ShellDiagnostic] = Field(default_factory=list)

    def by_visibility(self, kind: str) -> List[FunctionDescriptor]:
        return [f for f in self.functions if f.visibility.kind == kind]

    @property
    def public_functions(self) -> List[FunctionDescriptor]:
        return self.by_visibility("public")

    @property
    def internal_functions(self) -> List[FunctionDescriptor]:
        return self.by_visibility("internal")


def has_usable_visibility(raw: Any) -> bool:
    if not isinstance(raw, dict):
        return False
    visibility = raw.get("visibility")
    return isinstance(visibility, dict) and visibility.get("kind") in VISIBILITY_KINDS


def parse_function_spec(output: str) -> FunctionSpecResult:
    """
    Parse the stdout of `convex function-spec`.

    Entries without a usable visibility are counted and dropped. Entries that
    fail validation otherwise are dropped with a diagnostic.
    Raises SpecFetchError if the document itself is unusable.
    """
    try:
        payload = json.loads(output)
    except ValueError as exc:
        raise SpecFetchError(f"Invalid function spec JSON: {exc}") from exc

    try:
        document = FunctionSpecDocument.model_validate(payload)
    except ValidationError as exc:
        raise SpecFetchError(f"Unexpected function spec document: {exc}") from exc

    functions: List[FunctionDescriptor] = []
    diagnostics: List[ShellDiagnostic] = []
    skipped = 0

    for raw in document.functions:
        if not has_usable_visibility(raw):
            skipped += 1
            continue

        try:
            functions.append(FunctionDescriptor.model_validate(raw))
        except ValidationError as exc:
            diagnostics.append(ShellDiagnostic(
                identifier=str(raw.get("identifier") or "<unknown>"),
                error_code="ERR_INVALID_DESCRIPTOR",
                message=f"{exc.error_count()} validation error(s): {exc.errors()[0]['msg']}",
                suggestion="Check the output of `convex function-spec` for this function.",
            ))

    return FunctionSpecResult(
        url=document.url,
        deployment_name=extract_deployment_name(document.url),
        functions=functions,
        skipped_count=skipped,
        total_count=len(document.functions),
        diagnostics=diagnostics,
    )


class SpecFetcher:
    """
    Fetches function descriptors for one deployment.
    """
    def __init__(self, source: SpecSource):
        self.source = source

    def fetch(self) -> FunctionSpecResult:
        deployment_type = "production" if self.source.prod else "dev"
        OutputFormatter.log(f"Fetching function specs from Convex ({deployment_type})...", severity="info")

        try:
            result = parse_function_spec(self.source.function_spec())
        except SpecFetchError as exc:
            OutputFormatter.log(f"Error fetching function specs: {exc.message}", severity="error")
            if exc.stderr:
                OutputFormatter.log(f"stderr: {exc.stderr}", severity="error")
            raise

        OutputFormatter.log(f"Loaded {result.total_count} functions from {result.url}", severity="success")
        if result.skipped_count > 0:
            OutputFormatter.log(
                f"  (skipped {result.skipped_count} functions without visibility information)",
                severity="info",
            )
        if result.diagnostics:
            OutputFormatter.print_diagnostics(result.diagnostics)

        OutputFormatter.log(f"  - {len(result.public_functions)} public functions (api)", severity="info")
        OutputFormatter.log(f"  - {len(result.internal_functions)} internal functions (internal)", severity="info")
        return result
