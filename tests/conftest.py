import copy
import json
import pytest
import sys
from pathlib import Path

# Ensure src/ is in the python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from convex_shell.cli.formatter import OutputFormatter
from convex_shell.utils.diagnostics import FunctionInvocationError, SpecFetchError

SAMPLE_SPEC = {
    "url": "https://happy-otter-123.convex.cloud",
    "functions": [
        {
            "identifier": "users/queries.js:list",
            "functionType": "Query",
            "args": {
                "type": "object",
                "value": {"limit": {"fieldType": {"type": "number"}, "optional": True}},
            },
            "returns": {"type": "any"},
            "visibility": {"kind": "public"},
        },
        {
            "identifier": "users/mutations.js:remove",
            "functionType": "Mutation",
            "args": {
                "type": "object",
                "value": {"id": {"fieldType": {"type": "id", "tableName": "users"}, "optional": False}},
            },
            "returns": {"type": "null"},
            "visibility": {"kind": "public"},
        },
        {
            "identifier": "utils/actions.js:helloWorld",
            "functionType": "Action",
            "args": {"type": "object", "value": {}},
            "returns": {"type": "any"},
            "visibility": {"kind": "internal"},
        },
        {
            "identifier": "http.js:GET /health",
            "functionType": "HttpAction",
        },
    ],
}


class FakeCLI:
    """Stands in for ConvexCLI: records calls and replays canned output."""

    def __init__(self, spec=None, prod=False):
        self.prod = prod
        self.spec_output = json.dumps(spec if spec is not None else SAMPLE_SPEC)
        self.spec_error = None
        self.run_results = {}
        self.run_error = None
        self.calls = []

    def function_spec(self) -> str:
        self.calls.append(("function-spec",))
        if self.spec_error is not None:
            raise self.spec_error
        return self.spec_output

    def run_function(self, run_path, args=None):
        self.calls.append(("run", run_path, args))
        if self.run_error is not None:
            raise self.run_error
        return self.run_results.get(run_path, {"ok": True})


@pytest.fixture(autouse=True)
def reset_log_level():
    OutputFormatter.configure("INFO")
    yield
    OutputFormatter.configure("INFO")


@pytest.fixture
def sample_spec():
    return copy.deepcopy(SAMPLE_SPEC)


@pytest.fixture
def fake_cli():
    return FakeCLI()


@pytest.fixture
def failing_spec_error():
    return SpecFetchError("Command '['npx', 'convex', 'function-spec']' returned non-zero exit status 1.", stderr="not logged in")


@pytest.fixture
def failing_run_error():
    return FunctionInvocationError("boom", run_path="users/queries:list", stderr="Uncaught Error")


@pytest.fixture
def make_fake_cli():
    return FakeCLI
