import json
from typing import Any, Dict, Optional

from convex_shell.core.models import FunctionArg, FunctionDescriptor
from convex_shell.core.naming import identifier_to_run_path

NAMED_FIELD_TYPES = {"string", "number", "boolean", "array", "object", "union", "literal"}


def format_arg_type(arg: FunctionArg) -> str:
    """Render one argument validator, e.g. `Id<"users">?` for an optional id."""
    field_type = arg.field_type

    if field_type.type == "id":
        type_str = f'Id<"{field_type.table_name}">'
    elif field_type.type in NAMED_FIELD_TYPES:
        type_str = field_type.type
    else:
        type_str = field_type.type or "any"

    return f"{type_str}?" if arg.optional else type_str


def format_return_type(returns: Dict[str, Any]) -> str:
    if returns.get("type") == "any":
        return "any"
    return json.dumps(returns, separators=(",", ":"))


def format_signature(descriptor: FunctionDescriptor, run_path: Optional[str] = None) -> str:
    """
    Render the block shown when a function is evaluated without calling it:

        [Query] ---- users/queries:list
        Args: {
          limit: number?
        }
        Returns: any
    """
    path = run_path or identifier_to_run_path(descriptor.identifier)
    lines = [f"[{descriptor.function_type}] ---- {path}", "Args: {"]
    for name, arg in descriptor.args.value.items():
        lines.append(f"  {name}: {format_arg_type(arg)}")
    lines.append("}")
    lines.append(f"Returns: {format_return_type(descriptor.returns)}")
    return "\n".join(lines)
