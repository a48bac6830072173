"""
Convex Function Shell.

Programmatic use::

    from convex_shell import update

    ctx = update()
    result = ctx.api.myModule.myFunction({"arg1": "value"})
"""
from __future__ import annotations

from pathlib import Path
from typing import Any

from convex_shell.config.loader import CONFIG_FILE_NAME, load_config
from convex_shell.core.context import ShellContext
from convex_shell.core.models import FunctionArg, FunctionDescriptor, ShellSettings
from convex_shell.core.namespace import (
    FunctionLeaf,
    NamespaceNode,
    build_namespace_tree,
    children,
    iter_leaves,
    resolve,
)
from convex_shell.core.naming import identifier_to_api_path, identifier_to_run_path
from convex_shell.core.signature import format_arg_type, format_return_type, format_signature
from convex_shell.discovery.spec_fetcher import FunctionSpecResult, SpecFetcher, parse_function_spec
from convex_shell.execution.runner import ConvexCLI
from convex_shell.utils.diagnostics import FunctionInvocationError, ShellError, SpecFetchError


def update(is_prod: bool = False, cli: Any | None = None, config_path: Path | None = None) -> ShellContext:
	"""Fetch the function spec and return a context with `api` and `internal` populated."""
	config_data = load_config(config_path or Path.cwd() / CONFIG_FILE_NAME)
	context = ShellContext(config_dict=config_data, is_prod=is_prod, cli=cli)
	context.update()
	return context


__all__ = [
	"ConvexCLI",
	"FunctionArg",
	"FunctionDescriptor",
	"FunctionInvocationError",
	"FunctionLeaf",
	"FunctionSpecResult",
	"NamespaceNode",
	"ShellContext",
	"ShellError",
	"ShellSettings",
	"SpecFetchError",
	"SpecFetcher",
	"build_namespace_tree",
	"children",
	"format_arg_type",
	"format_return_type",
	"format_signature",
	"identifier_to_api_path",
	"identifier_to_run_path",
	"iter_leaves",
	"parse_function_spec",
	"resolve",
	"update",
]
