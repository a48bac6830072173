import re
from typing import List, Optional

DEFAULT_DEPLOYMENT_NAME = "unknown"

TOP_LEVEL_BINDINGS: List[str] = ["api", "internal", "update", "help"]

MODULE_EXTENSIONS: tuple[str, ...] = (".js", ".ts", ".jsx", ".tsx", ".mjs", ".cjs")

DEPLOYMENT_URL_PATTERN = re.compile(r"https?://([^.]+)\.")

# Dots left in a module path after the extension is removed nest like slashes.
MODULE_SEPARATORS = re.compile(r"[/.]")


def _split_identifier(identifier: str) -> tuple[str, Optional[str]]:
    """Split `module/path.js:name` into the extension-less module path and the export name."""
    module, sep, export_name = identifier.rpartition(":")
    if not sep:
        module, export_name = identifier, None

    for extension in MODULE_EXTENSIONS:
        if module.endswith(extension):
            module = module[: -len(extension)]
            break

    return module, export_name


def identifier_to_run_path(identifier: str) -> str:
    """
    Convert a function identifier to the path accepted by `convex run`.

    "namespaceGrants/mutations.js:addNamespaceGrant" -> "namespaceGrants/mutations:addNamespaceGrant"
    """
    module, export_name = _split_identifier(identifier)
    if export_name is None:
        return module
    return f"{module}:{export_name}"


def identifier_to_api_path(identifier: str) -> str:
    """
    Convert a function identifier to its dotted namespace path.

    "namespaceGrants/mutations.js:addNamespaceGrant" -> "namespaceGrants.mutations.addNamespaceGrant"
    """
    return ".".join(split_identifier_segments(identifier))


def split_identifier_segments(identifier: str) -> List[str]:
    """Return the namespace path segments for an identifier."""
    module, export_name = _split_identifier(identifier)
    segments = [part for part in MODULE_SEPARATORS.split(module) if part]
    if export_name is not None:
        segments.append(export_name)
    return segments


def extract_deployment_name(url: str) -> str:
    """Extract the deployment label, e.g. "frugal-fox-192" from "https://frugal-fox-192.convex.cloud"."""
    match = DEPLOYMENT_URL_PATTERN.search(url or "")
    if match:
        return match.group(1)
    return DEFAULT_DEPLOYMENT_NAME
