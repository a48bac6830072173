"""
Namespace trees mirroring the remote module hierarchy.

A tree is a nest of plain dicts whose leaves are `FunctionLeaf` objects.
`NamespaceNode` wraps one of those dicts; sub-nodes are wrapped on first
access and memoized so that navigating the same path twice yields the same
object (completion and identity checks rely on this).

Children are reached with attribute access (`api.users.list`) or item access
(`api["my-module"]`). Node helpers live at module level so that no method
name can shadow a remote module or function called e.g. `get` or `list`.
"""
from collections.abc import Mapping
from typing import Any, Dict, Iterable, Iterator, List, Optional, Protocol, Sequence, Union

from convex_shell.cli.formatter import OutputFormatter
from convex_shell.core.models import FunctionDescriptor
from convex_shell.core.naming import (
    identifier_to_api_path,
    identifier_to_run_path,
    split_identifier_segments,
)
from convex_shell.core.signature import format_signature


class FunctionRunner(Protocol):
    def run_function(self, run_path: str, args: Optional[Dict[str, Any]] = None) -> Any:
        ...


class FunctionLeaf:
    """
    A remote function. Calling it runs the function through the CLI;
    its text representation is the function signature.
    """

    def __init__(self, descriptor: FunctionDescriptor, runner: FunctionRunner):
        self.descriptor = descriptor
        self.run_path = identifier_to_run_path(descriptor.identifier)
        self.api_path = identifier_to_api_path(descriptor.identifier)
        self._runner = runner

    def __call__(self, args: Optional[Mapping[str, Any]] = None, /, **kwargs: Any) -> Any:
        if args is not None and not isinstance(args, Mapping):
            raise TypeError(
                f"{self.api_path} expects an argument object, got {type(args).__name__}."
            )
        payload = dict(args or {})
        payload.update(kwargs)
        return self._runner.run_function(self.run_path, payload)

    def __str__(self) -> str:
        return format_signature(self.descriptor, self.run_path)

    __repr__ = __str__


TreeEntry = Union[Dict[str, Any], FunctionLeaf]


class NamespaceNode:
    """An internal node of a namespace tree."""

    def __init__(self, entries: Dict[str, TreeEntry], path: Sequence[str] = (), preview_limit: int = 10):
        self._entries = entries
        self._path = tuple(path)
        self._preview_limit = preview_limit
        self._wrapped: Dict[str, NamespaceNode] = {}

    def _child(self, name: str) -> Optional[Union["NamespaceNode", FunctionLeaf]]:
        value = self._entries.get(name)
        if isinstance(value, dict):
            node = self._wrapped.get(name)
            if node is None or node._entries is not value:
                node = NamespaceNode(value, self._path + (name,), self._preview_limit)
                self._wrapped[name] = node
            return node
        return value

    def _lookup(self, name: str) -> Optional[Union["NamespaceNode", FunctionLeaf]]:
        child = self._child(name)
        if child is None:
            OutputFormatter.log(
                f"Property '{name}' not found at path: {'.'.join(self._path)}",
                severity="warning",
            )
        return child

    def __getattr__(self, name: str):
        if name.startswith("_"):
            raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")
        return self._lookup(name)

    def __getitem__(self, name: str):
        return self._lookup(name)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __dir__(self) -> List[str]:
        return list(self._entries)

    def __repr__(self) -> str:
        keys = list(self._entries)
        if not keys:
            return "{}"
        more = ", ..." if len(keys) > self._preview_limit else ""
        return f"{{ {', '.join(keys[: self._preview_limit])}{more} }}"

    __str__ = __repr__


def node_path(node: NamespaceNode) -> str:
    return ".".join(node._path)


def children(node: NamespaceNode) -> List[str]:
    """Names of the immediate children, in insertion order."""
    return list(node._entries)


def resolve(
    node: NamespaceNode,
    path: Union[str, Iterable[str]],
    quiet: bool = False,
) -> Optional[Union[NamespaceNode, FunctionLeaf]]:
    """
    Walk a dotted path (or a sequence of segments) from `node`.
    Returns None when any segment is missing.
    """
    segments = path.split(".") if isinstance(path, str) else list(path)
    current: Any = node
    for segment in segments:
        if not segment:
            continue
        if not isinstance(current, NamespaceNode):
            return None
        current = current._child(segment) if quiet else current._lookup(segment)
        if current is None:
            return None
    return current


def iter_leaves(node: NamespaceNode) -> Iterator[FunctionLeaf]:
    for name in children(node):
        child = node._child(name)
        if isinstance(child, NamespaceNode):
            yield from iter_leaves(child)
        elif isinstance(child, FunctionLeaf):
            yield child


def build_namespace_tree(
    descriptors: Iterable[FunctionDescriptor],
    visibility: str,
    runner: FunctionRunner,
    preview_limit: int = 10,
) -> NamespaceNode:
    """
    Build the tree of all descriptors with the given visibility kind.

    When two descriptors land on the same path the later one wins.
    """
    tree: Dict[str, TreeEntry] = {}

    for descriptor in descriptors:
        if descriptor.visibility.kind != visibility:
            continue

        segments = split_identifier_segments(descriptor.identifier)
        if not segments:
            continue

        *parents, name = segments
        current = tree
        for part in parents:
            child = current.get(part)
            if not isinstance(child, dict):
                child = {}
                current[part] = child
            current = child

        current[name] = FunctionLeaf(descriptor, runner)

    return NamespaceNode(tree, preview_limit=preview_limit)
