import re
from typing import Callable, List, Mapping, Tuple

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from convex_shell.core.namespace import NamespaceNode, children, resolve
from convex_shell.core.naming import TOP_LEVEL_BINDINGS

# "api.users.queries.li" -> root expression "api.users.queries", partial "li"
PROPERTY_CHAIN_PATTERN = re.compile(
    r"\b((?:api|internal)(?:\.[A-Za-z_][A-Za-z0-9_]*)*)\.([A-Za-z0-9_]*)$"
)


def complete_line(line: str, roots: Mapping[str, NamespaceNode]) -> Tuple[List[str], str]:
    """
    Return (candidates, partial) for the text typed so far.

    Inside an `api.`/`internal.` chain the candidates are the children of the
    resolved node that start with the partial segment, or all children if none
    do. Anywhere else, including a chain that does not end at a module,
    the top-level bindings are offered.
    """
    if not line or not line.strip():
        return list(TOP_LEVEL_BINDINGS), line

    match = PROPERTY_CHAIN_PATTERN.search(line)
    if match:
        expression, partial = match.group(1), match.group(2)
        binding, _, rest = expression.partition(".")
        root = roots.get(binding)
        node = resolve(root, rest, quiet=True) if root is not None else None
        if isinstance(node, NamespaceNode):
            keys = children(node)
            hits = [key for key in keys if key.startswith(partial)]
            return (hits or keys), partial

    tokens = line.split()
    last_token = tokens[-1] if tokens and not line[-1].isspace() else ""
    hits = [name for name in TOP_LEVEL_BINDINGS if name.startswith(last_token)]
    return (hits or list(TOP_LEVEL_BINDINGS)), last_token


class NamespaceCompleter(Completer):
    """
    prompt_toolkit completer over the live namespace trees. `roots_provider`
    is called on every keystroke so completion follows `update()`.
    """

    def __init__(self, roots_provider: Callable[[], Mapping[str, NamespaceNode]]):
        self.roots_provider = roots_provider

    def get_completions(self, document: Document, complete_event):
        candidates, partial = complete_line(document.text_before_cursor, self.roots_provider())
        for candidate in candidates:
            yield Completion(candidate, start_position=-len(partial))
