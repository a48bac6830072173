from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from convex_shell.core.models import ShellSettings
from convex_shell.core.namespace import NamespaceNode, build_namespace_tree, children
from convex_shell.core.naming import DEFAULT_DEPLOYMENT_NAME
from convex_shell.execution.runner import ConvexCLI


class ShellContext(BaseModel):
    """
    Session state of one shell: the target deployment and the two live
    namespace roots. Roots are replaced wholesale by `update()`, never
    mutated in place.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    settings: ShellSettings = Field(default_factory=ShellSettings)

    is_prod: bool = False

    # Deployment label shown in the prompt, e.g. "happy-otter-123"
    deployment_name: str = DEFAULT_DEPLOYMENT_NAME

    # External CLI used for both spec fetches and function calls
    cli: Optional[Any] = None

    api: Optional[NamespaceNode] = None
    internal: Optional[NamespaceNode] = None

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None, **data: Any):
        """
        Initialize the context, optionally with a configuration dictionary.
        """
        if config_dict and 'settings' not in data:
            data['settings'] = ShellSettings(**(config_dict.get('shell') or {}))

        super().__init__(**data)

    def model_post_init(self, __context: Any) -> None:
        if self.cli is None:
            self.cli = ConvexCLI(command=self.settings.command, prod=self.is_prod)

    @property
    def deployment_type(self) -> str:
        return "prod" if self.is_prod else "dev"

    @property
    def prompt(self) -> str:
        return f"{self.deployment_name}:{self.deployment_type}> "

    @property
    def is_loaded(self) -> bool:
        return self.api is not None and self.internal is not None

    def roots(self) -> Dict[str, NamespaceNode]:
        bindings: Dict[str, NamespaceNode] = {}
        if self.api is not None:
            bindings["api"] = self.api
        if self.internal is not None:
            bindings["internal"] = self.internal
        return bindings

    def modules(self, binding: str) -> List[str]:
        """Sorted top-level module names of the `api` or `internal` tree."""
        root = self.roots().get(binding)
        if root is None:
            return []
        return sorted(children(root))

    def apply(self, result) -> None:
        """Build both trees from a fetch result and swap them in."""
        limit = self.settings.preview_limit
        api = build_namespace_tree(result.functions, "public", self.cli, preview_limit=limit)
        internal = build_namespace_tree(result.functions, "internal", self.cli, preview_limit=limit)

        self.api = api
        self.internal = internal
        self.deployment_name = result.deployment_name

    def update(self):
        """
        Fetch the function spec and rebuild both trees.
        On failure the current trees are left untouched and the error propagates.
        """
        from convex_shell.discovery.spec_fetcher import SpecFetcher

        result = SpecFetcher(self.cli).fetch()
        self.apply(result)
        return result
