from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


VISIBILITY_KINDS: tuple[str, ...] = ("public", "internal")


class ShellSettings(BaseSettings):
    """
    Shell settings (the 'shell' section in convex_shell.yaml).
    """
    model_config = SettingsConfigDict(env_prefix='CONVEX_SHELL_', extra='ignore')

    command: List[str] = Field(default_factory=lambda: ["npx", "convex"])
    log_level: str = "INFO"
    preview_limit: int = Field(default=10, ge=1)


class FieldType(BaseModel):
    """
    Validator description of one argument, e.g. {"type": "id", "tableName": "users"}.
    """
    model_config = ConfigDict(extra='allow', frozen=True, populate_by_name=True)

    type: Optional[str] = None
    table_name: Optional[str] = Field(default=None, alias="tableName")


class FunctionArg(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    field_type: FieldType = Field(default_factory=FieldType, alias="fieldType")
    optional: bool = False


class FunctionArgs(BaseModel):
    model_config = ConfigDict(extra='allow', frozen=True)

    type: str = "object"
    value: Dict[str, FunctionArg] = Field(default_factory=dict)


class Visibility(BaseModel):
    model_config = ConfigDict(extra='allow', frozen=True)

    kind: Literal["public", "internal"]


class FunctionDescriptor(BaseModel):
    """
    One function as reported by `convex function-spec`.
    """
    model_config = ConfigDict(extra='allow', frozen=True, populate_by_name=True)

    identifier: str = Field(..., min_length=1)
    function_type: str = Field(..., alias="functionType")
    args: FunctionArgs = Field(default_factory=FunctionArgs)
    returns: Dict[str, Any] = Field(default_factory=dict)
    visibility: Visibility

    @property
    def is_public(self) -> bool:
        return self.visibility.kind == "public"


class FunctionSpecDocument(BaseModel):
    """
    The raw document printed by `convex function-spec`. Functions are kept
    unvalidated so malformed entries can be filtered one by one.
    """
    model_config = ConfigDict(extra='allow')

    url: str
    functions: List[Any] = Field(default_factory=list)
