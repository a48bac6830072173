import os
import re
import yaml
from pathlib import Path
from typing import Any, Dict, Mapping

CONFIG_FILE_NAME = "convex_shell.yaml"

CONFIG_SECTIONS = ("shell",)

ENV_REFERENCE = re.compile(r"\$\{(?P<name>[^}:]+)(?::(?P<default>[^}]+))?\}")


def expand_env_references(text: str) -> str:
    """Substitute `${NAME}` and `${NAME:fallback}` from the process environment."""
    return ENV_REFERENCE.sub(
        lambda ref: os.environ.get(ref.group("name"), ref.group("default") or ""),
        text,
    )


def read_config_document(path: Path) -> Mapping[str, Any]:
    """
    Parse the config file after environment expansion.
    A missing, unreadable or malformed file, or one whose top level
    is not a mapping, reads as an empty document.
    """
    try:
        text = path.read_text()
    except OSError:
        return {}

    try:
        document = yaml.safe_load(expand_env_references(text))
    except yaml.YAMLError:
        return {}

    return document if isinstance(document, dict) else {}


def load_config(path: Path) -> Dict[str, Dict[str, Any]]:
    """
    Return the known sections of `convex_shell.yaml`, each as a mapping.

    A section left empty (`shell:` with nothing under it) reads as {}.
    A section holding anything other than a mapping is dropped, as are
    unknown top-level keys.
    """
    document = read_config_document(path)

    sections: Dict[str, Dict[str, Any]] = {}
    for name in CONFIG_SECTIONS:
        if name not in document:
            continue
        body = document[name]
        if body is None:
            sections[name] = {}
        elif isinstance(body, dict):
            sections[name] = body
    return sections
