"""Project and settings files.

The project file names the repositories a project depends on::

    project.name: demo
    project.repositories:
        - widgets
    repository.widgets:
        type: github
        user: acme
        repo: widgets
        ref: v1.0

The settings file (``~/.reposync/repos.yml`` by default) is private to the
user and may hold credentials under the same ``repository.<name>`` keys.
"""
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping

import yaml
from pydantic import BaseModel, Field

from reposync.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

REPO_KEY_PREFIX = "repository."
CREDENTIAL_KEYS = ("login", "password", "password_env")
DEFAULT_SETTINGS_PATH = Path("~/.reposync/repos.yml")


def load_yaml_mapping(path: Path, required: bool = True) -> Dict[str, Any]:
    """Read a YAML file whose root must be a mapping.

    Args:
        path: File to read
        required: If False, a missing file yields an empty mapping

    Raises:
        ConfigurationError: If the file is missing (when required), is not
            valid YAML, or its root is not a mapping
    """
    path = Path(path).expanduser()
    if not path.exists():
        if required:
            raise ConfigurationError(f"Configuration file not found: {path}")
        logger.debug(f"No configuration file at {path}")
        return {}

    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Configuration file '{path}' must contain a mapping at the root")
    return dict(data)


def _repo_sections(data: Mapping[str, Any], source: Path) -> Dict[str, Dict[str, str]]:
    repos: Dict[str, Dict[str, str]] = {}
    for key, value in data.items():
        if not isinstance(key, str) or not key.startswith(REPO_KEY_PREFIX):
            continue
        name = key[len(REPO_KEY_PREFIX):]
        if not isinstance(value, Mapping):
            raise ConfigurationError(f"{source}: '{key}' must be a mapping")
        # Entries are string maps; YAML may have typed a version as a number.
        repos[name] = {
            str(k): "" if v is None else str(v) for k, v in value.items()
        }
    return repos


class Project(BaseModel):
    """Parsed project file."""

    name: str = Field(default="", description="Project name")
    repositories: List[str] = Field(default_factory=list, description="Repos the project uses")
    repos: Dict[str, Dict[str, str]] = Field(
        default_factory=dict, description="repository.<name> entries"
    )

    @classmethod
    def load(cls, path: Path) -> "Project":
        """Load a project file.

        Raises:
            ConfigurationError: If the file cannot be read or is malformed
        """
        path = Path(path)
        data = load_yaml_mapping(path)

        repositories = data.get("project.repositories") or []
        if not isinstance(repositories, list):
            raise ConfigurationError(f"{path}: 'project.repositories' must be a list")

        return cls(
            name=str(data.get("project.name", "")),
            repositories=[str(r) for r in repositories],
            repos=_repo_sections(data, path),
        )

    def repo_vars(self, name: str) -> Dict[str, str]:
        """Return the configuration entry for repository name.

        Raises:
            ConfigurationError: If the project has no such repository
        """
        if name not in self.repos:
            raise ConfigurationError(
                f'error loading project.yml: unknown repository "{name}"'
            )
        return dict(self.repos[name])


class Settings(BaseModel):
    """Parsed private settings file."""

    repos: Dict[str, Dict[str, str]] = Field(default_factory=dict)

    @classmethod
    def load(cls, path: Path = DEFAULT_SETTINGS_PATH) -> "Settings":
        """Load the settings file; a missing file means no settings."""
        path = Path(path)
        data = load_yaml_mapping(path, required=False)
        return cls(repos=_repo_sections(data, path))

    def repo_credentials(self, name: str) -> Dict[str, str]:
        """Return the login/password/password_env entries set for name."""
        entry = self.repos.get(name, {})
        return {key: entry[key] for key in CREDENTIAL_KEYS if entry.get(key)}
