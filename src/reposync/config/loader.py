"""Select and parametrize a downloader from a repository entry."""
import logging
from typing import Dict, Mapping, Optional, Type, TypeVar

from pydantic import ValidationError

from reposync.config.models import (
    GitRepoConfig,
    GithubRepoConfig,
    LocalRepoConfig,
    RepoConfig,
)
from reposync.config.project import CREDENTIAL_KEYS, Settings
from reposync.core.errors import ConfigurationError
from reposync.downloader import Downloader, GitDownloader, GithubDownloader, LocalDownloader
from reposync.git.executor import GitExecutor

logger = logging.getLogger(__name__)

ConfigT = TypeVar("ConfigT", bound=RepoConfig)


def load_error(message: str) -> ConfigurationError:
    return ConfigurationError(f"error loading project.yml: {message}")


def _validate(model: Type[ConfigT], repo_name: str, repo_vars: Mapping[str, str]) -> ConfigT:
    try:
        return model.model_validate(dict(repo_vars))
    except ValidationError as e:
        raise load_error(f'repo "{repo_name}" is invalid: {e}') from e


def _with_private_credentials(
    repo_name: str, repo_vars: Mapping[str, str], settings: Optional[Settings]
) -> Dict[str, str]:
    merged = dict(repo_vars)
    if settings is None:
        return merged

    # The project file is probably world-readable; credentials are better
    # kept in the private settings file, which fills in what is missing.
    private = settings.repo_credentials(repo_name)
    for key in CREDENTIAL_KEYS:
        if not merged.get(key) and key in private:
            merged[key] = private[key]
    return merged


def load_downloader(
    repo_name: str,
    repo_vars: Mapping[str, str],
    settings: Optional[Settings] = None,
    executor: Optional[GitExecutor] = None,
) -> Downloader:
    """Build the downloader described by a repository entry.

    Args:
        repo_name: Name of the repository in the project file
        repo_vars: The repository's string-valued configuration entry
        settings: Private settings supplying missing credentials
        executor: Git executor shared with the caller, if any

    Returns:
        A downloader whose commit is the entry's ``ref``

    Raises:
        ConfigurationError: If the type is unknown or a required field is missing
    """
    repo_type = repo_vars.get("type", "")

    if repo_type == "github":
        config = _validate(
            GithubRepoConfig,
            repo_name,
            _with_private_credentials(repo_name, repo_vars, settings),
        )
        downloader: Downloader = GithubDownloader(
            user=config.user,
            repo=config.repo,
            server=config.server,
            login=config.login,
            password=config.password,
            password_env=config.password_env,
            executor=executor,
        )

    elif repo_type == "git":
        if not repo_vars.get("url"):
            raise load_error(f'repo "{repo_name}" missing required field "url"')
        config = _validate(GitRepoConfig, repo_name, repo_vars)
        downloader = GitDownloader(config.url, executor=executor)

    elif repo_type == "local":
        if not repo_vars.get("path"):
            raise load_error(f'repo "{repo_name}" missing required field "path"')
        config = _validate(LocalRepoConfig, repo_name, repo_vars)
        downloader = LocalDownloader(config.path, executor=executor)

    else:
        raise load_error(f"invalid repository type: {repo_type}")

    downloader.set_commit(config.ref)
    logger.debug(f"Loaded {repo_type} downloader for {repo_name} at {config.ref}")
    return downloader
