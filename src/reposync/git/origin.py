"""Credential injection for private repos and repair of the origin remote.

Credentials are written into the working copy's ``origin`` URL only for
the duration of one authenticated command; the public URL is restored
afterwards so that no password is left in ``.git/config``.
"""
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, Sequence, Tuple, Union

from reposync.core.errors import GitOperationError
from reposync.git.executor import GitExecutor, format_command, redact_text
from reposync.git.protocol import (
    get_remote_url,
    set_remote_url_cmd,
    set_remote_url,
    warn_wrong_origin_url,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

DEFAULT_SERVER = "github.com"


def fixup_origin(
    executor: GitExecutor,
    repo_dir: PathLike,
    expected_url: str,
    set_url: Callable[[PathLike, str], None],
    secrets: Sequence[str] = (),
) -> bool:
    """Point ``origin`` back at expected_url if it drifted elsewhere.

    Emits one warning naming both URLs whenever a rewrite happens.

    Returns:
        True if origin had to be rewritten
    """
    cur_url = get_remote_url(executor, repo_dir, "origin")
    if cur_url == expected_url:
        return False

    warn_wrong_origin_url(
        repo_dir, redact_text(cur_url, secrets), redact_text(expected_url, secrets)
    )
    set_url(repo_dir, expected_url)
    return True


class OriginManager:
    """Computes remote URLs for a hosted repo and manages its ``origin``."""

    def __init__(
        self,
        executor: GitExecutor,
        user: str,
        repo: str,
        server: str = "",
        login: str = "",
        password: str = "",
        password_env: str = "",
    ):
        self.executor = executor
        self.server = server
        self.user = user
        self.repo = repo
        self.login = login
        self._password = password
        self.password_env = password_env

    def password(self) -> str:
        """The literal password, else the named environment variable, else ''."""
        if self._password:
            return self._password
        if self.password_env:
            return os.environ.get(self.password_env, "")
        return ""

    def secrets(self) -> Tuple[str, ...]:
        pw = self.password()
        return (pw,) if pw else ()

    def remote_urls(self) -> Tuple[str, str]:
        """Return (authenticated URL, public URL).

        The two are equal when no login is configured.
        """
        server = self.server or DEFAULT_SERVER

        auth = ""
        if self.login:
            auth = f"{self.login}:{self.password()}@"

        url = f"https://{auth}{server}/{self.user}/{self.repo}.git"
        public_url = f"https://{server}/{self.user}/{self.repo}.git"
        return url, public_url

    def set_origin_url(self, repo_dir: PathLike, url: str) -> None:
        # The executor must not echo the URL; log a redacted copy instead.
        logger.debug(
            f"Executing: {format_command(set_remote_url_cmd('origin', url), self.secrets())}"
        )
        set_remote_url(
            self.executor, repo_dir, "origin", url, log_cmd=False, redact=self.secrets()
        )

    def set_remote_auth(self, repo_dir: PathLike) -> None:
        url, public_url = self.remote_urls()
        if url == public_url:
            return
        self.set_origin_url(repo_dir, url)

    def clear_remote_auth(self, repo_dir: PathLike) -> None:
        url, public_url = self.remote_urls()
        if url == public_url:
            return
        self.set_origin_url(repo_dir, public_url)

    @contextmanager
    def authenticated(self, repo_dir: PathLike) -> Iterator[None]:
        """Run the enclosed block with credentials in the origin URL.

        The public URL is restored on every exit path. A failed restore is
        only logged so it cannot mask the outcome of the block.
        """
        self.set_remote_auth(repo_dir)
        try:
            yield
        finally:
            self.restore_public_url(repo_dir)

    def restore_public_url(self, repo_dir: PathLike) -> None:
        """clear_remote_auth() for cleanup paths: failures are logged, not raised."""
        try:
            self.clear_remote_auth(repo_dir)
        except GitOperationError as e:
            logger.warning(f"Failed to restore public origin URL in {repo_dir}: {e}")

    def authenticated_command(self, repo_dir: PathLike, args: Sequence[str]) -> bytes:
        with self.authenticated(repo_dir):
            return self.executor.run(repo_dir, args, redact=self.secrets())

    def fixup_origin(self, repo_dir: PathLike) -> bool:
        """Reset origin to the public URL (never the authenticated one)."""
        _, public_url = self.remote_urls()
        return fixup_origin(
            self.executor, repo_dir, public_url, self.set_origin_url, self.secrets()
        )
