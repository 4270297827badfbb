"""Downloader for repositories hosted on GitHub (or a compatible server)."""
import logging
from pathlib import Path
from typing import Optional, Union

from reposync.downloader.base import Downloader
from reposync.git import protocol
from reposync.git.executor import GitExecutor
from reposync.git.origin import OriginManager

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class GithubDownloader(Downloader):
    """Hosted-service downloader.

    Private repos authenticate by embedding login and password in the
    origin URL for the duration of each network command.
    """

    def __init__(
        self,
        user: str = "",
        repo: str = "",
        server: str = "",
        login: str = "",
        password: str = "",
        password_env: str = "",
        executor: Optional[GitExecutor] = None,
    ):
        super().__init__(executor)
        self.origin = OriginManager(
            self.executor,
            user=user,
            repo=repo,
            server=server,
            login=login,
            password=password,
            password_env=password_env,
        )

    @property
    def repo(self) -> str:
        return self.origin.repo

    def remote_urls(self):
        return self.origin.remote_urls()

    def fetch(self, repo_dir: PathLike) -> None:
        def _fetch():
            logger.debug(f"Fetching repo {self.repo}")
            self.origin.authenticated_command(repo_dir, ["fetch", "--tags"])

        self.fetch_cache.cached_fetch(_fetch)

    def fetch_file(self, path: PathLike, filename: str, dst_dir: PathLike) -> Path:
        self.fetch(path)
        return protocol.show_file(
            self.executor, path, self.get_commit(), filename, dst_dir
        )

    def update_repo(self, path: PathLike, branch_name: str) -> None:
        self.fetch(path)
        protocol.update(self.executor, path, branch_name)
        protocol.checkout(self.executor, path, branch_name)

    def download_repo(self, commit: str, dst_path: PathLike) -> None:
        url, public_url = self.remote_urls()

        logger.info(
            f"Downloading repository {self.repo} (commit: {commit}) from {public_url}"
        )
        self._clone(url, dst_path, redact=self.origin.secrets())

        # The clone stored the authenticated URL as origin.
        try:
            protocol.checkout(self.executor, dst_path, commit)
        finally:
            self.origin.restore_public_url(dst_path)

    def fixup_origin(self, path: PathLike) -> bool:
        return self.origin.fixup_origin(path)
