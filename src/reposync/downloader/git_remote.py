"""Downloader for repositories reachable at an arbitrary git URL."""
import logging
from pathlib import Path
from typing import Optional, Union

from reposync.downloader.base import Downloader
from reposync.git import protocol
from reposync.git.executor import GitExecutor
from reposync.git.origin import fixup_origin

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class GitDownloader(Downloader):
    """Generic-remote downloader; the URL is used verbatim."""

    def __init__(self, url: str, executor: Optional[GitExecutor] = None):
        super().__init__(executor)
        self.url = url

    def fetch(self, repo_dir: PathLike) -> None:
        def _fetch():
            logger.debug(f"Fetching repo {self.url}")
            self.executor.run(repo_dir, ["fetch", "--tags"])

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
        logger.info(f"Downloading repository {self.url} (commit: {commit})")
        self._clone(self.url, dst_path)
        protocol.checkout(self.executor, dst_path, commit)

    def _set_origin_url(self, repo_dir: PathLike, url: str) -> None:
        protocol.set_remote_url(self.executor, repo_dir, "origin", url)

    def fixup_origin(self, path: PathLike) -> bool:
        return fixup_origin(self.executor, path, self.url, self._set_origin_url)
