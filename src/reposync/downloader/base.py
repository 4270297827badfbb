"""Downloader interface shared by the github, git and local variants."""
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Union

from reposync.downloader.cache import FetchCache
from reposync.git import protocol
from reposync.git.executor import GitExecutor
from reposync.git.refs import CommitKind, classify

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Clones always start from this branch before checking out the target.
PRIMARY_BRANCH = "master"


class Downloader(ABC):
    """Fetches and synchronizes one repository's working copy.

    Holds the configured target reference and the per-run fetch latch.
    The git queries every variant answers the same way live here; the
    variant-specific transport is left to subclasses.
    """

    def __init__(self, executor: Optional[GitExecutor] = None):
        self.executor = executor or GitExecutor()
        self.fetch_cache = FetchCache()
        self._commit = ""

    def get_commit(self) -> str:
        return self._commit

    def set_commit(self, commit: str) -> None:
        self._commit = commit

    @abstractmethod
    def fetch_file(self, path: PathLike, filename: str, dst_dir: PathLike) -> Path:
        """Copy filename, as of the configured commit, into dst_dir."""

    @abstractmethod
    def download_repo(self, commit: str, dst_path: PathLike) -> None:
        """Create a working copy at dst_path and land it on commit."""

    @abstractmethod
    def update_repo(self, path: PathLike, branch_name: str) -> None:
        """Bring an existing working copy up to date with branch_name."""

    @abstractmethod
    def fixup_origin(self, path: PathLike) -> bool:
        """Repair the origin remote; returns True if it was rewritten."""

    def hash_for(self, path: PathLike, commit: str) -> str:
        return protocol.hash_for(self.executor, path, commit)

    def commits_for(self, path: PathLike, commit: str) -> List[str]:
        return protocol.commits_for(self.executor, path, commit)

    def are_changes(self, path: PathLike) -> bool:
        return protocol.are_changes(self.executor, path)

    def commit_type(self, path: PathLike, commit: str) -> CommitKind:
        return classify(self.executor, path, commit)

    def _clone(
        self,
        url: str,
        dst_path: PathLike,
        redact: tuple = (),
    ) -> None:
        args = ["clone", "-b", PRIMARY_BRANCH, url, str(dst_path)]
        if logger.isEnabledFor(logging.DEBUG):
            self.executor.run_interactive(None, args, redact=redact)
        else:
            self.executor.run(None, args, redact=redact)
