"""Downloader for repositories that live on the local filesystem."""
import logging
import shutil
from pathlib import Path
from typing import Optional, Union

from reposync.downloader.base import Downloader
from reposync.git import protocol
from reposync.git.executor import GitExecutor

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class LocalDownloader(Downloader):
    """Copies a repository from a directory instead of cloning it.

    There is no remote to fetch from, so updating re-copies the source.
    """

    def __init__(self, path: PathLike, executor: Optional[GitExecutor] = None):
        super().__init__(executor)
        self.path = Path(path)

    def fetch_file(self, path: PathLike, filename: str, dst_dir: PathLike) -> Path:
        src_path = self.path / filename
        dst_path = Path(dst_dir) / filename

        logger.debug(f"Fetching file {src_path} to {dst_path}")
        dst_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src_path, dst_path)
        return dst_path

    def update_repo(self, path: PathLike, branch_name: str) -> None:
        shutil.rmtree(path, ignore_errors=True)
        self.download_repo(branch_name, path)

    def download_repo(self, commit: str, dst_path: PathLike) -> None:
        logger.info(f"Downloading local repository {self.path}")
        shutil.copytree(self.path, dst_path, symlinks=True)
        protocol.checkout(self.executor, dst_path, commit)

    def fixup_origin(self, path: PathLike) -> bool:
        return False
