"""Git command executor: the only place reposync spawns a subprocess."""
import logging
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Union

from reposync.core.errors import CommandFailedError, ToolNotFoundError

logger = logging.getLogger(__name__)

REDACTED = "<password-hidden>"

PathLike = Union[str, Path]


def redact_text(text: str, secrets: Sequence[str]) -> str:
    """Replace every non-empty secret in text with a placeholder."""
    for secret in secrets:
        if secret:
            text = text.replace(secret, REDACTED)
    return text


def format_command(args: Sequence[str], secrets: Sequence[str] = ()) -> str:
    """Render a git command line for logging, with secrets hidden."""
    return redact_text(
        " ".join(shlex.quote(part) for part in ["git", *args]), secrets
    )


class GitExecutor:
    """Runs git commands rooted at a working directory.

    The working directory is handed to the child process rather than
    changed for the whole process, so executors used on distinct
    working copies do not interfere with each other.
    """

    def __init__(self, binary: str = "git"):
        self.binary = binary
        self._git_path: Optional[str] = None

    def git_path(self) -> str:
        """Locate the git binary on the search path (once per executor).

        Raises:
            ToolNotFoundError: If the binary is not on the search path
        """
        if self._git_path is None:
            found = shutil.which(self.binary)
            if found is None:
                raise ToolNotFoundError(
                    f"Can't find git binary: '{self.binary}' is not on PATH"
                )
            self._git_path = Path(found).as_posix()
        return self._git_path

    def _argv(self, args: Sequence[str]) -> List[str]:
        return [self.git_path(), *args]

    def run(
        self,
        repo_dir: Optional[PathLike],
        args: Sequence[str],
        *,
        log_cmd: bool = True,
        redact: Sequence[str] = (),
    ) -> bytes:
        """Run a git command and return its standard output.

        Args:
            repo_dir: Working directory for the command (None: current)
            args: Git arguments, without the binary itself
            log_cmd: Echo the command at DEBUG level
            redact: Strings hidden from logged commands and error text

        Returns:
            Captured stdout as bytes

        Raises:
            ToolNotFoundError: If git is not installed
            CommandFailedError: If git exits non-zero or cannot be started
        """
        argv = self._argv(args)
        if log_cmd:
            logger.debug(f"Executing: {format_command(args, redact)}")

        try:
            result = subprocess.run(
                argv,
                cwd=str(repo_dir) if repo_dir is not None else None,
                capture_output=True,
                check=False,
            )
        except OSError as e:
            raise CommandFailedError(
                [redact_text(a, redact) for a in args],
                -1,
                stderr=redact_text(str(e), redact),
            ) from e

        if result.returncode != 0:
            raise CommandFailedError(
                [redact_text(a, redact) for a in args],
                result.returncode,
                stdout=redact_text(
                    result.stdout.decode("utf-8", errors="replace"), redact
                ),
                stderr=redact_text(
                    result.stderr.decode("utf-8", errors="replace"), redact
                ),
            )

        return result.stdout

    def run_interactive(
        self,
        repo_dir: Optional[PathLike],
        args: Sequence[str],
        *,
        redact: Sequence[str] = (),
    ) -> None:
        """Run a git command with its output attached to the terminal."""
        argv = self._argv(args)
        logger.debug(f"Executing: {format_command(args, redact)}")

        try:
            result = subprocess.run(
                argv,
                cwd=str(repo_dir) if repo_dir is not None else None,
                check=False,
            )
        except OSError as e:
            raise CommandFailedError(
                [redact_text(a, redact) for a in args],
                -1,
                stderr=redact_text(str(e), redact),
            ) from e

        if result.returncode != 0:
            raise CommandFailedError(
                [redact_text(a, redact) for a in args],
                result.returncode,
                stderr="output already streamed above",
            )
