"""Checkout, merge and update of a working copy, plus working-copy queries."""
import logging
from pathlib import Path
from typing import List, Sequence, Union

from reposync.core.errors import RepoSyncError
from reposync.git.executor import GitExecutor
from reposync.git.refs import HEADS_PREFIX, CommitKind, classify, qualify

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def init_submodules(executor: GitExecutor, repo_dir: PathLike) -> None:
    executor.run(repo_dir, ["submodule", "init"])


def update_submodules(executor: GitExecutor, repo_dir: PathLike) -> None:
    executor.run(repo_dir, ["submodule", "update"])


def checkout(executor: GitExecutor, repo_dir: PathLike, ref: str) -> None:
    """Check out ref, creating a local branch when ref is a tag.

    Tags get a new local branch of the same name so that later updates
    have a branch to merge into. Hashes end up in detached HEAD state.
    Submodules are always initialized and updated afterwards so the repo
    does not look modified right after switching commits; this is free
    when they are already current.

    Raises:
        UnresolvableRefError: If ref cannot be classified
        CommandFailedError: If checkout or a submodule step fails
    """
    kind = classify(executor, repo_dir, ref)
    full = qualify(ref, kind)

    if kind is CommitKind.TAG:
        logger.debug(f"Will create new branch {ref} from {full}")
        cmd = ["checkout", full, "-b", ref]
    else:
        # The raw name lets git create a tracking branch for remote-only branches.
        logger.debug(f"Will checkout {full}")
        cmd = ["checkout", ref]
    executor.run(repo_dir, cmd)

    init_submodules(executor, repo_dir)
    update_submodules(executor, repo_dir)


def merge(executor: GitExecutor, repo_dir: PathLike, ref: str) -> None:
    """Merge the upstream version of ref into the working copy.

    A local branch is merged from its ``origin`` counterpart. Only
    meaningful after a fetch.
    """
    kind = classify(executor, repo_dir, ref)
    if kind is CommitKind.LOCAL_BRANCH:
        kind = CommitKind.REMOTE_BRANCH
    full = qualify(ref, kind)

    executor.run(repo_dir, ["merge", "--no-commit", "--no-ff", full])
    logger.debug(f"Merging changes from {full}")


def try_merge(executor: GitExecutor, repo_dir: PathLike, ref: str) -> bool:
    """Attempt merge() and discard its failure.

    A branch that no longer exists at origin must not block the update,
    so the working copy stays wherever the preceding checkout left it.

    Returns:
        True if the merge succeeded
    """
    try:
        merge(executor, repo_dir, ref)
    except RepoSyncError as e:
        logger.debug(f"Merging changes from {ref} failed, keeping checkout: {e}")
        return False
    return True


def update(executor: GitExecutor, repo_dir: PathLike, ref: str) -> bool:
    """Check out ref, then merge its upstream changes on a best-effort basis.

    Only a checkout failure is raised.

    Returns:
        True if the merge step succeeded
    """
    checkout(executor, repo_dir, ref)
    return try_merge(executor, repo_dir, ref)


def _lookup_name(executor: GitExecutor, repo_dir: PathLike, ref: str) -> str:
    """Qualified name of ref for read-only lookups.

    A tag checkout leaves a branch and a tag sharing one name, and git's
    revision lookup prefers the tag, so local branches are spelled out.
    """
    kind = classify(executor, repo_dir, ref)
    if kind is CommitKind.LOCAL_BRANCH:
        return HEADS_PREFIX + ref
    return qualify(ref, kind)


def show_file(
    executor: GitExecutor,
    repo_dir: PathLike,
    ref: str,
    filename: str,
    dst_dir: PathLike,
) -> Path:
    """Write filename as of ref into dst_dir, creating dst_dir if needed.

    Returns:
        Path of the written file
    """
    dst_dir = Path(dst_dir)
    dst_dir.mkdir(parents=True, exist_ok=True)

    full = _lookup_name(executor, repo_dir, ref)
    dst_path = dst_dir / filename

    logger.debug(f"Fetching file {filename} to {dst_path}")
    data = executor.run(repo_dir, ["show", f"{full}:{filename}"])
    dst_path.parent.mkdir(parents=True, exist_ok=True)
    dst_path.write_bytes(data)
    return dst_path


def are_changes(executor: GitExecutor, repo_dir: PathLike) -> bool:
    """Whether the working tree has unstaged modifications."""
    output = executor.run(repo_dir, ["diff", "--name-only"])
    return len(output) > 0


def hash_for(executor: GitExecutor, repo_dir: PathLike, ref: str) -> str:
    """Return the hash of the commit that ref resolves to.

    Annotated tags are peeled to their commit.
    """
    full = _lookup_name(executor, repo_dir, ref)
    output = executor.run(repo_dir, ["rev-parse", f"{full}^{{commit}}"])
    return output.decode("utf-8").strip()


def commits_for(executor: GitExecutor, repo_dir: PathLike, ref: str) -> List[str]:
    """Return the hash of ref plus every branch and tag pointing at it, sorted."""
    commit_hash = hash_for(executor, repo_dir, ref)

    output = executor.run(
        repo_dir,
        ["for-each-ref", "--format=%(refname:short)", "--points-at", commit_hash],
    )
    names = [commit_hash]
    text = output.decode("utf-8").strip()
    if text:
        names.extend(text.split("\n"))

    return sorted(names)


def get_remote_url(executor: GitExecutor, repo_dir: PathLike, remote: str) -> str:
    output = executor.run(repo_dir, ["remote", "get-url", remote])
    return output.decode("utf-8").strip()


def set_remote_url_cmd(remote: str, url: str) -> List[str]:
    return ["remote", "set-url", remote, url]


def set_remote_url(
    executor: GitExecutor,
    repo_dir: PathLike,
    remote: str,
    url: str,
    log_cmd: bool = True,
    redact: Sequence[str] = (),
) -> None:
    executor.run(
        repo_dir, set_remote_url_cmd(remote, url), log_cmd=log_cmd, redact=redact
    )


def warn_wrong_origin_url(repo_dir: PathLike, cur_url: str, good_url: str) -> None:
    logger.warning(
        f'Repo at {repo_dir}: "origin" remote points to unexpected URL: '
        f"{cur_url}; correcting it to {good_url}.  "
        f"Repo contents may be incorrect."
    )
