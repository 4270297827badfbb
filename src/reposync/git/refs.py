"""Reference classification and qualification.

A reference supplied by a project file can be a local branch, a branch
that only exists on ``origin``, a tag, or a raw commit hash. Git commands
need a differently prefixed name for each, so every operation first
classifies the raw string and then qualifies it.

Nothing here is cached: the kind of a name changes as the working copy
changes (checking out a tag creates a local branch of the same name).
"""
import logging
from enum import Enum
from pathlib import Path
from typing import Union

from reposync.core.errors import (
    CommandFailedError,
    UnknownKindError,
    UnresolvableRefError,
)
from reposync.git.executor import GitExecutor

logger = logging.getLogger(__name__)

REMOTE_PREFIX = "origin/"
TAG_PREFIX = "tags/"
HEADS_PREFIX = "heads/"


class CommitKind(Enum):
    """What a reference string names in a working copy."""

    REMOTE_BRANCH = "remote_branch"
    LOCAL_BRANCH = "local_branch"
    TAG = "tag"
    HASH = "hash"


def merge_base(executor: GitExecutor, repo_dir: Union[str, Path], ref: str) -> str:
    """Return the merge-base of ref with itself.

    Any resolvable commit-ish is its own merge-base, so this doubles as an
    existence probe.
    """
    output = executor.run(repo_dir, ["merge-base", ref, ref])
    return output.decode("utf-8").strip()


def _ref_exists(executor: GitExecutor, repo_dir: Union[str, Path], full_ref: str) -> bool:
    try:
        executor.run(repo_dir, ["show-ref", "--verify", "--quiet", full_ref])
    except CommandFailedError:
        return False
    return True


def branch_exists(executor: GitExecutor, repo_dir: Union[str, Path], name: str) -> bool:
    """Whether a local branch called name exists."""
    return _ref_exists(executor, repo_dir, f"refs/heads/{name}")


def tag_exists(executor: GitExecutor, repo_dir: Union[str, Path], name: str) -> bool:
    """Whether a tag called name exists."""
    return _ref_exists(executor, repo_dir, f"refs/tags/{name}")


def _resolves(executor: GitExecutor, repo_dir: Union[str, Path], ref: str) -> bool:
    try:
        merge_base(executor, repo_dir, ref)
    except CommandFailedError:
        return False
    return True


def classify(executor: GitExecutor, repo_dir: Union[str, Path], ref: str) -> CommitKind:
    """Determine what kind of reference ref is in the working copy.

    Probes run in a fixed order and the first match wins:

    1. ``HEAD`` is always a hash.
    2. ref resolves as-is: a local branch if one has that name, else a
       tag if one has that name, else a hash.
    3. ``origin/<ref>`` resolves: a remote branch.
    4. ``tags/<ref>`` resolves: a tag.

    A local branch therefore wins over a tag of the same name.

    Raises:
        UnresolvableRefError: If none of the probes resolve
    """
    if ref == "HEAD":
        return CommitKind.HASH

    if _resolves(executor, repo_dir, ref):
        if branch_exists(executor, repo_dir, ref):
            return CommitKind.LOCAL_BRANCH
        # Git resolves bare tag names too, so step 4 alone would never see them.
        if tag_exists(executor, repo_dir, ref):
            return CommitKind.TAG
        return CommitKind.HASH

    if _resolves(executor, repo_dir, REMOTE_PREFIX + ref):
        return CommitKind.REMOTE_BRANCH

    if _resolves(executor, repo_dir, TAG_PREFIX + ref):
        return CommitKind.TAG

    raise UnresolvableRefError(f'Cannot determine commit type of "{ref}"')


def qualify(ref: str, kind: CommitKind) -> str:
    """Prefix ref as git commands expect for its kind.

    Raises:
        UnknownKindError: If kind is not a CommitKind
    """
    if kind is CommitKind.REMOTE_BRANCH:
        return REMOTE_PREFIX + ref
    if kind is CommitKind.TAG:
        return TAG_PREFIX + ref
    if kind in (CommitKind.HASH, CommitKind.LOCAL_BRANCH):
        return ref
    raise UnknownKindError(f"unknown commit type: {kind!r}")


def full_commit_name(executor: GitExecutor, repo_dir: Union[str, Path], ref: str) -> str:
    """Classify ref and return its qualified name."""
    return qualify(ref, classify(executor, repo_dir, ref))
