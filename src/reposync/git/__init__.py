"""Git layer: command execution, reference resolution and checkout protocol."""
from reposync.git.executor import GitExecutor
from reposync.git.origin import OriginManager
from reposync.git.protocol import checkout, merge, try_merge, update
from reposync.git.refs import CommitKind, classify, full_commit_name, qualify

__all__ = [
    "CommitKind",
    "GitExecutor",
    "OriginManager",
    "checkout",
    "classify",
    "full_commit_name",
    "merge",
    "qualify",
    "try_merge",
    "update",
]
