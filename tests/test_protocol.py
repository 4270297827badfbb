"""Tests for the checkout/merge protocol and working-copy queries."""
import pytest

from reposync.core.errors import UnresolvableRefError
from reposync.git import protocol

from conftest import commit_file, git


class TestCheckout:
    """Tests for checkout()."""

    def test_tag_creates_local_branch(self, cloned_repo, executor, upstream_repo):
        """Given tag v1.0, checkout leaves a local branch named v1.0 on it."""
        protocol.checkout(executor, cloned_repo, "v1.0")

        assert git(cloned_repo, "show-ref", "--verify", "refs/heads/v1.0")
        assert git(cloned_repo, "symbolic-ref", "HEAD") == "refs/heads/v1.0"
        assert git(cloned_repo, "rev-parse", "HEAD") == upstream_repo["main_sha"]
        assert ["checkout", "tags/v1.0", "-b", "v1.0"] in executor.calls

    def test_tag_checkout_twice_reuses_branch(self, cloned_repo, executor):
        protocol.checkout(executor, cloned_repo, "v1.0")
        protocol.checkout(executor, cloned_repo, "master")
        protocol.checkout(executor, cloned_repo, "v1.0")

        assert git(cloned_repo, "symbolic-ref", "HEAD") == "refs/heads/v1.0"

    def test_hash_detaches_head(self, cloned_repo, executor, upstream_repo):
        protocol.checkout(executor, cloned_repo, upstream_repo["release_sha"])

        assert git(cloned_repo, "rev-parse", "--abbrev-ref", "HEAD") == "HEAD"
        assert git(cloned_repo, "rev-parse", "HEAD") == upstream_repo["release_sha"]

    def test_remote_branch_gets_tracking_branch(self, cloned_repo, executor, upstream_repo):
        protocol.checkout(executor, cloned_repo, "dev")

        assert git(cloned_repo, "rev-parse", "--abbrev-ref", "HEAD") == "dev"
        assert (cloned_repo / "B.h").exists()

    def test_always_syncs_submodules(self, cloned_repo, executor):
        protocol.checkout(executor, cloned_repo, "master")

        checkout_at = executor.calls.index(["checkout", "master"])
        assert executor.calls[checkout_at + 1:] == [
            ["submodule", "init"],
            ["submodule", "update"],
        ]

    def test_unknown_reference_aborts(self, cloned_repo, executor):
        with pytest.raises(UnresolvableRefError):
            protocol.checkout(executor, cloned_repo, "DOES_NOT_EXIST")
        assert not any(call[0] == "checkout" for call in executor.calls)


class TestUpdate:
    """Tests for update(): checkout, then best-effort merge."""

    def test_merges_upstream_changes(self, cloned_repo, executor, upstream_repo):
        commit_file(upstream_repo["path"], "D.h", "#include <set>\n", "Add D.h")
        git(cloned_repo, "fetch", "--tags")

        merged = protocol.update(executor, cloned_repo, "master")

        assert merged is True
        assert ["merge", "--no-commit", "--no-ff", "origin/master"] in executor.calls
        assert (cloned_repo / "D.h").exists()

    def test_local_branch_merges_from_origin(self, cloned_repo, executor):
        protocol.checkout(executor, cloned_repo, "dev")
        executor.calls.clear()

        protocol.update(executor, cloned_repo, "dev")

        assert ["merge", "--no-commit", "--no-ff", "origin/dev"] in executor.calls

    def test_deleted_upstream_branch_is_tolerated(self, cloned_repo, executor, upstream_repo):
        """Given dev was removed from origin, update still lands on local dev."""
        protocol.checkout(executor, cloned_repo, "dev")
        git(upstream_repo["path"], "branch", "-D", "dev")
        git(cloned_repo, "branch", "-dr", "origin/dev")

        merged = protocol.update(executor, cloned_repo, "dev")

        assert merged is False
        assert git(cloned_repo, "rev-parse", "--abbrev-ref", "HEAD") == "dev"
        assert git(cloned_repo, "rev-parse", "HEAD") == upstream_repo["dev_sha"]

    def test_checkout_failure_propagates(self, cloned_repo, executor):
        with pytest.raises(UnresolvableRefError):
            protocol.update(executor, cloned_repo, "DOES_NOT_EXIST")

    def test_try_merge_reports_failure(self, cloned_repo, executor):
        assert protocol.try_merge(executor, cloned_repo, "DOES_NOT_EXIST") is False


class TestQueries:
    """Tests for hash_for, commits_for, are_changes and show_file."""

    def test_hash_for_each_kind(self, cloned_repo, executor, upstream_repo):
        assert protocol.hash_for(executor, cloned_repo, "master") == upstream_repo["main_sha"]
        assert protocol.hash_for(executor, cloned_repo, "dev") == upstream_repo["dev_sha"]
        assert protocol.hash_for(executor, cloned_repo, "v2") == upstream_repo["release_sha"]

    def test_commits_for_lists_hash_and_names(self, upstream_repo, executor):
        """Given tag v2 and branch release on one commit, both are listed."""
        sha = upstream_repo["release_sha"]

        commits = protocol.commits_for(executor, upstream_repo["path"], "v2")

        assert commits == [sha, "release", "v2"]
        assert commits == sorted(commits)

    def test_annotated_tag_peels_to_commit(self, cloned_repo, executor, upstream_repo):
        """Given annotated tag v3 on release, lookups report the commit."""
        sha = upstream_repo["release_sha"]
        git(cloned_repo, "tag", "-a", "v3", "-m", "annotated", "origin/release")

        assert protocol.hash_for(executor, cloned_repo, "v3") == sha
        commits = protocol.commits_for(executor, cloned_repo, "v3")
        assert commits[0] == sha
        assert set(commits) == {sha, "origin/release", "v2", "v3"}

    def test_branch_from_tag_wins_over_tag(self, cloned_repo, executor, upstream_repo, tmp_path):
        """Given branch v1.0 moved past tag v1.0, lookups follow the branch."""
        protocol.checkout(executor, cloned_repo, "v1.0")
        new_sha = commit_file(cloned_repo, "D.h", "#include <set>\n", "Add D.h on v1.0")

        assert protocol.hash_for(executor, cloned_repo, "v1.0") == new_sha
        assert new_sha != upstream_repo["main_sha"]

        written = protocol.show_file(executor, cloned_repo, "v1.0", "D.h", tmp_path / "out")
        assert written.read_text() == "#include <set>\n"

    def test_commits_for_hash_only(self, upstream_repo, executor):
        path = upstream_repo["path"]
        git(path, "checkout", "-q", "master")
        sha = commit_file(path, "E.h", "\n", "Unnamed commit")
        git(path, "reset", "-q", "--hard", "HEAD~1")

        assert protocol.commits_for(executor, path, sha) == [sha]

    def test_are_changes(self, cloned_repo, executor):
        assert protocol.are_changes(executor, cloned_repo) is False

        (cloned_repo / "A.h").write_text("modified\n")

        assert protocol.are_changes(executor, cloned_repo) is True

    def test_show_file_writes_into_new_dir(self, cloned_repo, executor, tmp_path):
        dst_dir = tmp_path / "out" / "nested"

        written = protocol.show_file(executor, cloned_repo, "dev", "B.h", dst_dir)

        assert written == dst_dir / "B.h"
        assert written.read_text() == "#include <vector>\n"
        assert ["show", "origin/dev:B.h"] in executor.calls
