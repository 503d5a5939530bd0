"""
Versioned store: a git repository holding the stored copies of a vault.

Wraps GitPython for the handful of operations the sync engine needs. Local
operations go through `repo.git`; network operations (clone, fetch, push)
go through the credential fallback chain in `gfv.core.git.auth`.

Pulls are fast-forward only. When local and remote history have diverged
the pull raises ConflictError and leaves the local branch where it was.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

from gfv.core.errors import (
    AlreadyExistsError,
    BackendError,
    ConflictError,
    NoRemoteError,
    NotInitializedError,
)
from gfv.core.git.auth import AuthMethod, default_auth_chain, run_with_auth, stderr_of
from gfv.core.git.models import COMMIT_IDENTITY, PullOutcome

logger = logging.getLogger(__name__)

_IDENTITY_ENV = {
    "GIT_AUTHOR_NAME": COMMIT_IDENTITY.name or "",
    "GIT_AUTHOR_EMAIL": COMMIT_IDENTITY.email or "",
    "GIT_COMMITTER_NAME": COMMIT_IDENTITY.name or "",
    "GIT_COMMITTER_EMAIL": COMMIT_IDENTITY.email or "",
}


class VersionedStore:
    """
    Git repository backing one vault.

    Example:
        >>> store = VersionedStore.open(vault.repo_path)
        >>> if store.has_changes():
        ...     store.add_all()
        ...     store.commit("Update vault")
    """

    def __init__(self, repo: Repo, auth_chain: list[AuthMethod] | None = None) -> None:
        self.repo = repo
        self.auth_chain = auth_chain if auth_chain is not None else default_auth_chain()

    @property
    def path(self) -> Path:
        """Working tree directory of the repository."""
        return Path(self.repo.working_tree_dir or self.repo.git_dir)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def init(cls, path: Path, auth_chain: list[AuthMethod] | None = None) -> VersionedStore:
        """
        Create a new repository at path.

        Raises:
            AlreadyExistsError: If path already holds a repository
        """
        if (path / ".git").exists():
            raise AlreadyExistsError(
                f"Repository already exists at {path}",
                path=str(path),
            )
        try:
            repo = Repo.init(path, mkdir=True)
        except GitCommandError as e:
            raise BackendError(
                f"Failed to initialize repository at {path}",
                stderr=stderr_of(e),
                path=str(path),
            ) from e
        logger.debug("Initialized repository at %s", path)
        return cls(repo, auth_chain)

    @classmethod
    def open(cls, path: Path, auth_chain: list[AuthMethod] | None = None) -> VersionedStore:
        """
        Open the existing repository at path.

        Raises:
            NotInitializedError: If path is not a git repository
        """
        try:
            repo = Repo(path)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise NotInitializedError(
                f"No repository at {path}",
                hint="Run 'gfv init' to create a vault",
                path=str(path),
            ) from e
        return cls(repo, auth_chain)

    @classmethod
    def clone(
        cls,
        url: str,
        path: Path,
        auth_chain: list[AuthMethod] | None = None,
    ) -> VersionedStore:
        """
        Clone url into path through the credential chain.

        A remote without any commits is treated as a failure so that callers
        can fall back to creating a fresh repository.

        Raises:
            AlreadyExistsError: If path exists and is not empty
            BackendError: If the remote is unreachable or empty
            AuthenticationError: If every credential method was rejected
        """
        if path.exists() and any(path.iterdir()):
            raise AlreadyExistsError(
                f"Cannot clone into non-empty directory {path}",
                path=str(path),
            )
        chain = auth_chain if auth_chain is not None else default_auth_chain()

        def attempt(env: dict[str, str]) -> Repo:
            # Leftovers of a previous failed attempt
            if path.exists() and any(path.iterdir()):
                shutil.rmtree(path)
            return Repo.clone_from(url, path, env=env)

        try:
            repo = run_with_auth(chain, f"clone {url}", attempt)
        except BackendError:
            _remove_tree(path)
            raise

        if not repo.head.is_valid():
            repo.close()
            _remove_tree(path)
            raise BackendError(f"Remote {url} has no commits", url=url)

        logger.debug("Cloned %s into %s", url, path)
        return cls(repo, chain)

    # ------------------------------------------------------------------
    # Local state
    # ------------------------------------------------------------------

    def is_empty(self) -> bool:
        """True while the current branch has no commits."""
        return not self.repo.head.is_valid()

    def head_sha(self) -> str | None:
        """Commit id HEAD points to, or None on an unborn branch."""
        if self.is_empty():
            return None
        return self.repo.head.commit.hexsha

    def has_changes(self) -> bool:
        """Check for staged, unstaged or untracked differences."""
        status = self._git("status", "--porcelain", "--untracked-files=all")
        return bool(status.strip())

    def add_all(self) -> None:
        """Stage every change in the working tree, deletions included."""
        self._git("add", "--all")

    def commit(self, message: str) -> str:
        """
        Commit the index with the gfv identity.

        Returns:
            The new commit id.
        """
        try:
            self.repo.git.commit(
                "--allow-empty",
                "--no-verify",
                "-m",
                message,
                env=_IDENTITY_ENV,
            )
        except GitCommandError as e:
            raise BackendError(
                f"Failed to commit: {stderr_of(e) or e}",
                stderr=stderr_of(e),
            ) from e
        sha = self.repo.head.commit.hexsha
        logger.debug("Committed %s: %s", sha[:8], message)
        return sha

    def diff(self) -> str:
        """Diff of the staged changes."""
        return self._git("diff", "--cached")

    # ------------------------------------------------------------------
    # Branches
    # ------------------------------------------------------------------

    def current_branch(self) -> str:
        """
        Name of the checked out branch.

        Raises:
            BackendError: If HEAD is detached
        """
        if self.repo.head.is_detached:
            raise BackendError(
                "HEAD is detached",
                hint=f"Check out a branch in {self.path}",
            )
        return self.repo.active_branch.name

    def set_branch(self, name: str) -> None:
        """Rename the current branch to name, keeping its commit."""
        if self.current_branch() == name:
            return
        if self.is_empty():
            self._git("symbolic-ref", "HEAD", f"refs/heads/{name}")
        else:
            self._git("branch", "-M", name)
        logger.debug("Current branch is now %s", name)

    def checkout_branch(self, name: str, remote: str) -> None:
        """
        Check out branch name, creating it from remote/name if only the
        remote-tracking ref exists, or from HEAD otherwise.
        """
        if self._ref_sha(f"refs/heads/{name}") is not None:
            self._git("checkout", name)
        elif self.remote_branch_exists(remote, name):
            self._git("checkout", "-b", name, "--track", f"{remote}/{name}")
        else:
            self._git("checkout", "-b", name)

    # ------------------------------------------------------------------
    # Remotes
    # ------------------------------------------------------------------

    def add_remote(self, name: str, url: str) -> None:
        self._git("remote", "add", name, url)

    def set_remote(self, name: str, url: str) -> None:
        """Point remote name at url, adding it if missing."""
        if self.remote_url(name) is None:
            self.add_remote(name, url)
        else:
            self._git("remote", "set-url", name, url)

    def remote_url(self, name: str) -> str | None:
        if name not in [remote.name for remote in self.repo.remotes]:
            return None
        return self.repo.remote(name).url

    def remove_remote(self, name: str) -> None:
        if self.remote_url(name) is not None:
            self._git("remote", "remove", name)

    def remote_branch_exists(self, remote: str, branch: str) -> bool:
        """Whether the remote-tracking ref for branch exists locally."""
        return self._ref_sha(f"refs/remotes/{remote}/{branch}") is not None

    # ------------------------------------------------------------------
    # Network
    # ------------------------------------------------------------------

    def fetch(self, remote: str, branch: str) -> None:
        """
        Fetch branch into refs/remotes/<remote>/<branch>.

        Raises:
            NoRemoteError: If remote is not configured
        """
        self._require_remote(remote)
        refspec = f"+refs/heads/{branch}:refs/remotes/{remote}/{branch}"
        run_with_auth(
            self.auth_chain,
            f"fetch {remote}/{branch}",
            lambda env: self.repo.git.fetch("--no-tags", remote, refspec, env=env),
        )

    def pull(self, remote: str, branch: str) -> PullOutcome:
        """
        Fetch and fast-forward branch to remote/branch.

        Returns:
            UP_TO_DATE if the fetched commit is already contained locally,
            FAST_FORWARD if the local branch was moved forward.

        Raises:
            BackendError: If the fetch fails
            ConflictError: If local and remote history have diverged
        """
        self.fetch(remote, branch)

        fetched = self._ref_sha(f"refs/remotes/{remote}/{branch}")
        if fetched is None:
            raise BackendError(
                f"Remote branch {remote}/{branch} not found",
                remote=remote,
                branch=branch,
            )

        local_ref = f"refs/heads/{branch}"
        local = self._ref_sha(local_ref)

        if local == fetched or (local is not None and self.repo.is_ancestor(fetched, local)):
            logger.debug("%s is up to date with %s/%s", branch, remote, branch)
            return PullOutcome.UP_TO_DATE

        if local is None or self.repo.is_ancestor(local, fetched):
            self._git("update-ref", local_ref, fetched)
            self._git("symbolic-ref", "HEAD", local_ref)
            self._git("reset", "--hard", fetched)
            logger.debug("Fast-forwarded %s to %s", branch, fetched[:8])
            return PullOutcome.FAST_FORWARD

        raise ConflictError(
            f"Local branch '{branch}' and {remote}/{branch} have diverged",
            hint=f"Resolve manually in: {self.path}",
            remote=remote,
            branch=branch,
        )

    def push(self, remote: str, branch: str) -> None:
        """
        Push refs/heads/<branch> to the same name on remote.

        Raises:
            NoRemoteError: If remote is not configured
            BackendError: If the push is rejected
        """
        self._require_remote(remote)
        refspec = f"refs/heads/{branch}:refs/heads/{branch}"
        run_with_auth(
            self.auth_chain,
            f"push to {remote}/{branch}",
            lambda env: self.repo.git.push(remote, refspec, env=env),
        )
        logger.debug("Pushed %s to %s", branch, remote)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_remote(self, remote: str) -> None:
        if self.remote_url(remote) is None:
            raise NoRemoteError(
                f"No remote named '{remote}' is configured",
                hint="Add one with: gfv vault set-remote <url>",
                remote=remote,
            )

    def _ref_sha(self, ref: str) -> str | None:
        try:
            return self.repo.git.rev_parse("--verify", "--quiet", f"{ref}^{{commit}}")
        except GitCommandError:
            return None

    def _git(self, command: str, *args: str) -> str:
        try:
            return self.repo.git.execute(["git", command, *args])
        except GitCommandError as e:
            stderr = stderr_of(e)
            raise BackendError(
                f"git {command} failed: {stderr or e}",
                stderr=stderr,
                command=command,
            ) from e


def _remove_tree(path: Path) -> None:
    if path.exists():
        shutil.rmtree(path, ignore_errors=True)
