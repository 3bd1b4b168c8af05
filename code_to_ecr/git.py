from __future__ import annotations

import logging
from pathlib import Path

from ._utils import run_logged

logger = logging.getLogger(__name__)

# Source side of the push refspec when nothing is checked out.
DETACHED_HEAD = "HEAD"


def codecommit_remote_url(repo_name: str, profile: str = "", region: str = "") -> str:
    """Build a git-remote-codecommit URL for ``repo_name``.

    An empty profile leaves credential resolution to the default chain.
    """
    scheme = f"codecommit::{region}://" if region else "codecommit://"
    who = f"{profile}@" if profile else ""
    return f"{scheme}{who}{repo_name}"


class GitClient:
    """Thin wrapper over the ``git`` executable."""

    def __init__(self, executable: str = "git") -> None:
        self.executable = executable

    def _git(self, path: Path, *args: str) -> list[str]:
        return [self.executable, "-C", str(path), *args]

    def is_work_tree(self, path: Path) -> bool:
        result = run_logged(
            self._git(path, "rev-parse", "--is-inside-work-tree"),
            capture_output=True,
            check=False,
            echo="never",
        )
        return result.returncode == 0 and result.stdout.strip() == "true"

    def current_branch(self, path: Path) -> str:
        """Return the checked-out branch; raises CalledProcessError on detached HEAD."""
        return run_logged(
            self._git(path, "symbolic-ref", "--quiet", "--short", "HEAD"),
            capture_output=True,
            echo="never",
        ).stdout.strip()

    def push(self, path: Path, remote_url: str, refspec: str, *, force: bool) -> None:
        args = ["push"]
        if force:
            args.append("--force")
        args.extend([remote_url, refspec])
        logger.debug("Pushing %s to %s (force=%s)", refspec, remote_url, force)
        run_logged(self._git(path, *args))
