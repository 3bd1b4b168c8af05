from __future__ import annotations


class CodeToEcrError(Exception):
    """Base class for failures that abort the workflow with exit status 1."""


class InvalidArgument(CodeToEcrError):
    """Raised for bad, missing or conflicting command-line arguments."""


class NotAGitRepository(CodeToEcrError):
    """Raised when the local path is not a Git working tree on a branch."""


class RemoteCallFailure(CodeToEcrError):
    """Raised when an AWS API call or a git command fails."""


class CloneUrlNotFound(CodeToEcrError):
    """Raised when CodeCommit metadata carries no HTTPS clone URL."""
