"""Turn parsed command-line arguments into a finalized BuildRequest."""

from __future__ import annotations

import argparse
import logging
import subprocess
from pathlib import Path

from pydantic import SecretStr, ValidationError

from .errors import InvalidArgument, NotAGitRepository
from .git import DETACHED_HEAD, GitClient
from .models import BuildRequest
from .settings import Settings

logger = logging.getLogger(__name__)


def resolve_local_branch(
    git: GitClient, path: Path, *, allow_detached: bool = False
) -> str:
    """Return the checked-out branch of ``path``.

    With ``allow_detached`` a detached HEAD resolves to ``HEAD`` instead of
    failing; the caller must then name the remote branch explicitly.
    """
    if not path.is_dir():
        raise NotAGitRepository(f"{path} does not exist or is not a directory")
    if not git.is_work_tree(path):
        raise NotAGitRepository(f"{path} is not a git working tree")
    try:
        branch = git.current_branch(path)
    except subprocess.CalledProcessError as exc:
        if allow_detached:
            logger.info("%s has a detached HEAD; pushing HEAD", path)
            return DETACHED_HEAD
        raise NotAGitRepository(
            f"Cannot read the current branch of {path} (detached HEAD?)"
        ) from exc
    if branch == "":
        raise NotAGitRepository(f"Cannot read the current branch of {path}")
    return branch


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        field = ".".join(str(item) for item in error["loc"])
        parts.append(f"{field}: {error['msg']}" if field else error["msg"])
    return "; ".join(parts)


def resolve_request(
    args: argparse.Namespace, settings: Settings, git: GitClient
) -> BuildRequest:
    """Merge flags, environment settings and git state.

    Flags win over ``CODE_TO_ECR_*`` / ``AWS_PROFILE`` settings, which win over
    built-in defaults.
    """
    for label, value in (
        ("codecommit_repo_name", args.codecommit_repo_name),
        ("image_repo_name", args.image_repo_name),
    ):
        if value.strip() == "":
            raise InvalidArgument(f"{label} must not be empty")

    user = args.dockerhub_user or ""
    token = args.dockerhub_token or ""
    if bool(user) != bool(token):
        raise InvalidArgument(
            "--dockerhub-user and --dockerhub-token must be given together"
        )

    try:
        repo_path = Path(args.git_repo_path).expanduser().resolve()
    except RuntimeError as exc:
        raise NotAGitRepository(f"Cannot resolve {args.git_repo_path}: {exc}") from exc
    local_branch = resolve_local_branch(
        git, repo_path, allow_detached=bool(args.codecommit_repo_branch)
    )
    remote_branch = args.codecommit_repo_branch or local_branch
    logger.debug("Local branch %s, CodeCommit branch %s", local_branch, remote_branch)

    try:
        return BuildRequest(
            local_repo_path=repo_path,
            codecommit_repo_name=args.codecommit_repo_name,
            image_repo_name=args.image_repo_name,
            local_branch=local_branch,
            codecommit_branch=remote_branch,
            image_tag=args.image_tag or settings.image_tag,
            dockerfile_name=args.dockerfile,
            build_context=args.docker_build_context,
            build_arg=args.docker_build_arg or "",
            dockerhub_user=user,
            dockerhub_token=SecretStr(token),
            force_push=args.force,
            aws_profile=args.profile or settings.aws_profile,
            codebuild_project_name=args.codebuild_project or settings.codebuild_project,
        )
    except ValidationError as exc:
        raise InvalidArgument(_describe(exc)) from exc
