from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Any, Callable

from botocore.exceptions import BotoCoreError, ClientError

from .aws import AwsClients, error_code
from .errors import CloneUrlNotFound, RemoteCallFailure
from .git import DETACHED_HEAD, GitClient, codecommit_remote_url
from .models import BuildRequest, StartedBuild

logger = logging.getLogger(__name__)

# CodeBuild's enum value for a CodeCommit source.
CODECOMMIT_SOURCE_TYPE = "CODECOMMIT"


def _get_or_create(
    kind: str,
    name: str,
    *,
    get: Callable[[], Any],
    create: Callable[[], Any],
    missing_code: str,
    exists_code: str,
) -> bool:
    """Return True when the resource had to be created."""
    try:
        get()
        logger.info("%s repository exists: %s", kind, name)
        return False
    except ClientError as exc:
        if error_code(exc) != missing_code:
            raise RemoteCallFailure(
                f"Failed to read {kind} repository {name}: {exc}"
            ) from exc
    except BotoCoreError as exc:
        raise RemoteCallFailure(
            f"Failed to read {kind} repository {name}: {exc}"
        ) from exc

    logger.info("Creating %s repository: %s", kind, name)
    try:
        create()
    except ClientError as exc:
        # Lost a race with another creator; the repository is there either way.
        if error_code(exc) == exists_code:
            logger.info("%s repository appeared concurrently: %s", kind, name)
            return False
        raise RemoteCallFailure(
            f"Failed to create {kind} repository {name}: {exc}"
        ) from exc
    except BotoCoreError as exc:
        raise RemoteCallFailure(
            f"Failed to create {kind} repository {name}: {exc}"
        ) from exc
    return True


def ensure_codecommit_repo(codecommit: Any, name: str) -> bool:
    return _get_or_create(
        "CodeCommit",
        name,
        get=lambda: codecommit.get_repository(repositoryName=name),
        create=lambda: codecommit.create_repository(repositoryName=name),
        missing_code="RepositoryDoesNotExistException",
        exists_code="RepositoryNameExistsException",
    )


def ensure_ecr_repo(ecr: Any, name: str) -> bool:
    return _get_or_create(
        "ECR",
        name,
        get=lambda: ecr.describe_repositories(repositoryNames=[name]),
        create=lambda: ecr.create_repository(repositoryName=name),
        missing_code="RepositoryNotFoundException",
        exists_code="RepositoryAlreadyExistsException",
    )


def publish(
    git: GitClient,
    local_path: Path,
    remote_url: str,
    local_branch: str,
    remote_branch: str,
    *,
    force: bool = False,
) -> None:
    source = (
        DETACHED_HEAD if local_branch == DETACHED_HEAD else f"refs/heads/{local_branch}"
    )
    refspec = f"{source}:refs/heads/{remote_branch}"
    logger.info("Pushing %s -> %s (%s)", local_branch, remote_branch, remote_url)
    try:
        git.push(local_path, remote_url, refspec, force=force)
    except subprocess.CalledProcessError as exc:
        hint = "" if force else " (if the remote branch has diverged, use --force)"
        raise RemoteCallFailure(
            f"git push to {remote_url} failed with exit status {exc.returncode}{hint}"
        ) from exc


def resolve_clone_url(codecommit: Any, name: str) -> str:
    try:
        metadata = codecommit.get_repository(repositoryName=name).get(
            "repositoryMetadata", {}
        )
    except (ClientError, BotoCoreError) as exc:
        raise RemoteCallFailure(
            f"Failed to read CodeCommit repository {name}: {exc}"
        ) from exc
    clone_url = metadata.get("cloneUrlHttp")
    if not clone_url:
        raise CloneUrlNotFound(f"No HTTPS clone URL for CodeCommit repository {name}")
    return clone_url


def start_build(codebuild: Any, codecommit: Any, request: BuildRequest) -> StartedBuild:
    """Start the CodeBuild project against the pushed branch and return immediately."""
    clone_url = resolve_clone_url(codecommit, request.codecommit_repo_name)
    overrides = [item.to_api() for item in request.environment_overrides()]
    logger.debug(
        "Environment overrides: %s",
        [item["name"] for item in overrides],
    )
    try:
        response = codebuild.start_build(
            projectName=request.codebuild_project_name,
            environmentVariablesOverride=overrides,
            sourceTypeOverride=CODECOMMIT_SOURCE_TYPE,
            sourceLocationOverride=clone_url,
            sourceVersion=request.codecommit_branch,
        )
    except (ClientError, BotoCoreError) as exc:
        raise RemoteCallFailure(
            f"Failed to start CodeBuild project {request.codebuild_project_name}: {exc}"
        ) from exc

    build_id = response.get("build", {}).get("id", "")
    logger.info("Started build: %s", build_id)
    return StartedBuild(
        build_id=build_id,
        project_name=request.codebuild_project_name,
        source_version=request.codecommit_branch,
    )


def run(request: BuildRequest, clients: AwsClients, git: GitClient) -> StartedBuild:
    logger.info("==> CodeCommit repository")
    ensure_codecommit_repo(clients.codecommit, request.codecommit_repo_name)

    logger.info("==> git push")
    publish(
        git,
        request.local_repo_path,
        codecommit_remote_url(
            request.codecommit_repo_name, request.aws_profile, clients.region
        ),
        request.local_branch,
        request.codecommit_branch,
        force=request.force_push,
    )

    logger.info("==> ECR repository")
    ensure_ecr_repo(clients.ecr, request.image_repo_name)

    logger.info("==> CodeBuild")
    return start_build(clients.codebuild, clients.codecommit, request)
