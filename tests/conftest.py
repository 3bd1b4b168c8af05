from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any

import pytest
from botocore.exceptions import ClientError

from code_to_ecr.aws import AwsClients
from code_to_ecr.models import BuildRequest


def client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class FakeCodeCommit:
    def __init__(
        self,
        existing: dict[str, dict[str, Any]] | None = None,
        *,
        create_error: str | None = None,
        with_clone_url: bool = True,
    ) -> None:
        self.repos: dict[str, dict[str, Any]] = dict(existing or {})
        self.create_error = create_error
        self.with_clone_url = with_clone_url
        self.calls: list[tuple[str, str]] = []

    def _metadata(self, name: str) -> dict[str, Any]:
        metadata: dict[str, Any] = {"repositoryName": name}
        if self.with_clone_url:
            metadata["cloneUrlHttp"] = (
                f"https://git-codecommit.us-east-1.amazonaws.com/v1/repos/{name}"
            )
        return metadata

    def get_repository(self, *, repositoryName: str) -> dict[str, Any]:
        self.calls.append(("get_repository", repositoryName))
        if repositoryName not in self.repos:
            raise client_error("RepositoryDoesNotExistException", "GetRepository")
        return {"repositoryMetadata": self.repos[repositoryName]}

    def create_repository(self, *, repositoryName: str) -> dict[str, Any]:
        self.calls.append(("create_repository", repositoryName))
        if self.create_error:
            raise client_error(self.create_error, "CreateRepository")
        self.repos[repositoryName] = self._metadata(repositoryName)
        return {"repositoryMetadata": self.repos[repositoryName]}


class FakeEcr:
    def __init__(
        self, existing: set[str] | None = None, *, create_error: str | None = None
    ) -> None:
        self.repos = set(existing or ())
        self.create_error = create_error
        self.calls: list[tuple[str, str]] = []

    def describe_repositories(self, *, repositoryNames: list[str]) -> dict[str, Any]:
        (name,) = repositoryNames
        self.calls.append(("describe_repositories", name))
        if name not in self.repos:
            raise client_error("RepositoryNotFoundException", "DescribeRepositories")
        return {"repositories": [{"repositoryName": name}]}

    def create_repository(self, *, repositoryName: str) -> dict[str, Any]:
        self.calls.append(("create_repository", repositoryName))
        if self.create_error:
            raise client_error(self.create_error, "CreateRepository")
        self.repos.add(repositoryName)
        return {"repository": {"repositoryName": repositoryName}}


class FakeCodeBuild:
    def __init__(self, *, error: str | None = None) -> None:
        self.error = error
        self.builds: list[dict[str, Any]] = []

    def start_build(self, **kwargs: Any) -> dict[str, Any]:
        if self.error:
            raise client_error(self.error, "StartBuild")
        self.builds.append(kwargs)
        return {"build": {"id": f"{kwargs['projectName']}:build-{len(self.builds)}"}}


class FakeGit:
    def __init__(
        self,
        branch: str = "main",
        *,
        work_tree: bool = True,
        detached: bool = False,
        diverged: bool = False,
    ) -> None:
        self.branch = branch
        self.work_tree = work_tree
        self.detached = detached
        self.diverged = diverged
        self.pushes: list[tuple[Path, str, str, bool]] = []

    def is_work_tree(self, path: Path) -> bool:
        return self.work_tree

    def current_branch(self, path: Path) -> str:
        if self.detached:
            raise subprocess.CalledProcessError(1, ["git", "symbolic-ref"])
        return self.branch

    def push(self, path: Path, remote_url: str, refspec: str, *, force: bool) -> None:
        if self.diverged and not force:
            raise subprocess.CalledProcessError(1, ["git", "push"])
        self.pushes.append((path, remote_url, refspec, force))


@pytest.fixture
def git() -> FakeGit:
    return FakeGit()


@pytest.fixture
def clients() -> AwsClients:
    return AwsClients(
        codecommit=FakeCodeCommit(),
        ecr=FakeEcr(),
        codebuild=FakeCodeBuild(),
        region="us-east-1",
    )


@pytest.fixture
def request_(tmp_path: Path) -> BuildRequest:
    return BuildRequest(
        local_repo_path=tmp_path,
        codecommit_repo_name="my-repo",
        image_repo_name="my-image",
        local_branch="main",
        codecommit_branch="main",
    )
