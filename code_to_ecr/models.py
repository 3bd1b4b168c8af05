"""Request and result models passed between the workflow stages."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr, model_validator

from .settings import DEFAULT_CODEBUILD_PROJECT, DEFAULT_IMAGE_TAG

# Order matters: the buildspec reads these names and nothing else.
BUILD_VARIABLE_NAMES: tuple[str, ...] = (
    "IMAGE_REPO_NAME",
    "IMAGE_TAG",
    "DOCKERFILE_NAME",
    "DOCKER_BUILD_CONTEXT",
    "DOCKER_BUILD_ARG",
    "DOCKERHUB_USER",
    "DOCKERHUB_TOKEN",
)


class EnvironmentOverride(BaseModel):
    """A single CodeBuild environment variable override."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    value: str = ""
    type: Literal["PLAINTEXT"] = "PLAINTEXT"

    def to_api(self) -> dict[str, str]:
        return {"name": self.name, "value": self.value, "type": self.type}


class BuildRequest(BaseModel):
    """Finalized parameters for one invocation, built once and never mutated."""

    model_config = ConfigDict(frozen=True)

    local_repo_path: Path = Field(..., description="Git working tree to push")
    codecommit_repo_name: str = Field(..., min_length=1)
    image_repo_name: str = Field(..., min_length=1)
    local_branch: str = Field(..., min_length=1, description="Checked-out branch")
    codecommit_branch: str = Field(..., min_length=1, description="Remote branch")
    image_tag: str = Field(default=DEFAULT_IMAGE_TAG, min_length=1)
    dockerfile_name: str = "Dockerfile"
    build_context: str = "."
    build_arg: str = ""
    dockerhub_user: str = ""
    dockerhub_token: SecretStr = SecretStr("")
    force_push: bool = False
    aws_profile: str = ""
    codebuild_project_name: str = Field(
        default=DEFAULT_CODEBUILD_PROJECT, min_length=1
    )

    @model_validator(mode="after")
    def _dockerhub_pair(self) -> BuildRequest:
        has_user = self.dockerhub_user != ""
        has_token = self.dockerhub_token.get_secret_value() != ""
        if has_user != has_token:
            raise ValueError(
                "--dockerhub-user and --dockerhub-token must be given together"
            )
        return self

    def environment_overrides(self) -> list[EnvironmentOverride]:
        values = {
            "IMAGE_REPO_NAME": self.image_repo_name,
            "IMAGE_TAG": self.image_tag,
            "DOCKERFILE_NAME": self.dockerfile_name,
            "DOCKER_BUILD_CONTEXT": self.build_context,
            "DOCKER_BUILD_ARG": self.build_arg,
            "DOCKERHUB_USER": self.dockerhub_user,
            "DOCKERHUB_TOKEN": self.dockerhub_token.get_secret_value(),
        }
        return [
            EnvironmentOverride(name=name, value=values[name])
            for name in BUILD_VARIABLE_NAMES
        ]


@dataclass(frozen=True)
class StartedBuild:
    build_id: str
    project_name: str
    source_version: str
