from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CODEBUILD_PROJECT = "code-to-ecr"
DEFAULT_IMAGE_TAG = "latest"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CODE_TO_ECR_", case_sensitive=False, populate_by_name=True
    )

    codebuild_project: str = DEFAULT_CODEBUILD_PROJECT
    image_tag: str = DEFAULT_IMAGE_TAG
    boto_debug: bool = False
    # Read without the prefix so the usual AWS_PROFILE export is honoured.
    aws_profile: str = Field(default="", validation_alias="AWS_PROFILE")
