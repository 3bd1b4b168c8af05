"""The CloudFormation template that defines the CodeBuild backend.

The template is shipped for users to deploy themselves; this package never
deploys it. Its buildspec consumes the environment variables that
``BuildRequest.environment_overrides`` sends with every build.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

TEMPLATE_NAME = "backend-of-code-to-ecr.cfn.yml"


class _CloudFormationLoader(yaml.SafeLoader):
    pass


def _construct_intrinsic(
    loader: yaml.SafeLoader, tag_suffix: str, node: yaml.Node
) -> dict[str, Any]:
    # !Sub / !Ref / !GetAtt short forms -> {"Fn::Sub": ...} style mappings
    if isinstance(node, yaml.ScalarNode):
        value: Any = loader.construct_scalar(node)
    elif isinstance(node, yaml.SequenceNode):
        value = loader.construct_sequence(node, deep=True)
    else:
        value = loader.construct_mapping(node, deep=True)
    key = "Ref" if tag_suffix == "Ref" else f"Fn::{tag_suffix}"
    return {key: value}


_CloudFormationLoader.add_multi_constructor("!", _construct_intrinsic)


def template_path() -> Path:
    return Path(__file__).resolve().parent / "templates" / TEMPLATE_NAME


def template_text() -> str:
    return template_path().read_text()


def load_template() -> dict[str, Any]:
    return yaml.load(template_text(), Loader=_CloudFormationLoader)


def declared_build_variables() -> list[str]:
    """Environment variable names the CodeBuild project declares, in order."""
    project = load_template()["Resources"]["CodeBuildProject"]["Properties"]
    return [item["Name"] for item in project["Environment"]["EnvironmentVariables"]]
