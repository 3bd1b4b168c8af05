from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, NoReturn, Sequence

from pydantic import ValidationError

from . import __version__
from . import workflow
from ._utils import ensure
from .aws import aws_clients
from .errors import CodeToEcrError, InvalidArgument
from .git import GitClient
from .resolver import resolve_request
from .settings import DEFAULT_CODEBUILD_PROJECT, DEFAULT_IMAGE_TAG, Settings
from .template import template_text

PROG = "code-to-ecr"

logger = logging.getLogger(__name__)


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises InvalidArgument instead of exiting with 2."""

    def error(self, message: str) -> NoReturn:
        raise InvalidArgument(message)


class _PrintTemplateAction(argparse.Action):
    def __init__(self, option_strings: Sequence[str], dest: str, **kwargs: Any):
        kwargs.setdefault("default", argparse.SUPPRESS)
        super().__init__(option_strings, dest, nargs=0, **kwargs)

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Any,
        option_string: str | None = None,
    ) -> None:
        sys.stdout.write(template_text())
        parser.exit()


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog=PROG,
        description=(
            "Push a local git repository to AWS CodeCommit, then start an AWS "
            "CodeBuild project that builds a Docker image and pushes it to ECR."
        ),
    )
    parser.add_argument("git_repo_path", help="Path to the local git working tree")
    parser.add_argument("codecommit_repo_name", help="CodeCommit repository name")
    parser.add_argument("image_repo_name", help="ECR repository name")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Force-push, overwriting the CodeCommit branch history",
    )
    parser.add_argument(
        "--profile",
        default=None,
        help="AWS named profile (default: AWS_PROFILE or the default chain)",
    )
    parser.add_argument(
        "--codebuild-project",
        default=None,
        metavar="NAME",
        help=f"CodeBuild project name (default: {DEFAULT_CODEBUILD_PROJECT})",
    )
    parser.add_argument(
        "--image-tag",
        default=None,
        help=f"Docker image tag (default: {DEFAULT_IMAGE_TAG})",
    )
    parser.add_argument(
        "--codecommit-repo-branch",
        default=None,
        metavar="NAME",
        help="CodeCommit branch to push to (default: the local HEAD branch)",
    )
    parser.add_argument(
        "--dockerfile",
        default="Dockerfile",
        metavar="NAME",
        help="Dockerfile name inside the build context (default: Dockerfile)",
    )
    parser.add_argument(
        "--docker-build-context",
        default=".",
        metavar="PATH",
        help="Docker build context in the repository (default: .)",
    )
    parser.add_argument(
        "--docker-build-arg",
        default=None,
        metavar="ARG",
        help="Value passed to docker build --build-arg",
    )
    parser.add_argument(
        "--dockerhub-user", default=None, metavar="NAME", help="Docker Hub user"
    )
    parser.add_argument(
        "--dockerhub-token",
        default=None,
        metavar="TOKEN",
        help="Docker Hub access token (requires --dockerhub-user)",
    )
    parser.add_argument(
        "--print-template",
        action=_PrintTemplateAction,
        help="Print the CloudFormation template of the CodeBuild backend and exit",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def configure_logging(debug: bool, boto_debug: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(levelname)s: %(message)s",
    )
    if not boto_debug:
        for name in ("boto3", "botocore", "urllib3"):
            logging.getLogger(name).setLevel(logging.WARNING)


def main(argv: list[str] | None = None) -> int:
    try:
        try:
            settings = Settings()
        except ValidationError as exc:
            raise InvalidArgument(f"Invalid environment settings: {exc}") from exc
        args = parse_args(argv)
        configure_logging(args.debug, settings.boto_debug)
        ensure(["git"])

        git = GitClient()
        request = resolve_request(args, settings, git)
        clients = aws_clients(request.aws_profile)
        started = workflow.run(request, clients, git)
    except CodeToEcrError as exc:
        sys.stderr.write(f"{PROG}: {exc}\n")
        return 1

    logger.info(
        "Build accepted by %s for %s", started.project_name, started.source_version
    )
    print(started.build_id)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
