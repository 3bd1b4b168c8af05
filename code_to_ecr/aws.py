from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from boto3.session import Session
from botocore.exceptions import BotoCoreError, ClientError

from .errors import RemoteCallFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AwsClients:
    codecommit: Any
    ecr: Any
    codebuild: Any
    region: str = ""


def aws_clients(profile: str = "") -> AwsClients:
    """Create the three service clients from one session.

    An empty profile falls through to the default credential chain.
    """
    try:
        session = Session(profile_name=profile or None)
        region = session.region_name or ""
        clients = AwsClients(
            codecommit=session.client("codecommit"),
            ecr=session.client("ecr"),
            codebuild=session.client("codebuild"),
            region=region,
        )
    except BotoCoreError as exc:
        raise RemoteCallFailure(f"Failed to set up AWS session: {exc}") from exc
    logger.debug("AWS session: profile=%s region=%s", profile or "<default>", region)
    return clients


def error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "")
