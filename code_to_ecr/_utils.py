from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Iterable, Literal

from .errors import RemoteCallFailure

logger = logging.getLogger(__name__)


def run_logged(
    cmd: Iterable[str],
    *,
    capture_output: bool = False,
    check: bool = True,
    echo: Literal["always", "on_error", "never"] = "on_error",
    cwd: Path | None = None,
) -> subprocess.CompletedProcess[str]:
    """
    Run a subprocess in text mode, logging the command line at DEBUG.
    Captured output is replayed through the logger according to ``echo``;
    raises CalledProcessError when check=True and the command fails.
    """
    cmd_list = list(cmd)
    logger.debug("$ %s", shlex.join(cmd_list))
    result = subprocess.run(
        cmd_list, capture_output=capture_output, text=True, cwd=cwd
    )
    failed = result.returncode != 0
    if capture_output and (echo == "always" or (echo == "on_error" and failed)):
        level = logging.ERROR if failed else logging.INFO
        for stream in (result.stdout, result.stderr):
            for line in (stream or "").splitlines():
                logger.log(level, "%s: %s", cmd_list[0], line)
    if check and failed:
        raise subprocess.CalledProcessError(
            result.returncode, result.args, output=result.stdout, stderr=result.stderr
        )
    return result


def ensure(commands: Iterable[str]) -> None:
    missing = [name for name in commands if shutil.which(name) is None]
    if missing:
        raise RemoteCallFailure(f"missing dependency: {', '.join(missing)}")
