"""code-to-ecr - push a Git repository to CodeCommit and build it into ECR.

The image is built remotely by an AWS CodeBuild project.
"""

__version__ = "0.1.0"

# Configure logging for library use
import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

from .cli import main

__all__ = ["main", "__version__"]
