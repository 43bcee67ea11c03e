"""
Environment configuration for the wiki mirror
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

HOST_VAR = "CBT_HOST"
TOKEN_VAR = "API_TOKEN"
OUTPUT_DIR_VAR = "OUTPUT_DIR"


def default_output_dir() -> str:
    """Directory used when OUTPUT_DIR is not set: "out" inside this package."""
    """Directory used when OUTPUT_DIR is not set: "out" beside this package."""
    return os.path.join(os.path.dirname(os.path.abspath(__file__)), "out")


@dataclass
class MirrorConfig:
    """Settings needed to run the mirror pipeline."""
    host: str
    token: str
    output_dir: str


def load_config(environ: Optional[Mapping[str, str]] = None) -> MirrorConfig:
    """
    Load configuration from environment variables.

    When no mapping is given, a .env file in the working directory is loaded
    into the process environment first.

    Args:
        environ: Mapping to read instead of os.environ

    Returns:
        MirrorConfig instance

    Raises:
        ConfigurationError: If CBT_HOST or API_TOKEN is missing
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    host = environ.get(HOST_VAR, "")
    token = environ.get(TOKEN_VAR, "")

    missing = []
    if not host:
        missing.append(HOST_VAR)
    if not token:
        missing.append(TOKEN_VAR)
    if missing:
        raise ConfigurationError(missing)

    output_dir = environ.get(OUTPUT_DIR_VAR) or default_output_dir()
    return MirrorConfig(host=host.rstrip("/"), token=token, output_dir=output_dir)
