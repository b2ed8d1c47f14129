"""Dotnet SDK version constraint selection."""

import json
import logging
from typing import Optional

from nuget_lock.config import UpdateArtifactsConfig

logger = logging.getLogger(__name__)

GLOBAL_JSON = "global.json"


def parse_global_json_version(content: Optional[str]) -> Optional[str]:
    """SDK version pinned by a global.json document, if it can be read."""
    if not content:
        return None
    try:
        data = json.loads(content)
        version = data["sdk"]["version"]
    except (ValueError, KeyError, TypeError):
        return None
    return version if isinstance(version, str) and version else None


def get_dotnet_constraint(
    global_json_content: Optional[str],
    config: UpdateArtifactsConfig
) -> Optional[str]:
    """Explicit config wins over global.json; None means unconstrained."""
    if config.constraints.dotnet:
        logger.debug("Using dotnet constraint from config")
        return config.constraints.dotnet

    version = parse_global_json_version(global_json_content)
    if version:
        logger.debug(f"Using dotnet constraint {version} from {GLOBAL_JSON}")
    return version
