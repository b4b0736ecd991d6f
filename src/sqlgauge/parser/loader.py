"""YAML config loader for SQLGauge.

one file, one document. everything that can go wrong here - missing file,
bad yaml, wrong shape - comes out as a ConfigError so the cli can report
it in one line.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from sqlgauge.errors import ConfigError
from sqlgauge.models.config import RelayConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.yaml")
SQL_RECEIVER = "smartagent/sql"


def load_config(path: str | Path = DEFAULT_CONFIG_PATH) -> RelayConfig:
    """Read and validate a relay config file.

    ${VAR} references are expanded from the environment in the exporter and
    connection params sections only, which is how the auth token and db
    password are meant to get in. query text is never touched - snowflake
    session variables use the same $name syntax.
    """
    path = Path(path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Error reading YAML file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing YAML file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at the top level")

    try:
        config = RelayConfig.model_validate(_expand_secrets(data))
    except ValidationError as e:
        raise ConfigError(f"Invalid config in {path}: {_first_error(e)}") from e

    logger.debug(
        "Loaded %s: driver=%s, %d queries",
        path,
        config.sql.db_driver,
        len(config.sql.queries),
    )
    return config


def _expand_secrets(data: dict[str, Any]) -> dict[str, Any]:
    """Expand env references in exporters.* and receivers.smartagent/sql.params."""
    data = dict(data)
    if isinstance(data.get("exporters"), dict):
        data["exporters"] = _expand_env(data["exporters"])

    receivers = data.get("receivers")
    if isinstance(receivers, dict) and isinstance(receivers.get(SQL_RECEIVER), dict):
        receiver = dict(receivers[SQL_RECEIVER])
        if isinstance(receiver.get("params"), dict):
            receiver["params"] = _expand_env(receiver["params"])
        data["receivers"] = {**receivers, SQL_RECEIVER: receiver}
    return data


def _expand_env(node: Any) -> Any:
    """Recursively expand ${VAR} / $VAR in string scalars.

    unset variables are left as-is (os.path.expandvars behaviour), which then
    usually fails validation or auth loudly enough to notice.
    """
    if isinstance(node, str):
        return os.path.expandvars(node)
    if isinstance(node, dict):
        return {k: _expand_env(v) for k, v in node.items()}
    if isinstance(node, list):
        return [_expand_env(v) for v in node]
    return node


def _first_error(exc: ValidationError) -> str:
    """Squash a pydantic error down to 'loc.path: message'.

    the full pydantic dump is great in a repl and awful in a one-line
    diagnostic.
    """
    err = exc.errors()[0]
    loc = ".".join(str(part) for part in err["loc"])
    extra = f" (+{exc.error_count() - 1} more)" if exc.error_count() > 1 else ""
    return f"{loc}: {err['msg']}{extra}"
