"""Configuration loading utilities."""

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from iomrpc.config.schema import AuthConfig, ClientConfig
from iomrpc.utils.exceptions import ConfigError

AUTH_REQUIRED_FIELDS = ("host", "port", "ca", "cert", "key")

# Keys whose children are header names and must reach the model untouched.
_VERBATIM_KEYS = {"default_headers"}


def get_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".iomrpc" / "config.json"


def load_config(config_path: Path | None = None) -> ClientConfig:
    """
    Load configuration from file or create default.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        Loaded configuration object.
    """
    path = config_path or get_config_path()

    if path.exists():
        try:
            with open(path) as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("config file must be a JSON object")
            return ClientConfig.model_validate(convert_keys(data))
        except (json.JSONDecodeError, ValueError) as e:
            raise ConfigError(
                f"Failed to load config from {path}: {e}. "
                "Fix the file or remove it to regenerate defaults.",
                path=str(path),
            ) from e

    return ClientConfig()


def save_config(config: ClientConfig, config_path: Path | None = None) -> None:
    """
    Save configuration to file.

    Args:
        config: Configuration to save.
        config_path: Optional path to save to. Uses default if not provided.
    """
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    data = convert_to_camel(config.model_dump(exclude_none=True))

    with open(path, "w") as f:
        json.dump(data, f, indent=2)


def parse_auth_file(auth_file_path: str | Path) -> AuthConfig:
    """
    Parse an operator auth file (YAML format).

    The file carries host, port and PEM material for ca, cert and key;
    operator and type are optional.
    """
    path = Path(auth_file_path).expanduser()
    try:
        with open(path, encoding="utf-8") as f:
            auth_data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Failed to parse auth file: {e}", path=str(path)) from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse auth file: invalid YAML syntax: {e}", path=str(path)) from e

    if not isinstance(auth_data, dict) or any(not auth_data.get(k) for k in AUTH_REQUIRED_FIELDS):
        raise ConfigError(
            "Invalid auth file format: missing required fields (host, port, ca, cert, key)",
            path=str(path),
        )

    try:
        return AuthConfig(
            host=str(auth_data["host"]),
            port=auth_data["port"],
            ca=auth_data["ca"],
            cert=auth_data["cert"],
            key=auth_data["key"],
            operator=auth_data.get("operator"),
            type=auth_data.get("type"),
        )
    except ValidationError as e:
        raise ConfigError(f"Failed to parse auth file: {e}", path=str(path)) from e


def convert_keys(data: Any) -> Any:
    """Convert camelCase keys to snake_case for Pydantic.
    Keys under default_headers are preserved (they are header names)."""
    if isinstance(data, dict):
        result: dict[str, Any] = {}
        for k, v in data.items():
            new_k = camel_to_snake(k)
            if new_k in _VERBATIM_KEYS and isinstance(v, dict):
                result[new_k] = dict(v)
            else:
                result[new_k] = convert_keys(v)
        return result
    if isinstance(data, list):
        return [convert_keys(item) for item in data]
    return data


def convert_to_camel(data: Any) -> Any:
    """Convert snake_case keys to camelCase.
    Keys under default_headers are preserved (header names)."""
    if isinstance(data, dict):
        result: dict[str, Any] = {}
        for k, v in data.items():
            if k in _VERBATIM_KEYS and isinstance(v, dict):
                result[snake_to_camel(k)] = dict(v)
            else:
                result[snake_to_camel(k)] = convert_to_camel(v)
        return result
    if isinstance(data, list):
        return [convert_to_camel(item) for item in data]
    return data


def camel_to_snake(name: str) -> str:
    """Convert camelCase to snake_case."""
    result = []
    for i, char in enumerate(name):
        if char.isupper() and i > 0:
            result.append("_")
        result.append(char.lower())
    return "".join(result)


def snake_to_camel(name: str) -> str:
    """Convert snake_case to camelCase."""
    components = name.split("_")
    return components[0] + "".join(x.title() for x in components[1:])
