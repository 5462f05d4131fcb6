"""Client construction and output helpers shared by CLI commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer
from pydantic import BaseModel
from rich.console import Console
from rich.markup import escape

from iomrpc.config.loader import load_config
from iomrpc.rpc.client import RpcClient
from iomrpc.utils.exceptions import classify_exception


def build_client(auth: Path | None, url: str | None, config_path: Path | None) -> RpcClient:
    """Auth file wins (native transport), then --url (web transport), then the config file."""
    if auth is not None:
        return RpcClient.from_auth_file(auth)
    config = load_config(config_path)
    if url:
        config = config.model_copy(update={"transport": "grpc-web", "base_url": url})
    return RpcClient.from_config(config)


def parse_headers(values: list[str] | None) -> dict[str, str]:
    headers: dict[str, str] = {}
    for item in values or []:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"header must be key=value, got {item!r}", param_hint="--header")
        headers[key.strip()] = value
    return headers


def parse_params(raw: str) -> dict[str, Any]:
    try:
        params = json.loads(raw or "{}")
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"invalid JSON: {e}", param_hint="PARAMS") from e
    if not isinstance(params, dict):
        raise typer.BadParameter("request must be a JSON object", param_hint="PARAMS")
    return params


def to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    return value


def fail(console: Console, exc: BaseException) -> None:
    """Print an error (yellow if retryable, red otherwise) and exit 1."""
    _, category, retryable = classify_exception(exc)
    style = "yellow" if retryable else "red"
    console.print(f"[{style}]{escape(str(exc))}[/{style}] [dim]({category.value})[/dim]")
    raise typer.Exit(1)
