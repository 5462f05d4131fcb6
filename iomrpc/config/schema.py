"""Configuration schema using Pydantic.

Construction-time settings for an RpcClient: transport kind, endpoint or
mutual-TLS material, default timeout and headers, and extra method names.
Persisted to ~/.iomrpc/config.json.
"""

from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

TransportType = Literal["grpc", "grpc-web"]


class AuthConfig(BaseModel):
    """Operator auth material for the native (mutual TLS) transport."""
    host: str
    port: int
    ca: str  # PEM text of the server certificate authority
    cert: str  # PEM text of the operator client certificate
    key: str  # PEM text of the operator client private key
    operator: str | None = None
    type: str | None = None


class ServiceMethodsConfig(BaseModel):
    """Extra snake_case method names appended to the built-in service catalogs."""
    operator: list[str] = Field(default_factory=list)
    listener: list[str] = Field(default_factory=list)


class ClientConfig(BaseSettings):
    """Root configuration for iomrpc clients."""
    transport: TransportType = "grpc-web"
    base_url: str | None = None  # Required for grpc-web
    auth: AuthConfig | None = None  # Required for grpc
    timeout_ms: int | None = None  # Applied when a call sets no timeout
    default_headers: dict[str, str] = Field(default_factory=dict)
    methods: ServiceMethodsConfig = Field(default_factory=ServiceMethodsConfig)

    model_config = SettingsConfigDict(
        env_prefix="IOMRPC_",
        env_nested_delimiter="__",
    )
