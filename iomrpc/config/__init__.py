"""Configuration module for iomrpc."""

from iomrpc.config.loader import get_config_path, load_config, parse_auth_file, save_config
from iomrpc.config.schema import AuthConfig, ClientConfig, ServiceMethodsConfig, TransportType

__all__ = [
    "AuthConfig",
    "ClientConfig",
    "ServiceMethodsConfig",
    "TransportType",
    "get_config_path",
    "load_config",
    "parse_auth_file",
    "save_config",
]
