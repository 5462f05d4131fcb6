"""Native transport: HTTP/2 to host:port with mutual TLS.

The wire format is Connect unary JSON, the same as the web transport. Binary
gRPC framing (protobuf messages, trailers) is not spoken, so the server must
accept Connect requests on its TLS port.
"""

from __future__ import annotations

import ssl
import tempfile
from pathlib import Path

import httpx

from iomrpc.config.schema import AuthConfig
from iomrpc.transport.connect import DEFAULT_HTTP_TIMEOUT_S, ConnectTransport
from iomrpc.utils.exceptions import TransportConfigError


def build_ssl_context(ca: str, cert: str, key: str) -> ssl.SSLContext:
    """
    Build a client SSL context from PEM text.

    The server certificate must chain to ``ca``; hostname checking is off
    because operator servers are commonly addressed by IP.
    """
    try:
        context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH, cadata=ca)
        context.check_hostname = False
        # load_cert_chain only reads from files.
        with tempfile.TemporaryDirectory(prefix="iomrpc-") as tmp:
            cert_path = Path(tmp) / "client.crt"
            key_path = Path(tmp) / "client.key"
            cert_path.write_text(cert, encoding="utf-8")
            key_path.write_text(key, encoding="utf-8")
            key_path.chmod(0o600)
            context.load_cert_chain(certfile=str(cert_path), keyfile=str(key_path))
    except (ssl.SSLError, ValueError) as e:
        raise TransportConfigError(f"invalid TLS material for native gRPC transport: {e}", field="auth") from e
    return context


class NativeTransport(ConnectTransport):
    """
    HTTP/2 transport authenticated with an operator certificate.

    Requests are Connect unary JSON, not gRPC frames. ``kind`` stays "grpc"
    because it names the auth-file connection mode.
    """

    kind = "grpc"

    def __init__(
        self,
        auth: AuthConfig | None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if auth is None:
            raise TransportConfigError("Auth configuration is required for native gRPC transport", field="auth")
        missing = [name for name in ("ca", "cert", "key") if not getattr(auth, name)]
        if missing:
            raise TransportConfigError(
                f"TLS material missing for native gRPC transport: {', '.join(missing)}",
                field="auth",
            )
        self.auth = auth
        http_client = httpx.AsyncClient(
            base_url=f"https://{auth.host}:{auth.port}",
            http2=True,
            verify=build_ssl_context(auth.ca, auth.cert, auth.key),
            timeout=DEFAULT_HTTP_TIMEOUT_S,
            transport=transport,
        )
        super().__init__(http_client)
