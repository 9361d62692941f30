"""Network share resolver.

Validates the user's network target locally, asks the engine to connect,
and on success builds a UNC-style Source with the credential attached.
Nothing is cached: a failed attempt leaves no state behind.
"""

import logging

from ...core.errors import ConnectionFailed
from ...engine.base import ExtractionEngine, NetworkProtocol
from ...sources.base import Credential, Resolver, Source, SourceKind

logger = logging.getLogger(__name__)


def build_unc_path(host: str, share: str) -> str:
    """Build a ``\\\\host\\share`` path.

    Slashes around the share are dropped and inner forward slashes become
    backslashes.
    """
    share_part = share.replace("/", "\\").strip("\\")
    if not share_part:
        return f"\\\\{host}"
    return f"\\\\{host}\\{share_part}"


class NetworkResolver(Resolver):
    """Resolver for SMB, FTP and HTTP network locations."""

    kind = SourceKind.NETWORK

    def __init__(self, engine: ExtractionEngine):
        self.engine = engine

    def resolve(
        self,
        protocol: NetworkProtocol | str = NetworkProtocol.SMB,
        host: str = "",
        share: str = "",
        username: str = "",
        password: str = "",
        **params: object,
    ) -> Source:
        """Connect to a network location and resolve it into a Source.

        Args:
            protocol: SMB, FTP or HTTP
            host: Host name or IP address
            share: Share name or path on the host
            username: Login name (may be empty)
            password: Login password (may be empty)

        Returns:
            Source with kind=network, a UNC path and the credential

        Raises:
            ConnectionFailed: If the input is invalid or the engine cannot connect
        """
        host = (host or "").strip()
        share = (share or "").strip()

        if not host:
            raise ConnectionFailed("Host must not be empty")

        try:
            proto = NetworkProtocol.parse(protocol)
        except ValueError as e:
            raise ConnectionFailed(str(e)) from e

        logger.info("Connecting to %s://%s/%s", proto.value.lower(), host, share)
        try:
            connected = self.engine.connect_network(proto, host, share, username, password)
        except Exception as e:
            raise ConnectionFailed(f"Could not connect to {host}: {e}") from e

        if not connected:
            raise ConnectionFailed(f"Could not connect to {host} over {proto.value}")

        return Source(
            kind=SourceKind.NETWORK,
            path=build_unc_path(host, share),
            credential=Credential(username=username, password=password),
        )
