"""Contract consumed from the extraction engine.

The engine is an opaque service: it copies/decodes archives, reports
progress through pull-style getters, enumerates removable storage and
connects to network shares. This boundary is the only place
engine-specific types cross into the pipeline.
"""

from abc import ABC, abstractmethod
from enum import Enum


class NetworkProtocol(str, Enum):
    """Protocols a network source can be reached over."""

    SMB = "SMB"
    FTP = "FTP"
    HTTP = "HTTP"

    @classmethod
    def parse(cls, value: "str | NetworkProtocol") -> "NetworkProtocol":
        """Parse a protocol name case-insensitively.

        Raises:
            ValueError: If the name is not a supported protocol
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            supported = ", ".join(p.value for p in cls)
            raise ValueError(
                f"Unsupported protocol: '{value}'. Supported protocols: {supported}"
            ) from None


class ExtractionEngine(ABC):
    """Abstract base class for extraction engines.

    ``extract`` is a blocking call that runs on the supervisor's background
    worker. The getters are polled concurrently from another thread, so
    implementations must make them safe to call while ``extract`` runs.
    """

    @abstractmethod
    def extract(self, source_path: str, destination_path: str) -> bool:
        """Extract archives from ``source_path`` into ``destination_path``.

        Returns:
            True if extraction succeeded
        """
        pass

    @abstractmethod
    def current_progress(self) -> float:
        """Progress of the running extraction, from 0.0 to 1.0."""
        pass

    @abstractmethod
    def current_file_name(self) -> str:
        """Name of the item being processed, or "" when idle."""
        pass

    @abstractmethod
    def missing_files(self) -> list[str]:
        """Required archives found missing by the last extraction."""
        pass

    @abstractmethod
    def validate(self, path: str) -> bool:
        """Pre-flight check that ``path`` holds a usable installation."""
        pass

    @abstractmethod
    def list_usb_devices(self) -> list[str]:
        """Enumerate removable storage as ``path|label|totalSpace|freeSpace`` records."""
        pass

    @abstractmethod
    def connect_network(
        self,
        protocol: NetworkProtocol,
        host: str,
        share: str,
        username: str,
        password: str,
    ) -> bool:
        """Connect to a network location.

        Returns:
            True if the connection succeeded
        """
        pass

    def last_error(self) -> str:
        """Human-readable reason for the last failure, if the engine knows one."""
        return ""
