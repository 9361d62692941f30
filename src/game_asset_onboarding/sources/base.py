"""Base abstractions for source resolvers.

This module defines the resolved ``Source`` handed to extraction, the typed
USB device descriptor, and the interface every per-kind resolver
implements to integrate with the ``SourceResolver`` facade.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SourceKind(str, Enum):
    """The three kinds of location game archives can be read from."""

    LOCAL = "local"
    USB = "usb"
    NETWORK = "network"


@dataclass(frozen=True)
class Credential:
    """Username/password pair for a network source. Both may be empty."""

    username: str = ""
    password: str = field(default="", repr=False)

    @property
    def is_anonymous(self) -> bool:
        return not self.username


@dataclass(frozen=True)
class Source:
    """A resolved input location.

    Created by a resolver from user input and read-only once handed to the
    extraction supervisor. Sources are never persisted.

    Attributes:
        kind: Which backend produced this source
        path: Filesystem path, mount point, or UNC-style ``\\\\host\\share``
        credential: Network credential (network sources only)
    """

    kind: SourceKind
    path: str
    credential: Credential | None = None

    def __post_init__(self) -> None:
        if not self.path:
            raise ValueError("Source path must not be empty")


@dataclass(frozen=True)
class UsbDevice:
    """Typed descriptor of a removable storage device.

    Attributes:
        path: Mount point of the device
        label: Human-readable volume label
        total_space: Capacity in bytes (0 when unknown)
        free_space: Free bytes (0 when unknown)
    """

    path: str
    label: str
    total_space: int = 0
    free_space: int = 0


class Resolver(ABC):
    """Abstract base class for all per-kind source resolvers.

    Implementations turn a user's choice into a ``Source`` or raise a
    ``ResolutionError`` subclass. Resolvers hold no state between
    attempts.
    """

    kind: SourceKind

    @abstractmethod
    def resolve(self, **params: Any) -> Source:
        """Resolve user input into a Source.

        Args:
            **params: Kind-specific selection parameters

        Returns:
            The resolved Source

        Raises:
            ResolutionError: If the choice cannot be turned into a Source
        """
        pass
