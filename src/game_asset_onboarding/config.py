"""Runtime configuration for onboarding.

Values come from defaults, then environment variables, then explicit
overrides (the CLI passes its flags here).
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from .core.archives import ARCHIVE_EXTENSION
from .core.errors import ConfigurationError

ENV_HOME = "GAME_ONBOARDING_HOME"
ENV_BROWSE_ROOT = "GAME_ONBOARDING_BROWSE_ROOT"
ENV_NETWORK_MOUNTS = "GAME_ONBOARDING_NETWORK_MOUNTS"

MOUNT_SEPARATOR = ";"

DEFAULT_HOME = Path("~/.local/share/game-asset-onboarding")
ASSET_DIRNAME = "assets"
LEDGER_FILENAME = "onboarding.json"


def parse_network_mount(value: str) -> tuple[str, Path]:
    """Parse one ``\\\\host\\share=/local/path`` mapping.

    Raises:
        ConfigurationError: If the value is not ``UNC=PATH``
    """
    unc, separator, local = value.partition("=")
    unc, local = unc.strip(), local.strip()
    if not separator or not unc or not local:
        raise ConfigurationError(f"Invalid network mount '{value}': expected UNC=PATH")
    if not unc.startswith(("\\\\", "//")):
        raise ConfigurationError(
            f"Invalid network mount '{value}': '{unc}' is not a network share path"
        )
    return unc, Path(local).expanduser()


def parse_network_mounts(value: str) -> dict[str, Path]:
    """Parse ``;``-separated ``UNC=PATH`` mappings, as read from the environment."""
    return dict(
        parse_network_mount(item) for item in value.split(MOUNT_SEPARATOR) if item.strip()
    )


@dataclass(frozen=True)
class OnboardingConfig:
    """Paths and tunables for one onboarding run.

    Attributes:
        data_dir: App-private directory holding the ledger and assets
        poll_interval: Seconds between progress samples
        file_filter: Extension a locally selected archive must have
        browse_root: Directory the local file browser starts in
        network_timeout: Seconds to wait when connecting to network sources
        network_mounts: Maps ``\\\\host\\share`` prefixes to local mount points
    """

    data_dir: Path
    poll_interval: float = 0.1
    file_filter: str = ARCHIVE_EXTENSION
    browse_root: Path | None = None
    network_timeout: float = 5.0
    network_mounts: Mapping[str, Path] = field(default_factory=dict)

    @property
    def asset_dir(self) -> Path:
        return self.data_dir / ASSET_DIRNAME

    @property
    def ledger_path(self) -> Path:
        return self.data_dir / LEDGER_FILENAME

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, **overrides: Any
    ) -> "OnboardingConfig":
        """Build a config from the environment plus explicit overrides.

        Overrides whose value is None are ignored, so unset CLI flags fall
        through to the environment and defaults. ``network_mounts`` overrides
        are merged over the mounts read from the environment.

        Args:
            environ: Environment to read (defaults to os.environ)
            **overrides: Field values that take precedence

        Returns:
            OnboardingConfig instance

        Raises:
            ConfigurationError: If a network mount mapping is malformed
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {
            "data_dir": Path(env.get(ENV_HOME) or DEFAULT_HOME),
        }
        if env.get(ENV_BROWSE_ROOT):
            values["browse_root"] = Path(env[ENV_BROWSE_ROOT])

        mounts = parse_network_mounts(env.get(ENV_NETWORK_MOUNTS, ""))
        mounts.update(overrides.pop("network_mounts", None) or {})
        values["network_mounts"] = mounts

        values.update({key: value for key, value in overrides.items() if value is not None})

        values["data_dir"] = Path(values["data_dir"]).expanduser()
        if values.get("browse_root") is not None:
            values["browse_root"] = Path(values["browse_root"]).expanduser()
        return cls(**values)
