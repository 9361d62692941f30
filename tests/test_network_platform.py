"""Tests for the network share platform."""

from unittest.mock import Mock

import pytest

from game_asset_onboarding.core.errors import ConnectionFailed
from game_asset_onboarding.engine.base import NetworkProtocol
from game_asset_onboarding.platforms.network import NetworkResolver, build_unc_path
from game_asset_onboarding.sources.base import Credential, SourceKind


@pytest.fixture
def engine() -> Mock:
    engine = Mock()
    engine.connect_network.return_value = True
    return engine


class TestBuildUncPath:
    """Test UNC path construction."""

    def test_host_and_share(self) -> None:
        assert build_unc_path("nas", "games") == "\\\\nas\\games"

    def test_nested_share_path(self) -> None:
        assert build_unc_path("nas", "/games/Diablo II/") == "\\\\nas\\games\\Diablo II"

    def test_empty_share(self) -> None:
        assert build_unc_path("192.168.1.10", "") == "\\\\192.168.1.10"


class TestNetworkProtocol:
    """Test protocol parsing."""

    def test_case_insensitive(self) -> None:
        assert NetworkProtocol.parse("smb") is NetworkProtocol.SMB
        assert NetworkProtocol.parse(" Http ") is NetworkProtocol.HTTP
        assert NetworkProtocol.parse(NetworkProtocol.FTP) is NetworkProtocol.FTP

    def test_unsupported(self) -> None:
        with pytest.raises(ValueError, match="Supported protocols: SMB, FTP, HTTP"):
            NetworkProtocol.parse("gopher")


class TestNetworkResolver:
    """Test connecting and resolving network sources."""

    def test_resolve(self, engine: Mock) -> None:
        """Test that a successful connect yields a UNC source with the credential."""
        source = NetworkResolver(engine).resolve(
            protocol="SMB", host="nas", share="games", username="me", password="secret"
        )

        assert source.kind is SourceKind.NETWORK
        assert source.path == "\\\\nas\\games"
        assert source.credential == Credential("me", "secret")
        engine.connect_network.assert_called_once_with(
            NetworkProtocol.SMB, "nas", "games", "me", "secret"
        )

    def test_anonymous(self, engine: Mock) -> None:
        source = NetworkResolver(engine).resolve(protocol="ftp", host="nas", share="pub")

        assert source.credential is not None
        assert source.credential.is_anonymous

    def test_password_hidden_from_repr(self, engine: Mock) -> None:
        source = NetworkResolver(engine).resolve(host="nas", share="games", username="me", password="hunter2")

        assert "hunter2" not in repr(source)

    @pytest.mark.parametrize("host", ["", "   "])
    def test_empty_host_rejected_locally(self, engine: Mock, host: str) -> None:
        """Test that an empty host fails without contacting the engine."""
        with pytest.raises(ConnectionFailed):
            NetworkResolver(engine).resolve(host=host, share="games")

        engine.connect_network.assert_not_called()

    def test_unsupported_protocol(self, engine: Mock) -> None:
        with pytest.raises(ConnectionFailed, match="Unsupported protocol"):
            NetworkResolver(engine).resolve(protocol="nfs", host="nas", share="games")

        engine.connect_network.assert_not_called()

    def test_connect_refused(self, engine: Mock) -> None:
        engine.connect_network.return_value = False

        with pytest.raises(ConnectionFailed, match="Could not connect to nas"):
            NetworkResolver(engine).resolve(host="nas", share="games")

    def test_engine_error_wrapped(self, engine: Mock) -> None:
        """Test that engine exceptions surface as ConnectionFailed."""
        engine.connect_network.side_effect = OSError("timed out")

        with pytest.raises(ConnectionFailed) as exc_info:
            NetworkResolver(engine).resolve(host="nas", share="games")

        assert isinstance(exc_info.value.__cause__, OSError)

    def test_failed_attempt_leaves_no_state(self, engine: Mock) -> None:
        """Test that a failure does not affect the next attempt."""
        resolver = NetworkResolver(engine)
        engine.connect_network.return_value = False
        with pytest.raises(ConnectionFailed):
            resolver.resolve(host="nas", share="games", username="me", password="wrong")

        engine.connect_network.return_value = True
        source = resolver.resolve(host="nas", share="games", username="me", password="right")

        assert source.credential == Credential("me", "right")
