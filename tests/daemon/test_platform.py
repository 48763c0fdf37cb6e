"""Tests for platform detection utilities."""

import platform
from pathlib import Path

import pytest  # type: ignore[import-not-found]

import chessclock.daemon.platform as platform_module
from chessclock.daemon.platform import (
    Platform,
    get_ipc_socket_path,
    get_log_file_path,
    get_pid_file_path,
    get_platform,
    get_runtime_dir,
    get_state_file_path,
    is_daemon_supported,
)


class TestPlatformDetection:
    """Test platform detection."""

    def test_get_platform(self) -> None:
        """Test platform detection returns valid platform."""
        assert get_platform() in (Platform.LINUX, Platform.MACOS, Platform.WINDOWS, Platform.UNKNOWN)

    def test_get_platform_matches_system(self) -> None:
        """Test platform detection matches system platform."""
        plat = get_platform()
        system = platform.system().lower()

        if system == "linux":
            assert plat == Platform.LINUX
        elif system == "darwin":
            assert plat == Platform.MACOS
        elif system == "windows":
            assert plat == Platform.WINDOWS


class TestPaths:
    """Test path utilities."""

    def test_runtime_dir_created(self, home_dir: Path) -> None:
        """Test the runtime directory is created on demand."""
        path = get_runtime_dir()

        assert path == home_dir / ".chessclock" / "runtime"
        assert path.is_dir()

    def test_runtime_files_outside_logs(self, home_dir: Path) -> None:
        """Test daemon files never land in the time sheet directory."""
        logs = home_dir / ".chessclock" / "logs"
        for path in (get_pid_file_path(), get_state_file_path(), get_log_file_path()):
            assert path.parent == get_runtime_dir()
            assert logs not in path.parents

    def test_file_suffixes(self) -> None:
        """Test runtime file names."""
        assert get_pid_file_path().suffix == ".pid"
        assert get_state_file_path().suffix == ".json"
        assert get_log_file_path().name == "daemon.log"

    def test_get_ipc_socket_path(self) -> None:
        """Test IPC socket path on Unix platforms."""
        if get_platform() not in (Platform.LINUX, Platform.MACOS):
            pytest.skip("Unix domain sockets are not available")
        assert get_ipc_socket_path().suffix == ".sock"

    def test_get_ipc_socket_path_unsupported(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test socket path lookup fails without Unix sockets."""
        monkeypatch.setattr(platform_module, "get_platform", lambda: Platform.WINDOWS)

        with pytest.raises(RuntimeError, match="Unsupported platform"):
            get_ipc_socket_path()


class TestDaemonSupport:
    """Test daemon support detection."""

    def test_is_daemon_supported_returns_tuple(self) -> None:
        """Test daemon support check returns (bool, str) tuple."""
        supported, reason = is_daemon_supported()
        assert isinstance(supported, bool)
        assert isinstance(reason, str)

    @pytest.mark.parametrize("plat", [Platform.LINUX, Platform.MACOS])
    def test_supported_platforms(self, monkeypatch: pytest.MonkeyPatch, plat: Platform) -> None:
        """Test daemon support on Unix platforms."""
        monkeypatch.setattr(platform_module, "get_platform", lambda: plat)
        assert is_daemon_supported() == (True, "Platform supported")

    @pytest.mark.parametrize("plat", [Platform.WINDOWS, Platform.UNKNOWN])
    def test_unsupported_platforms(self, monkeypatch: pytest.MonkeyPatch, plat: Platform) -> None:
        """Test daemon support returns False without Unix sockets."""
        monkeypatch.setattr(platform_module, "get_platform", lambda: plat)

        supported, reason = is_daemon_supported()
        assert supported is False
        assert "Unsupported platform" in reason
