"""本地版本管理器测试。"""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from nvmx.core.local_manager import LocalManager, VersionNotInstalledError

from conftest import make_installed


@pytest.fixture
def local_manager(config_manager):
    return LocalManager(config_manager)


class TestIsInstalled:
    """安装状态检测测试。"""

    def test_true_with_executable(self, local_manager, nvmx_home):
        make_installed(nvmx_home, "v14.17.0")

        assert local_manager.is_installed("v14.17.0")
        assert local_manager.is_installed("14.17.0")

    def test_false_when_executable_missing(self, local_manager, nvmx_home):
        make_installed(nvmx_home, "v14.17.0", with_executable=False)

        assert not local_manager.is_installed("v14.17.0")

    def test_false_when_directory_missing(self, local_manager):
        assert not local_manager.is_installed("v14.17.0")


class TestListInstalled:
    """已安装版本枚举测试。"""

    def test_empty_when_store_missing(self, local_manager):
        assert local_manager.list_installed() == []

    def test_sorted_numerically_descending(self, local_manager, nvmx_home):
        for version in ("v9.0.0", "v10.0.0", "v16.13.0", "v9.11.2"):
            make_installed(nvmx_home, version)

        assert local_manager.list_installed() == ["v16.13.0", "v10.0.0", "v9.11.2", "v9.0.0"]

    def test_skips_partial_and_foreign_entries(self, local_manager, nvmx_home):
        make_installed(nvmx_home, "v14.17.0")
        make_installed(nvmx_home, "v16.13.0", with_executable=False)
        (nvmx_home / "versions" / "scratch").mkdir()
        (nvmx_home / "versions" / "notes.txt").write_text("x")

        assert local_manager.list_installed() == ["v14.17.0"]


class TestRemoveVersion:
    """版本删除测试。"""

    def test_removes_tree(self, local_manager, nvmx_home):
        version_dir = make_installed(nvmx_home, "v14.17.0")

        local_manager.remove_version("14.17.0")

        assert not version_dir.exists()
        assert local_manager.list_installed() == []

    def test_not_installed_leaves_store_unchanged(self, local_manager, nvmx_home):
        make_installed(nvmx_home, "v16.13.0")
        partial = make_installed(nvmx_home, "v14.17.0", with_executable=False)

        with pytest.raises(VersionNotInstalledError):
            local_manager.remove_version("v14.17.0")

        assert partial.exists()
        assert local_manager.list_installed() == ["v16.13.0"]


class TestGetCurrentVersion:
    """当前版本检测测试。"""

    @patch("nvmx.core.local_manager.subprocess.run")
    def test_returns_trimmed_output(self, mock_run, local_manager):
        mock_run.return_value = MagicMock(returncode=0, stdout="v16.13.0\n")

        assert local_manager.get_current_version() == "v16.13.0"

    @patch("nvmx.core.local_manager.subprocess.run", side_effect=FileNotFoundError("node"))
    def test_none_without_node(self, mock_run, local_manager):
        assert local_manager.get_current_version() is None

    @patch("nvmx.core.local_manager.subprocess.run")
    def test_none_on_failure_exit(self, mock_run, local_manager):
        mock_run.return_value = MagicMock(returncode=1, stdout="")

        assert local_manager.get_current_version() is None

    @patch("nvmx.core.local_manager.subprocess.run", side_effect=subprocess.TimeoutExpired("node", 10))
    def test_none_on_timeout(self, mock_run, local_manager):
        assert local_manager.get_current_version() is None
