"""工具模块测试。"""

import logging
from pathlib import Path

import pytest

from nvmx.main import main
from nvmx.utils.input_validator import InputValidationError, InputValidator
from nvmx.utils.logger import get_logger, get_nvmx_home, setup_logger
from nvmx.utils.platform_info import UnsupportedPlatformError, ensure_supported_host


class TestPlatformInfo:
    """主机平台检测测试。"""

    @pytest.mark.parametrize("system,machine,expected", [
        ("Linux", "x86_64", ("linux", "x64")),
        ("Linux", "aarch64", ("linux", "arm64")),
        ("Darwin", "arm64", ("darwin", "arm64")),
        ("Darwin", "x86_64", ("darwin", "x64")),
    ])
    def test_supported_hosts(self, monkeypatch, system, machine, expected):
        monkeypatch.setattr("platform.system", lambda: system)
        monkeypatch.setattr("platform.machine", lambda: machine)

        assert ensure_supported_host() == expected

    def test_windows_unsupported(self, monkeypatch):
        monkeypatch.setattr("platform.system", lambda: "Windows")

        with pytest.raises(UnsupportedPlatformError, match="Windows"):
            ensure_supported_host()

    def test_unknown_arch_unsupported(self, monkeypatch):
        monkeypatch.setattr("platform.machine", lambda: "ppc64le")

        with pytest.raises(UnsupportedPlatformError, match="ppc64le"):
            ensure_supported_host()


class TestInputValidator:
    """用户输入验证测试。"""

    @pytest.mark.parametrize("name", ["lts", "work-1", "node_16.x"])
    def test_valid_alias_names(self, name):
        assert InputValidator.validate_alias_name(name) is True

    @pytest.mark.parametrize("name", ["", "   ", "bad name", "a/b", "x" * 51])
    def test_invalid_alias_names(self, name):
        with pytest.raises(InputValidationError):
            InputValidator.validate_alias_name(name)

    @pytest.mark.parametrize("url", [
        "https://nodejs.org/dist",
        "https://npmmirror.com/mirrors/node/",
        "http://localhost:8080",
        "http://127.0.0.1:7890",
    ])
    def test_valid_urls(self, url):
        assert InputValidator.validate_url(url) is True

    @pytest.mark.parametrize("url", ["", "nodejs.org", "ftp://example.com", "not a url"])
    def test_invalid_urls(self, url):
        with pytest.raises(InputValidationError):
            InputValidator.validate_url(url)

    def test_sanitize_url_strips_trailing_slash(self):
        assert InputValidator.sanitize_url(" https://nodejs.org/dist/ ") == "https://nodejs.org/dist"

    def test_positive_int(self):
        assert InputValidator.validate_positive_int(" 15 ", "TTL") == 15

        with pytest.raises(InputValidationError, match="TTL"):
            InputValidator.validate_positive_int("0", "TTL")

    def test_safe_join_path(self, tmp_path):
        assert InputValidator.safe_join_path(str(tmp_path), "a/b") == str(tmp_path / "a" / "b")

        with pytest.raises(InputValidationError):
            InputValidator.safe_join_path(str(tmp_path), "../escape")


class TestNvmxHome:
    """主目录解析测试。"""

    def test_env_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv("NVMX_HOME", str(tmp_path / "custom"))
        assert get_nvmx_home() == tmp_path / "custom"

    def test_default_home(self, monkeypatch):
        monkeypatch.delenv("NVMX_HOME", raising=False)
        assert get_nvmx_home() == Path.home() / ".nvmx"


@pytest.fixture
def fresh_logger(monkeypatch):
    monkeypatch.setattr("nvmx.utils.logger._logger", None)
    nvmx_logger = logging.getLogger("nvmx")
    saved_handlers = list(nvmx_logger.handlers)
    saved_level = nvmx_logger.level
    yield nvmx_logger
    for handler in nvmx_logger.handlers:
        if handler not in saved_handlers:
            handler.close()
    nvmx_logger.handlers[:] = saved_handlers
    nvmx_logger.setLevel(saved_level)


class TestLogger:
    """日志配置测试。"""

    def test_get_logger_does_not_touch_home(self, fresh_logger, nvmx_home):
        logger = get_logger()

        assert logger.name == "nvmx"
        assert not (nvmx_home / "logs").exists()

    def test_setup_logger_writes_under_current_home(self, fresh_logger, nvmx_home):
        logger = setup_logger(log_to_console=False)
        logger.info("hello")

        assert (nvmx_home / "logs" / "nvmx.log").exists()
        assert get_logger() is logger

    def test_main_configures_file_logging(self, fresh_logger, nvmx_home, capsys):
        assert main(["alias", "ls"]) == 0
        assert (nvmx_home / "logs" / "nvmx.log").exists()
