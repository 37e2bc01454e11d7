"""测试共享的 fixture。"""

import io
import tarfile
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from nvmx.core.config_manager import ConfigManager


@pytest.fixture(autouse=True)
def supported_host(monkeypatch):
    """固定主机为 linux-x64，避免测试结果依赖运行环境。"""
    monkeypatch.setattr("platform.system", lambda: "Linux")
    monkeypatch.setattr("platform.machine", lambda: "x86_64")


@pytest.fixture
def nvmx_home(tmp_path, monkeypatch):
    home = tmp_path / ".nvmx"
    monkeypatch.setenv("NVMX_HOME", str(home))
    return home


@pytest.fixture
def config_manager(nvmx_home):
    return ConfigManager(nvmx_home)


def make_installed(home: Path, version: str, with_executable: bool = True) -> Path:
    """在版本目录下创建一个（可选带 node 可执行文件的）安装目录。"""
    version_dir = home / "versions" / version
    (version_dir / "bin").mkdir(parents=True, exist_ok=True)
    if with_executable:
        node = version_dir / "bin" / "node"
        node.write_text("#!/bin/sh\necho %s\n" % version)
        node.chmod(0o755)
    return version_dir


def build_node_tarball(version: str = "14.17.0", platform: str = "linux", arch: str = "x64") -> bytes:
    """构建一个与官方发行包目录结构一致的最小 tar.gz。"""
    top = f"node-v{version}-{platform}-{arch}"
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tf:
        for directory in (top, f"{top}/bin", f"{top}/lib"):
            info = tarfile.TarInfo(directory)
            info.type = tarfile.DIRTYPE
            info.mode = 0o755
            tf.addfile(info)

        files = {
            f"{top}/bin/node": (f"#!/bin/sh\necho v{version}\n".encode(), 0o755),
            f"{top}/lib/README.md": (b"node\n", 0o644),
        }
        for name, (data, mode) in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = mode
            tf.addfile(info, io.BytesIO(data))

        link = tarfile.TarInfo(f"{top}/bin/npm")
        link.type = tarfile.SYMTYPE
        link.linkname = "../lib/README.md"
        tf.addfile(link)
    return buffer.getvalue()


def make_response(json_data=None, content: bytes = b"", status_error: Exception | None = None):
    """构造一个模拟的 requests 响应对象。"""
    response = MagicMock()
    response.__enter__.return_value = response
    response.__exit__.return_value = False
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    response.json.return_value = json_data
    response.iter_content.return_value = [content[i:i + 4096] for i in range(0, len(content), 4096)]
    return response


SAMPLE_INDEX = [
    {"version": "v17.1.0", "date": "2021-11-09", "files": [], "lts": False, "security": False},
    {"version": "v16.13.0", "date": "2021-10-26", "files": [], "lts": "Gallium", "security": False},
    {"version": "v9.11.2", "date": "2018-06-12", "files": [], "lts": False, "security": True},
    {"version": "v14.18.1", "date": "2021-10-12", "files": [], "lts": "Fermium", "security": False},
    {"version": "not-a-version", "date": "2021-01-01", "files": []},
    {"version": "v10.24.1", "date": "2021-04-06", "files": [], "lts": "Dubnium", "security": True},
]
