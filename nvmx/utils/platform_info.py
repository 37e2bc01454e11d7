"""
主机平台检测模块。

将当前系统和 CPU 架构映射为 Node.js 发行包命名中使用的名称。
"""

import platform
from typing import Tuple


class UnsupportedPlatformError(Exception):
    """不支持的操作系统或 CPU 架构异常。"""
    pass


PLATFORM_MAP = {
    "linux": "linux",
    "darwin": "darwin",
}

ARCH_MAP = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "arm64": "arm64",
    "aarch64": "arm64",
}


def get_platform() -> str:
    """
    获取当前操作系统在发行包中的名称。

    返回:
        "linux" 或 "darwin"

    抛出:
        UnsupportedPlatformError: 操作系统不受支持时抛出
    """
    system = platform.system().lower()
    name = PLATFORM_MAP.get(system)
    if name is None:
        raise UnsupportedPlatformError(f"Unsupported platform: {platform.system()}")
    return name


def get_arch() -> str:
    """
    获取当前 CPU 架构在发行包中的名称。

    返回:
        "x64" 或 "arm64"

    抛出:
        UnsupportedPlatformError: 架构不受支持时抛出
    """
    machine = platform.machine().lower()
    arch = ARCH_MAP.get(machine)
    if arch is None:
        raise UnsupportedPlatformError(f"Unsupported architecture: {platform.machine()}")
    return arch


def ensure_supported_host() -> Tuple[str, str]:
    """检查当前主机是否受支持，返回 (platform, arch)。"""
    return get_platform(), get_arch()
