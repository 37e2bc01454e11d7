"""
本地版本管理模块。

提供本地已安装 Node.js 版本的检测、枚举和删除功能。
是否已安装完全由目录和可执行文件是否存在决定，不维护额外清单。
"""

import shutil
import subprocess
from pathlib import Path
from typing import List, Optional

from nvmx.utils.logger import get_logger
from nvmx.core.config_manager import ConfigManager
from nvmx.core.interfaces import ILocalManager
from nvmx.core import version_utils

logger = get_logger()


class LocalManagerError(Exception):
    """本地管理错误异常。"""
    pass


class VersionNotInstalledError(LocalManagerError):
    """版本未安装错误异常。"""
    pass


NODE_EXECUTABLE = Path("bin") / "node"


class LocalManager(ILocalManager):
    """
    本地版本管理器类。

    负责管理 versions 目录下已安装的 Node.js 版本。
    实现 ILocalManager 抽象接口。
    """

    def __init__(self, config_manager: ConfigManager):
        """
        初始化本地版本管理器。

        参数:
            config_manager: 配置管理器实例
        """
        self.config_manager = config_manager

    @property
    def versions_dir(self) -> Path:
        return self.config_manager.versions_dir

    def get_version_dir(self, version: str) -> Path:
        """
        获取版本安装目录。

        参数:
            version: 版本号，可不带 v 前缀

        返回:
            versions/<规范化版本号> 路径
        """
        return self.versions_dir / version_utils.normalize_version(version)

    def get_bin_dir(self, version: str) -> Path:
        """获取版本的 bin 目录。"""
        return self.get_version_dir(version) / "bin"

    def get_node_executable(self, version: str) -> Path:
        """获取版本的 node 可执行文件路径。"""
        return self.get_version_dir(version) / NODE_EXECUTABLE

    def is_installed(self, version: str) -> bool:
        """
        判断指定版本是否已完整安装。

        目录存在但缺少 node 可执行文件（例如安装中断）时视为未安装。

        参数:
            version: 版本号

        返回:
            已安装返回 True
        """
        version_dir = self.get_version_dir(version)
        return version_dir.is_dir() and (version_dir / NODE_EXECUTABLE).exists()

    def list_installed(self) -> List[str]:
        """
        扫描本地已安装的版本。

        返回:
            版本号列表，按主、次、修订号数值降序排列
        """
        if not self.versions_dir.is_dir():
            logger.debug(f"版本目录不存在: {self.versions_dir}")
            return []

        versions = []
        for item in self.versions_dir.iterdir():
            if not item.is_dir():
                continue
            if not version_utils.is_valid_version(item.name):
                logger.debug(f"跳过非版本目录: {item.name}")
                continue
            if self.is_installed(item.name):
                versions.append(item.name)
            else:
                logger.debug(f"目录 {item.name} 缺少 node 可执行文件，视为未安装")

        return version_utils.sort_versions_desc(versions)

    def remove_version(self, version: str) -> None:
        """
        删除已安装的版本目录。

        参数:
            version: 版本号

        抛出:
            VersionNotInstalledError: 版本未安装时抛出
        """
        normalized = version_utils.normalize_version(version)
        if not self.is_installed(normalized):
            raise VersionNotInstalledError(f"Node.js {normalized} is not installed")

        version_dir = self.get_version_dir(normalized)
        shutil.rmtree(version_dir, ignore_errors=True)
        logger.info(f"已删除 {version_dir}")

    def get_current_version(self) -> Optional[str]:
        """
        通过执行 node --version 获取当前生效的版本。

        返回:
            版本字符串，无可用 node 或执行失败返回 None
        """
        try:
            result = subprocess.run(
                ["node", "--version"],
                capture_output=True,
                text=True,
                timeout=10,
            )
        except subprocess.TimeoutExpired:
            logger.warning("获取当前 node 版本超时 (10秒)")
            return None
        except (FileNotFoundError, PermissionError) as e:
            logger.debug(f"无法执行 node: {e}")
            return None

        if result.returncode != 0:
            logger.debug(f"node --version 返回非零退出码: {result.returncode}")
            return None

        output = result.stdout.strip()
        return output or None
