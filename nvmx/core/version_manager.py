"""
版本管理器模块。

协调版本解析、远程版本获取、安装、切换和卸载，供命令行调用。
"""

from pathlib import Path
from typing import Dict, List, Optional, Tuple

from nvmx.utils.logger import get_logger
from nvmx.utils.input_validator import InputValidator
from nvmx.core.config_manager import ConfigManager
from nvmx.core.remote_fetcher import RemoteFetcher
from nvmx.core.local_manager import LocalManager, VersionNotInstalledError
from nvmx.core.download_manager import DownloadManager
from nvmx.core.version_resolver import VersionResolver
from nvmx.core import version_utils

logger = get_logger()


class VersionManager:
    """
    版本管理器类。

    本类作为协调者，将具体工作委托给各个专用模块。
    所有模块共享同一个 ConfigManager 实例。
    """

    def __init__(self, config_manager: ConfigManager):
        """
        初始化版本管理器。

        参数:
            config_manager: 配置管理器实例
        """
        self.config_manager = config_manager

        self.remote_fetcher = RemoteFetcher(config_manager)
        self.local_manager = LocalManager(config_manager)
        self.download_manager = DownloadManager(config_manager, self.local_manager)
        self.resolver = VersionResolver(config_manager, self.remote_fetcher)

    def install(self, specifier: Optional[str] = None, cwd: Optional[Path] = None) -> Tuple[str, bool]:
        """
        解析并安装版本。

        参数:
            specifier: 版本号或别名，None 时按版本文件、默认版本、最新 LTS 依次回退
            cwd: 查找版本文件的起始目录

        返回:
            (规范化版本号, 是否实际执行了安装)
        """
        version = self.resolver.resolve_for_install(specifier, cwd)
        installed = self.download_manager.install_version(version)
        return version, installed

    def use(self, specifier: Optional[str] = None, cwd: Optional[Path] = None) -> Tuple[str, Path]:
        """
        解析版本并确认其已安装。

        不修改 PATH，只返回版本号和 bin 目录，由 shell 集成负责切换。

        返回:
            (规范化版本号, bin 目录)

        抛出:
            VersionNotInstalledError: 版本未安装
        """
        version = self.resolver.resolve_for_use(specifier, cwd)
        if not self.local_manager.is_installed(version):
            raise VersionNotInstalledError(
                f"Node.js {version} is not installed. Install it first with: nvmx install {version}"
            )
        return version, self.local_manager.get_bin_dir(version)

    def uninstall(self, version: str) -> str:
        """卸载指定版本，返回规范化版本号。参数按版本号处理，不解析别名。"""
        normalized = version_utils.normalize_version(version.strip())
        self.download_manager.uninstall_version(normalized)
        return normalized

    def list_installed(self) -> List[str]:
        """列出已安装版本。"""
        return self.local_manager.list_installed()

    def get_remote_versions(self, force_refresh: bool = False) -> List[str]:
        """获取远程可用版本。"""
        return self.remote_fetcher.get_remote_versions(force_refresh)

    def get_current_version(self) -> Optional[str]:
        """获取当前生效的版本。"""
        return self.local_manager.get_current_version()

    def get_aliases(self) -> Dict[str, str]:
        """获取全部别名。"""
        return self.config_manager.get_aliases()

    def set_alias(self, name: str, version: str) -> str:
        """
        设置别名，目标版本必须已安装。

        参数:
            name: 别名
            version: 目标版本号

        返回:
            规范化后的目标版本号

        抛出:
            InputValidationError: 别名或版本号格式无效
            VersionNotInstalledError: 目标版本未安装
        """
        InputValidator.validate_alias_name(name)
        InputValidator.validate_version_string(version)
        name = InputValidator.sanitize_alias_name(name)
        normalized = version_utils.normalize_version(version.strip())

        if not self.local_manager.is_installed(normalized):
            raise VersionNotInstalledError(
                f"Node.js {normalized} is not installed. Install it first with: nvmx install {normalized}"
            )

        self.config_manager.set_alias(name, normalized)
        logger.info(f"别名 {name} 已指向 {normalized}")
        return normalized

    def remove_alias(self, name: str) -> bool:
        """删除别名，返回别名是否存在。"""
        return self.config_manager.remove_alias(name.strip())

    def prune_download_cache(self) -> List[Path]:
        """按缓存策略清理下载的发行包。"""
        return self.download_manager.prune_download_cache()
