"""
版本解析模块。

将用户输入的版本说明（别名、版本号、项目版本文件或默认版本）解析为规范化的版本号。
"""

from pathlib import Path
from typing import Optional

from nvmx.utils.logger import get_logger
from nvmx.utils import platform_info
from nvmx.core.config_manager import ConfigManager
from nvmx.core.remote_fetcher import RemoteFetcher
from nvmx.core import version_utils

logger = get_logger()


class VersionResolverError(Exception):
    """版本解析错误异常。"""
    pass


class NoVersionSpecifiedError(VersionResolverError):
    """未指定版本且没有默认版本。"""
    pass


class InvalidVersionError(VersionResolverError):
    """解析结果不是合法的三段式版本号。"""
    pass


VERSION_FILES = (".nvmxrc", ".node-version")
LTS_SPECIFIER = "lts"
PURPOSE_INSTALL = "install"
PURPOSE_USE = "use"


def find_version_file(start_dir: Path) -> Optional[Path]:
    """
    从起始目录向上查找版本文件。

    同一目录中 .nvmxrc 优先于 .node-version，最先找到版本文件的目录生效。

    参数:
        start_dir: 起始目录

    返回:
        版本文件路径，未找到返回 None
    """
    current = Path(start_dir).resolve()
    for directory in (current, *current.parents):
        for file_name in VERSION_FILES:
            candidate = directory / file_name
            if candidate.is_file():
                return candidate
    return None


def read_version_file(file_path: Path) -> Optional[str]:
    """
    读取版本文件内容。

    参数:
        file_path: 版本文件路径

    返回:
        去除空白并规范化后的版本号，文件为空或无法读取返回 None
    """
    try:
        content = Path(file_path).read_text(encoding="utf-8").strip()
    except (IOError, OSError, UnicodeDecodeError) as e:
        logger.warning(f"读取版本文件 {file_path} 失败: {e}")
        return None
    return version_utils.normalize_version(content) if content else None


class VersionResolver:
    """
    版本解析器类。

    解析顺序：别名 > 显式版本号 > 项目版本文件 > 默认版本 >
    最新 LTS（仅安装时）。
    """

    def __init__(self, config_manager: ConfigManager, remote_fetcher: RemoteFetcher):
        """
        初始化版本解析器。

        参数:
            config_manager: 配置管理器实例
            remote_fetcher: 远程版本获取器实例，用于解析最新 LTS
        """
        self.config_manager = config_manager
        self.remote_fetcher = remote_fetcher

    def resolve(
        self,
        specifier: Optional[str],
        start_dir: Optional[Path] = None,
        purpose: str = PURPOSE_USE,
    ) -> str:
        """
        将版本说明解析为规范化的版本号。

        参数:
            specifier: 用户输入的版本号或别名，None 或空字符串表示未指定
            start_dir: 查找版本文件的起始目录，默认当前工作目录
            purpose: "install" 或 "use"，决定最后的回退方式

        返回:
            v<major>.<minor>.<patch> 形式的版本号

        抛出:
            UnsupportedPlatformError: 当前主机不受支持
            NoVersionSpecifiedError: use 时未指定版本且没有默认版本
            InvalidVersionError: 解析结果不是合法版本号
        """
        platform_info.ensure_supported_host()

        specifier = (specifier or "").strip()
        if specifier:
            resolved = self._resolve_specifier(specifier)
        else:
            resolved = self._resolve_fallback(Path(start_dir) if start_dir else Path.cwd(), purpose)

        if not version_utils.is_valid_version(resolved):
            raise InvalidVersionError(f"Invalid Node.js version: {resolved}")
        return resolved

    def resolve_for_install(self, specifier: Optional[str], start_dir: Optional[Path] = None) -> str:
        """解析安装时使用的版本，未指定时最终回退到最新 LTS。"""
        return self.resolve(specifier, start_dir, PURPOSE_INSTALL)

    def resolve_for_use(self, specifier: Optional[str], start_dir: Optional[Path] = None) -> str:
        """解析切换时使用的版本，未指定且无默认版本时报错。"""
        return self.resolve(specifier, start_dir, PURPOSE_USE)

    def _resolve_specifier(self, specifier: str) -> str:
        alias_target = self.config_manager.get_alias(specifier)
        if alias_target:
            logger.debug(f"别名 {specifier} 指向 {alias_target}")
            return version_utils.normalize_version(alias_target)

        if specifier.lower() == LTS_SPECIFIER:
            return self.remote_fetcher.get_latest_lts()

        return version_utils.normalize_version(specifier)

    def _resolve_fallback(self, start_dir: Path, purpose: str) -> str:
        version_file = find_version_file(start_dir)
        if version_file is not None:
            file_version = read_version_file(version_file)
            if file_version:
                logger.info(f"使用 {version_file} 中的版本 {file_version}")
                return file_version

        default_version = self.config_manager.get_default_version()
        if default_version:
            logger.debug(f"使用默认版本 {default_version}")
            return version_utils.normalize_version(self.config_manager.resolve_alias(default_version))

        if purpose == PURPOSE_INSTALL:
            logger.info("未指定版本，将安装最新的 LTS 版本")
            return self.remote_fetcher.get_latest_lts()

        raise NoVersionSpecifiedError("No version specified and no default version set")
