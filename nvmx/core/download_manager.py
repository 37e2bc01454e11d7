"""
下载管理模块。

提供 Node.js 版本的下载、解压、安装和卸载功能，以及下载缓存清理。
"""

import os
import shutil
import tarfile
import time
from pathlib import Path
from typing import List

import requests

from nvmx.utils.logger import get_logger
from nvmx.utils.input_validator import InputValidator, InputValidationError
from nvmx.utils import platform_info
from nvmx.core.config_manager import ConfigManager
from nvmx.core.local_manager import LocalManager
from nvmx.core.interfaces import IDownloadManager
from nvmx.core import version_utils

logger = get_logger()


class DownloadManagerError(Exception):
    """下载管理错误异常。"""
    pass


class InstallationError(DownloadManagerError):
    """安装错误异常。"""
    pass


class DownloadError(InstallationError):
    """下载错误异常。"""
    pass


class ExtractionError(InstallationError):
    """解压或复制错误异常。"""
    pass


CHUNK_SIZE = 8192
DOWNLOAD_TIMEOUT = 300


class DownloadManager(IDownloadManager):
    """
    下载管理器类。

    负责 Node.js 版本的下载、解压和安装。安装直接写入最终的版本目录，
    中途失败可能留下缺少 node 可执行文件的目录，LocalManager 会将其视为未安装，
    下一次安装会覆盖它。
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        local_manager: LocalManager,
        session: requests.Session | None = None,
    ):
        """
        初始化下载管理器。

        参数:
            config_manager: 配置管理器实例
            local_manager: 本地版本管理器实例
            session: 可选的 requests 会话，默认直接使用 requests 模块
        """
        self.config_manager = config_manager
        self.local_manager = local_manager
        self.session = session or requests

    def get_tarball_name(self, version: str) -> str:
        """
        获取当前主机对应的发行包文件名。

        参数:
            version: 版本号

        返回:
            node-v<版本>-<平台>-<架构>.tar.gz
        """
        return f"{self._get_dist_name(version)}.tar.gz"

    def _get_dist_name(self, version: str) -> str:
        """发行包解压后的顶层目录名。"""
        number = version_utils.strip_version_prefix(version)
        host_platform, arch = platform_info.ensure_supported_host()
        return f"node-v{number}-{host_platform}-{arch}"

    def build_download_url(self, version: str) -> str:
        """
        构建下载 URL。

        参数:
            version: 版本号

        返回:
            <镜像>/v<版本>/node-v<版本>-<平台>-<架构>.tar.gz
        """
        number = version_utils.strip_version_prefix(version)
        mirror_url = self.config_manager.get_mirror_url()
        return f"{mirror_url}/v{number}/{self.get_tarball_name(version)}"

    def download_file(self, url: str, destination: Path) -> None:
        """
        以流式方式下载文件。

        参数:
            url: 下载地址
            destination: 保存路径

        抛出:
            DownloadError: 网络错误或非 2xx 响应
        """
        proxies = self.config_manager.get_request_proxies()
        try:
            with self.session.get(url, stream=True, timeout=DOWNLOAD_TIMEOUT, proxies=proxies) as response:
                response.raise_for_status()

                with open(destination, "wb") as f:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
        except requests.RequestException as e:
            raise DownloadError(f"下载 {url} 失败: {e}") from e
        except OSError as e:
            raise DownloadError(f"写入 {destination} 失败: {e}") from e

    def extract_tarball(self, tarball_path: Path, destination: Path) -> None:
        """
        解压 tar.gz 发行包，防止路径遍历漏洞。

        参数:
            tarball_path: 发行包路径
            destination: 解压目标目录

        抛出:
            ExtractionError: 包含非法路径或解压失败
        """
        try:
            with tarfile.open(tarball_path, "r:gz") as tf:
                for member in tf.getmembers():
                    try:
                        InputValidator.safe_join_path(str(destination), member.name)
                    except InputValidationError as e:
                        raise ExtractionError(f"发行包包含非法路径: {member.name}") from e

                if hasattr(tarfile, "data_filter"):
                    tf.extractall(destination, filter="data")
                else:
                    tf.extractall(destination)
        except (tarfile.TarError, OSError) as e:
            raise ExtractionError(f"解压 {tarball_path} 失败: {e}") from e

    def install_version(self, version: str) -> bool:
        """
        下载并安装指定版本。已安装时直接返回，不访问网络。

        参数:
            version: 版本号，可不带 v 前缀

        返回:
            实际执行了安装返回 True，已安装返回 False

        抛出:
            UnsupportedPlatformError: 当前主机不受支持
            DownloadError: 下载失败，此时不会创建版本目录
            ExtractionError: 解压或复制失败，版本目录可能残留部分文件
        """
        normalized = version_utils.normalize_version(version)

        if self.local_manager.is_installed(normalized):
            logger.info(f"Node.js {normalized} 已安装")
            return False

        self.config_manager.ensure_directories()

        download_url = self.build_download_url(normalized)
        tarball_path = self.config_manager.cache_dir / self.get_tarball_name(normalized)

        logger.info(f"正在下载 Node.js {normalized}: {download_url}")
        self.download_file(download_url, tarball_path)

        version_dir = self.local_manager.get_version_dir(normalized)
        if version_dir.exists():
            # 未安装成功的残留目录，整体清除后重新复制
            logger.info(f"清除未完成的安装目录: {version_dir}")
            shutil.rmtree(version_dir, ignore_errors=True)
        version_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"正在解压 Node.js {normalized}...")
        extract_dir = self.config_manager.cache_dir / self._get_dist_name(normalized)

        try:
            self.extract_tarball(tarball_path, self.config_manager.cache_dir)
            shutil.copytree(extract_dir, version_dir, symlinks=True, dirs_exist_ok=True)
        except (shutil.Error, OSError) as e:
            raise ExtractionError(f"复制 {extract_dir} 到 {version_dir} 失败: {e}") from e
        finally:
            shutil.rmtree(extract_dir, ignore_errors=True)

        logger.info(f"Node.js {normalized} 安装成功")
        return True

    def uninstall_version(self, version: str) -> None:
        """
        卸载指定版本。

        参数:
            version: 版本号

        抛出:
            VersionNotInstalledError: 版本未安装
        """
        self.local_manager.remove_version(version)
        logger.info(f"Node.js {version_utils.normalize_version(version)} 已卸载")

    def prune_download_cache(self) -> List[Path]:
        """
        按缓存策略清理下载的发行包。

        先删除超过 ttl 天的发行包，再从最旧的开始删除，直到总大小不超过 maxSize（MB）。

        返回:
            被删除的文件列表
        """
        cache_dir = self.config_manager.cache_dir
        if not cache_dir.is_dir():
            return []

        cache_config = self.config_manager.get_cache_config()
        max_bytes = int(cache_config["maxSize"]) * 1024 * 1024
        max_age = float(cache_config["ttl"]) * 24 * 60 * 60
        now = time.time()

        archives = sorted(
            (p for p in cache_dir.iterdir() if p.is_file() and p.name.endswith(".tar.gz")),
            key=lambda p: p.stat().st_mtime,
        )

        removed = []
        kept = []
        for archive in archives:
            if now - archive.stat().st_mtime > max_age:
                removed.append(archive)
            else:
                kept.append(archive)

        total = sum(p.stat().st_size for p in kept)
        while kept and total > max_bytes:
            oldest = kept.pop(0)
            total -= oldest.stat().st_size
            removed.append(oldest)

        for archive in removed:
            os.remove(archive)
            logger.info(f"已删除缓存的发行包 {archive.name}")

        return removed
