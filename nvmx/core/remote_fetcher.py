"""
远程版本获取模块。

从镜像的 index.json 获取可用的 Node.js 版本列表，并通过配置中的缓存信封
按 ttl 复用结果。获取失败时回退到已有（即使已过期）的缓存。
"""

from typing import Any, Dict, List

import requests

from nvmx.utils.logger import get_logger
from nvmx.core.config_manager import ConfigManager
from nvmx.core.interfaces import IRemoteFetcher
from nvmx.core import version_utils

logger = get_logger()


class RemoteFetcherError(Exception):
    """远程获取错误异常。"""
    pass


class NetworkError(RemoteFetcherError):
    """网络错误异常。"""
    pass


class MirrorError(RemoteFetcherError):
    """镜像源返回内容无效异常。"""
    pass


class CatalogUnavailableError(RemoteFetcherError):
    """远程获取失败且没有任何缓存可用。"""
    pass


INDEX_FILE = "index.json"
REQUEST_TIMEOUT = 30


class RemoteFetcher(IRemoteFetcher):
    """
    远程版本获取器类。

    负责从镜像源获取 Node.js 可用版本列表并维护缓存。
    实现 IRemoteFetcher 抽象接口。
    """

    def __init__(self, config_manager: ConfigManager, session: requests.Session | None = None):
        """
        初始化远程版本获取器。

        参数:
            config_manager: 配置管理器实例
            session: 可选的 requests 会话，默认直接使用 requests 模块
        """
        self.config_manager = config_manager
        self.session = session or requests

    def get_index_url(self) -> str:
        """获取镜像 index.json 的完整地址。"""
        return f"{self.config_manager.get_mirror_url()}/{INDEX_FILE}"

    def fetch_releases(self) -> List[Dict[str, Any]]:
        """
        从镜像源获取并解析发布列表。

        返回:
            发布信息列表，每项包含 version、date、lts、security

        抛出:
            NetworkError: 请求失败或返回非 2xx 状态
            MirrorError: 返回内容不是预期的 JSON 数组
        """
        index_url = self.get_index_url()
        proxies = self.config_manager.get_request_proxies()
        logger.info(f"正在从 {index_url} 获取可用的 Node.js 版本...")

        try:
            response = self.session.get(index_url, timeout=REQUEST_TIMEOUT, proxies=proxies)
            response.raise_for_status()
        except requests.RequestException as e:
            raise NetworkError(f"请求 {index_url} 失败: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise MirrorError(f"{index_url} 返回的内容不是有效的 JSON: {e}") from e

        if not isinstance(data, list):
            raise MirrorError(f"索引文件格式不支持: {type(data).__name__}")

        releases = []
        skipped = 0
        for item in data:
            if not isinstance(item, dict):
                skipped += 1
                continue
            version = item.get("version", "")
            if not isinstance(version, str) or not version_utils.is_valid_version(version):
                skipped += 1
                continue
            releases.append({
                "version": version_utils.normalize_version(version),
                "date": item.get("date"),
                "lts": bool(item.get("lts")),
                "security": bool(item.get("security")),
            })

        if skipped:
            logger.debug(f"索引中有 {skipped} 个无效项被过滤")

        return releases

    def get_remote_versions(self, force_refresh: bool = False) -> List[str]:
        """
        获取远程可用的 Node.js 版本。

        参数:
            force_refresh: 为 True 时忽略有效缓存，强制请求镜像

        返回:
            按版本号降序排列的版本列表

        抛出:
            CatalogUnavailableError: 请求失败且没有任何缓存
        """
        if not force_refresh and self.config_manager.is_remote_versions_cache_valid():
            envelope = self.config_manager.get_remote_versions_cache()
            if envelope and envelope.get("versions"):
                logger.debug("使用本地缓存的远程版本列表")
                return list(envelope["versions"])

        try:
            releases = self.fetch_releases()
        except RemoteFetcherError as e:
            envelope = self.config_manager.get_remote_versions_cache()
            if envelope and envelope.get("versions"):
                logger.warning(f"获取远程版本失败，使用缓存的版本列表（可能已过期）: {e}")
                return list(envelope["versions"])

            logger.error(f"获取远程版本失败且没有可用缓存: {e}")
            raise CatalogUnavailableError(f"Failed to fetch available Node.js versions: {e}") from e

        versions = version_utils.sort_versions_desc(
            dict.fromkeys(r["version"] for r in releases)
        )
        lts = [r["version"] for r in releases if r["lts"]]
        self.config_manager.set_remote_versions_cache(versions, lts)
        logger.info(f"成功获取 {len(versions)} 个 Node.js 版本")
        return versions

    def get_latest_lts(self, force_refresh: bool = False) -> str:
        """
        获取最新的 LTS 版本。

        取版本列表中第一个被标记为 LTS 的版本；没有任何标记时取第一个版本。

        参数:
            force_refresh: 是否强制刷新远程版本列表

        返回:
            规范化的版本号
        """
        versions = self.get_remote_versions(force_refresh)
        if not versions:
            raise CatalogUnavailableError("远程版本列表为空")

        envelope = self.config_manager.get_remote_versions_cache() or {}
        lts_versions = set(envelope.get("lts", []))
        for version in versions:
            if version in lts_versions:
                return version
        return versions[0]

    def clear_cache(self) -> None:
        """清空远程版本缓存。"""
        self.config_manager.set_remote_versions_cache([])
        logger.info("远程版本缓存已清空")

    def set_cache_ttl(self, minutes: int) -> None:
        """
        设置远程版本缓存的 ttl。

        参数:
            minutes: ttl（分钟）
        """
        self.config_manager.set_remote_versions_cache_ttl(minutes)
        logger.info(f"远程版本缓存 ttl 已设置为 {minutes} 分钟")
