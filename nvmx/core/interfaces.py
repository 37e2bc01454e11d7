"""
核心模块抽象接口定义。

定义 ConfigManager、LocalManager、RemoteFetcher、DownloadManager 等核心模块的抽象接口。
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional


class IConfigManager(ABC):
    """配置管理器抽象接口。"""

    @abstractmethod
    def load_config(self) -> Dict[str, Any]:
        """从磁盘加载配置并与默认配置合并。"""
        pass

    @abstractmethod
    def save_config(self, partial: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """读取-合并-写入保存配置。"""
        pass

    @abstractmethod
    def get_mirror_url(self) -> str:
        """获取镜像地址。"""
        pass

    @abstractmethod
    def get_proxy_url(self) -> Optional[str]:
        """获取代理地址。"""
        pass

    @abstractmethod
    def get_default_version(self) -> Optional[str]:
        """获取默认版本。"""
        pass

    @abstractmethod
    def get_aliases(self) -> Dict[str, str]:
        """获取全部别名。"""
        pass

    @abstractmethod
    def set_alias(self, name: str, version: str) -> None:
        """设置别名。"""
        pass

    @abstractmethod
    def remove_alias(self, name: str) -> bool:
        """删除别名。"""
        pass

    @abstractmethod
    def get_remote_versions_cache(self) -> Optional[Dict[str, Any]]:
        """获取远程版本缓存信封。"""
        pass

    @abstractmethod
    def set_remote_versions_cache(self, versions: List[str], lts: Optional[List[str]] = None) -> None:
        """刷新远程版本缓存。"""
        pass

    @abstractmethod
    def is_remote_versions_cache_valid(self, now: Optional[int] = None) -> bool:
        """判断远程版本缓存是否有效。"""
        pass


class ILocalManager(ABC):
    """本地版本管理器抽象接口。"""

    @abstractmethod
    def is_installed(self, version: str) -> bool:
        """判断指定版本是否已完整安装。"""
        pass

    @abstractmethod
    def list_installed(self) -> List[str]:
        """列出已安装版本，按版本号降序。"""
        pass

    @abstractmethod
    def remove_version(self, version: str) -> None:
        """删除已安装版本。"""
        pass

    @abstractmethod
    def get_version_dir(self, version: str) -> Path:
        """获取版本安装目录。"""
        pass

    @abstractmethod
    def get_current_version(self) -> Optional[str]:
        """获取当前生效的 Node.js 版本。"""
        pass


class IRemoteFetcher(ABC):
    """远程版本获取器抽象接口。"""

    @abstractmethod
    def get_remote_versions(self, force_refresh: bool = False) -> List[str]:
        """获取远程可用版本列表。"""
        pass

    @abstractmethod
    def get_latest_lts(self, force_refresh: bool = False) -> str:
        """获取最新的 LTS 版本。"""
        pass


class IDownloadManager(ABC):
    """安装生命周期管理器抽象接口。"""

    @abstractmethod
    def install_version(self, version: str) -> bool:
        """下载并安装指定版本。"""
        pass

    @abstractmethod
    def uninstall_version(self, version: str) -> None:
        """卸载指定版本。"""
        pass
