"""
nvmx 核心模块。

提供配置管理、版本解析、远程版本缓存和安装生命周期管理功能。
"""

from .interfaces import IConfigManager, ILocalManager, IRemoteFetcher, IDownloadManager
from .config_manager import ConfigManager, ConfigValidationError, ConfigSaveError
from .local_manager import LocalManager, LocalManagerError, VersionNotInstalledError
from .remote_fetcher import RemoteFetcher, RemoteFetcherError, NetworkError, MirrorError, CatalogUnavailableError
from .download_manager import DownloadManager, DownloadManagerError, InstallationError, DownloadError, ExtractionError
from .version_resolver import VersionResolver, VersionResolverError, NoVersionSpecifiedError, InvalidVersionError
from .version_manager import VersionManager
from . import version_utils

__all__ = [
    "IConfigManager", "ILocalManager", "IRemoteFetcher", "IDownloadManager",
    "ConfigManager", "ConfigValidationError", "ConfigSaveError",
    "LocalManager", "LocalManagerError", "VersionNotInstalledError",
    "RemoteFetcher", "RemoteFetcherError", "NetworkError", "MirrorError", "CatalogUnavailableError",
    "DownloadManager", "DownloadManagerError", "InstallationError", "DownloadError", "ExtractionError",
    "VersionResolver", "VersionResolverError", "NoVersionSpecifiedError", "InvalidVersionError",
    "VersionManager",
    "version_utils",
]
