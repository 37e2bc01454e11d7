"""
配置管理器模块。

提供 config.json 的加载、合并保存、验证功能，以及别名表和远程版本缓存的读写。
"""

import copy
import json
import os
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from nvmx.utils.logger import get_logger, get_nvmx_home
from nvmx.core.interfaces import IConfigManager
from nvmx.core.version_utils import normalize_version

logger = get_logger()


class ConfigValidationError(Exception):
    """配置验证错误异常。"""
    pass


class ConfigSaveError(Exception):
    """配置保存错误异常。"""
    pass


DEFAULT_MIRROR_URL = "https://nodejs.org/dist"
DEFAULT_REMOTE_CACHE_TTL = 30


def _atomic_save_json(file_path: Path, data: Any, indent: int = 2) -> None:
    """
    通过临时文件写入 JSON 数据，再替换目标文件，避免写入中断导致文件损坏。

    参数:
        file_path: 目标文件路径
        data: 要保存的数据
        indent: JSON 缩进
    """
    temp_path = file_path.with_suffix(file_path.suffix + ".tmp")

    try:
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=indent, ensure_ascii=False)
        os.replace(temp_path, file_path)
    except (IOError, OSError, TypeError, ValueError):
        if temp_path.exists():
            try:
                temp_path.unlink()
            except OSError:
                logger.debug(f"无法删除临时文件: {temp_path}")
        raise


def _now_ms() -> int:
    """当前时间的毫秒时间戳。"""
    return int(time.time() * 1000)


class ConfigManager(IConfigManager):
    """
    配置管理器类。

    每次访问都从磁盘重新读取配置，不在进程内缓存。保存采用读取-合并-写入：
    先重新加载磁盘上的当前配置，再覆盖传入的部分字段，最后整体重写文件。
    多个进程同时写入时没有加锁，后写入者覆盖先写入者。
    实现 IConfigManager 抽象接口。
    """

    CONFIG_FILE_NAME = "config.json"

    REQUIRED_FIELDS = {
        "mirrorUrl": str,
        "cache": dict,
        "aliases": dict,
    }

    OPTIONAL_FIELDS = {
        "proxyUrl": str,
        "defaultVersion": str,
        "remoteVersionsCache": dict,
    }

    def __init__(self, home: Optional[Path] = None):
        """
        初始化配置管理器。

        参数:
            home: nvmx 主目录，默认为 NVMX_HOME 环境变量或 ~/.nvmx
        """
        self.home = Path(home) if home is not None else get_nvmx_home()
        self.config_file = self.home / self.CONFIG_FILE_NAME

    @property
    def versions_dir(self) -> Path:
        """已安装版本的存放目录。"""
        return self.home / "versions"

    @property
    def cache_dir(self) -> Path:
        """下载缓存目录。"""
        return self.home / "cache"

    def ensure_directories(self) -> None:
        """确保主目录、版本目录和下载缓存目录存在。"""
        for directory in (self.home, self.versions_dir, self.cache_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def get_default_config(self) -> Dict[str, Any]:
        """
        获取内置默认配置。

        返回:
            默认配置字典（每次返回新的副本）
        """
        return {
            "mirrorUrl": DEFAULT_MIRROR_URL,
            "cache": {
                "maxSize": 1024,
                "ttl": 30,
            },
            "aliases": {},
        }

    def load_config(self) -> Dict[str, Any]:
        """
        加载配置文件。

        配置文件不存在时返回默认配置；存在时与默认配置做浅合并，
        文件中的键覆盖默认值。读取、解析或验证失败时记录错误并返回默认配置。

        返回:
            配置字典
        """
        defaults = self.get_default_config()
        if not self.config_file.exists():
            logger.debug(f"配置文件不存在，使用默认配置: {self.config_file}")
            return defaults

        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                user_config = json.load(f)
            if not isinstance(user_config, dict):
                raise ConfigValidationError("配置文件顶层必须是 JSON 对象")

            # 可选字段为 null 时视为未设置
            for field in self.OPTIONAL_FIELDS:
                if field in user_config and user_config[field] is None:
                    user_config.pop(field)

            config = {**defaults, **user_config}
            self.validate_config(config)
            return config
        except (IOError, OSError, json.JSONDecodeError) as e:
            logger.error(f"加载配置文件失败，使用默认配置: {e}")
            return defaults
        except ConfigValidationError as e:
            logger.error(f"配置验证失败，使用默认配置: {e}")
            return defaults

    def save_config(self, partial: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        保存配置到文件（读取-合并-写入）。

        值为 None 的键会从配置中删除。

        参数:
            partial: 要覆盖的部分配置

        返回:
            写入磁盘的完整配置

        抛出:
            ConfigValidationError: 合并后的配置无效
            ConfigSaveError: 写入文件失败
        """
        current = self.load_config()
        for key, value in (partial or {}).items():
            if value is None:
                current.pop(key, None)
            else:
                current[key] = value

        self.validate_config(current)

        try:
            self.home.mkdir(parents=True, exist_ok=True)
            logger.debug(f"保存配置到 {self.config_file}")
            _atomic_save_json(self.config_file, current, indent=2)
        except (IOError, OSError, TypeError, ValueError) as e:
            logger.error(f"保存配置失败: {e}")
            raise ConfigSaveError(f"无法保存配置到 {self.config_file}: {e}") from e

        return current

    def validate_config(self, config: Dict[str, Any]) -> bool:
        """
        验证配置的有效性。

        参数:
            config: 要验证的配置字典

        返回:
            验证通过返回 True

        抛出:
            ConfigValidationError: 配置验证失败时抛出
        """
        for field, expected_type in self.REQUIRED_FIELDS.items():
            if field not in config:
                raise ConfigValidationError(f"缺少必需字段: {field}")
            if not isinstance(config[field], expected_type):
                raise ConfigValidationError(
                    f"字段 '{field}' 必须是 {expected_type.__name__} 类型，"
                    f"实际为 {type(config[field]).__name__}"
                )

        for field, expected_type in self.OPTIONAL_FIELDS.items():
            if field in config and not isinstance(config[field], expected_type):
                raise ConfigValidationError(
                    f"字段 '{field}' 必须是 {expected_type.__name__} 类型，"
                    f"实际为 {type(config[field]).__name__}"
                )

        for name, target in config["aliases"].items():
            if not isinstance(target, str):
                raise ConfigValidationError(f"别名 '{name}' 的目标版本必须是字符串")

        return True

    def get_mirror_url(self) -> str:
        """获取 Node.js 镜像地址（不带末尾斜杠）。"""
        return self.load_config()["mirrorUrl"].rstrip("/")

    def set_mirror_url(self, url: str) -> None:
        """设置 Node.js 镜像地址。"""
        self.save_config({"mirrorUrl": url})

    def get_proxy_url(self) -> Optional[str]:
        """获取代理地址，未配置返回 None。"""
        return self.load_config().get("proxyUrl") or None

    def set_proxy_url(self, url: Optional[str]) -> None:
        """设置代理地址，传入 None 清除代理。"""
        self.save_config({"proxyUrl": url})

    def get_request_proxies(self) -> Optional[Dict[str, str]]:
        """
        获取 requests 使用的代理映射。

        返回:
            {"http": url, "https": url}，未配置代理返回 None
        """
        proxy_url = self.get_proxy_url()
        if not proxy_url:
            return None
        return {"http": proxy_url, "https": proxy_url}

    def get_default_version(self) -> Optional[str]:
        """获取默认版本，未配置返回 None。"""
        return self.load_config().get("defaultVersion") or None

    def set_default_version(self, version: str) -> None:
        """设置默认版本。"""
        self.save_config({"defaultVersion": version})

    def get_cache_config(self) -> Dict[str, Any]:
        """
        获取下载缓存策略。

        返回:
            包含 maxSize（MB）和 ttl（天）的字典
        """
        cache_config = dict(self.get_default_config()["cache"])
        cache_config.update(self.load_config().get("cache", {}))
        return cache_config

    def get_aliases(self) -> Dict[str, str]:
        """获取全部别名。"""
        return dict(self.load_config().get("aliases", {}))

    def get_alias(self, name: str) -> Optional[str]:
        """获取别名指向的版本，不存在返回 None。"""
        return self.get_aliases().get(name)

    def set_alias(self, name: str, version: str) -> None:
        """
        设置别名。

        参数:
            name: 别名
            version: 目标版本，会被规范化为 v 前缀形式
        """
        aliases = self.get_aliases()
        aliases[name] = normalize_version(version)
        self.save_config({"aliases": aliases})

    def remove_alias(self, name: str) -> bool:
        """
        删除别名。

        返回:
            别名存在并已删除返回 True，不存在返回 False
        """
        aliases = self.get_aliases()
        if name not in aliases:
            return False
        del aliases[name]
        self.save_config({"aliases": aliases})
        return True

    def resolve_alias(self, name_or_version: str) -> str:
        """
        解析别名，不是别名时原样返回。

        参数:
            name_or_version: 别名或版本号

        返回:
            别名目标版本或原始输入
        """
        return self.get_aliases().get(name_or_version, name_or_version)

    def get_remote_versions_cache(self) -> Optional[Dict[str, Any]]:
        """
        获取远程版本缓存信封。

        返回:
            包含 versions、timestamp、ttl 的字典，不存在返回 None
        """
        envelope = self.load_config().get("remoteVersionsCache")
        if not envelope:
            return None
        return copy.deepcopy(envelope)

    def set_remote_versions_cache(
        self,
        versions: List[str],
        lts: Optional[List[str]] = None,
    ) -> None:
        """
        刷新远程版本缓存。

        时间戳只在这里更新；ttl 沿用上一次的设置，从未设置时为 30 分钟。

        参数:
            versions: 按版本号降序排列的版本列表
            lts: 其中被标记为 LTS 的版本
        """
        previous = self.get_remote_versions_cache() or {}
        envelope = {
            "versions": list(versions),
            "timestamp": _now_ms(),
            "ttl": previous.get("ttl", DEFAULT_REMOTE_CACHE_TTL),
            "lts": list(lts or []),
        }
        self.save_config({"remoteVersionsCache": envelope})

    def set_remote_versions_cache_ttl(self, minutes: int) -> None:
        """
        设置远程版本缓存的 ttl（分钟），不刷新版本数据。

        参数:
            minutes: 新的 ttl
        """
        envelope = self.get_remote_versions_cache() or {
            "versions": [],
            "timestamp": 0,
            "lts": [],
        }
        envelope["ttl"] = minutes
        self.save_config({"remoteVersionsCache": envelope})

    def is_remote_versions_cache_valid(self, now: Optional[int] = None) -> bool:
        """
        判断远程版本缓存是否仍在有效期内。

        参数:
            now: 当前毫秒时间戳，默认取系统时间

        返回:
            now < timestamp + ttl 时返回 True
        """
        envelope = self.get_remote_versions_cache()
        if not envelope:
            return False

        timestamp = envelope.get("timestamp", 0)
        ttl_minutes = envelope.get("ttl", DEFAULT_REMOTE_CACHE_TTL)
        current = _now_ms() if now is None else now
        return current < timestamp + ttl_minutes * 60 * 1000
