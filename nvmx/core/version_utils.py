"""
版本工具模块。

提供版本号规范化、解析、校验和排序等工具函数。
"""

import re
from typing import Iterable, List, Tuple

VERSION_PATTERN = re.compile(r'^v?(\d+)\.(\d+)\.(\d+)$')


def normalize_version(version: str) -> str:
    """
    规范化版本字符串，缺少 v 前缀时补上。

    参数:
        version: 版本字符串，如 "14.17.0" 或 "v14.17.0"

    返回:
        以 v 开头的版本字符串
    """
    return version if version.startswith("v") else f"v{version}"


def strip_version_prefix(version: str) -> str:
    """去掉版本字符串的 v 前缀，得到纯数字版本号。"""
    return normalize_version(version)[1:]


def is_valid_version(version: str) -> bool:
    """
    判断字符串是否为合法的三段式版本号。

    参数:
        version: 版本字符串，可带 v 前缀

    返回:
        合法返回 True
    """
    return bool(version) and VERSION_PATTERN.match(version) is not None


def _parse_version(version_str: str) -> Tuple[int, ...]:
    """
    解析版本字符串为可比较的元组。

    参数:
        version_str: 版本字符串

    返回:
        版本元组 (major, minor, patch)
    """
    match = VERSION_PATTERN.match(version_str)
    if match:
        return tuple(int(p) for p in match.groups())
    parts = re.findall(r'\d+', version_str)
    return tuple(int(p) for p in parts) if parts else (0,)


def sort_versions_desc(versions: Iterable[str]) -> List[str]:
    """
    按版本号数值降序排列版本列表。

    参数:
        versions: 版本字符串序列

    返回:
        排序后的版本列表
    """
    return sorted(versions, key=_parse_version, reverse=True)
