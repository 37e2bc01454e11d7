"""
输入验证模块。

提供用户输入的验证和 sanitization 功能。
"""

import os
import re
from typing import Any

from nvmx.utils.logger import get_logger

logger = get_logger()


class InputValidationError(Exception):
    """输入验证错误异常。"""
    pass


class InputValidator:
    """
    输入验证器类。

    提供别名、版本号、URL 等用户输入的验证和 sanitization 功能。
    """

    ALIAS_NAME_PATTERN = re.compile(r'^[a-zA-Z0-9_.-]+$')
    VERSION_STRING_PATTERN = re.compile(r'^[a-zA-Z0-9._/*-]+$')
    URL_PATTERN = re.compile(
        r'^https?://'
        r'(?:(?:[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?\.)+'
        r'(?:[A-Z]{2,63}|[A-Z0-9-]{2,})'
        r'|localhost'
        r'|\d{1,3}(?:\.\d{1,3}){3})'
        r'(?::\d+)?'
        r'(?:/?|[/?]\S+)$',
        re.IGNORECASE
    )
    MAX_ALIAS_NAME_LENGTH = 50
    MAX_VERSION_LENGTH = 100

    @classmethod
    def validate_alias_name(cls, name: str) -> bool:
        """
        验证别名的有效性。

        参数:
            name: 别名

        返回:
            验证通过返回 True，否则抛出 InputValidationError
        """
        if not name or not name.strip():
            raise InputValidationError("别名不能为空")

        name = name.strip()

        if len(name) > cls.MAX_ALIAS_NAME_LENGTH:
            raise InputValidationError(f"别名不能超过 {cls.MAX_ALIAS_NAME_LENGTH} 个字符")

        if not cls.ALIAS_NAME_PATTERN.match(name):
            raise InputValidationError("别名只能包含字母、数字、点、下划线和连字符")

        return True

    @classmethod
    def sanitize_alias_name(cls, name: str) -> str:
        """去除别名两端空白。"""
        if not name:
            return ""
        return name.strip()

    @classmethod
    def validate_version_string(cls, version: str) -> bool:
        """
        验证版本号字符串的有效性。

        参数:
            version: 版本号字符串

        返回:
            验证通过返回 True，否则抛出 InputValidationError
        """
        if not version or not version.strip():
            raise InputValidationError("版本号不能为空")

        if len(version.strip()) > cls.MAX_VERSION_LENGTH:
            raise InputValidationError(f"版本号不能超过 {cls.MAX_VERSION_LENGTH} 个字符")

        if not cls.VERSION_STRING_PATTERN.match(version.strip()):
            raise InputValidationError("版本号格式无效")

        return True

    @classmethod
    def validate_url(cls, url: str) -> bool:
        """
        验证 URL 的有效性。

        参数:
            url: URL 字符串

        返回:
            验证通过返回 True，否则抛出 InputValidationError
        """
        if not url or not url.strip():
            raise InputValidationError("URL 不能为空")

        if not cls.URL_PATTERN.match(url.strip()):
            raise InputValidationError(f"URL 格式无效: {url}")

        return True

    @classmethod
    def sanitize_url(cls, url: str) -> str:
        """
        sanitize URL 字符串，去除空白和末尾的斜杠。

        参数:
            url: 原始 URL

        返回:
            sanitized 后的 URL
        """
        if not url:
            return ""
        return url.strip().rstrip("/")

    @classmethod
    def validate_positive_int(cls, value: Any, field: str) -> int:
        """
        验证并转换正整数输入。

        参数:
            value: 原始输入
            field: 字段名称，用于错误信息

        返回:
            转换后的整数
        """
        try:
            number = int(str(value).strip())
        except (TypeError, ValueError) as e:
            raise InputValidationError(f"{field} 必须是正整数") from e

        if number <= 0:
            raise InputValidationError(f"{field} 必须是正整数")

        return number

    @classmethod
    def safe_join_path(cls, base_path: str, *paths: str) -> str:
        """
        安全连接路径，防止路径遍历。

        参数:
            base_path: 基础路径
            *paths: 要连接的路径部分

        返回:
            安全连接后的路径

        抛出:
            InputValidationError: 如果结果路径位于 base_path 外部
        """
        base = os.path.abspath(base_path)
        joined = os.path.abspath(os.path.join(base, *paths))
        if joined != base and not joined.startswith(base + os.sep):
            raise InputValidationError(f"路径遍历检测: {joined}")
        return joined
