"""
nvmx 工具模块。

提供日志记录、主机平台检测和输入验证等工具功能。
"""

from .logger import get_logger, get_nvmx_home
from .platform_info import UnsupportedPlatformError, get_arch, get_platform, ensure_supported_host
from .input_validator import InputValidator, InputValidationError

__all__ = [
    "get_logger",
    "get_nvmx_home",
    "UnsupportedPlatformError",
    "get_arch",
    "get_platform",
    "ensure_supported_host",
    "InputValidator",
    "InputValidationError",
]
