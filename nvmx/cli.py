"""
nvmx 命令行接口模块。
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from nvmx import __version__
from nvmx.core.config_manager import ConfigManager, ConfigSaveError, ConfigValidationError
from nvmx.core.download_manager import InstallationError
from nvmx.core.local_manager import VersionNotInstalledError
from nvmx.core.remote_fetcher import CatalogUnavailableError
from nvmx.core.version_manager import VersionManager
from nvmx.core.version_resolver import VersionResolverError
from nvmx.utils.input_validator import InputValidator, InputValidationError
from nvmx.utils.logger import get_logger, set_log_level
from nvmx.utils.platform_info import UnsupportedPlatformError

logger = get_logger()

REMOTE_LIST_LIMIT = 20

HANDLED_ERRORS = (
    UnsupportedPlatformError,
    VersionNotInstalledError,
    CatalogUnavailableError,
    InstallationError,
    ConfigSaveError,
    ConfigValidationError,
    VersionResolverError,
    InputValidationError,
)


def create_parser() -> argparse.ArgumentParser:
    """
    创建并配置命令行参数解析器。

    返回:
        配置好的 ArgumentParser 实例
    """
    parser = argparse.ArgumentParser(
        prog="nvmx",
        description="nvmx - Node.js 版本管理器",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例:
  nvmx install 14.17.0         安装 Node.js 14.17.0
  nvmx install                 按 .nvmxrc / 默认版本 / 最新 LTS 安装
  nvmx use lts                 切换到别名 lts 指向的版本
  nvmx ls-remote --force       刷新并列出远程可用版本
  nvmx alias set lts 16.13.0   设置别名
  nvmx config set mirror URL   设置镜像地址
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="启用详细输出",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="命令",
        description="可用的 CLI 命令",
    )

    install_parser = subparsers.add_parser(
        "install",
        help="下载并安装指定版本",
    )
    install_parser.add_argument(
        "version",
        nargs="?",
        default=None,
        help="版本号或别名（省略则使用版本文件、默认版本或最新 LTS）",
    )

    use_parser = subparsers.add_parser(
        "use",
        help="切换到指定版本",
    )
    use_parser.add_argument(
        "version",
        nargs="?",
        default=None,
        help="版本号或别名（省略则使用版本文件或默认版本）",
    )

    subparsers.add_parser(
        "list",
        aliases=["ls"],
        help="列出已安装的版本",
    )

    remote_parser = subparsers.add_parser(
        "ls-remote",
        help="列出远程可用的版本",
    )
    remote_parser.add_argument(
        "--force",
        "-f",
        action="store_true",
        help="忽略缓存，强制刷新",
    )

    subparsers.add_parser(
        "current",
        help="显示当前生效的版本",
    )

    uninstall_parser = subparsers.add_parser(
        "uninstall",
        aliases=["remove"],
        help="卸载指定版本",
    )
    uninstall_parser.add_argument(
        "version",
        help="要卸载的版本",
    )

    config_parser = subparsers.add_parser(
        "config",
        help="查看或修改配置",
    )
    config_subparsers = config_parser.add_subparsers(dest="config_command")
    config_get = config_subparsers.add_parser("get", help="获取配置值")
    config_get.add_argument("key", choices=["mirror", "proxy", "default"])
    config_set = config_subparsers.add_parser("set", help="设置配置值")
    config_set.add_argument("key", choices=["mirror", "proxy", "default"])
    config_set.add_argument("value", help="配置值（proxy 设置为 none 表示清除）")

    alias_parser = subparsers.add_parser(
        "alias",
        help="管理版本别名",
    )
    alias_subparsers = alias_parser.add_subparsers(dest="alias_command")
    alias_subparsers.add_parser("list", aliases=["ls"], help="列出全部别名")
    alias_set = alias_subparsers.add_parser("set", help="设置别名")
    alias_set.add_argument("name", help="别名")
    alias_set.add_argument("version", help="目标版本")
    alias_rm = alias_subparsers.add_parser("rm", aliases=["remove"], help="删除别名")
    alias_rm.add_argument("name", help="别名")

    cache_parser = subparsers.add_parser(
        "cache",
        help="管理缓存",
    )
    cache_subparsers = cache_parser.add_subparsers(dest="cache_command")
    cache_ttl = cache_subparsers.add_parser("set-ttl", help="设置远程版本缓存的 ttl（分钟）")
    cache_ttl.add_argument("minutes", help="ttl（分钟）")
    cache_subparsers.add_parser("clear-remote", help="清空远程版本缓存")
    cache_subparsers.add_parser("clean", help="按缓存策略清理下载的发行包")

    return parser


def run_cli(args: argparse.Namespace) -> int:
    """
    运行命令行接口。

    参数:
        args: 解析后的命令行参数

    返回:
        退出码（0 表示成功）
    """
    if args.verbose:
        set_log_level(logging.DEBUG)

    if args.command is None:
        print("未指定命令。使用 --help 查看帮助信息。", file=sys.stderr)
        return 1

    command_handlers = {
        "install": handle_install,
        "use": handle_use,
        "list": handle_list,
        "ls": handle_list,
        "ls-remote": handle_ls_remote,
        "current": handle_current,
        "uninstall": handle_uninstall,
        "remove": handle_uninstall,
        "config": handle_config,
        "alias": handle_alias,
        "cache": handle_cache,
    }

    handler = command_handlers.get(args.command)
    if handler is None:
        print(f"未知命令: {args.command}", file=sys.stderr)
        return 1

    try:
        return handler(args)
    except HANDLED_ERRORS as e:
        logger.debug(f"命令 {args.command} 失败: {e!r}")
        print(f"错误: {e}", file=sys.stderr)
        return 1


def _get_managers(home: Optional[Path] = None):
    """
    获取管理器实例。

    返回:
        包含 ConfigManager、VersionManager 的元组
    """
    config_manager = ConfigManager(home)
    version_manager = VersionManager(config_manager)
    return config_manager, version_manager


def handle_install(args: argparse.Namespace) -> int:
    """处理 install 命令：解析并安装版本。"""
    _, version_manager = _get_managers()
    version, installed = version_manager.install(args.version, Path.cwd())
    if installed:
        print(f"Node.js {version} 安装成功")
    else:
        print(f"Node.js {version} 已安装")
    return 0


def handle_use(args: argparse.Namespace) -> int:
    """
    处理 use 命令：确认版本已安装并输出其 bin 目录。

    实际的 PATH 修改由 shell 集成脚本完成。
    """
    _, version_manager = _get_managers()
    version, bin_dir = version_manager.use(args.version, Path.cwd())
    print(version)
    print(bin_dir)
    return 0


def handle_list(args: argparse.Namespace) -> int:
    """处理 list 命令：列出已安装的版本。"""
    _, version_manager = _get_managers()
    versions = version_manager.list_installed()
    current = version_manager.get_current_version()

    print("已安装的 Node.js 版本:")
    if not versions:
        print("  没有已安装的版本")
        return 0

    for version in versions:
        marker = "* " if version == current else "  "
        print(f"{marker}{version}")
    return 0


def handle_ls_remote(args: argparse.Namespace) -> int:
    """处理 ls-remote 命令：列出远程可用版本。"""
    _, version_manager = _get_managers()
    versions = version_manager.get_remote_versions(args.force)

    print("可用的 Node.js 版本:")
    for version in versions[:REMOTE_LIST_LIMIT]:
        print(f"  {version}")
    if len(versions) > REMOTE_LIST_LIMIT:
        print(f"  ... 还有 {len(versions) - REMOTE_LIST_LIMIT} 个版本")
    return 0


def handle_current(args: argparse.Namespace) -> int:
    """处理 current 命令：显示当前生效的版本。"""
    _, version_manager = _get_managers()
    current = version_manager.get_current_version()
    if current:
        print(f"当前 Node.js 版本: {current}")
    else:
        print("当前没有生效的 Node.js 版本")
    return 0


def handle_uninstall(args: argparse.Namespace) -> int:
    """处理 uninstall 命令：卸载指定版本。"""
    _, version_manager = _get_managers()
    version = version_manager.uninstall(args.version)
    print(f"Node.js {version} 已卸载")
    return 0


def handle_config(args: argparse.Namespace) -> int:
    """处理 config 命令：查看或修改镜像、代理和默认版本。"""
    config_manager, _ = _get_managers()

    if args.config_command == "get":
        if args.key == "mirror":
            print(f"镜像地址: {config_manager.get_mirror_url()}")
        elif args.key == "proxy":
            print(f"代理地址: {config_manager.get_proxy_url() or '未设置'}")
        else:
            print(f"默认版本: {config_manager.get_default_version() or '未设置'}")
        return 0

    if args.config_command == "set":
        value = args.value.strip()
        if args.key == "mirror":
            InputValidator.validate_url(value)
            config_manager.set_mirror_url(InputValidator.sanitize_url(value))
            print(f"镜像地址已设置为: {InputValidator.sanitize_url(value)}")
        elif args.key == "proxy":
            if value.lower() == "none":
                config_manager.set_proxy_url(None)
                print("代理地址已清除")
            else:
                InputValidator.validate_url(value)
                config_manager.set_proxy_url(value)
                print(f"代理地址已设置为: {value}")
        else:
            InputValidator.validate_version_string(value)
            config_manager.set_default_version(value)
            print(f"默认版本已设置为: {value}")
        return 0

    print("用法: nvmx config {get,set} ...", file=sys.stderr)
    return 1


def handle_alias(args: argparse.Namespace) -> int:
    """处理 alias 命令：列出、设置或删除别名。"""
    _, version_manager = _get_managers()

    if args.alias_command in ("list", "ls"):
        aliases = version_manager.get_aliases()
        if not aliases:
            print("没有已设置的别名")
            return 0
        print("别名:")
        for name, version in sorted(aliases.items()):
            print(f"  {name} -> {version}")
        return 0

    if args.alias_command == "set":
        version = version_manager.set_alias(args.name, args.version)
        print(f"别名 '{args.name}' 已指向 Node.js {version}")
        return 0

    if args.alias_command in ("rm", "remove"):
        if version_manager.remove_alias(args.name):
            print(f"别名 '{args.name}' 已删除")
            return 0
        print(f"别名 '{args.name}' 不存在", file=sys.stderr)
        return 1

    print("用法: nvmx alias {list,set,rm} ...", file=sys.stderr)
    return 1


def handle_cache(args: argparse.Namespace) -> int:
    """处理 cache 命令：设置 ttl、清空远程版本缓存或清理发行包。"""
    _, version_manager = _get_managers()

    if args.cache_command == "set-ttl":
        minutes = InputValidator.validate_positive_int(args.minutes, "TTL")
        version_manager.remote_fetcher.set_cache_ttl(minutes)
        print(f"远程版本缓存 ttl 已设置为 {minutes} 分钟")
        return 0

    if args.cache_command == "clear-remote":
        version_manager.remote_fetcher.clear_cache()
        print("远程版本缓存已清空")
        return 0

    if args.cache_command == "clean":
        removed = version_manager.prune_download_cache()
        print(f"已清理 {len(removed)} 个缓存的发行包")
        return 0

    print("用法: nvmx cache {set-ttl,clear-remote,clean} ...", file=sys.stderr)
    return 1
