# plugins/core_assets/discovery.py

import os
import logging
import posixpath
from collections.abc import Mapping
from pathlib import Path
from typing import Dict, Optional

from backend.core.contracts import Plugin
from . import filesystem
from .contracts import AssetProducer
from .models import PluginAsset, PluginAssets

logger = logging.getLogger(__name__)

# 未声明 assets 时扫描的插件子目录
ASSETS_DIR_NAME = "assets"


def discover_assets(plugin: Plugin) -> PluginAssets:
    """
    构建插件当前的资源集合。

    1. 插件的 extends 声明了 "assets"（映射、列表，或懒加载的生产者）时使用声明；
       声明中被跳过的条目不会导致回退，结果可以为空。
    2. 否则（或声明求值后为空）扫描 {plugin.root}/assets/ 下的所有普通文件。
    """
    assets = _declared_assets(plugin)

    # 声明为空和未声明无法区分，同样回退到目录扫描
    if assets is None:
        assets = _scanned_assets(plugin)

    collection = PluginAssets(plugin=plugin)
    for path, root in assets.items():
        try:
            collection.add(path, PluginAsset(path=path, source_root=Path(root), plugin=plugin))
        except ValueError as e:
            logger.warning(f"Skipping invalid asset '{path}' in plugin '{plugin.name}': {e}")

    return collection


def _declared_assets(plugin: Plugin) -> Optional[Dict[str, str]]:
    """声明求值为空时返回 None；否则返回规范化后的映射（可能为空）。"""
    declared = plugin.extends.get("assets")

    # 懒加载：只在需要时求值，且每次发现只求值一次
    if callable(declared):
        declared = declared()
    elif isinstance(declared, AssetProducer):
        declared = declared.resolve()

    if not declared:
        return None

    if isinstance(declared, Mapping):
        entries = declared.items()
    else:
        entries = enumerate(declared)

    normalized: Dict[str, str] = {}

    for key, root in entries:
        if isinstance(key, str):
            # 与媒体目录索引中的写法保持一致，如 ./app.js -> app.js
            normalized[posixpath.normpath(key) if key else key] = str(root)
            continue

        # 位置条目：用相对插件根目录的路径作为键
        absolute = Path(os.path.normpath(plugin.root / root))
        relative = _relative_to_root(plugin.root, absolute)
        if relative is None:
            logger.warning(
                f"Declared asset '{root}' is outside of plugin '{plugin.name}' root {plugin.root}; skipping."
            )
            continue
        normalized[relative] = str(absolute)

    return normalized


def _relative_to_root(plugin_root: Path, absolute: Path) -> Optional[str]:
    """absolute 相对插件根目录的 POSIX 路径；不在根目录下时返回 None。"""
    candidates = [
        (Path(os.path.normpath(plugin_root)), absolute),
        (plugin_root.resolve(), absolute.resolve()),
    ]
    for base, target in candidates:
        try:
            relative = target.relative_to(base)
        except ValueError:
            continue
        if relative.parts:
            return relative.as_posix()
    return None


def _scanned_assets(plugin: Plugin) -> Dict[str, str]:
    root = plugin.root / ASSETS_DIR_NAME
    assets: Dict[str, str] = {}

    for path in filesystem.index(root, recursive=True):
        absolute = root / path
        if absolute.is_file():
            assets[path] = str(absolute)

    return assets
