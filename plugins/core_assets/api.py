# plugins/core_assets/api.py

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse
from pydantic import BaseModel

from backend.core.contracts import PluginRegistryInterface
from .contracts import AssetResolverInterface
from .dependencies import get_asset_resolver, get_plugin_registry
from .models import MEDIA_URL_PREFIX

logger = logging.getLogger(__name__)


class PluginSummary(BaseModel):
    name: str
    version: Optional[str] = None
    priority: int
    root: str
    media_root: Optional[str] = None

class AssetSummary(BaseModel):
    path: str
    url: str
    filename: str
    extension: str


# --- 路由器 1: /media/plugins/... 公开的插件资源 ---
media_router = APIRouter(
    prefix=MEDIA_URL_PREFIX,
    tags=["Core-Assets", "Media"]
)

@media_router.get("/{plugin_name}/{path:path}", response_class=FileResponse)
async def serve_plugin_asset(
    plugin_name: str,
    path: str,
    resolver: AssetResolverInterface = Depends(get_asset_resolver)
):
    """
    发布并返回一个插件资源。
    只有出现在插件资源集合中的路径才能被访问，因此不存在目录穿越的问题。
    """
    try:
        # 清理和发布都是阻塞的文件系统操作，放到线程里执行
        response = await asyncio.to_thread(resolver.resolve, plugin_name, path)
    except Exception as e:
        logger.error(f"Error resolving plugin asset '{plugin_name}/{path}': {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error while publishing plugin asset.")

    if response is None:
        raise HTTPException(status_code=404, detail=f"Asset '{path}' not found in plugin '{plugin_name}'.")
    return response


# --- 路由器 2: /api/plugins/... 插件与资源的元信息 ---
plugins_api_router = APIRouter(
    prefix="/api/plugins",
    tags=["Core-Assets"]
)

@plugins_api_router.get("", response_model=List[PluginSummary])
async def list_plugins(registry: PluginRegistryInterface = Depends(get_plugin_registry)):
    return [
        PluginSummary(
            name=plugin.name,
            version=plugin.version,
            priority=plugin.priority,
            root=str(plugin.root),
            media_root=str(plugin.media_root) if plugin.media_root else None,
        )
        for plugin in registry.plugins()
    ]

@plugins_api_router.get("/{plugin_name}/assets", response_model=List[AssetSummary])
async def list_plugin_assets(
    plugin_name: str,
    registry: PluginRegistryInterface = Depends(get_plugin_registry),
    resolver: AssetResolverInterface = Depends(get_asset_resolver)
):
    plugin = registry.plugin(plugin_name)
    if plugin is None:
        raise HTTPException(status_code=404, detail=f"Plugin '{plugin_name}' not found.")

    assets = await asyncio.to_thread(resolver.assets, plugin)
    return [
        AssetSummary(path=asset.path, url=asset.url(), filename=asset.filename, extension=asset.extension)
        for asset in assets.values()
    ]
