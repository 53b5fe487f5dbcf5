# plugins/core_assets/__init__.py
import logging
from typing import List

from fastapi import APIRouter

from backend.core.contracts import Container, HookManager
from .resolver import AssetResolver
from .settings import AssetSettings

logger = logging.getLogger(__name__)

def _create_asset_resolver(container: Container) -> AssetResolver:
    settings: AssetSettings = container.resolve("asset_settings")
    return AssetResolver(container.resolve("plugin_registry"), mode=settings.publish_mode)

async def provide_routers(routers: List[APIRouter]) -> List[APIRouter]:
    from .api import media_router, plugins_api_router
    routers.append(media_router)
    routers.append(plugins_api_router)
    logger.debug("Provided 'media_router' and 'plugins_api_router' to the application.")
    return routers

def register_plugin(container: Container, hook_manager: HookManager):
    logger.info("--> 正在注册 [core_assets] 插件...")
    container.register("asset_settings", AssetSettings.from_env, singleton=True)
    container.register("asset_resolver", _create_asset_resolver, singleton=True)
    hook_manager.add_implementation(
        "collect_api_routers", provide_routers, priority=50, plugin_name="core_assets"
    )
    logger.info("插件 [core_assets] 注册成功。")
