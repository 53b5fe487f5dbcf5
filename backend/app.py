# backend/app.py
import os
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, APIRouter
from fastapi.middleware.cors import CORSMiddleware

from backend.container import Container
from backend.core.hooks import HookManager
from backend.core.loader import PluginLoader
from backend.core.registry import PluginRegistry


def build_platform(media_dir: str = None, package: str = "plugins"):
    """
    组装平台核心：容器、钩子管理器、插件注册表，并加载所有插件。
    FastAPI 的 lifespan 和 CLI 共用这一套启动流程。
    """
    container = Container()
    hook_manager = HookManager(container)
    registry = PluginRegistry(media_dir or os.getenv("VITRINE_MEDIA_DIR", "media"))

    # 1. 注册平台核心服务
    container.register("container", lambda: container)
    container.register("hook_manager", lambda: hook_manager)
    container.register("plugin_registry", lambda: registry)
    hook_manager.add_shared_context("plugin_registry", registry)

    # 2. 加载插件（同步注册）
    loader = PluginLoader(container, hook_manager, registry, package=package)
    loader.load_plugins()

    return container, hook_manager, registry


@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- 启动阶段 ---
    container, hook_manager, registry = build_platform(
        media_dir=app.state.media_dir, package=app.state.plugins_package
    )

    logger = logging.getLogger(__name__)
    logger.info("--- FastAPI 应用组装 ---")

    app.state.container = container
    hook_manager.add_shared_context("app", app)

    # 3. 平台核心负责收集并装配 API 路由
    logger.info("正在从所有插件收集 API 路由...")
    routers_to_add: list[APIRouter] = await hook_manager.filter("collect_api_routers", [])

    if routers_to_add:
        logger.info(f"已收集到 {len(routers_to_add)} 个路由。正在添加到应用中...")
        for router in routers_to_add:
            app.include_router(router)
            logger.debug(f"已添加路由: prefix='{router.prefix}', tags={router.tags}")
    else:
        logger.warning("未从插件中收集到任何 API 路由。")

    # 4. 触发最终启动完成钩子
    await hook_manager.trigger('app_startup_complete')

    logger.info(f"--- Vitrine 已就绪 ({len(registry)} 个插件, 媒体目录: {registry.media_dir}) ---")
    yield
    # --- 关闭阶段 ---
    logger.info("--- Vitrine 正在关闭 ---")
    await hook_manager.trigger('app_shutdown')


def create_app(media_dir: str = None, plugins_package: str = "plugins") -> FastAPI:
    """应用工厂函数"""
    app = FastAPI(
        title="Vitrine (Plugin Asset Server)",
        version="0.3.0",
        lifespan=lifespan
    )
    app.state.media_dir = media_dir
    app.state.plugins_package = plugins_package

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    return app
