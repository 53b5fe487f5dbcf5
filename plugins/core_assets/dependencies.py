# plugins/core_assets/dependencies.py

from fastapi import Request

from backend.core.contracts import PluginRegistryInterface
from .contracts import AssetResolverInterface

def get_asset_resolver(request: Request) -> AssetResolverInterface:
    return request.app.state.container.resolve("asset_resolver")

def get_plugin_registry(request: Request) -> PluginRegistryInterface:
    return request.app.state.container.resolve("plugin_registry")
