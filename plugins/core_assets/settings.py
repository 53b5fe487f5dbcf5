# plugins/core_assets/settings.py

import os
from pydantic import BaseModel

from .models import PublishMode


class AssetSettings(BaseModel):
    publish_mode: PublishMode = PublishMode.SYMLINK

    @classmethod
    def from_env(cls) -> "AssetSettings":
        """从环境变量读取配置；非法的 VITRINE_PUBLISH_MODE 会抛出 ValidationError。"""
        mode = os.getenv("VITRINE_PUBLISH_MODE", PublishMode.SYMLINK.value).strip().lower()
        return cls(publish_mode=mode)
