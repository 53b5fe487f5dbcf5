# conftest.py

import pytest


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """测试期间不受本机 .env 或 shell 中 VITRINE_* 配置的影响。"""
    for name in ("VITRINE_MEDIA_DIR", "VITRINE_PUBLISH_MODE", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
