# plugins/example_widgets/__init__.py
import logging
from pathlib import Path

PLUGIN_DIR = Path(__file__).parent

logger = logging.getLogger(__name__)

def _widget_assets():
    # 只发布构建产物，dist/ 里的其他文件不公开
    return [
        str(PLUGIN_DIR / "dist" / "widgets.js"),
        str(PLUGIN_DIR / "dist" / "widgets.css"),
    ]

# 覆盖 manifest.json 中的 extends.assets；列表在第一次需要时才会计算
extends = {
    "assets": _widget_assets,
}
