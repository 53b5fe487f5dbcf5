# plugins/example_theme/__init__.py
# 只提供静态资源的插件；包标记让 manifest.json 与 assets/ 随发行包一起安装。
