# plugins/core_assets/tests/test_resolver.py

import pytest
from pathlib import Path
from unittest.mock import patch

from fastapi.responses import FileResponse

from plugins.core_assets.models import PublishMode
from plugins.core_assets.resolver import AssetResolver


class TestClean:
    """已发布文件与当前资源集合的对账。"""

    def test_removes_exactly_the_undeclared_file(self, resolver, make_plugin, publish):
        make_plugin(files={"assets/a.js": "a"})
        kept = publish("demo", "a.js", "a")
        stale = publish("demo", "old.css")

        removed = resolver.clean("demo")

        assert removed == ["old.css"]
        assert kept.exists()
        assert kept.read_text() == "a"
        assert not stale.exists()

    def test_removes_stale_directory_recursively(self, resolver, make_plugin, publish, registry):
        make_plugin(files={"assets/a.js": "a"})
        publish("demo", "a.js")
        publish("demo", "old/deep/nested.css")
        publish("demo", "old/top.css")

        removed = resolver.clean("demo")

        assert removed == ["old"]
        assert not (registry.media_root_for("demo") / "old").exists()

    def test_keeps_directories_of_nested_assets(self, resolver, make_plugin, publish):
        make_plugin(files={"assets/css/site.css": "s"})
        site = publish("demo", "css/site.css", "s")
        publish("demo", "css/legacy.css")

        removed = resolver.clean("demo")

        assert removed == ["css/legacy.css"]
        assert site.exists()

    def test_removes_stale_symlinks(self, resolver, make_plugin, registry, tmp_path):
        make_plugin(files={"assets/a.js": "a"})
        media = registry.media_root_for("demo")
        media.mkdir(parents=True)
        (media / "gone.js").symlink_to(tmp_path / "does-not-exist.js")

        assert resolver.clean("demo") == ["gone.js"]
        assert not (media / "gone.js").is_symlink()

    def test_unknown_plugin_is_a_noop(self, resolver):
        assert resolver.clean("nobody") == []

    def test_missing_media_root_is_a_noop(self, resolver, make_plugin):
        make_plugin(files={"assets/a.js": "a"})

        assert resolver.clean("demo") == []

    def test_removal_errors_propagate(self, resolver, make_plugin, publish):
        make_plugin(files={"assets/a.js": "a"})
        publish("demo", "old.css")

        with patch("plugins.core_assets.filesystem.Path.unlink", side_effect=PermissionError("denied")):
            with pytest.raises(PermissionError):
                resolver.clean("demo")


class TestResolve:

    def test_unknown_plugin_returns_none(self, resolver):
        assert resolver.resolve("nobody", "a.js") is None

    def test_unknown_path_returns_none(self, resolver, make_plugin):
        make_plugin(files={"assets/a.js": "a"})

        assert resolver.resolve("demo", "missing.js") is None

    def test_resolve_publishes_and_returns_file_response(self, resolver, make_plugin, registry):
        plugin = make_plugin(files={"assets/style.css": "h1 { color: red; }"})

        response = resolver.resolve("demo", "style.css")

        assert isinstance(response, FileResponse)
        published = registry.media_root_for("demo") / "style.css"
        assert published.is_symlink()
        assert Path(response.path) == (plugin.root / "assets" / "style.css").resolve()
        assert Path(response.path).read_text() == "h1 { color: red; }"

    def test_resolve_cleans_before_publishing(self, resolver, make_plugin, publish):
        make_plugin(files={"assets/style.css": "s"})
        stale = publish("demo", "removed.js")

        resolver.resolve("demo", "style.css")

        assert not stale.exists()

    def test_resolve_still_cleans_for_unknown_path(self, resolver, make_plugin, publish):
        make_plugin(files={"assets/style.css": "s"})
        stale = publish("demo", "removed.js")

        assert resolver.resolve("demo", "removed.js") is None
        assert not stale.exists()

    def test_copy_mode(self, registry, make_plugin):
        make_plugin(files={"assets/app.js": "console.log(1)"})
        resolver = AssetResolver(registry, mode=PublishMode.COPY)

        response = resolver.resolve("demo", "app.js")

        published = registry.media_root_for("demo") / "app.js"
        assert not published.is_symlink()
        assert Path(response.path) == published.resolve()

    def test_publish_all(self, resolver, make_plugin, registry, publish):
        make_plugin(files={"assets/a.js": "a", "assets/img/b.png": "b"})
        publish("demo", "old.css")

        published = resolver.publish_all("demo")

        media = registry.media_root_for("demo")
        assert [asset.path for asset in published] == ["a.js", "img/b.png"]
        assert (media / "a.js").exists()
        assert (media / "img" / "b.png").exists()
        assert not (media / "old.css").exists()

    def test_publish_all_unknown_plugin(self, resolver):
        assert resolver.publish_all("nobody") is None



class TestPublishedSetStaysInSync:

    def test_dot_prefixed_key_is_not_cleaned_after_publishing(self, resolver, make_plugin, registry):
        plugin = make_plugin(files={"dist/app.js": "a"})
        plugin.extends["assets"] = {"./app.js": str(plugin.root / "dist" / "app.js")}

        assert resolver.resolve("demo", "app.js") is not None
        assert resolver.clean("demo") == []
        assert (registry.media_root_for("demo") / "app.js").exists()

    def test_key_cannot_publish_into_another_plugins_media_root(self, resolver, make_plugin, registry):
        make_plugin(name="victim", files={"assets/app.js": "mine"})
        attacker = make_plugin(name="demo", files={"dist/app.js": "theirs"})
        attacker.extends["assets"] = {"../victim/app.js": str(attacker.root / "dist" / "app.js")}

        assert resolver.publish_all("demo") == []
        assert resolver.resolve("demo", "../victim/app.js") is None
        assert not (registry.media_root_for("victim") / "app.js").exists()

    def test_dangling_published_link_is_repaired(self, resolver, make_plugin, registry, tmp_path):
        plugin = make_plugin(files={"assets/a.js": "current"})
        published = registry.media_root_for("demo") / "a.js"
        published.parent.mkdir(parents=True)
        published.symlink_to(tmp_path / "old-install" / "a.js")

        response = resolver.resolve("demo", "a.js")

        assert Path(response.path) == (plugin.root / "assets" / "a.js").resolve()
        assert Path(response.path).read_text() == "current"
