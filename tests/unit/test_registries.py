"""Unit tests for registry discovery and URL parsing."""

import asyncio

import pytest

from nuget_lock.nuget.registries import (
    get_configured_registries,
    get_default_registries,
    get_random_string,
    parse_registry_url,
)


class TestParseRegistryUrl:
    """Test feed URL and protocol version extraction."""

    def test_v3_index(self):
        info = parse_registry_url("https://api.nuget.org/v3/index.json")
        assert info.feed_url == "https://api.nuget.org/v3/index.json"
        assert info.protocol_version == 3

    def test_v2_feed(self):
        info = parse_registry_url("https://www.nuget.org/api/v2/")
        assert info.protocol_version == 2

    def test_protocol_version_fragment(self):
        info = parse_registry_url("https://my.feed/nuget/index.json#protocolVersion=2")
        assert info.feed_url == "https://my.feed/nuget/index.json"
        assert info.protocol_version == 2

    def test_relative_url_unchanged(self):
        info = parse_registry_url("not a url")
        assert info.feed_url == "not a url"
        assert info.protocol_version == 2


class TestConfiguredRegistries:
    """Test reading package sources from nuget.config."""

    @pytest.fixture
    def project_dir(self, local_dir):
        path = local_dir / "src" / "App"
        path.mkdir(parents=True)
        return path

    def test_defaults(self):
        registries = get_default_registries()
        assert [r.url for r in registries] == ["https://api.nuget.org/v3/index.json"]

    def test_no_config(self, context, local_dir, project_dir):
        assert asyncio.run(get_configured_registries("src/App/App.csproj", context.fs)) is None

    def test_config_without_package_sources(self, context, local_dir, project_dir):
        (local_dir / "nuget.config").write_text("<configuration></configuration>")
        assert asyncio.run(get_configured_registries("src/App/App.csproj", context.fs)) is None

    def test_malformed_config(self, context, local_dir, project_dir):
        (local_dir / "nuget.config").write_text("<configuration>")
        assert asyncio.run(get_configured_registries("src/App/App.csproj", context.fs)) is None

    def test_sources_added_after_defaults(self, context, local_dir, project_dir):
        (local_dir / "NuGet.Config").write_text("""<?xml version="1.0" encoding="utf-8"?>
<configuration>
  <packageSources>
    <add key="contoso" value="https://contoso.com/nuget/v3/index.json" />
    <add key="legacy" value="https://legacy.example/api/v2" protocolVersion="2" />
    <add key="local" value="./packages" />
  </packageSources>
</configuration>
""")
        registries = asyncio.run(get_configured_registries("src/App/App.csproj", context.fs))

        assert [(r.name, r.url) for r in registries] == [
            (None, "https://api.nuget.org/v3/index.json"),
            ("contoso", "https://contoso.com/nuget/v3/index.json"),
            ("legacy", "https://legacy.example/api/v2#protocolVersion=2"),
        ]

    def test_clear_removes_defaults(self, context, local_dir, project_dir):
        (project_dir / "nuget.config").write_text("""<configuration>
  <packageSources>
    <clear />
    <add key="contoso" value="https://contoso.com/nuget/v3/index.json" />
  </packageSources>
</configuration>
""")
        registries = asyncio.run(get_configured_registries("src/App/App.csproj", context.fs))

        assert [r.name for r in registries] == ["contoso"]

    def test_closest_config_wins(self, context, local_dir, project_dir):
        (local_dir / "nuget.config").write_text(
            '<configuration><packageSources><clear /><add key="root" value="https://root/index.json" />'
            '</packageSources></configuration>'
        )
        (project_dir / "nuget.config").write_text(
            '<configuration><packageSources><clear /><add key="near" value="https://near/index.json" />'
            '</packageSources></configuration>'
        )
        registries = asyncio.run(get_configured_registries("src/App/App.csproj", context.fs))

        assert [r.name for r in registries] == ["near"]

    def test_config_found_for_missing_project_dir(self, context, local_dir):
        (local_dir / "nuget.config").write_text(
            '<configuration><packageSources><clear /><add key="root" value="https://root/index.json" />'
            '</packageSources></configuration>'
        )
        registries = asyncio.run(get_configured_registries("new/Proj/Proj.csproj", context.fs))

        assert [r.name for r in registries] == ["root"]


def test_random_string_is_unique():
    values = {get_random_string() for _ in range(20)}
    assert len(values) == 20
    assert all(len(v) == 16 for v in values)
