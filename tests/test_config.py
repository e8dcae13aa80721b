"""
Tests for configuration loading — directory.yml parsing and validation.
"""

import textwrap
from pathlib import Path

import pytest

from src.core.config.loader import ConfigError, find_config_file, load_config, workspace_root


@pytest.fixture
def valid_directory_yml(tmp_path: Path) -> Path:
    """Create a valid directory.yml in a temp directory."""
    content = textwrap.dedent("""\
        version: 1
        name: my-directory
        title: My AI Tools
        catalog_path: public/tools.json
        branch: gh-pages
        default_repo: tools
        timeout: 5
    """)
    path = tmp_path / "directory.yml"
    path.write_text(content, encoding="utf-8")
    return path


class TestFindConfigFile:
    def test_finds_in_directory(self, valid_directory_yml: Path):
        assert find_config_file(valid_directory_yml.parent) == valid_directory_yml.resolve()

    def test_walks_up(self, valid_directory_yml: Path):
        nested = valid_directory_yml.parent / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_file(nested) == valid_directory_yml.resolve()

    def test_not_found(self, tmp_path: Path):
        assert find_config_file(tmp_path) is None


class TestLoadConfig:
    def test_load_valid(self, valid_directory_yml: Path):
        config = load_config(valid_directory_yml)
        assert config.name == "my-directory"
        assert config.catalog_path == "public/tools.json"
        assert config.branch == "gh-pages"
        assert config.default_repo == "tools"
        assert config.timeout == 5

    def test_defaults_fill_in(self, valid_directory_yml: Path):
        config = load_config(valid_directory_yml)
        assert config.api_url == "https://api.github.com"
        assert config.site_dir == "site"

    def test_wrapped_under_directory_key(self, tmp_path: Path):
        path = tmp_path / "directory.yml"
        path.write_text("directory:\n  name: wrapped\n", encoding="utf-8")
        assert load_config(path).name == "wrapped"

    def test_empty_file_gives_defaults(self, tmp_path: Path):
        path = tmp_path / "directory.yml"
        path.write_text("", encoding="utf-8")
        assert load_config(path).name == "ai-tools-directory"

    def test_missing_explicit_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "directory.yml"
        path.write_text("name: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "directory.yml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_invalid_value(self, tmp_path: Path):
        path = tmp_path / "directory.yml"
        path.write_text("timeout: -1\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid directory configuration"):
            load_config(path)

    def test_workspace_root(self, valid_directory_yml: Path):
        assert workspace_root(valid_directory_yml) == valid_directory_yml.parent.resolve()
