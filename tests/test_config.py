"""
Tests for configuration loading — CLI values, IMEI_* env vars and imei.yml.
"""

import textwrap
from pathlib import Path

import pytest

from imei.core.config.loader import load_run_config, read_config_file
from imei.core.errors import ConfigError


@pytest.fixture
def config_yml(tmp_path: Path) -> Path:
    """A config file pinning ImageMagick and skipping jpeg-xl."""
    content = textwrap.dedent("""\
        force: false
        skip: [jpeg-xl]
        versions:
          imagemagick: 7.1.1-15
          aom: 3.6.0
        build_dir: /opt/imagemagick
        work_dir: /tmp/imei-work
    """)
    path = tmp_path / "imei.yml"
    path.write_text(content)
    return path


class TestDefaults:
    """Tests for defaults with no sources."""

    def test_defaults(self):
        config = load_run_config(env={})
        assert config.force is False
        assert config.skip == frozenset()
        assert config.version_overrides == {}
        assert config.work_dir == Path("/usr/local/src/imei")
        assert config.build_dir == Path("/usr/local")
        assert config.log_file == Path("/var/log/imei.log")
        assert config.verify_signature is True


class TestConfigFile:
    """Tests for imei.yml."""

    def test_load(self, config_yml):
        config = load_run_config(config_path=config_yml, env={})
        assert config.skip == frozenset({"jpeg-xl"})
        assert config.override_for("imagemagick") == "7.1.1-15"
        assert config.build_dir == Path("/opt/imagemagick")

    def test_located_via_env(self, config_yml):
        config = load_run_config(env={"IMEI_CONFIG": str(config_yml)})
        assert config.override_for("aom") == "3.6.0"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_run_config(config_path=tmp_path / "nope.yml", env={})

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "imei.yml"
        path.write_text("force: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            read_config_file(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "imei.yml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigError, match="mapping"):
            read_config_file(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "imei.yml"
        path.write_text("")
        assert read_config_file(path) == {}

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "imei.yml"
        path.write_text("forse: true\n")
        with pytest.raises(ConfigError, match="forse"):
            load_run_config(config_path=path, env={})

    def test_unknown_component(self, tmp_path):
        path = tmp_path / "imei.yml"
        path.write_text("skip: [libpng]\n")
        with pytest.raises(ConfigError, match="libpng"):
            load_run_config(config_path=path, env={})

    def test_bad_value_type(self, tmp_path):
        path = tmp_path / "imei.yml"
        path.write_text("force: maybe\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_run_config(config_path=path, env={})


class TestEnvironment:
    """Tests for IMEI_* environment variables."""

    def test_bools_and_paths(self):
        config = load_run_config(env={
            "IMEI_FORCE": "yes",
            "IMEI_CI": "1",
            "IMEI_VERIFY_SIGNATURE": "false",
            "IMEI_BUILD_DIR": "/opt/im",
        })
        assert config.force is True
        assert config.ci is True
        assert config.verify_signature is False
        assert config.build_dir == Path("/opt/im")

    def test_bad_bool(self):
        with pytest.raises(ConfigError, match="IMEI_FORCE"):
            load_run_config(env={"IMEI_FORCE": "perhaps"})

    def test_versions_and_skip(self):
        config = load_run_config(env={
            "IMEI_JPEG_XL_VERSION": "0.8.2",
            "IMEI_SKIP": "aom, libheif",
        })
        assert config.override_for("jpeg-xl") == "0.8.2"
        assert config.skip == frozenset({"aom", "libheif"})

    def test_github_token(self):
        config = load_run_config(env={"GITHUB_TOKEN": "abc"})
        assert config.http_headers()["Authorization"] == "Bearer abc"
        assert "abc" not in repr(config)


class TestPrecedence:
    """CLI > env > file > defaults."""

    def test_env_beats_file(self, config_yml):
        config = load_run_config(
            config_path=config_yml,
            env={"IMEI_IMAGEMAGICK_VERSION": "7.1.1-20", "IMEI_BUILD_DIR": "/srv/im"},
        )
        assert config.override_for("imagemagick") == "7.1.1-20"
        assert config.override_for("aom") == "3.6.0"
        assert config.build_dir == Path("/srv/im")

    def test_cli_beats_env(self, config_yml):
        config = load_run_config(
            {
                "build_dir": "/cli/prefix",
                "version_overrides": {"imagemagick": "7.1.1-21", "aom": None},
                "force": None,
            },
            config_path=config_yml,
            env={"IMEI_IMAGEMAGICK_VERSION": "7.1.1-20", "IMEI_FORCE": "1"},
        )
        assert config.build_dir == Path("/cli/prefix")
        assert config.override_for("imagemagick") == "7.1.1-21"
        # Unset CLI values leave lower layers alone
        assert config.override_for("aom") == "3.6.0"
        assert config.force is True

    def test_skip_is_additive(self, config_yml):
        config = load_run_config(
            {"skip": ["aom"]},
            config_path=config_yml,
            env={"IMEI_SKIP": "libheif"},
        )
        assert config.skip == frozenset({"aom", "libheif", "jpeg-xl"})
