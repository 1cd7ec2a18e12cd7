"""Tests for configuration loading, validation and CLI merging."""

from argparse import Namespace

import pytest

from config_loader import DEFAULT_CONFIG, ConfigLoader, get_nested


def write_config(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding='utf-8')
    return str(path)


class TestLoad:
    """Test YAML loading."""

    def test_env_substitution_and_defaults(self, tmp_path, monkeypatch, vault):
        monkeypatch.setenv("SLIDES_ROOT", str(vault))
        path = write_config(tmp_path, (
            "vault:\n"
            "  content_root: ${SLIDES_ROOT}\n"
            "marp:\n"
            "  chrome_path: /opt/chrome\n"
        ))

        config = ConfigLoader.load(path)

        assert config['vault']['content_root'] == str(vault)
        assert config['vault']['attachment_folder'] == ''
        assert config['marp']['chrome_path'] == "/opt/chrome"
        assert config['marp']['executable'] == "marp"
        assert config['export']['target'] == "slide-document"

    def test_unset_variable_is_left_in_place(self, tmp_path, monkeypatch):
        monkeypatch.delenv("UNSET_SLIDES_VAR", raising=False)
        path = write_config(tmp_path, "vault:\n  content_root: ${UNSET_SLIDES_VAR}\n")

        config = ConfigLoader.load(path)

        assert config['vault']['content_root'] == "${UNSET_SLIDES_VAR}"

    def test_empty_file_gives_defaults(self, tmp_path):
        config = ConfigLoader.load(write_config(tmp_path, ""))

        assert config == DEFAULT_CONFIG

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigLoader.load(str(tmp_path / "nope.yaml"))

    def test_non_mapping_is_rejected(self, tmp_path):
        with pytest.raises(ValueError, match="dictionary"):
            ConfigLoader.load(write_config(tmp_path, "- a\n- b\n"))

    def test_defaults_are_not_shared(self):
        first = ConfigLoader.with_defaults({})
        first['marp']['chrome_path'] = "/changed"

        assert DEFAULT_CONFIG['marp']['chrome_path'] == ''


class TestValidate:
    """Test validation errors."""

    def test_valid_config(self, config):
        ConfigLoader.validate(config)

    def test_content_root_required(self):
        with pytest.raises(ValueError, match="vault.content_root"):
            ConfigLoader.validate(ConfigLoader.with_defaults({}))

    def test_unsubstituted_variable(self):
        config = ConfigLoader.with_defaults({'vault': {'content_root': '${SLIDES_ROOT}'}})

        with pytest.raises(ValueError, match="SLIDES_ROOT environment variable"):
            ConfigLoader.validate(config)

    def test_content_root_must_exist(self, tmp_path):
        config = ConfigLoader.with_defaults({'vault': {'content_root': str(tmp_path / "missing")}})

        with pytest.raises(ValueError, match="not a valid directory"):
            ConfigLoader.validate(config)

    def test_unknown_target(self, config):
        config['export']['target'] = "gif"

        with pytest.raises(ValueError, match="export.target"):
            ConfigLoader.validate(config)

    def test_target_alias_is_accepted(self, config):
        config['export']['target'] = "pptx"

        ConfigLoader.validate(config)

    def test_plugin_flag_must_be_boolean(self, config):
        config['marp']['enable_markdown_it_plugins'] = "yes"

        with pytest.raises(ValueError, match="boolean"):
            ConfigLoader.validate(config)

    def test_math_typesetting(self, config):
        config['marp']['math_typesetting'] = False
        ConfigLoader.validate(config)

        config['marp']['math_typesetting'] = "latex"
        with pytest.raises(ValueError, match="math_typesetting"):
            ConfigLoader.validate(config)

    def test_relative_resources_directory_must_exist(self, config, vault):
        config['marp']['resources_directory'] = "resources"

        with pytest.raises(ValueError, match="resources_directory"):
            ConfigLoader.validate(config)

        (vault / "resources").mkdir()
        ConfigLoader.validate(config)

    def test_staging_root_must_not_be_a_file(self, config, staging_root):
        staging_root.write_text("x", encoding='utf-8')

        with pytest.raises(ValueError, match="staging_root"):
            ConfigLoader.validate(config)


class TestMergeWithArgs:
    """Test CLI argument precedence."""

    def test_arguments_override_file_values(self, config):
        args = Namespace(
            content_root="/other",
            attachment_folder="Media",
            target="html",
            export_path="/exports/",
            chrome_path="/opt/chrome",
            marp_executable="/usr/local/bin/marp",
            log_file="export.log",
            verbose=2
        )

        merged = ConfigLoader.merge_with_args(config, args)

        assert merged['vault']['content_root'] == "/other"
        assert merged['vault']['attachment_folder'] == "Media"
        assert merged['export']['target'] == "html"
        assert merged['export']['export_path'] == "/exports/"
        assert merged['marp']['chrome_path'] == "/opt/chrome"
        assert merged['marp']['executable'] == "/usr/local/bin/marp"
        assert merged['logging'] == {'level': 'DEBUG', 'file': 'export.log'}

    def test_missing_arguments_keep_file_values(self, config):
        merged = ConfigLoader.merge_with_args(config, Namespace(verbose=1))

        assert merged['vault'] == config['vault']
        assert merged['logging']['level'] == 'INFO'


class TestGetNested:
    """Test dotted lookups."""

    def test_lookup(self):
        assert get_nested({'a': {'b': {'c': 1}}}, 'a.b.c') == 1

    def test_default(self):
        assert get_nested({'a': {}}, 'a.b', 'fallback') == 'fallback'
        assert get_nested({'a': 'leaf'}, 'a.b') is None
