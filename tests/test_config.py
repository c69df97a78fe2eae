"""Tests for settings loading and JSON preprocessing."""

import json
from pathlib import Path

import pytest

from vsixinstall.config import (
    DEFAULT_GALLERY_URL,
    ConfigError,
    Settings,
    _format_syntax_error,
    load_config,
    load_settings,
    preprocess_jsonish,
    save_settings,
    settings_to_dict,
    validate_settings,
)
from vsixinstall.paths import artifact_filename, get_config_path, get_default_download_dir


class TestPreprocessJsonish:
    """Tests for the JSON preprocessor."""

    def test_valid_strict_json_unchanged(self):
        input_text = '{"gallery_url": "https://example.test", "keep_artifacts": true}'
        assert preprocess_jsonish(input_text) == input_text

    def test_trailing_comma_in_array(self):
        result = preprocess_jsonish('["extensionDependencies",]')
        assert result == '["extensionDependencies" ]'
        assert json.loads(result) == ["extensionDependencies"]

    def test_trailing_comma_before_comment_and_brace(self):
        result = preprocess_jsonish('{"a": 1, // last\n}')
        assert json.loads(result) == {"a": 1}

    def test_line_comment_blanked_keeps_length(self):
        input_text = '{"a": 1} // note'
        result = preprocess_jsonish(input_text)
        assert len(result) == len(input_text)
        assert json.loads(result) == {"a": 1}

    def test_comment_markers_inside_strings_kept(self):
        input_text = '{"gallery_url": "https://example.test/gallery"}'
        assert json.loads(preprocess_jsonish(input_text)) == {
            "gallery_url": "https://example.test/gallery"
        }

    def test_escaped_quote_inside_string(self):
        input_text = '{"code_command": "say \\"hi\\", // not a comment",}'
        assert json.loads(preprocess_jsonish(input_text)) == {
            "code_command": 'say "hi", // not a comment'
        }


class TestValidateSettings:
    def test_empty_gives_defaults(self):
        settings = validate_settings({})
        assert settings == Settings()
        assert settings.gallery_url == DEFAULT_GALLERY_URL
        assert settings.dependency_fields == ["extensionDependencies"]
        assert settings.verify_attempts == 3
        assert settings.download_dir == get_default_download_dir()

    def test_values_applied(self, temp_dir):
        settings = validate_settings(
            {
                "gallery_url": "https://example.test/gallery/",
                "download_dir": str(temp_dir),
                "dependency_fields": ["extensionDependencies", "extensionPack"],
                "keep_artifacts": True,
                "verify_interval": 0,
            }
        )
        assert settings.gallery_url == "https://example.test/gallery"
        assert settings.download_dir == temp_dir
        assert settings.dependency_fields == ["extensionDependencies", "extensionPack"]
        assert settings.keep_artifacts is True
        assert settings.verify_interval == 0

    def test_unknown_key_rejected(self):
        with pytest.raises(ConfigError, match="Unknown setting 'galery_url'"):
            validate_settings({"galery_url": "https://example.test"})

    def test_wrong_type_rejected(self):
        with pytest.raises(ConfigError, match="verify_attempts must be int"):
            validate_settings({"verify_attempts": "3"})

    def test_bool_not_a_number(self):
        with pytest.raises(ConfigError, match="must be a number"):
            validate_settings({"request_timeout": True})

    def test_dependency_field_entries_checked(self):
        with pytest.raises(ConfigError, match=r"dependency_fields\[1\]"):
            validate_settings({"dependency_fields": ["extensionDependencies", ""]})

    @pytest.mark.parametrize(
        "data,message",
        [
            ({"gallery_url": "ftp://example.test"}, "http"),
            ({"dependency_fields": []}, "at least one"),
            ({"verify_attempts": -1}, "verify_attempts"),
            ({"install_timeout": 0}, "install_timeout"),
        ],
    )
    def test_value_errors_become_config_errors(self, data, message):
        with pytest.raises(ConfigError, match=message):
            validate_settings(data)

    def test_not_a_mapping(self):
        with pytest.raises(ConfigError, match="must be an object"):
            validate_settings(["gallery_url"])


class TestLoadConfig:
    def test_load_jsonish_file(self, temp_dir):
        path = temp_dir / "config.json"
        path.write_text('{\n  // scratch space\n  "keep_artifacts": true,\n}\n')
        assert load_config(path) == {"keep_artifacts": True}

    def test_load_yaml_file(self, temp_dir):
        path = temp_dir / "config.yaml"
        path.write_text("keep_artifacts: true\ndependency_fields:\n  - extensionDependencies\n")
        assert load_config(path) == {
            "keep_artifacts": True,
            "dependency_fields": ["extensionDependencies"],
        }

    def test_empty_yaml_is_empty_mapping(self, temp_dir):
        path = temp_dir / "config.yml"
        path.write_text("")
        assert load_config(path) == {}

    def test_yaml_must_be_mapping(self, temp_dir):
        path = temp_dir / "config.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_syntax_error_has_location(self):
        with pytest.raises(ConfigError) as exc_info:
            load_config('{\n  "keep_artifacts": tru\n}')
        message = str(exc_info.value)
        assert "line 2" in message
        assert "^" in message

    def test_missing_file(self, temp_dir):
        with pytest.raises(ConfigError, match="not found"):
            load_config(temp_dir / "missing.json")

    def test_top_level_must_be_object(self):
        with pytest.raises(ConfigError, match="JSON object"):
            load_config("[1, 2]")

    def test_rejects_other_types(self):
        with pytest.raises(TypeError):
            load_config(42)

    def test_format_syntax_error_caret(self):
        text = '{"a": }'
        try:
            json.loads(text)
        except json.JSONDecodeError as e:
            message = _format_syntax_error(text, e)
        lines = message.split("\n")
        assert lines[1] == text
        assert lines[2] == " " * 6 + "^"


class TestLoadSettings:
    def test_missing_file_gives_defaults(self, temp_dir):
        assert load_settings(temp_dir / "none.json") == Settings()

    def test_env_var_selects_file(self, temp_dir, monkeypatch):
        path = temp_dir / "custom.json"
        path.write_text('{"code_command": "codium"}')
        monkeypatch.setenv("VSIXINSTALL_CONFIG", str(path))

        assert get_config_path() == path
        assert load_settings().code_command == "codium"

    def test_save_then_load(self, temp_dir):
        path = temp_dir / "nested" / "config.json"
        original = Settings(download_dir=temp_dir / "dl", keep_artifacts=True)

        save_settings(original, path)

        assert json.loads(path.read_text())["download_dir"] == str(temp_dir / "dl")
        assert load_settings(path) == original

    def test_settings_to_dict_is_json_safe(self):
        data = settings_to_dict(Settings(download_dir=Path("/tmp/x")))
        assert json.loads(json.dumps(data))["download_dir"] == "/tmp/x"


def test_artifact_filename():
    assert artifact_filename("pub.a", "1.2.3") == "pub.a-1.2.3.vsix"
