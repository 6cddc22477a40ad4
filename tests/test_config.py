"""Tests for RunConfig resolution, validation and the YAML config file"""
import dataclasses

import pytest

from macsetup.config import (
    RECOMMENDED_PYTHON_VERSION,
    RunConfig,
    UserConfig,
    is_valid_email,
    is_valid_name,
    is_valid_python_version,
    resolve_config,
)
from macsetup.errors import ConfigError

from conftest import ScriptedPrompter


class TestValidation:
    @pytest.mark.parametrize("email", ["test@example.com", "user.name+tag@example.co.uk", "test123@test-domain.com"])
    def test_accepts_conventional_emails(self, email):
        assert is_valid_email(email)

    @pytest.mark.parametrize("email", ["invalid-email", "test@", "@example.com", "test.example.com", "a@b.c", ""])
    def test_rejects_malformed_emails(self, email):
        assert not is_valid_email(email)

    def test_name_must_not_be_blank(self):
        assert is_valid_name("Ada")
        assert not is_valid_name("   ")

    @pytest.mark.parametrize("version,valid", [("3.12.11", True), ("3.10.12", True), ("3.12", False), ("latest", False)])
    def test_python_version_shape(self, version, valid):
        assert is_valid_python_version(version) is valid


class TestRunConfig:
    def test_is_immutable(self):
        cfg = RunConfig(name="Ada", email="ada@example.com")
        with pytest.raises(dataclasses.FrozenInstanceError):
            cfg.dry_run = True

    def test_defaults(self):
        cfg = RunConfig(name="Ada", email="ada@example.com")
        assert cfg.python_version == RECOMMENDED_PYTHON_VERSION
        assert cfg.work_tools is False
        assert cfg.dry_run is False


class TestNonInteractive:
    def test_flags_only(self):
        cfg = resolve_config(name="Ada", email="ada@example.com", python_version="3.11.9", non_interactive=True)
        assert cfg.name == "Ada"
        assert cfg.python_version == "3.11.9"
        assert cfg.work_tools is False
        assert cfg.dry_run is False
        assert cfg.non_interactive is True

    def test_missing_name_fails(self):
        with pytest.raises(ConfigError, match="--name is required"):
            resolve_config(email="ada@example.com", non_interactive=True)

    def test_missing_email_fails(self):
        with pytest.raises(ConfigError, match="--email is required"):
            resolve_config(name="Ada", non_interactive=True)

    def test_invalid_email_flag_fails(self):
        with pytest.raises(ConfigError, match="Invalid email"):
            resolve_config(name="Ada", email="test@", non_interactive=True)

    def test_invalid_python_version_fails(self):
        with pytest.raises(ConfigError, match="Invalid Python version"):
            resolve_config(name="Ada", email="ada@example.com", python_version="3.12", non_interactive=True)

    def test_identity_from_config_file(self, temp_dir):
        path = temp_dir / "macsetup.yaml"
        path.write_text("name: Grace Hopper\nemail: grace@example.com\nwork_tools: true\npython_version: 3.11.9\n")
        cfg = resolve_config(non_interactive=True, user_config=UserConfig(path))

        assert cfg.name == "Grace Hopper"
        assert cfg.email == "grace@example.com"
        assert cfg.work_tools is True
        assert cfg.python_version == "3.11.9"

    def test_flags_override_config_file(self, temp_dir):
        path = temp_dir / "macsetup.yaml"
        path.write_text("name: Grace Hopper\nemail: grace@example.com\nwork_tools: true\n")
        cfg = resolve_config(name="Ada", work_tools=False, non_interactive=True, user_config=UserConfig(path))

        assert cfg.name == "Ada"
        assert cfg.email == "grace@example.com"
        assert cfg.work_tools is False


class TestInteractive:
    def test_prompts_for_missing_values(self):
        prompter = ScriptedPrompter(texts=["Ada", "ada@example.com"], confirms=[True, False])
        cfg = resolve_config(prompter=prompter)

        assert cfg.name == "Ada"
        assert cfg.email == "ada@example.com"
        assert cfg.work_tools is True
        assert cfg.dry_run is False
        assert len(prompter.asked) == 4

    def test_flags_are_not_prompted(self):
        prompter = ScriptedPrompter(texts=[], confirms=[])
        cfg = resolve_config(name="Ada", email="ada@example.com", work_tools=False, dry_run=True, prompter=prompter)

        assert prompter.asked == []
        assert cfg.dry_run is True

    def test_reprompts_until_email_is_valid(self):
        prompter = ScriptedPrompter(texts=["Ada", "invalid-email", "@example.com", "ada@example.com"], confirms=[False, False])
        cfg = resolve_config(prompter=prompter)

        assert cfg.email == "ada@example.com"
        assert prompter.errors == ["Please enter a valid email address"] * 2

    def test_reprompts_blank_name(self):
        prompter = ScriptedPrompter(texts=["  ", "Ada", "ada@example.com"], confirms=[False, False])
        assert resolve_config(prompter=prompter).name == "Ada"

    def test_dry_run_confirmation(self):
        prompter = ScriptedPrompter(confirms=[False, True])
        cfg = resolve_config(name="Ada", email="ada@example.com", prompter=prompter)
        assert cfg.dry_run is True

    def test_invalid_explicit_email_fails_even_interactively(self):
        with pytest.raises(ConfigError):
            resolve_config(name="Ada", email="test.example.com", prompter=ScriptedPrompter())


class TestUserConfig:
    def test_missing_file_is_empty(self, temp_dir):
        cfg = UserConfig(temp_dir / "absent.yaml")
        assert cfg.get("name") is None
        assert cfg.get("work_tools", False) is False

    def test_remember_and_save_round_trip(self, temp_dir):
        path = temp_dir / "nested" / "macsetup.yaml"
        cfg = UserConfig(path)
        cfg.remember(RunConfig(name="Ada", email="ada@example.com", work_tools=True))
        cfg.save()

        loaded = UserConfig(path)
        assert loaded.get("name") == "Ada"
        assert loaded.get("work_tools") is True
        assert loaded.get("python_version") == RECOMMENDED_PYTHON_VERSION

    def test_invalid_yaml_raises_config_error(self, temp_dir):
        path = temp_dir / "broken.yaml"
        path.write_text("name: [unterminated\n")
        with pytest.raises(ConfigError, match="Failed to load config"):
            UserConfig(path)

    def test_non_mapping_rejected(self, temp_dir):
        path = temp_dir / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="must contain a mapping"):
            UserConfig(path)


class TestConfigFileTypes:
    """Values in the YAML file must have the type the field expects"""

    @pytest.mark.parametrize(
        "content,key",
        [
            ("name: 123\nemail: ada@example.com\n", "name"),
            ("name: Ada\nemail: [ada@example.com]\n", "email"),
            ("name: Ada\nemail: ada@example.com\nwork_tools: 'false'\n", "work_tools"),
            ("name: Ada\nemail: ada@example.com\npython_version: 3.12\n", "python_version"),
        ],
    )
    def test_wrong_type_is_config_error(self, temp_dir, content, key):
        path = temp_dir / "macsetup.yaml"
        path.write_text(content)
        with pytest.raises(ConfigError, match=f"'{key}' in .* must be a"):
            resolve_config(non_interactive=True, user_config=UserConfig(path))

    def test_wrong_type_is_reported_interactively_too(self, temp_dir):
        path = temp_dir / "macsetup.yaml"
        path.write_text("name: 123\n")
        with pytest.raises(ConfigError):
            resolve_config(user_config=UserConfig(path), prompter=ScriptedPrompter(texts=["Ada"]))

    def test_null_values_fall_back_to_defaults(self, temp_dir):
        path = temp_dir / "macsetup.yaml"
        path.write_text("name: Ada\nemail: ada@example.com\nwork_tools:\npython_version:\n")
        cfg = resolve_config(non_interactive=True, user_config=UserConfig(path))

        assert cfg.work_tools is False
        assert cfg.python_version == RECOMMENDED_PYTHON_VERSION
