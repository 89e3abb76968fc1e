"""Tests for configuration loading, validation and environment variables."""

from pathlib import Path

import pytest

from rundeck_notifier.config import ConfigurationError, load_config, validate_config_file
from rundeck_notifier.config.duration import DurationParseError, parse_duration, validate_duration_range
from rundeck_notifier.config.environment import load_environment_config
from rundeck_notifier.config.models import AppConfig, PollingConfig, RundeckInstanceConfig, TriggerConfig
from rundeck_notifier.config.validators import check_for_warnings

# Test fixtures directory
FIXTURES_DIR = Path(__file__).parent / "fixtures"


def write_config(tmp_path, content):
    config_path = tmp_path / "rundeck.yaml"
    config_path.write_text(content, encoding="utf-8")
    return config_path


class TestConfigurationLoading:
    """Test configuration loading from YAML files."""

    def test_load_valid_config(self):
        """Test loading a complete configuration file."""
        app_config = load_config(FIXTURES_DIR / "valid_config.yaml")

        # Instances
        assert [instance.name for instance in app_config.instances] == ["Default", "Staging"]
        assert app_config.instances[0].url == "https://rundeck.example.com"
        assert app_config.instances_by_name()["Staging"].username == "deployer"

        # Triggers
        deploy = app_config.get_trigger("deploy")
        assert deploy.job_id == "1"
        assert deploy.tags == "#deploy, #rundeck"
        assert deploy.wait_for_completion is True
        assert deploy.fail_on_error is True
        assert "env=production" in deploy.options
        assert app_config.get_trigger("smoke-tests").username == "tester"
        assert app_config.get_trigger("missing") is None

        # Runtime settings
        assert app_config.polling.interval_seconds == 10
        assert app_config.job_cache.enabled is True
        assert app_config.job_cache.expiration_seconds == 900
        assert app_config.advanced.http_request_timeout == 20
        assert app_config.logging.level == "INFO"
        assert app_config.logging.format == "key-value"

    def test_load_minimal_config(self):
        """Test defaults of a minimal configuration."""
        with pytest.warns(UserWarning, match="has no credentials"):
            app_config = load_config(FIXTURES_DIR / "minimal_config.yaml")

        assert app_config.triggers == []
        assert app_config.polling.interval_seconds == 5
        assert app_config.job_cache.enabled is False
        assert app_config.job_cache.expiration_seconds == 1800
        assert app_config.advanced.http_request_timeout == 30
        assert app_config.logging.level == "INFO"
        assert app_config.logging.format == "key-value"

    def test_invalid_config(self):
        """Test that every validation problem is reported."""
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(FIXTURES_DIR / "invalid_config.yaml")

        error = exc_info.value
        assert error.message == "Configuration validation failed"
        assert any("url must start with http" in e for e in error.errors)
        assert error.suggestions

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path / "nope.yaml")

    def test_default_locations(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "rundeck.yaml").write_text(
            "instances:\n  - name: Local\n    url: https://localhost:4440\n    username: a\n    password: b\n",
            encoding="utf-8",
        )

        app_config = load_config()

        assert app_config.instances[0].name == "Local"

    def test_no_config_anywhere(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(ConfigurationError) as exc_info:
            load_config()
        assert len(exc_info.value.errors) == 2

    def test_empty_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="empty"):
            load_config(write_config(tmp_path, ""))

    def test_non_mapping_root(self, tmp_path):
        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(write_config(tmp_path, "- just\n- a list\n"))

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ConfigurationError, match="YAML"):
            load_config(write_config(tmp_path, "instances: [unclosed\n"))

    def test_unknown_trigger_instance(self, tmp_path):
        content = (
            "instances:\n  - name: Default\n    url: https://rundeck\n    username: a\n    password: b\n"
            "triggers:\n  - name: deploy\n    instance: Other\n    job_id: '1'\n"
        )
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(write_config(tmp_path, content))
        assert any("unknown instance 'Other'" in e for e in exc_info.value.errors)

    def test_error_rendering(self):
        error = ConfigurationError("Broken", errors=["first"], suggestions=["fix it"])
        rendered = str(error)

        assert rendered.startswith("Broken")
        assert "1. first" in rendered
        assert "- fix it" in rendered


class TestValidateConfigFile:
    """Test the validate command helper."""

    def test_valid(self, capsys):
        assert validate_config_file(FIXTURES_DIR / "valid_config.yaml") is True
        assert "✓" in capsys.readouterr().out

    def test_invalid(self, capsys):
        assert validate_config_file(FIXTURES_DIR / "invalid_config.yaml") is False
        assert "✗" in capsys.readouterr().out


class TestModels:
    """Test model-level validation rules."""

    def test_credentials_must_be_paired(self):
        with pytest.raises(ValueError):
            RundeckInstanceConfig(name="Default", url="https://rundeck", username="admin")
        with pytest.raises(ValueError):
            TriggerConfig(name="deploy", instance="Default", job_id="1", password="secret")

    def test_url_scheme(self):
        with pytest.raises(ValueError):
            RundeckInstanceConfig(name="Default", url="rundeck.example.com")

    def test_duplicate_instances(self):
        instance = {"name": "Default", "url": "https://rundeck"}
        with pytest.raises(ValueError, match="Duplicate instance"):
            AppConfig(instances=[instance, instance])

    def test_duplicate_triggers(self):
        trigger = {"name": "deploy", "instance": "Default", "job_id": "1"}
        with pytest.raises(ValueError, match="Duplicate trigger"):
            AppConfig(instances=[{"name": "Default", "url": "https://rundeck"}], triggers=[trigger, trigger])

    def test_at_least_one_instance(self):
        with pytest.raises(ValueError):
            AppConfig(instances=[])

    @pytest.mark.parametrize("interval", ["0s", "2h", "PT0.5S", "often"])
    def test_poll_interval_bounds(self, interval):
        with pytest.raises(ValueError):
            PollingConfig(interval=interval)

    def test_poll_interval_iso(self):
        assert PollingConfig(interval="PT1M").interval_seconds == 60


class TestWarnings:
    """Test non-fatal configuration warnings."""

    def test_clean_config(self):
        config_dict = {
            "instances": [{"name": "Default", "url": "https://rundeck", "username": "a", "password": "b"}],
            "triggers": [{"name": "deploy", "tags": "#deploy", "wait_for_completion": True, "fail_on_error": True}],
        }
        assert check_for_warnings(config_dict) == []

    def test_plain_http_credentials(self):
        warnings_found = check_for_warnings(
            {"instances": [{"name": "Default", "url": "http://rundeck", "username": "a", "password": "b"}]}
        )
        assert any("plain http" in w for w in warnings_found)

    def test_unmarked_tag(self):
        warnings_found = check_for_warnings({"triggers": [{"name": "deploy", "tags": "deploy"}]})
        assert any("no marker character" in w for w in warnings_found)

    def test_fail_without_wait(self):
        warnings_found = check_for_warnings({"triggers": [{"name": "deploy", "fail_on_error": True}]})
        assert any("does not wait" in w for w in warnings_found)

    def test_short_interval(self):
        assert check_for_warnings({"polling": {"interval": "1s"}})


class TestDuration:
    """Test duration parsing."""

    @pytest.mark.parametrize(
        "value, seconds",
        [("5s", 5), ("1m", 60), ("1h30m", 5400), ("2d", 172800), ("PT5S", 5), ("PT30M", 1800), ("P1D", 86400)],
    )
    def test_parse(self, value, seconds):
        assert parse_duration(value) == seconds

    @pytest.mark.parametrize("value", ["", "0s", "5x", "P", "PT", "abc"])
    def test_invalid(self, value):
        with pytest.raises(DurationParseError):
            parse_duration(value)

    def test_range_messages(self):
        with pytest.raises(DurationParseError, match="Minimum is 1 second"):
            validate_duration_range(0, min_seconds=1, max_seconds=3600, label="Poll interval")
        with pytest.raises(DurationParseError, match="Maximum is 1 hour"):
            validate_duration_range(7200, min_seconds=1, max_seconds=3600)


class TestEnvironmentConfig:
    """Test build context loaded from CI variables."""

    def test_build_variables(self):
        env_config = load_environment_config(
            {"JOB_NAME": "my-app", "BUILD_NUMBER": "42", "WORKSPACE": "/ws", "LOG_LEVEL": "debug"}
        )

        assert env_config.job_name == "my-app"
        assert env_config.build_number == 42
        assert env_config.workspace == "/ws"
        assert env_config.build_result == "SUCCESS"
        assert env_config.log_level == "DEBUG"
        assert env_config.variables["JOB_NAME"] == "my-app"

    def test_required_build_variables(self):
        with pytest.raises(ConfigurationError) as exc_info:
            load_environment_config({}, require_build=True)
        assert len(exc_info.value.errors) == 2

    def test_optional_build_variables(self):
        env_config = load_environment_config({})
        assert env_config.job_name is None
        assert env_config.build_number is None

    @pytest.mark.parametrize(
        "environ",
        [
            {"BUILD_NUMBER": "abc"},
            {"BUILD_NUMBER": "0"},
            {"BUILD_RESULT": "GREEN"},
            {"LOG_LEVEL": "LOUD"},
        ],
    )
    def test_invalid_values(self, environ):
        with pytest.raises(ConfigurationError):
            load_environment_config(environ)

    def test_reads_os_environ(self, build_env_vars):
        env_config = load_environment_config(require_build=True)

        assert env_config.job_name == "my-app"
        assert env_config.build_number == 42

    def test_build_result_case_insensitive(self):
        assert load_environment_config({"BUILD_RESULT": "unstable"}).build_result == "UNSTABLE"
