"""
StackConfig loading: defaults, TOML file, environment overrides, validation.
"""

import pytest

from elastic_container.config import StackConfig, load_config
from elastic_container.errors import ConfigError


class TestDefaults:
    def test_default_values(self, tmp_path):
        config = load_config(env={}, cwd=tmp_path)

        assert config.username == "elastic"
        assert config.password == "password"
        assert config.stack_version == "7.17.0"
        assert config.network_name == "elastic"
        assert config.local_kbn_url == "http://127.0.0.1:5601"
        assert config.elasticsearch_url == "http://elasticsearch:9200"
        assert config.fleet_url == "http://fleet-server:8220"
        assert config.max_tries == 15
        assert config.retry_delay == 40.0
        assert config.kibana_config is None

    def test_images_follow_stack_version(self):
        config = StackConfig(stack_version="8.1.0")

        assert config.images == [
            "docker.elastic.co/elasticsearch/elasticsearch:8.1.0",
            "docker.elastic.co/kibana/kibana:8.1.0",
            "docker.elastic.co/beats/elastic-agent:8.1.0",
        ]

    def test_kibana_headers(self):
        assert StackConfig(stack_version="7.16.3").kibana_headers == {
            "kbn-version": "7.16.3",
            "kbn-xsrf": "kibana",
            "Content-Type": "application/json",
        }

    def test_is_immutable(self):
        config = StackConfig()
        with pytest.raises(AttributeError):
            config.password = "other"


class TestConfigFile:
    def test_reads_sections(self, tmp_path):
        path = tmp_path / "custom.toml"
        path.write_text(
            '[stack]\nversion = "7.16.3"\nnetwork = "lab"\n'
            '[credentials]\npassword = "s3cret"\n'
            '[kibana]\nmax_tries = 3\nretry_delay = 5\nconfig_file = "conf/kibana.yml"\n'
            '[unknown]\nkey = 1\n',
            encoding="utf-8",
        )

        config = load_config(path, env={})

        assert config.stack_version == "7.16.3"
        assert config.network_name == "lab"
        assert config.password == "s3cret"
        assert config.username == "elastic"
        assert config.max_tries == 3
        assert config.retry_delay == 5.0
        assert config.kibana_config == tmp_path / "conf" / "kibana.yml"

    def test_picks_up_file_from_cwd(self, tmp_path):
        (tmp_path / "elastic-container.toml").write_text('[credentials]\nusername = "admin"\n', encoding="utf-8")

        config = load_config(env={}, cwd=tmp_path)

        assert config.username == "admin"

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.toml", env={})

    def test_invalid_toml(self, tmp_path):
        path = tmp_path / "broken.toml"
        path.write_text("[stack\nversion = ", encoding="utf-8")

        with pytest.raises(ConfigError, match="Failed to parse"):
            load_config(path, env={})

    def test_non_numeric_retry_budget(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text('[kibana]\nmax_tries = "lots"\n', encoding="utf-8")

        with pytest.raises(ConfigError, match="max_tries"):
            load_config(path, env={})


class TestEnvironmentOverrides:
    def test_env_wins_over_file(self, tmp_path):
        path = tmp_path / "c.toml"
        path.write_text('[credentials]\npassword = "from-file"\n', encoding="utf-8")

        config = load_config(path, env={"ELASTIC_PASSWORD": "from-env", "STACK_VERSION": "7.17.1"})

        assert config.password == "from-env"
        assert config.stack_version == "7.17.1"

    def test_empty_env_value_is_ignored(self, tmp_path):
        config = load_config(env={"ELASTIC_PASSWORD": ""}, cwd=tmp_path)

        assert config.password == "password"


class TestValidation:
    @pytest.mark.parametrize("kwargs, field", [
        ({"max_tries": 0}, "max_tries"),
        ({"retry_delay": -1}, "retry_delay"),
        ({"request_timeout": 0}, "request_timeout"),
        ({"password": ""}, "password"),
        ({"stack_version": ""}, "stack.version"),
    ])
    def test_rejects_invalid_values(self, kwargs, field):
        with pytest.raises(ConfigError, match=field):
            StackConfig(**kwargs)

    def test_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            StackConfig(max_tries=-3)

    def test_zero_delay_allowed(self):
        assert StackConfig(retry_delay=0).retry_delay == 0

    def test_unquoted_version_is_rejected(self, tmp_path):
        path = tmp_path / "float.toml"
        path.write_text("[stack]\nversion = 7.17\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="stack_version must be a string"):
            load_config(path, env={})

    @pytest.mark.parametrize("field", [
        "username", "password", "network_name", "elasticsearch_url",
        "local_es_url", "kibana_url", "local_kbn_url", "fleet_url",
    ])
    def test_non_string_fields_are_rejected(self, field):
        with pytest.raises(ConfigError, match=f"{field} must be a string"):
            StackConfig(**{field: 1})

    def test_non_string_kibana_config_file(self, tmp_path):
        path = tmp_path / "int.toml"
        path.write_text("[kibana]\nconfig_file = 1\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="kibana.config_file must be a string"):
            load_config(path, env={})
