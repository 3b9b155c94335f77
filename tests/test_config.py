"""Tests for engine.yml loading."""

import textwrap

import pytest
from pydantic import ValidationError

from ssh_engine.config import Configuration, load_config
from ssh_engine.errors import ConfigNotFoundError, ConfigParseError


def _write_config(directory, yaml_text: str) -> None:
    (directory / "engine.yml").write_text(textwrap.dedent(yaml_text))


# --- Successful loads ---


class TestLoadConfig:
    def test_fields_match_yaml_values(self, tmp_path):
        _write_config(tmp_path, """\
            user: deploy
            privateKeyFile: /home/deploy/.ssh/id_ed25519
            host: build.example.com
            port: "2222"
            remoteCommand: cd /srv/app && ./status.sh
            logFileName: debug.log
        """)
        config = load_config(tmp_path)
        assert config.user == "deploy"
        assert config.private_key_file == "/home/deploy/.ssh/id_ed25519"
        assert config.host == "build.example.com"
        assert config.port == "2222"
        assert config.remote_command == "cd /srv/app && ./status.sh"
        assert config.log_file_name == "debug.log"
        assert config.debug_logging
        assert config.address == "build.example.com:2222"

    def test_integer_port_becomes_string(self, tmp_path):
        _write_config(tmp_path, """\
            user: deploy
            privateKeyFile: key
            host: localhost
            port: 22
            remoteCommand: uptime
        """)
        assert load_config(tmp_path).port == "22"

    def test_quoted_values_kept_as_written(self, tmp_path):
        _write_config(tmp_path, """\
            user: "yes"
            privateKeyFile: key
            host: localhost
            port: "022"
            remoteCommand: uptime
        """)
        config = load_config(tmp_path)
        assert config.user == "yes"
        assert config.port == "022"

    def test_unquoted_yaml_scalars_are_coerced(self, tmp_path):
        _write_config(tmp_path, """\
            user: yes
            privateKeyFile: key
            host: localhost
            port: 022
            remoteCommand: uptime
        """)
        config = load_config(tmp_path)
        assert config.user == "True"
        assert config.port == "18"

    def test_log_file_name_optional(self, tmp_path):
        _write_config(tmp_path, """\
            user: deploy
            privateKeyFile: key
            host: localhost
            port: 22
            remoteCommand: uptime
        """)
        config = load_config(tmp_path)
        assert config.log_file_name == ""
        assert not config.debug_logging

    def test_null_value_becomes_empty_string(self, tmp_path):
        _write_config(tmp_path, """\
            user: deploy
            privateKeyFile: key
            host: localhost
            port: 22
            remoteCommand:
        """)
        assert load_config(tmp_path).remote_command == ""

    def test_host_key_checking_defaults_to_insecure(self, tmp_path):
        _write_config(tmp_path, """\
            user: deploy
            privateKeyFile: key
            host: localhost
            port: 22
            remoteCommand: uptime
        """)
        config = load_config(tmp_path)
        assert config.insecure_ignore_host_key is True
        assert config.known_hosts_file == ""

    def test_host_key_checking_can_be_enabled(self, tmp_path):
        _write_config(tmp_path, """\
            user: deploy
            privateKeyFile: key
            host: localhost
            port: 22
            remoteCommand: uptime
            insecureIgnoreHostKey: false
            knownHostsFile: /etc/ssh/ssh_known_hosts
        """)
        config = load_config(tmp_path)
        assert config.insecure_ignore_host_key is False
        assert config.known_hosts_file == "/etc/ssh/ssh_known_hosts"

    def test_configuration_is_immutable(self):
        config = Configuration(
            user="u", privateKeyFile="k", host="h", port="22", remoteCommand="c"
        )
        with pytest.raises(ValidationError):
            config.host = "other"


# --- Failures ---


class TestLoadConfigErrors:
    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigNotFoundError) as exc_info:
            load_config(tmp_path)
        assert str(exc_info.value) == (
            "The file 'engine.yml' could not be found in the current directory"
        )

    def test_malformed_yaml(self, tmp_path):
        _write_config(tmp_path, "user: [unclosed\n")
        with pytest.raises(ConfigParseError) as exc_info:
            load_config(tmp_path)
        assert "Error reading the engine.yml file" in str(exc_info.value)

    def test_not_a_mapping(self, tmp_path):
        _write_config(tmp_path, "- just\n- a list\n")
        with pytest.raises(ConfigParseError):
            load_config(tmp_path)

    def test_missing_required_keys_are_named(self, tmp_path):
        _write_config(tmp_path, """\
            user: deploy
            port: 22
        """)
        with pytest.raises(ConfigParseError) as exc_info:
            load_config(tmp_path)
        message = str(exc_info.value)
        assert "privateKeyFile" in message
        assert "host" in message
        assert "remoteCommand" in message

    def test_nested_value_rejected(self, tmp_path):
        _write_config(tmp_path, """\
            user: deploy
            privateKeyFile: key
            host: {name: localhost}
            port: 22
            remoteCommand: uptime
        """)
        with pytest.raises(ConfigParseError):
            load_config(tmp_path)
