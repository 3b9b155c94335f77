"""Load engine.yml into an immutable Configuration."""

from pathlib import Path
from typing import Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigNotFoundError, ConfigParseError

CONFIG_FILE_NAME = "engine.yml"

REQUIRED_KEYS = ("user", "privateKeyFile", "host", "port", "remoteCommand")


class Configuration(BaseModel):
    """Connection and relay settings read once at startup."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    user: str
    private_key_file: str = Field(alias="privateKeyFile")
    host: str
    port: str
    remote_command: str = Field(alias="remoteCommand")
    log_file_name: str = Field("", alias="logFileName")

    # Accepting any host key is the historical behaviour; turning it off
    # verifies against known_hosts_file (or the asyncssh default).
    insecure_ignore_host_key: bool = Field(True, alias="insecureIgnoreHostKey")
    known_hosts_file: str = Field("", alias="knownHostsFile")

    @field_validator(
        "user",
        "private_key_file",
        "host",
        "port",
        "remote_command",
        "log_file_name",
        "known_hosts_file",
        mode="before",
    )
    @classmethod
    def coerce_to_string(cls, v) -> str:
        if v is None:
            return ""
        if isinstance(v, (dict, list)):
            raise ValueError("expected a scalar value")
        return str(v)

    @property
    def debug_logging(self) -> bool:
        return self.log_file_name != ""

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"


def load_config(directory: Union[str, Path] = ".") -> Configuration:
    """Read ``engine.yml`` from *directory*.

    Raises:
        ConfigNotFoundError: the file does not exist.
        ConfigParseError: the file cannot be read or parsed, or a required
            key is missing.
    """
    path = Path(directory) / CONFIG_FILE_NAME
    if not path.exists():
        raise ConfigNotFoundError(
            f"The file '{CONFIG_FILE_NAME}' could not be found in the current directory"
        )

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigParseError(f"Error reading the {CONFIG_FILE_NAME} file: {e}") from e

    if not isinstance(data, dict):
        raise ConfigParseError(
            f"Unable to decode the {CONFIG_FILE_NAME} file: expected a mapping of settings"
        )

    missing = [key for key in REQUIRED_KEYS if key not in data]
    if missing:
        raise ConfigParseError(
            f"Unable to decode the {CONFIG_FILE_NAME} file: "
            f"missing required keys: {', '.join(missing)}"
        )

    try:
        return Configuration.model_validate(data)
    except ValidationError as e:
        raise ConfigParseError(f"Unable to decode the {CONFIG_FILE_NAME} file: {e}") from e
