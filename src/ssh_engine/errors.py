"""Failure kinds raised by the engine.

Library code raises these; only the command-line entry point turns them into
a process exit status.
"""


class EngineError(Exception):
    """Base class for every fatal engine failure."""

    kind = "engine"


class ConfigError(EngineError):
    kind = "config"


class ConfigNotFoundError(ConfigError):
    kind = "config-missing"


class ConfigParseError(ConfigError):
    kind = "config-invalid"


class LogFileError(EngineError):
    kind = "log-file"


class KeyReadError(EngineError):
    kind = "key-read"


class KeyParseError(EngineError):
    kind = "key-parse"


class ConnectError(EngineError):
    kind = "connect"


class AuthenticationError(EngineError):
    kind = "auth"


class SessionError(EngineError):
    kind = "session"


class ShellStartError(EngineError):
    kind = "shell"


class RemoteWriteError(EngineError):
    """Writing to the remote shell failed after the session was started."""

    kind = "remote-write"
