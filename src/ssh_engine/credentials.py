"""Private key loading for public-key authentication."""

from pathlib import Path

import asyncssh

from .errors import KeyParseError, KeyReadError


def load_signer(path: str) -> asyncssh.SSHKey:
    """Read and parse the private key at *path*.

    Passphrase-protected keys are not supported and fail to parse.
    """
    try:
        data = Path(path).expanduser().read_bytes()
    except OSError as e:
        raise KeyReadError(
            f"could not read privateKeyFile at {path}: error reading the key file: {e}"
        ) from e

    try:
        return asyncssh.import_private_key(data)
    except asyncssh.KeyImportError as e:
        raise KeyParseError(
            f"could not read privateKeyFile at {path}: error parsing the private "
            f"key file. Is this a valid private key?: {e}"
        ) from e
