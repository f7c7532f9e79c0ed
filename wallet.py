import json
from pathlib import Path
from typing import Union
import base58
from solders.keypair import Keypair

SECRET_KEY_LENGTH = 64


class KeypairError(ValueError):
    """Raised when a secret key or keypair file cannot be used"""


def keypair_from_base58(secret: str) -> Keypair:
    """Decode a base58 secret key (Phantom export format) into a keypair"""
    try:
        secret_bytes = base58.b58decode(secret.strip())
    except ValueError as e:
        raise KeypairError(f"Secret is not valid base58: {e}")

    if len(secret_bytes) != SECRET_KEY_LENGTH:
        raise KeypairError(f"Expected {SECRET_KEY_LENGTH}-byte secret key, got {len(secret_bytes)}")

    try:
        return Keypair.from_bytes(secret_bytes)
    except ValueError as e:
        raise KeypairError(f"Secret key rejected: {e}")


def write_keypair(keypair: Keypair, path: Union[str, Path]) -> Path:
    """Write the keypair as a JSON array of its 64 secret bytes"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        json.dump(list(bytes(keypair)), f)
    return path


def load_keypair(path: Union[str, Path]) -> Keypair:
    """Load a keypair from a JSON array file (solana-keygen format)"""
    path = Path(path).resolve()
    if not path.is_file():
        raise KeypairError(f"Keypair file not found: {path}")

    try:
        with open(path, 'r') as f:
            secret = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise KeypairError(f"Could not read keypair file {path}: {e}")

    if not isinstance(secret, list) or not all(type(b) is int and 0 <= b <= 255 for b in secret):
        raise KeypairError(f"Keypair file {path} must contain a JSON array of bytes")
    if len(secret) != SECRET_KEY_LENGTH:
        raise KeypairError(f"Keypair file {path} holds {len(secret)} bytes, expected {SECRET_KEY_LENGTH}")

    try:
        return Keypair.from_bytes(bytes(secret))
    except ValueError as e:
        raise KeypairError(f"Keypair file {path} is not a valid secret key: {e}")
