"""
Key codec: conversion of Ed25519 key material between its base58 text form
and the raw byte encodings used for signing and account lookup.
"""
import base64
import logging
from dataclasses import dataclass
from typing import Union

import base58
import nacl.bindings
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey, Ed25519PublicKey
)
from cryptography.hazmat.primitives.serialization import (
    Encoding, PrivateFormat, PublicFormat, NoEncryption
)

from .exceptions import DecodeError

logger = logging.getLogger(__name__)

ED25519_KEY_SIZE = 32


@dataclass(frozen=True)
class KeyPair:
    """
    Raw Ed25519 key pair of a caller identity.

    Attributes:
        public_key: Raw 32-byte public key
        private_key: Raw 32-byte private key (seed)
    """
    public_key: bytes
    private_key: bytes

    def __repr__(self) -> str:
        # Never leak the private key into logs or tracebacks
        return f"KeyPair(public_key={encode_public_key(self.public_key)!r})"

    def matches(self) -> bool:
        """
        Check that the private key derives the public key of this pair.

        Returns:
            True if both halves belong together
        """
        try:
            private_key = Ed25519PrivateKey.from_private_bytes(self.private_key)
        except ValueError:
            return False
        return _raw_public_bytes(private_key.public_key()) == self.public_key


def _raw_public_bytes(public_key: Ed25519PublicKey) -> bytes:
    return public_key.public_bytes(Encoding.Raw, PublicFormat.Raw)


def _b58decode(encoded: str, what: str) -> bytes:
    if not isinstance(encoded, str) or not encoded:
        raise DecodeError(f"Encoded {what} must be a non-empty string")
    try:
        return base58.b58decode(encoded)
    except ValueError as e:
        raise DecodeError(f"Invalid base58 {what}: {e}") from e


def decode_private_key(encoded: str) -> bytes:
    """
    Decode a base58 Ed25519 private key.

    Args:
        encoded: Base58 text of the raw 32-byte key

    Returns:
        Raw private key bytes

    Raises:
        DecodeError: If the text is not base58 or has the wrong length
    """
    raw = _b58decode(encoded, "private key")
    if len(raw) != ED25519_KEY_SIZE:
        raise DecodeError(
            f"Ed25519 private key must be {ED25519_KEY_SIZE} bytes, got {len(raw)}"
        )
    return raw


def decode_public_key(encoded: str) -> bytes:
    """
    Decode a base58 Ed25519 public key.

    Args:
        encoded: Base58 text of the raw 32-byte key

    Returns:
        Raw public key bytes

    Raises:
        DecodeError: If the text is not base58 or has the wrong length, or
            if the bytes do not encode a point of the Ed25519 main subgroup
    """
    raw = _b58decode(encoded, "public key")
    if len(raw) != ED25519_KEY_SIZE:
        raise DecodeError(
            f"Ed25519 public key must be {ED25519_KEY_SIZE} bytes, got {len(raw)}"
        )
    # cryptography accepts any 32 bytes here; libsodium checks the point
    if not nacl.bindings.crypto_core_ed25519_is_valid_point(raw):
        raise DecodeError("Invalid Ed25519 public key: not a point of the main subgroup")
    return raw


def encode_public_key_bytes(key: Union[bytes, Ed25519PublicKey]) -> bytes:
    """
    Canonical byte serialization of a public key.

    This is the raw Ed25519 encoding, independent of any textual wrapping,
    and is what the accounts ledger is keyed by.

    Args:
        key: Raw public key bytes or a cryptography public key object

    Returns:
        Raw 32-byte public key

    Raises:
        DecodeError: If the key is not a valid Ed25519 public key
    """
    if isinstance(key, Ed25519PublicKey):
        return _raw_public_bytes(key)
    try:
        return _raw_public_bytes(Ed25519PublicKey.from_public_bytes(bytes(key)))
    except (TypeError, ValueError) as e:
        raise DecodeError(f"Invalid Ed25519 public key: {e}") from e


def encode_public_key(public_key: bytes) -> str:
    """Base58 text of a raw public key."""
    return base58.b58encode(public_key).decode("ascii")


def encode_private_key(private_key: bytes) -> str:
    """Base58 text of a raw private key."""
    return base58.b58encode(private_key).decode("ascii")


def public_key_lookup_string(key: Union[bytes, Ed25519PublicKey]) -> str:
    """
    String argument used to look a public key up in the accounts ledger.

    Args:
        key: Raw public key bytes or a cryptography public key object

    Returns:
        Base64 text of the canonical public key bytes
    """
    return base64.b64encode(encode_public_key_bytes(key)).decode("ascii")


def key_pair_from_encoded(private_key: str, public_key: str) -> KeyPair:
    """
    Build a key pair from base58 encoded halves.

    Args:
        private_key: Base58 private key
        public_key: Base58 public key

    Returns:
        KeyPair with raw key bytes

    Raises:
        DecodeError: If either half is malformed
    """
    return KeyPair(
        public_key=decode_public_key(public_key),
        private_key=decode_private_key(private_key)
    )


def generate_key_pair() -> KeyPair:
    """
    Generate a fresh Ed25519 key pair.

    Returns:
        KeyPair with raw key bytes
    """
    private_key = Ed25519PrivateKey.generate()
    private_bytes = private_key.private_bytes(
        encoding=Encoding.Raw,
        format=PrivateFormat.Raw,
        encryption_algorithm=NoEncryption()
    )
    public_bytes = _raw_public_bytes(private_key.public_key())
    logger.debug(f"Generated key pair for public key {encode_public_key(public_bytes)[:6]}…")
    return KeyPair(public_key=public_bytes, private_key=private_bytes)
