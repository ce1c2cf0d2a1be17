"""
Signature algorithms for transaction requests.
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, Type

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey, Ed25519PublicKey
)
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from ..exceptions import SigningError

logger = logging.getLogger(__name__)


class SignatureAlgorithm(ABC):
    """
    Abstract base class for signature algorithms.

    Implementations work on raw key bytes, so that key pairs stay plain data.
    """

    name: str = ""

    @abstractmethod
    def sign(self, data: bytes, private_key: bytes) -> bytes:
        """
        Sign ``data``.

        Raises:
            SigningError: If the private key does not fit this algorithm
        """
        pass

    @abstractmethod
    def verify(self, data: bytes, signature: bytes, public_key: bytes) -> bool:
        """Check ``signature`` of ``data``; never raises on a bad signature."""
        pass

    @abstractmethod
    def public_key_of(self, private_key: bytes) -> bytes:
        """
        Raw public key derived from ``private_key``.

        Raises:
            SigningError: If the private key does not fit this algorithm
        """
        pass


class Ed25519Algorithm(SignatureAlgorithm):
    """Ed25519 signatures; deterministic by construction."""

    name = "ed25519"

    def _private_key(self, private_key: bytes) -> Ed25519PrivateKey:
        try:
            return Ed25519PrivateKey.from_private_bytes(bytes(private_key))
        except (TypeError, ValueError) as e:
            raise SigningError(f"Not an Ed25519 private key: {e}") from e

    def sign(self, data: bytes, private_key: bytes) -> bytes:
        return self._private_key(private_key).sign(data)

    def verify(self, data: bytes, signature: bytes, public_key: bytes) -> bool:
        try:
            Ed25519PublicKey.from_public_bytes(bytes(public_key)).verify(bytes(signature), data)
            return True
        except (InvalidSignature, TypeError, ValueError):
            return False

    def public_key_of(self, private_key: bytes) -> bytes:
        return self._private_key(private_key).public_key().public_bytes(
            Encoding.Raw, PublicFormat.Raw
        )


class EmptyAlgorithm(SignatureAlgorithm):
    """
    Produces empty signatures, for nodes started without signature checks.
    Every signature verifies.
    """

    name = "empty"

    def sign(self, data: bytes, private_key: bytes) -> bytes:
        return b""

    def verify(self, data: bytes, signature: bytes, public_key: bytes) -> bool:
        return True

    def public_key_of(self, private_key: bytes) -> bytes:
        raise SigningError("The empty algorithm has no key derivation")


_ALGORITHMS: Dict[str, Type[SignatureAlgorithm]] = {
    Ed25519Algorithm.name: Ed25519Algorithm,
    EmptyAlgorithm.name: EmptyAlgorithm,
}


def get_algorithm(name: str = "ed25519") -> SignatureAlgorithm:
    """
    Get a signature algorithm by name.

    Args:
        name: "ed25519" or "empty"

    Returns:
        Algorithm instance

    Raises:
        ValueError: If the algorithm is unknown
    """
    try:
        return _ALGORITHMS[name.lower()]()
    except KeyError:
        raise ValueError(
            f"Unknown signature algorithm: {name}. Available: {', '.join(sorted(_ALGORITHMS))}"
        )
