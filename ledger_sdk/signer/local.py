"""
Local signer holding a key pair in memory.
"""
from typing import Optional

from ..keys import KeyPair, key_pair_from_encoded
from ..transactions import SignedTransactionRequest
from .algorithms import SignatureAlgorithm, get_algorithm
from .request_signer import RequestSigner


class LocalSigner:
    """Signer for a single caller identity whose keys live in process memory"""

    def __init__(self, key_pair: KeyPair, algorithm: Optional[SignatureAlgorithm] = None):
        self.key_pair = key_pair
        self._signer = RequestSigner(algorithm or get_algorithm("ed25519"))

    @classmethod
    def from_encoded(cls, private_key: str, public_key: str,
                     algorithm: Optional[SignatureAlgorithm] = None) -> "LocalSigner":
        """Create a signer from base58 encoded keys."""
        return cls(key_pair_from_encoded(private_key, public_key), algorithm)

    @property
    def public_key(self) -> bytes:
        return self.key_pair.public_key

    @property
    def algorithm(self) -> SignatureAlgorithm:
        return self._signer.algorithm

    def sign_request(self, request: SignedTransactionRequest) -> SignedTransactionRequest:
        """Sign ``request`` with this signer's keys."""
        return self._signer.sign_request(request, self.key_pair)
