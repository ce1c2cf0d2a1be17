"""
Signing of transaction requests.
"""
from typing import Protocol

from ..keys import KeyPair
from ..transactions import SignedTransactionRequest
from .algorithms import SignatureAlgorithm, Ed25519Algorithm, EmptyAlgorithm, get_algorithm
from .request_signer import RequestSigner
from .local import LocalSigner


class Signer(Protocol):
    """Protocol for custom signers"""
    public_key: bytes

    def sign_request(self, request: SignedTransactionRequest) -> SignedTransactionRequest:
        """Sign request and return the signed copy"""
        ...


__all__ = [
    'Signer',
    'SignatureAlgorithm',
    'Ed25519Algorithm',
    'EmptyAlgorithm',
    'get_algorithm',
    'RequestSigner',
    'LocalSigner',
    'KeyPair',
]
