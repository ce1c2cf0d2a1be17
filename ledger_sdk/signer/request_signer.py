"""
Signing of transaction requests over their canonical bytes.
"""
import logging
from typing import Optional

from ..exceptions import SigningError
from ..keys import KeyPair
from ..transactions import (
    SignedTransactionRequest, TransactionRequest, is_signed_variant,
    unsigned_bytes, with_signature
)
from .algorithms import Ed25519Algorithm, EmptyAlgorithm, SignatureAlgorithm

logger = logging.getLogger(__name__)


class RequestSigner:
    """
    Signs state-mutating requests with a key pair.

    The signature covers exactly the canonical bytes of the unsigned request,
    which is what the node rebuilds to verify it. Stateless and thread-safe.
    """

    def __init__(self, algorithm: Optional[SignatureAlgorithm] = None):
        self.algorithm = algorithm or Ed25519Algorithm()

    def sign(self, request: TransactionRequest, key_pair: KeyPair) -> bytes:
        """
        Compute the signature of ``request``.

        Args:
            request: Constructor or instance method call request; any
                signature it already carries is ignored
            key_pair: Keys of the caller

        Returns:
            Signature bytes

        Raises:
            SigningError: If the request is a view call, or the private key
                does not fit the algorithm or the key pair's public key
        """
        if not is_signed_variant(request):
            raise SigningError("View requests are never signed")
        self._check_key_pair(key_pair)
        return self.algorithm.sign(unsigned_bytes(request), key_pair.private_key)

    def sign_request(self, request: SignedTransactionRequest, key_pair: KeyPair) -> SignedTransactionRequest:
        """Copy of ``request`` carrying its signature."""
        return with_signature(request, self.sign(request, key_pair))

    def verify(self, request: SignedTransactionRequest, public_key: bytes) -> bool:
        """
        Verify the signature carried by ``request``.

        Returns:
            False for view requests, unsigned requests or a bad signature
        """
        if not is_signed_variant(request) or request.signature is None:
            return False
        return self.algorithm.verify(unsigned_bytes(request), request.signature, public_key)

    def _check_key_pair(self, key_pair: KeyPair) -> None:
        if isinstance(self.algorithm, EmptyAlgorithm):
            return
        derived = self.algorithm.public_key_of(key_pair.private_key)
        if derived != key_pair.public_key:
            raise SigningError(
                f"Private key does not match the public key of the pair for {self.algorithm.name}"
            )
