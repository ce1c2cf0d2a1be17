"""
Account resolution: from a public key to the account it controls on the ledger.
"""
import logging
import threading
from typing import Optional, Union

from cachetools import TTLCache
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from .exceptions import AccountNotFound
from .keys import encode_public_key_bytes, public_key_lookup_string
from .node.client import DEFAULT_QUERY_GAS_LIMIT, NodeClient
from .transactions import build_view_method_call
from .types import GET_FROM_ACCOUNTS_LEDGER
from .values import StorageReference, StringValue

logger = logging.getLogger(__name__)


class AccountResolver:
    """
    Maps public keys to account references through the node's accounts ledger.

    The mapping is owned by the ledger: the resolver only asks for it. When
    ``cache_ttl`` is given, successful lookups are remembered for that many
    seconds; a missing account is never cached.
    """

    def __init__(
        self,
        node: NodeClient,
        gas_limit: int = DEFAULT_QUERY_GAS_LIMIT,
        cache_ttl: Optional[int] = None,
        cache_size: int = 1024
    ):
        self.node = node
        self.gas_limit = gas_limit
        self._cache = TTLCache(maxsize=cache_size, ttl=cache_ttl) if cache_ttl else None
        self._cache_lock = threading.RLock()

    def resolve(self, public_key: Union[bytes, Ed25519PublicKey]) -> StorageReference:
        """
        Find the account controlled by ``public_key``.

        Args:
            public_key: Raw public key bytes or a cryptography public key

        Returns:
            Reference of the account

        Raises:
            DecodeError: If the public key is invalid
            AccountNotFound: If the accounts ledger has no entry for the key
            NodeError: If the lookup fails on the node
        """
        raw = encode_public_key_bytes(public_key)
        if self._cache is not None:
            with self._cache_lock:
                cached = self._cache.get(raw)
            if cached is not None:
                return cached

        lookup = public_key_lookup_string(raw)
        request = build_view_method_call(
            self.node.gamete,
            self.gas_limit,
            self.node.takamaka_code,
            GET_FROM_ACCOUNTS_LEDGER,
            self.node.accounts_ledger,
            [StringValue(lookup)]
        )
        account = self.node.query(request)
        if account is None:
            raise AccountNotFound(lookup)

        logger.debug(f"Public key {lookup[:8]}… is controlled by account {account}")
        if self._cache is not None:
            with self._cache_lock:
                self._cache[raw] = account
        return account

    def forget(self, public_key: Union[bytes, Ed25519PublicKey]) -> None:
        """Drop a cached mapping, if any."""
        if self._cache is not None:
            with self._cache_lock:
                self._cache.pop(encode_public_key_bytes(public_key), None)
