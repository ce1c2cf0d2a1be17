"""
Helpers running whole transactions: fetch nonce and gas, build, sign, submit.
"""
import logging
import threading
import weakref
from typing import Optional, Union

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from .keys import KeyPair, public_key_lookup_string
from .node.client import NodeClient
from .signer.algorithms import SignatureAlgorithm, get_algorithm
from .signer.request_signer import RequestSigner
from .transactions import (
    build_constructor_call, build_instance_method_call, build_view_method_call,
    check_call
)
from .types import BURN, MINT, CallSignature
from .values import BigIntegerValue, StorageReference, StorageValue, StringValue

logger = logging.getLogger(__name__)

DEFAULT_GAS_LIMIT = 1_000_000


class TransactionHelper:
    """
    Runs signed transactions on behalf of callers.

    Nonce acquisition and submission are serialized per account: for a given
    caller, the next nonce is only fetched once the previous request has come
    back with a result or a fault. Different accounts proceed in parallel.
    Faults are never retried here.
    """

    def __init__(
        self,
        node: NodeClient,
        algorithm: Optional[SignatureAlgorithm] = None,
        gas_limit: int = DEFAULT_GAS_LIMIT
    ):
        self.node = node
        self.signer = RequestSigner(algorithm)
        self.gas_limit = gas_limit
        # A lock lives as long as some thread holds or waits on it
        self._account_locks: "weakref.WeakValueDictionary[StorageReference, threading.Lock]" = (
            weakref.WeakValueDictionary()
        )
        self._account_locks_lock = threading.RLock()

    @classmethod
    def from_config(cls, node: NodeClient, config) -> "TransactionHelper":
        """Create a helper using the gas limit and algorithm of a ``NodeConfig``."""
        return cls(node, get_algorithm(config.signature_algorithm), config.gas_limit)

    def account_lock(self, account: StorageReference) -> threading.Lock:
        """Lock guarding the in-flight signed request of ``account``."""
        with self._account_locks_lock:
            lock = self._account_locks.get(account)
            if lock is None:
                lock = threading.Lock()
                self._account_locks[account] = lock
            return lock

    def _gas_limit(self, gas_limit: Optional[int]) -> int:
        return self.gas_limit if gas_limit is None else gas_limit

    def add_constructor_call(
        self,
        key_pair: KeyPair,
        caller: StorageReference,
        signature: CallSignature,
        *args: StorageValue,
        gas_limit: Optional[int] = None
    ) -> StorageReference:
        """
        Run a constructor as ``caller``.

        Returns:
            Reference of the created object

        Raises:
            ArgumentTypeMismatch: If ``args`` do not fit ``signature``
            SigningError: If ``key_pair`` cannot sign
            NodeError: If the node rejects or reverts the call
        """
        check_call(signature, args, constructor=True)
        with self.account_lock(caller):
            request = build_constructor_call(
                caller,
                self.node.get_nonce(caller),
                self.node.get_chain_id(),
                self._gas_limit(gas_limit),
                self.node.get_safe_gas_price(),
                self.node.takamaka_code,
                signature,
                args
            )
            return self.node.submit(self.signer.sign_request(request, key_pair))

    def add_instance_method_call(
        self,
        key_pair: KeyPair,
        caller: StorageReference,
        signature: CallSignature,
        receiver: StorageReference,
        *args: StorageValue,
        gas_limit: Optional[int] = None
    ) -> Optional[StorageValue]:
        """
        Run an instance method as ``caller``.

        Returns:
            The method's result, None for void methods

        Raises:
            ArgumentTypeMismatch: If ``args`` do not fit ``signature``
            SigningError: If ``key_pair`` cannot sign
            NodeError: If the node rejects or reverts the call
        """
        check_call(signature, args)
        with self.account_lock(caller):
            request = build_instance_method_call(
                caller,
                self.node.get_nonce(caller),
                self.node.get_chain_id(),
                self._gas_limit(gas_limit),
                self.node.get_safe_gas_price(),
                self.node.takamaka_code,
                signature,
                receiver,
                args
            )
            return self.node.submit(self.signer.sign_request(request, key_pair))

    def run_view_method_call(
        self,
        caller: StorageReference,
        signature: CallSignature,
        receiver: StorageReference,
        *args: StorageValue,
        gas_limit: Optional[int] = None
    ) -> Optional[StorageValue]:
        """Run a view method; no lock, nonce or signature is involved."""
        request = build_view_method_call(
            caller,
            self._gas_limit(gas_limit),
            self.node.takamaka_code,
            signature,
            receiver,
            args
        )
        return self.node.query(request)

    def mint(
        self,
        gamete_keys: KeyPair,
        public_key: Union[bytes, Ed25519PublicKey],
        amount: int
    ) -> StorageReference:
        """
        Let the gamete create coins for the account of ``public_key``,
        creating the account if needed.

        Returns:
            Reference of the credited account
        """
        account = self.add_instance_method_call(
            gamete_keys,
            self.node.gamete,
            MINT,
            self.node.accounts_ledger,
            BigIntegerValue(amount),
            StringValue(public_key_lookup_string(public_key))
        )
        logger.info(f"Minted {amount} coins for account {account}")
        return account

    def burn(
        self,
        gamete_keys: KeyPair,
        public_key: Union[bytes, Ed25519PublicKey],
        amount: int
    ) -> StorageReference:
        """
        Let the gamete destroy coins of the account of ``public_key``.

        Returns:
            Reference of the debited account
        """
        account = self.add_instance_method_call(
            gamete_keys,
            self.node.gamete,
            BURN,
            self.node.accounts_ledger,
            BigIntegerValue(amount),
            StringValue(public_key_lookup_string(public_key))
        )
        logger.info(f"Burnt {amount} coins from account {account}")
        return account
