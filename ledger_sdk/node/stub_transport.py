"""
In-memory stub node.

This transport plays the part of a remote node without any network: it owns
a manifest, a gas station, an accounts ledger and per-account nonces, and
validates signed requests the way a real node does (chain id, signature over
the rebuilt canonical bytes, nonce, gas). Application code is simulated by
handlers registered per call signature.
"""
import base64
import binascii
import hashlib
import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from ..codec import encode_value
from ..exceptions import DecodeError
from ..models import (
    ConstructorCallRequestModel, InstanceMethodCallRequestModel,
    StorageValueModel, ViewMethodCallRequestModel
)
from ..signer.algorithms import Ed25519Algorithm, SignatureAlgorithm
from ..transactions import (
    ConstructorCallTransactionRequest, TransactionRequest,
    ViewMethodCallTransactionRequest, request_from_model, unsigned_bytes
)
from ..types import (
    BURN, CallSignature, GET_ACCOUNTS_LEDGER, GET_CHAIN_ID,
    GET_FROM_ACCOUNTS_LEDGER, GET_GAMETE, GET_GAS_PRICE, GET_GAS_STATION,
    IGNORES_GAS_PRICE, MINT, NONCE
)
from ..values import (
    BigIntegerValue, BooleanValue, StorageReference, StorageValue,
    StringValue, TransactionReference
)
from .exceptions import (
    ExecutionRevertedError, NodeConnectionError, RejectReason, RejectedError
)
from .transport import NodeTransport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallContext:
    """What a handler knows about the call it runs."""
    caller: StorageReference
    node: "StubTransport"


# handler(context, receiver, actuals) -> result; receiver is None for constructors
Handler = Callable[[CallContext, Optional[StorageReference], Tuple[StorageValue, ...]], Optional[StorageValue]]


class StubTransport(NodeTransport):
    """
    A simulated node for testing and development.

    Raising any exception inside a handler reverts the call, which surfaces
    to the client as ``ExecutionRevertedError``.
    """

    def __init__(
        self,
        chain_id: str = "stub-chain",
        gas_price: int = 1,
        ignores_gas_price: bool = False,
        min_gas_limit: int = 10_000,
        algorithm: Optional[SignatureAlgorithm] = None
    ):
        self.chain_id = chain_id
        self.gas_price = gas_price
        self.ignores_gas_price = ignores_gas_price
        self.min_gas_limit = min_gas_limit
        self.algorithm = algorithm or Ed25519Algorithm()
        self.node_url: Optional[str] = None
        self.initialized = False

        self._lock = threading.RLock()
        self._progressive = itertools.count()
        self.takamaka_code = TransactionReference(hashlib.sha256(b"takamaka-code").hexdigest())
        self.manifest = self.new_reference()
        self.gas_station = self.new_reference()
        self.accounts_ledger = self.new_reference()
        self.gamete: Optional[StorageReference] = None

        self._public_keys: Dict[StorageReference, bytes] = {}
        self._ledger: Dict[str, StorageReference] = {}
        self._nonces: Dict[StorageReference, int] = {}
        self.balances: Dict[StorageReference, int] = {}
        self._methods: Dict[CallSignature, Handler] = {}
        self._constructors: Dict[CallSignature, Handler] = {}
        self._install_builtins()

    # Node state

    def new_reference(self) -> StorageReference:
        """Fresh storage reference for a newly created object."""
        with self._lock:
            progressive = next(self._progressive)
        return StorageReference(f"{self.takamaka_code.token}#{progressive:x}")

    def create_account(self, public_key: bytes, balance: int = 0) -> StorageReference:
        """
        Create an externally owned account controlled by ``public_key`` and
        register it in the accounts ledger.
        """
        with self._lock:
            key = base64.b64encode(public_key).decode("ascii")
            account = self._ledger.get(key)
            if account is None:
                account = self.new_reference()
                self._ledger[key] = account
                self._public_keys[account] = bytes(public_key)
                self._nonces[account] = 0
                self.balances[account] = 0
            self.balances[account] += balance
            return account

    def create_gamete(self, public_key: bytes, balance: int = 10 ** 30) -> StorageReference:
        """Create the bootstrap account; it is not listed in the accounts ledger."""
        with self._lock:
            self.gamete = self.new_reference()
            self._public_keys[self.gamete] = bytes(public_key)
            self._nonces[self.gamete] = 0
            self.balances[self.gamete] = balance
            return self.gamete

    def nonce_of(self, account: StorageReference) -> int:
        with self._lock:
            return self._nonces[account]

    def register_method(self, signature: CallSignature, handler: Handler) -> None:
        """Simulate the method ``signature`` with ``handler``."""
        if signature.is_constructor:
            raise ValueError(f"{signature} is a constructor")
        self._methods[signature] = handler

    def register_constructor(self, signature: CallSignature, handler: Handler) -> None:
        """Simulate the constructor ``signature`` with ``handler``, which returns the new object."""
        if not signature.is_constructor:
            raise ValueError(f"{signature} is not a constructor")
        self._constructors[signature] = handler

    # NodeTransport

    def initialize(self, node_url: str, verify_ssl: bool = True) -> None:
        self.node_url = node_url
        self.initialized = True
        logger.debug(f"Initialized stub transport for {node_url}")

    def get_takamaka_code(self) -> str:
        self._check_initialized()
        return self.takamaka_code.token

    def get_manifest(self) -> str:
        self._check_initialized()
        return self.manifest.token

    def add_constructor_call(self, request: ConstructorCallRequestModel) -> Optional[StorageValueModel]:
        return self._execute(request, commit=True)

    def add_instance_method_call(self, request: InstanceMethodCallRequestModel) -> Optional[StorageValueModel]:
        return self._execute(request, commit=True)

    def run_instance_method_call(self, request: ViewMethodCallRequestModel) -> Optional[StorageValueModel]:
        return self._execute(request, commit=False)

    def close(self) -> None:
        self.initialized = False

    # Execution

    def _check_initialized(self) -> None:
        if not self.initialized:
            raise NodeConnectionError("Stub transport not initialized")

    def _execute(self, model, commit: bool) -> Optional[StorageValueModel]:
        self._check_initialized()
        try:
            request = request_from_model(model)
        except DecodeError as e:
            raise RejectedError(f"Malformed request: {e}")

        with self._lock:
            self._validate(request)
            if commit:
                # The nonce is consumed even if the code then fails
                self._nonces[request.caller] += 1
            result = self._run(request)

        logger.debug(f"StubTransport ran {request.call_signature} for {request.caller}")
        return encode_value(result) if result is not None else None

    def _validate(self, request: TransactionRequest) -> None:
        if request.gas_limit < self.min_gas_limit:
            raise RejectedError(
                f"Gas limit {request.gas_limit} is below the minimum {self.min_gas_limit}",
                RejectReason.INSUFFICIENT_GAS
            )
        public_key = self._public_keys.get(request.caller)
        if isinstance(request, ViewMethodCallTransactionRequest):
            # Views may also be run by the manifest, to bootstrap its getters
            if public_key is None and request.caller != self.manifest:
                raise RejectedError(f"Unknown caller {request.caller}", RejectReason.UNKNOWN_CALLER)
            return

        if public_key is None:
            raise RejectedError(f"Unknown caller {request.caller}", RejectReason.UNKNOWN_CALLER)

        if request.chain_id != self.chain_id:
            raise RejectedError(
                f"Incorrect chain id: expected {self.chain_id!r}, got {request.chain_id!r}",
                RejectReason.WRONG_CHAIN_ID
            )
        if not self.algorithm.verify(unsigned_bytes(request), request.signature or b"", public_key):
            raise RejectedError("Invalid request signature", RejectReason.BAD_SIGNATURE)
        expected = self._nonces[request.caller]
        if request.nonce != expected:
            raise RejectedError(
                f"Incorrect nonce: the required nonce was {expected} but the request used {request.nonce}",
                RejectReason.STALE_NONCE
            )
        if not self.ignores_gas_price and request.gas_price < self.gas_price:
            raise RejectedError(
                f"Gas price {request.gas_price} is below the current price {self.gas_price}",
                RejectReason.INSUFFICIENT_GAS
            )

    def _run(self, request: TransactionRequest) -> Optional[StorageValue]:
        context = CallContext(caller=request.caller, node=self)
        signature = request.call_signature
        if isinstance(request, ConstructorCallTransactionRequest):
            handler = self._constructors.get(signature)
            receiver = None
        else:
            handler = self._methods.get(signature)
            receiver = request.receiver
        if handler is None:
            raise ExecutionRevertedError(f"Cannot find {signature}", "NoSuchMethodException")

        try:
            return handler(context, receiver, request.actuals)
        except Exception as e:
            raise ExecutionRevertedError(str(e) or type(e).__name__, type(e).__name__) from e

    # Built-in objects

    def _install_builtins(self) -> None:
        def manifest_getter(value):
            def handler(context, receiver, actuals):
                if receiver != self.manifest:
                    raise LookupError(f"{receiver} is not the manifest")
                result = value()
                if result is None:
                    raise LookupError("The node has no gamete yet")
                return result
            return handler

        self.register_method(GET_GAMETE, manifest_getter(lambda: self.gamete))
        self.register_method(GET_ACCOUNTS_LEDGER, manifest_getter(lambda: self.accounts_ledger))
        self.register_method(GET_GAS_STATION, manifest_getter(lambda: self.gas_station))
        self.register_method(GET_CHAIN_ID, manifest_getter(lambda: StringValue(self.chain_id)))
        self.register_method(NONCE, self._nonce)
        self.register_method(GET_GAS_PRICE, lambda context, receiver, actuals: BigIntegerValue(self.gas_price))
        self.register_method(IGNORES_GAS_PRICE, lambda context, receiver, actuals: BooleanValue(self.ignores_gas_price))
        self.register_method(GET_FROM_ACCOUNTS_LEDGER, self._get_from_ledger)
        self.register_method(MINT, self._mint)
        self.register_method(BURN, self._burn)

    def _nonce(self, context, receiver, actuals):
        if receiver not in self._nonces:
            raise LookupError(f"{receiver} is not an account")
        return BigIntegerValue(self._nonces[receiver])

    def _get_from_ledger(self, context, receiver, actuals):
        return self._ledger.get(actuals[0].value)

    def _public_key_argument(self, actuals) -> bytes:
        try:
            return base64.b64decode(actuals[1].value, validate=True)
        except binascii.Error as e:
            raise ValueError(f"Invalid public key encoding: {e}") from e

    def _mint(self, context, receiver, actuals):
        if context.caller != self.gamete:
            raise PermissionError("Only the gamete can mint")
        amount = actuals[0].value
        if amount < 0:
            raise ValueError("Cannot mint a negative amount")
        return self.create_account(self._public_key_argument(actuals), amount)

    def _burn(self, context, receiver, actuals):
        if context.caller != self.gamete:
            raise PermissionError("Only the gamete can burn")
        amount = actuals[0].value
        account = self._ledger.get(actuals[1].value)
        if account is None:
            raise LookupError("Unknown account")
        if amount < 0 or self.balances[account] < amount:
            raise ValueError("Cannot burn more than the balance")
        self.balances[account] -= amount
        return account
