"""
NodeClient - capability interface to a remote ledger node.
"""
import hashlib
import logging
import threading
from typing import Optional

from ..codec import decode_optional_value
from ..config import validate_node_url
from ..exceptions import SigningError
from ..transactions import (
    ConstructorCallTransactionRequest, InstanceMethodCallTransactionRequest,
    TransactionRequest, ViewMethodCallTransactionRequest, build_view_method_call,
    request_to_model, signed_bytes, unsigned_bytes
)
from ..types import (
    CallSignature, GET_ACCOUNTS_LEDGER, GET_CHAIN_ID, GET_GAMETE,
    GET_GAS_PRICE, GET_GAS_STATION, IGNORES_GAS_PRICE, NONCE
)
from ..values import (
    StorageReference, StorageValue, TransactionReference, ValueKind,
    kind_for_type
)
from .exceptions import ExecutionRevertedError
from .transport import NodeTransport, get_transport

# Gas for the client's own bookkeeping queries (nonce, gas price, manifest)
DEFAULT_QUERY_GAS_LIMIT = 100_000

# Multiplier applied to the gas station price to survive price changes
# between the query and the execution of a request
SAFE_GAS_PRICE_MULTIPLIER = 2


class NodeClient:
    """
    Client for a remote ledger node.

    This client handles:
    1. Reading the node's stable references (code base, manifest, gamete,
       accounts ledger, gas station), cached for the client's lifetime
    2. Querying fresh nonces and gas prices, never cached
    3. Submitting requests and decoding their typed results

    It never retries: every fault surfaces to the caller as a ``NodeError``.
    """

    def __init__(
        self,
        node_url: str,
        transport: Optional[NodeTransport] = None,
        timeout: int = 30,
        retry_count: int = 3,
        verify_ssl: bool = True,
        query_gas_limit: int = DEFAULT_QUERY_GAS_LIMIT,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the NodeClient

        Args:
            node_url: URL of the node (e.g., "https://node.example.com")
            transport: Transport to use (defaults to HTTP)
            timeout: Timeout for HTTP requests in seconds
            retry_count: Number of retries for idempotent HTTP reads
            verify_ssl: Whether to verify SSL certificates
            query_gas_limit: Gas limit for the client's bookkeeping queries
            logger: Optional logger instance to use for debug/info logging

        Raises:
            ValueError: If the URL doesn't use https (unless it's a loopback
                address or LEDGER_INSECURE_NODE=1)
        """
        self.node_url = validate_node_url(node_url)
        self.query_gas_limit = query_gas_limit
        self.logger = logger or logging.getLogger(__name__)

        self.transport = transport or get_transport("http", timeout=timeout, retry_count=retry_count)
        self.transport.initialize(self.node_url, verify_ssl=verify_ssl)

        self._cache_lock = threading.RLock()
        self._takamaka_code: Optional[TransactionReference] = None
        self._manifest: Optional[StorageReference] = None
        self._gamete: Optional[StorageReference] = None
        self._accounts_ledger: Optional[StorageReference] = None
        self._gas_station: Optional[StorageReference] = None
        self._chain_id: Optional[str] = None

        self.logger.info(f"Connected to node at {self.node_url}")

    @classmethod
    def from_config(cls, config, transport: Optional[NodeTransport] = None, **kwargs) -> "NodeClient":
        """Create a client from a ``NodeConfig``."""
        return cls(
            node_url=config.url,
            transport=transport,
            timeout=config.timeout,
            retry_count=config.retry_count,
            verify_ssl=config.verify_ssl,
            query_gas_limit=config.query_gas_limit,
            **kwargs
        )

    def __enter__(self) -> "NodeClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self.transport.close()

    # Stable references

    @property
    def takamaka_code(self) -> TransactionReference:
        """Reference to the transaction that installed the node's code base."""
        with self._cache_lock:
            if self._takamaka_code is None:
                self._takamaka_code = TransactionReference(self.transport.get_takamaka_code())
            return self._takamaka_code

    @property
    def manifest(self) -> StorageReference:
        with self._cache_lock:
            if self._manifest is None:
                self._manifest = StorageReference(self.transport.get_manifest())
            return self._manifest

    @property
    def gamete(self) -> StorageReference:
        """The node's privileged bootstrap account."""
        with self._cache_lock:
            if self._gamete is None:
                self._gamete = self._manifest_reference(GET_GAMETE)
            return self._gamete

    @property
    def accounts_ledger(self) -> StorageReference:
        with self._cache_lock:
            if self._accounts_ledger is None:
                self._accounts_ledger = self._manifest_reference(GET_ACCOUNTS_LEDGER)
            return self._accounts_ledger

    @property
    def gas_station(self) -> StorageReference:
        with self._cache_lock:
            if self._gas_station is None:
                self._gas_station = self._manifest_reference(GET_GAS_STATION)
            return self._gas_station

    def _manifest_reference(self, signature: CallSignature) -> StorageReference:
        manifest = self.manifest
        return self._query_required(manifest, signature, manifest)

    def _query_required(
        self,
        caller: StorageReference,
        signature: CallSignature,
        receiver: StorageReference,
        *args: StorageValue
    ) -> StorageValue:
        request = build_view_method_call(
            caller, self.query_gas_limit, self.takamaka_code, signature, receiver, args
        )
        result = self.query(request)
        if result is None:
            raise ExecutionRevertedError(f"{signature} returned null")
        return result

    # Fresh parameters

    def get_chain_id(self) -> str:
        """
        Chain id of the node, binding signed requests to it.

        Returns:
            Chain id string
        """
        with self._cache_lock:
            if self._chain_id is None:
                manifest = self.manifest
                self._chain_id = self._query_required(manifest, GET_CHAIN_ID, manifest).value
            return self._chain_id

    def get_nonce(self, account: StorageReference) -> int:
        """
        Current nonce of ``account``, to be used by its next signed request.

        Always queried; a cached nonce goes stale after each submission.
        """
        return self._query_required(account, NONCE, account).value

    def get_gas_price(self) -> int:
        """Current gas price of the node's gas station, 1 if the station ignores gas price."""
        station = self.gas_station
        gamete = self.gamete
        if self._query_required(gamete, IGNORES_GAS_PRICE, station).value:
            return 1
        return self._query_required(gamete, GET_GAS_PRICE, station).value

    def get_safe_gas_price(self) -> int:
        """
        Gas price to put in a request so that it is still accepted if the
        price grows a little before execution: twice the current price, so 2
        when the station ignores gas price.
        """
        return SAFE_GAS_PRICE_MULTIPLIER * self.get_gas_price()

    # Submission

    def submit(self, request: TransactionRequest) -> Optional[StorageValue]:
        """
        Submit a request and decode its result.

        Args:
            request: Signed constructor or instance method call, or a view call

        Returns:
            The typed result: a reference for constructors, None for void
            methods or a null result

        Raises:
            SigningError: If a state-mutating request is not signed
            RejectedError: If the node refuses the request
            ExecutionRevertedError: If the called code fails
            NodeConnectionError: On transport failure or timeout
            DecodeError: If the result does not match the declared return type
        """
        if isinstance(request, ViewMethodCallTransactionRequest):
            return self.query(request)

        if request.signature is None:
            raise SigningError("State-mutating requests must be signed before submission")
        model = request_to_model(request)
        self.logger.debug(
            f"Submitting {request.call_signature} from {request.caller} "
            f"(nonce {request.nonce}, request {hashlib.sha256(signed_bytes(request)).hexdigest()[:16]})"
        )

        if isinstance(request, ConstructorCallTransactionRequest):
            result = self.transport.add_constructor_call(model)
            return decode_optional_value(result, ValueKind.REFERENCE)
        if isinstance(request, InstanceMethodCallTransactionRequest):
            result = self.transport.add_instance_method_call(model)
            return self._decode_result(request.method, result)
        raise TypeError(f"Not a transaction request: {type(request).__name__}")

    def query(self, request: ViewMethodCallTransactionRequest) -> Optional[StorageValue]:
        """
        Run a view call; nothing is signed and no nonce is consumed.

        Raises:
            TypeError: If ``request`` is not a view request
        """
        if not isinstance(request, ViewMethodCallTransactionRequest):
            raise TypeError("Only view requests can be run as queries")
        self.logger.debug(
            f"Running {request.method} on {request.receiver} "
            f"(request {hashlib.sha256(unsigned_bytes(request)).hexdigest()[:16]})"
        )
        result = self.transport.run_instance_method_call(request_to_model(request))
        return self._decode_result(request.method, result)

    @staticmethod
    def _decode_result(signature: CallSignature, result) -> Optional[StorageValue]:
        if signature.is_void:
            return None
        return decode_optional_value(result, kind_for_type(signature.return_type))
