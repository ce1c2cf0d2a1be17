"""
Ledger SDK - build, sign and submit transaction requests to a remote ledger node.
"""
from .accounts import AccountResolver
from .codec import decode_value, encode_value, marshal_value, unmarshal_value
from .config import NodeConfig, load_key_pair_from_env, validate_node_url
from .exceptions import (
    AccountNotFound, ArgumentTypeMismatch, DecodeError, DecodeMismatch,
    LedgerSDKError, SigningError
)
from .helpers import TransactionHelper
from .keys import (
    KeyPair, decode_private_key, decode_public_key, encode_private_key,
    encode_public_key, encode_public_key_bytes, generate_key_pair,
    key_pair_from_encoded, public_key_lookup_string
)
from .node import (
    ExecutionRevertedError, NodeClient, NodeConnectionError, NodeError,
    NodeTimeoutError, RejectReason, RejectedError
)
from .signer import LocalSigner, RequestSigner, get_algorithm
from .transactions import (
    ConstructorCallTransactionRequest, InstanceMethodCallTransactionRequest,
    ViewMethodCallTransactionRequest, build_constructor_call,
    build_instance_method_call, build_view_method_call, signed_bytes,
    unsigned_bytes
)
from .types import (
    BasicType, CallSignature, ClassType, constructor_signature,
    method_signature, void_method_signature
)
from .values import (
    BigIntegerValue, BooleanValue, IntValue, StorageReference, StringValue,
    TransactionReference
)
from .version import __version__

__all__ = [
    # Clients
    "NodeClient",
    "AccountResolver",
    "TransactionHelper",
    "NodeConfig",
    "load_key_pair_from_env",
    "validate_node_url",
    # Keys and signing
    "KeyPair",
    "decode_private_key",
    "decode_public_key",
    "encode_private_key",
    "encode_public_key",
    "encode_public_key_bytes",
    "generate_key_pair",
    "key_pair_from_encoded",
    "public_key_lookup_string",
    "RequestSigner",
    "LocalSigner",
    "get_algorithm",
    # Requests
    "ConstructorCallTransactionRequest",
    "InstanceMethodCallTransactionRequest",
    "ViewMethodCallTransactionRequest",
    "build_constructor_call",
    "build_instance_method_call",
    "build_view_method_call",
    "unsigned_bytes",
    "signed_bytes",
    # Types and values
    "BasicType",
    "ClassType",
    "CallSignature",
    "constructor_signature",
    "method_signature",
    "void_method_signature",
    "BooleanValue",
    "IntValue",
    "BigIntegerValue",
    "StringValue",
    "StorageReference",
    "TransactionReference",
    "encode_value",
    "decode_value",
    "marshal_value",
    "unmarshal_value",
    # Errors
    "LedgerSDKError",
    "DecodeError",
    "DecodeMismatch",
    "ArgumentTypeMismatch",
    "SigningError",
    "AccountNotFound",
    "NodeError",
    "RejectedError",
    "RejectReason",
    "ExecutionRevertedError",
    "NodeConnectionError",
    "NodeTimeoutError",
    "__version__",
]
