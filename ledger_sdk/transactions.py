"""
Transaction requests and their builder.

A request is one of three variants:

- ``ConstructorCallTransactionRequest``: signed, runs a constructor
- ``InstanceMethodCallTransactionRequest``: signed, runs a method on a receiver
- ``ViewMethodCallTransactionRequest``: unsigned read-only method call; it has
  no nonce, chain id, gas price or signature

Building a request is pure data assembly. Arguments are checked against the
call signature before anything touches the network.
"""
import dataclasses
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Sequence, Tuple, Union

from .codec import decode_value, encode_value, read_value, write_value
from .exceptions import ArgumentTypeMismatch, DecodeError
from .marshalling import MarshallingContext, UnmarshallingContext
from .models import (
    CodeSignatureModel, ConstructorCallRequestModel,
    InstanceMethodCallRequestModel, ViewMethodCallRequestModel
)
from .types import CallSignature, ClassType, type_from_name
from .values import (
    StorageReference, StorageValue, TransactionReference, kind_for_type,
    matches_type
)


class RequestSelector(IntEnum):
    """Leading byte of the canonical encoding of each request variant."""
    CONSTRUCTOR_CALL = 1
    INSTANCE_METHOD_CALL = 2
    VIEW_METHOD_CALL = 3


class SignatureSelector(IntEnum):
    CONSTRUCTOR = 0
    VOID_METHOD = 1
    NON_VOID_METHOD = 2


@dataclass(frozen=True)
class ConstructorCallTransactionRequest:
    caller: StorageReference
    nonce: int
    chain_id: str
    gas_limit: int
    gas_price: int
    classpath: TransactionReference
    constructor: CallSignature
    actuals: Tuple[StorageValue, ...]
    signature: Optional[bytes] = None

    SELECTOR = RequestSelector.CONSTRUCTOR_CALL

    @property
    def call_signature(self) -> CallSignature:
        return self.constructor


@dataclass(frozen=True)
class InstanceMethodCallTransactionRequest:
    caller: StorageReference
    nonce: int
    chain_id: str
    gas_limit: int
    gas_price: int
    classpath: TransactionReference
    method: CallSignature
    receiver: StorageReference
    actuals: Tuple[StorageValue, ...]
    signature: Optional[bytes] = None

    SELECTOR = RequestSelector.INSTANCE_METHOD_CALL

    @property
    def call_signature(self) -> CallSignature:
        return self.method


@dataclass(frozen=True)
class ViewMethodCallTransactionRequest:
    caller: StorageReference
    gas_limit: int
    classpath: TransactionReference
    method: CallSignature
    receiver: StorageReference
    actuals: Tuple[StorageValue, ...]

    SELECTOR = RequestSelector.VIEW_METHOD_CALL

    @property
    def call_signature(self) -> CallSignature:
        return self.method


SignedTransactionRequest = Union[ConstructorCallTransactionRequest, InstanceMethodCallTransactionRequest]
TransactionRequest = Union[
    ConstructorCallTransactionRequest,
    InstanceMethodCallTransactionRequest,
    ViewMethodCallTransactionRequest
]


def is_signed_variant(request: TransactionRequest) -> bool:
    """True for the state-mutating variants, which must carry a signature."""
    return isinstance(request, (ConstructorCallTransactionRequest, InstanceMethodCallTransactionRequest))


def with_signature(request: SignedTransactionRequest, signature: bytes) -> SignedTransactionRequest:
    """Copy of ``request`` carrying ``signature``."""
    if not is_signed_variant(request):
        raise TypeError("View requests cannot carry a signature")
    return dataclasses.replace(request, signature=bytes(signature))


def validate_arguments(signature: CallSignature, args: Sequence[StorageValue]) -> Tuple[StorageValue, ...]:
    """
    Check that ``args`` fit the formal parameters of ``signature``.

    Args:
        signature: Call signature declaring the parameter types
        args: Actual arguments, in order

    Returns:
        The arguments as a tuple

    Raises:
        ArgumentTypeMismatch: On a count or type mismatch
    """
    args = tuple(args)
    formals = signature.parameter_types
    if len(args) != len(formals):
        raise ArgumentTypeMismatch(
            f"{signature} expects {len(formals)} arguments but {len(args)} were supplied"
        )
    for position, (arg, formal) in enumerate(zip(args, formals)):
        if not matches_type(arg, formal):
            raise ArgumentTypeMismatch(
                f"Argument {position} of {signature} must be of type {formal}, "
                f"got {type(arg).__name__}"
            )
    return args


def _check_quantity(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} cannot be negative: {value}")


def _check_method(signature: CallSignature) -> None:
    if signature.is_constructor:
        raise ArgumentTypeMismatch(f"{signature} is a constructor, not a method")


def _check_instance(name: str, value, expected: type) -> None:
    if not isinstance(value, expected):
        raise TypeError(f"{name} must be a {expected.__name__}, got {type(value).__name__}")


def check_call(
    signature: CallSignature,
    args: Sequence[StorageValue],
    constructor: bool = False
) -> Tuple[StorageValue, ...]:
    """
    Check that ``signature`` is a constructor (or a method) and that ``args``
    fit it. Runs no query, so callers can reject a bad call before fetching
    a nonce or gas price for it.

    Raises:
        ArgumentTypeMismatch: On the wrong kind of signature or on a count
            or type mismatch
    """
    if constructor:
        if not signature.is_constructor:
            raise ArgumentTypeMismatch(f"{signature} is not a constructor")
    else:
        _check_method(signature)
    return validate_arguments(signature, args)


def _check_common(caller, classpath, gas_limit: int) -> None:
    _check_instance("caller", caller, StorageReference)
    _check_instance("classpath", classpath, TransactionReference)
    _check_quantity("gas_limit", gas_limit)


def _check_signed(chain_id: str, nonce: int, gas_price: int) -> None:
    _check_instance("chain_id", chain_id, str)
    _check_quantity("nonce", nonce)
    _check_quantity("gas_price", gas_price)


def build_constructor_call(
    caller: StorageReference,
    nonce: int,
    chain_id: str,
    gas_limit: int,
    gas_price: int,
    classpath: TransactionReference,
    signature: CallSignature,
    args: Sequence[StorageValue] = ()
) -> ConstructorCallTransactionRequest:
    """
    Build an unsigned constructor call request.

    Raises:
        ArgumentTypeMismatch: If ``signature`` is not a constructor or the
            arguments do not match it
        ValueError: If nonce or gas parameters are not non-negative integers
        TypeError: If a reference or the chain id has the wrong type
    """
    actuals = check_call(signature, args, constructor=True)
    _check_common(caller, classpath, gas_limit)
    _check_signed(chain_id, nonce, gas_price)
    return ConstructorCallTransactionRequest(
        caller=caller,
        nonce=nonce,
        chain_id=chain_id,
        gas_limit=gas_limit,
        gas_price=gas_price,
        classpath=classpath,
        constructor=signature,
        actuals=actuals
    )


def build_instance_method_call(
    caller: StorageReference,
    nonce: int,
    chain_id: str,
    gas_limit: int,
    gas_price: int,
    classpath: TransactionReference,
    signature: CallSignature,
    receiver: StorageReference,
    args: Sequence[StorageValue] = ()
) -> InstanceMethodCallTransactionRequest:
    """
    Build an unsigned instance method call request.

    Raises:
        ArgumentTypeMismatch: If ``signature`` is a constructor or the
            arguments do not match it
        ValueError: If nonce or gas parameters are not non-negative integers
        TypeError: If a reference or the chain id has the wrong type
    """
    actuals = check_call(signature, args)
    _check_common(caller, classpath, gas_limit)
    _check_signed(chain_id, nonce, gas_price)
    _check_instance("receiver", receiver, StorageReference)
    return InstanceMethodCallTransactionRequest(
        caller=caller,
        nonce=nonce,
        chain_id=chain_id,
        gas_limit=gas_limit,
        gas_price=gas_price,
        classpath=classpath,
        method=signature,
        receiver=receiver,
        actuals=actuals
    )


def build_view_method_call(
    caller: StorageReference,
    gas_limit: int,
    classpath: TransactionReference,
    signature: CallSignature,
    receiver: StorageReference,
    args: Sequence[StorageValue] = ()
) -> ViewMethodCallTransactionRequest:
    """
    Build a view method call request. View calls are never signed and do not
    consume a nonce.

    Raises:
        ArgumentTypeMismatch: If ``signature`` is a constructor or the
            arguments do not match it
        ValueError: If the gas limit is not a non-negative integer
        TypeError: If a reference has the wrong type
    """
    actuals = check_call(signature, args)
    _check_common(caller, classpath, gas_limit)
    _check_instance("receiver", receiver, StorageReference)
    return ViewMethodCallTransactionRequest(
        caller=caller,
        gas_limit=gas_limit,
        classpath=classpath,
        method=signature,
        receiver=receiver,
        actuals=actuals
    )


# Canonical bytes

def _write_signature(context: MarshallingContext, signature: CallSignature) -> None:
    if signature.is_constructor:
        context.write_u8(SignatureSelector.CONSTRUCTOR)
    elif signature.is_void:
        context.write_u8(SignatureSelector.VOID_METHOD)
    else:
        context.write_u8(SignatureSelector.NON_VOID_METHOD)
    context.write_string(str(signature.declaring_type))
    if not signature.is_constructor:
        context.write_string(signature.member_name)
    context.write_u32(len(signature.parameter_types))
    for formal in signature.parameter_types:
        context.write_string(str(formal))
    if signature.return_type is not None:
        context.write_string(str(signature.return_type))


def _read_signature(context: UnmarshallingContext) -> CallSignature:
    selector = context.read_u8()
    try:
        selector = SignatureSelector(selector)
    except ValueError:
        raise DecodeError(f"Unknown signature selector: {selector}")
    try:
        declaring_type = ClassType(context.read_string())
        member_name = None if selector is SignatureSelector.CONSTRUCTOR else context.read_string()
        formals = tuple(type_from_name(context.read_string()) for _ in range(context.read_u32()))
        return_type = None
        if selector is SignatureSelector.NON_VOID_METHOD:
            return_type = type_from_name(context.read_string())
        return CallSignature(declaring_type, formals, member_name, return_type)
    except ValueError as e:
        raise DecodeError(f"Malformed call signature: {e}") from e


def marshal_request(request: TransactionRequest, context: MarshallingContext) -> None:
    """
    Write the canonical encoding of ``request`` without its signature.

    Field order: caller, nonce, chain id, gas limit, gas price, classpath,
    call signature, receiver, actuals. Nonce, chain id and gas price are
    absent for view calls; the receiver is absent for constructor calls.
    """
    signed = is_signed_variant(request)
    context.write_u8(request.SELECTOR)
    context.write_string(request.caller.token)
    if signed:
        context.write_big_integer(request.nonce)
        context.write_string(request.chain_id)
    context.write_big_integer(request.gas_limit)
    if signed:
        context.write_big_integer(request.gas_price)
    context.write_string(request.classpath.token)
    _write_signature(context, request.call_signature)
    if not isinstance(request, ConstructorCallTransactionRequest):
        context.write_string(request.receiver.token)
    context.write_u32(len(request.actuals))
    for actual in request.actuals:
        write_value(context, actual)


def unsigned_bytes(request: TransactionRequest) -> bytes:
    """Canonical bytes of ``request`` excluding any signature; what gets signed."""
    context = MarshallingContext()
    marshal_request(request, context)
    return context.to_bytes()


def signed_bytes(request: SignedTransactionRequest) -> bytes:
    """
    Canonical bytes of a signed request: the unsigned bytes followed by the
    length-prefixed signature.

    Raises:
        ValueError: If the request is a view call or carries no signature
    """
    if not is_signed_variant(request) or request.signature is None:
        raise ValueError("Only signed requests have a signed encoding")
    context = MarshallingContext()
    marshal_request(request, context)
    context.write_sized_bytes(request.signature)
    return context.to_bytes()


def unmarshal_request(data: bytes) -> TransactionRequest:
    """
    Rebuild a request from its canonical bytes, as the node does to verify a
    signature. A signature, if present, must be the last field.

    Raises:
        DecodeError: If the bytes are malformed
    """
    context = UnmarshallingContext(data)
    selector = context.read_u8()
    try:
        selector = RequestSelector(selector)
    except ValueError:
        raise DecodeError(f"Unknown request selector: {selector}")

    signed = selector is not RequestSelector.VIEW_METHOD_CALL
    try:
        caller = StorageReference(context.read_string())
        if signed:
            nonce = context.read_big_integer()
            chain_id = context.read_string()
        gas_limit = context.read_big_integer()
        if signed:
            gas_price = context.read_big_integer()
        classpath = TransactionReference(context.read_string())
        call_signature = _read_signature(context)
        receiver = None
        if selector is not RequestSelector.CONSTRUCTOR_CALL:
            receiver = StorageReference(context.read_string())
        actuals = tuple(
            read_value(context, kind_for_type(formal))
            for formal in _formals_for_count(call_signature, context.read_u32())
        )
    except ValueError as e:
        raise DecodeError(f"Malformed request: {e}") from e

    signature = None
    if signed and not context.exhausted:
        signature = context.read_sized_bytes()
    context.expect_end()

    if selector is RequestSelector.CONSTRUCTOR_CALL:
        return ConstructorCallTransactionRequest(
            caller, nonce, chain_id, gas_limit, gas_price, classpath,
            call_signature, actuals, signature
        )
    if selector is RequestSelector.INSTANCE_METHOD_CALL:
        return InstanceMethodCallTransactionRequest(
            caller, nonce, chain_id, gas_limit, gas_price, classpath,
            call_signature, receiver, actuals, signature
        )
    return ViewMethodCallTransactionRequest(
        caller, gas_limit, classpath, call_signature, receiver, actuals
    )


def _formals_for_count(signature: CallSignature, count: int):
    if count != len(signature.parameter_types):
        raise DecodeError(
            f"{signature} declares {len(signature.parameter_types)} parameters "
            f"but {count} actuals are encoded"
        )
    return signature.parameter_types


# Wire models

def signature_to_model(signature: CallSignature) -> CodeSignatureModel:
    return CodeSignatureModel(
        declaring_type=str(signature.declaring_type),
        member_name=signature.member_name,
        parameter_types=[str(t) for t in signature.parameter_types],
        return_type=str(signature.return_type) if signature.return_type is not None else None
    )


def signature_from_model(model: CodeSignatureModel) -> CallSignature:
    return CallSignature(
        ClassType(model.declaring_type),
        tuple(type_from_name(name) for name in model.parameter_types),
        model.member_name,
        type_from_name(model.return_type) if model.return_type is not None else None
    )


def request_to_model(request: TransactionRequest):
    """
    Wire model of ``request``.

    Raises:
        ValueError: If a state-mutating request carries no signature
    """
    actuals = [encode_value(actual) for actual in request.actuals]
    if isinstance(request, ViewMethodCallTransactionRequest):
        return ViewMethodCallRequestModel(
            caller=request.caller.token,
            gas_limit=str(request.gas_limit),
            classpath=request.classpath.token,
            method=signature_to_model(request.method),
            receiver=request.receiver.token,
            actuals=actuals
        )

    if request.signature is None:
        raise ValueError("State-mutating requests must be signed before submission")
    common = dict(
        caller=request.caller.token,
        nonce=str(request.nonce),
        chain_id=request.chain_id,
        gas_limit=str(request.gas_limit),
        gas_price=str(request.gas_price),
        classpath=request.classpath.token,
        actuals=actuals,
        signature=request.signature.hex()
    )
    if isinstance(request, ConstructorCallTransactionRequest):
        return ConstructorCallRequestModel(constructor=signature_to_model(request.constructor), **common)
    return InstanceMethodCallRequestModel(
        method=signature_to_model(request.method),
        receiver=request.receiver.token,
        **common
    )


def request_from_model(model) -> TransactionRequest:
    """
    Rebuild a request from its wire model.

    Raises:
        DecodeError: If the model holds malformed fields
    """
    try:
        if isinstance(model, ConstructorCallRequestModel):
            signature = signature_from_model(model.constructor)
        else:
            signature = signature_from_model(model.method)
        actuals = tuple(
            decode_value(actual, kind_for_type(formal))
            for actual, formal in zip(model.actuals, signature.parameter_types)
        )
        if len(actuals) != len(model.actuals) or len(actuals) != len(signature.parameter_types):
            raise DecodeError(f"Wrong number of actuals for {signature}")

        caller = StorageReference(model.caller)
        classpath = TransactionReference(model.classpath)
        gas_limit = int(model.gas_limit)
        if isinstance(model, ViewMethodCallRequestModel):
            return ViewMethodCallTransactionRequest(
                caller, gas_limit, classpath, signature,
                StorageReference(model.receiver), actuals
            )

        nonce = int(model.nonce)
        gas_price = int(model.gas_price)
        raw_signature = bytes.fromhex(model.signature)
        if isinstance(model, ConstructorCallRequestModel):
            return ConstructorCallTransactionRequest(
                caller, nonce, model.chain_id, gas_limit, gas_price, classpath,
                signature, actuals, raw_signature
            )
        return InstanceMethodCallTransactionRequest(
            caller, nonce, model.chain_id, gas_limit, gas_price, classpath,
            signature, StorageReference(model.receiver), actuals, raw_signature
        )
    except ValueError as e:
        raise DecodeError(f"Malformed request model: {e}") from e
