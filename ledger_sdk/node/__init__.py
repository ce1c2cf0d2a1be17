"""
Node module for the ledger SDK.

This module provides the client-side contract with a remote ledger node:
transports (HTTP/JSON or an in-memory stub node), the faults a node can
report, and the ``NodeClient`` capability interface built on top of them.
"""
from .client import NodeClient, SAFE_GAS_PRICE_MULTIPLIER
from .exceptions import (
    ExecutionRevertedError, FaultKind, NodeConnectionError, NodeError,
    NodeTimeoutError, RejectReason, RejectedError
)
from .transport import NodeTransport, get_transport

__all__ = [
    'NodeClient',
    'NodeTransport',
    'get_transport',
    'SAFE_GAS_PRICE_MULTIPLIER',
    'NodeError',
    'RejectedError',
    'ExecutionRevertedError',
    'NodeConnectionError',
    'NodeTimeoutError',
    'FaultKind',
    'RejectReason',
]
