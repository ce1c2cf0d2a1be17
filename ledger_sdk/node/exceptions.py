"""
Faults reported by, or on the way to, the remote node.
"""
from enum import Enum
from typing import Optional

from ..exceptions import LedgerSDKError


class FaultKind(str, Enum):
    """Kind field of a node fault descriptor."""
    REJECTED = "rejected"
    EXECUTION_REVERTED = "execution_reverted"
    TRANSPORT = "transport"


class RejectReason(str, Enum):
    """
    Why the node refused a request before running it.

    A caller may retry STALE_NONCE and INSUFFICIENT_GAS with refreshed
    parameters; the SDK itself never does.
    """
    STALE_NONCE = "stale_nonce"
    BAD_SIGNATURE = "bad_signature"
    INSUFFICIENT_GAS = "insufficient_gas"
    WRONG_CHAIN_ID = "wrong_chain_id"
    UNKNOWN_CALLER = "unknown_caller"
    UNKNOWN = "unknown"


class NodeError(LedgerSDKError):
    """Base exception for node faults."""
    kind: FaultKind = FaultKind.TRANSPORT


class RejectedError(NodeError):
    """Raised when the node rejects a request during validation."""
    kind = FaultKind.REJECTED

    def __init__(self, message: str, reason: RejectReason = RejectReason.UNKNOWN):
        self.reason = reason
        super().__init__(message)


class ExecutionRevertedError(NodeError):
    """Raised when the target code threw or failed."""
    kind = FaultKind.EXECUTION_REVERTED

    def __init__(self, message: str, exception_class_name: Optional[str] = None):
        self.exception_class_name = exception_class_name
        super().__init__(message)


class NodeConnectionError(NodeError):
    """Raised when the node cannot be reached or answers garbage."""
    pass


class NodeTimeoutError(NodeConnectionError):
    """Raised when a node round trip times out."""
    pass
