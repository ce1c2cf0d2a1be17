"""
Exceptions for the ledger SDK.

Local failures (decoding, argument validation, signing) are raised before any
network interaction. Faults reported by the remote node live in
``ledger_sdk.node.exceptions``.
"""


class LedgerSDKError(Exception):
    """Base exception for all ledger SDK errors."""
    pass


class DecodeError(LedgerSDKError):
    """Raised when key material or a value has a malformed encoding."""
    pass


class DecodeMismatch(DecodeError):
    """Raised when a wire value carries a different tag than expected."""

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected a {expected} value but got {actual}")


class ArgumentTypeMismatch(LedgerSDKError):
    """Raised when call arguments do not match the declared call signature."""
    pass


class SigningError(LedgerSDKError):
    """Raised when a request cannot be signed with the given key pair."""
    pass


class AccountNotFound(LedgerSDKError):
    """Raised when the accounts ledger holds no account for a public key."""

    def __init__(self, public_key: str):
        self.public_key = public_key
        super().__init__(f"No account found for public key {public_key}")
