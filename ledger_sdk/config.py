"""
Configuration of the node endpoint and of caller identities.

Nothing here has a hardcoded endpoint or key: values come from the caller or
from the environment.
"""
import os
import urllib.parse
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .keys import KeyPair, key_pair_from_encoded
from .signer.algorithms import get_algorithm


LOOPBACK_HOSTS = ("localhost", "127.0.0.1", "::1")


def validate_node_url(url: str) -> str:
    """
    Check that a node URL is well formed and secure.

    Plain http is only accepted for loopback hosts, or anywhere when
    LEDGER_INSECURE_NODE=1 is set for development.

    Returns:
        The URL without trailing slash

    Raises:
        ValueError: If the URL is malformed or insecure
    """
    parsed = urllib.parse.urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise ValueError(f"Invalid node URL '{url}'")
    is_local = parsed.hostname in LOOPBACK_HOSTS
    if parsed.scheme != "https" and not is_local and os.environ.get("LEDGER_INSECURE_NODE") != "1":
        raise ValueError(
            f"Node URL must use HTTPS for security (got: {parsed.scheme}://). "
            "Set LEDGER_INSECURE_NODE=1 to allow HTTP for development."
        )
    return url.rstrip("/")


class NodeConfig(BaseModel):
    """Validated settings for talking to a node"""
    url: str
    timeout: int = Field(30, gt=0)
    retry_count: int = Field(3, ge=0)
    verify_ssl: bool = True
    gas_limit: int = Field(1_000_000, gt=0)
    query_gas_limit: int = Field(100_000, gt=0)
    signature_algorithm: str = "ed25519"

    @field_validator("url")
    @classmethod
    def _validate_url(cls, url: str) -> str:
        return validate_node_url(url)

    @field_validator("signature_algorithm")
    @classmethod
    def _validate_algorithm(cls, name: str) -> str:
        get_algorithm(name)
        return name.lower()

    @classmethod
    def from_env(cls, **overrides) -> "NodeConfig":
        """
        Load the configuration from environment variables.

        Reads LEDGER_NODE_URL (required), LEDGER_NODE_TIMEOUT,
        LEDGER_NODE_RETRIES, LEDGER_NODE_VERIFY_SSL, LEDGER_GAS_LIMIT and
        LEDGER_SIGNATURE_ALGORITHM. Keyword arguments take precedence.

        Raises:
            ValueError: If LEDGER_NODE_URL is missing or a value is invalid
        """
        env = {
            "url": os.environ.get("LEDGER_NODE_URL"),
            "timeout": os.environ.get("LEDGER_NODE_TIMEOUT"),
            "retry_count": os.environ.get("LEDGER_NODE_RETRIES"),
            "verify_ssl": os.environ.get("LEDGER_NODE_VERIFY_SSL"),
            "gas_limit": os.environ.get("LEDGER_GAS_LIMIT"),
            "signature_algorithm": os.environ.get("LEDGER_SIGNATURE_ALGORITHM"),
        }
        values = {k: v for k, v in env.items() if v is not None}
        values.update(overrides)
        if not values.get("url"):
            raise ValueError("LEDGER_NODE_URL environment variable is required")
        return cls(**values)


def load_key_pair_from_env(name: str, environ: Optional[dict] = None) -> KeyPair:
    """
    Load the base58 key pair of identity ``name`` from the environment.

    Reads LEDGER_<NAME>_PRIVATE_KEY and LEDGER_<NAME>_PUBLIC_KEY.

    Raises:
        ValueError: If a variable is missing
        DecodeError: If a key is malformed
    """
    environ = os.environ if environ is None else environ
    prefix = f"LEDGER_{name.upper()}"
    private_key = environ.get(f"{prefix}_PRIVATE_KEY")
    public_key = environ.get(f"{prefix}_PUBLIC_KEY")
    if not private_key or not public_key:
        raise ValueError(f"{prefix}_PRIVATE_KEY and {prefix}_PUBLIC_KEY must both be set")
    return key_pair_from_encoded(private_key, public_key)
