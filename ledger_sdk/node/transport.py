"""
Transport layer for the remote node.

This module defines the contract every transport follows, so that the node
client works the same over HTTP or against the in-memory stub node used in
tests and development.
"""
import logging
from abc import ABC, abstractmethod
from typing import Optional

from ..models import (
    ConstructorCallRequestModel, InstanceMethodCallRequestModel,
    StorageValueModel, ViewMethodCallRequestModel
)

logger = logging.getLogger(__name__)


class NodeTransport(ABC):
    """
    Abstract base class for node transport implementations.

    Every method that talks to the node either returns the node's answer or
    raises a ``NodeError``; transports never retry a submission.
    """

    @abstractmethod
    def initialize(self, node_url: str, verify_ssl: bool = True) -> None:
        """
        Initialize the transport for the given node.

        Raises:
            NodeConnectionError: If initialization fails
        """
        pass

    @abstractmethod
    def get_takamaka_code(self) -> str:
        """Token of the transaction that installed the node's code base."""
        pass

    @abstractmethod
    def get_manifest(self) -> str:
        """Token of the node's manifest object."""
        pass

    @abstractmethod
    def add_constructor_call(self, request: ConstructorCallRequestModel) -> Optional[StorageValueModel]:
        """
        Run a signed constructor call.

        Returns:
            The reference of the created object

        Raises:
            RejectedError: If the node refuses the request
            ExecutionRevertedError: If the constructor fails
            NodeConnectionError: On transport failure
        """
        pass

    @abstractmethod
    def add_instance_method_call(self, request: InstanceMethodCallRequestModel) -> Optional[StorageValueModel]:
        """
        Run a signed instance method call.

        Returns:
            The method's result, None for void methods
        """
        pass

    @abstractmethod
    def run_instance_method_call(self, request: ViewMethodCallRequestModel) -> Optional[StorageValueModel]:
        """
        Run a view method call, without committing anything.

        Returns:
            The method's result, None for void methods or a null result
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Close any open connections or resources."""
        pass


def get_http_transport(
    timeout: int = 30,
    retry_count: int = 3
) -> NodeTransport:
    """
    Get an HTTP/JSON transport.

    Args:
        timeout: Request timeout in seconds
        retry_count: Retries for idempotent reads

    Returns:
        HTTP transport implementation
    """
    from .http_transport import HttpTransport
    return HttpTransport(timeout=timeout, retry_count=retry_count)


def get_stub_transport(**kwargs) -> NodeTransport:
    """
    Get the in-memory stub node.

    Returns:
        Stub transport implementation
    """
    from .stub_transport import StubTransport
    return StubTransport(**kwargs)


def get_transport(kind: str = "http", **kwargs) -> NodeTransport:
    """
    Get a transport implementation by kind.

    Args:
        kind: "http" or "stub"
        **kwargs: Passed to the transport's constructor

    Returns:
        Transport implementation

    Raises:
        ValueError: If the kind is unknown
    """
    if kind == "http":
        logger.info("Using HTTP transport for the node")
        return get_http_transport(**kwargs)
    if kind == "stub":
        logger.info("Using in-memory stub transport for the node")
        return get_stub_transport(**kwargs)
    raise ValueError(f"Unknown transport kind: {kind}")
