"""
HTTP/JSON transport for the remote node.
"""
import logging
from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..models import (
    ConstructorCallRequestModel, ErrorModel, InstanceMethodCallRequestModel,
    StorageValueModel, ViewMethodCallRequestModel
)
from ._rate_limited_log import rate_limited_log
from .exceptions import (
    ExecutionRevertedError, FaultKind, NodeConnectionError, NodeError,
    NodeTimeoutError, RejectReason, RejectedError
)
from .transport import NodeTransport

logger = logging.getLogger(__name__)


class HttpTransport(NodeTransport):
    """
    Talks to the node's REST endpoints.

    Only idempotent GETs are retried by the session; POSTs are sent once,
    since resubmitting a signed request would reuse its nonce.
    """

    TAKAMAKA_CODE_ENDPOINT = "/get/takamakaCode"
    MANIFEST_ENDPOINT = "/get/manifest"
    ADD_CONSTRUCTOR_CALL_ENDPOINT = "/add/constructorCallTransaction"
    ADD_INSTANCE_METHOD_CALL_ENDPOINT = "/add/instanceMethodCallTransaction"
    RUN_INSTANCE_METHOD_CALL_ENDPOINT = "/run/instanceMethodCallTransaction"

    def __init__(self, timeout: int = 30, retry_count: int = 3):
        self.timeout = timeout
        self.retry_count = retry_count
        self.node_url: Optional[str] = None
        self.session: Optional[requests.Session] = None

    def initialize(self, node_url: str, verify_ssl: bool = True) -> None:
        self.node_url = node_url.rstrip('/')
        self.session = requests.Session()
        self.session.verify = verify_ssl
        retries = Retry(
            total=self.retry_count,
            backoff_factor=0.5,
            status_forcelist=[502, 503, 504],
            allowed_methods=["GET"],
            raise_on_status=False
        )
        adapter = HTTPAdapter(max_retries=retries)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)
        logger.debug(f"Initialized HTTP transport for {self.node_url}")

    def get_takamaka_code(self) -> str:
        return self._reference_token(self._request("GET", self.TAKAMAKA_CODE_ENDPOINT))

    def get_manifest(self) -> str:
        return self._reference_token(self._request("GET", self.MANIFEST_ENDPOINT))

    def add_constructor_call(self, request: ConstructorCallRequestModel) -> Optional[StorageValueModel]:
        return self._value(self._request("POST", self.ADD_CONSTRUCTOR_CALL_ENDPOINT, request))

    def add_instance_method_call(self, request: InstanceMethodCallRequestModel) -> Optional[StorageValueModel]:
        return self._value(self._request("POST", self.ADD_INSTANCE_METHOD_CALL_ENDPOINT, request))

    def run_instance_method_call(self, request: ViewMethodCallRequestModel) -> Optional[StorageValueModel]:
        return self._value(self._request("POST", self.RUN_INSTANCE_METHOD_CALL_ENDPOINT, request))

    def close(self) -> None:
        if self.session is not None:
            self.session.close()
            self.session = None

    def _request(self, method: str, endpoint: str, body=None) -> Any:
        if self.session is None:
            raise NodeConnectionError("HTTP transport not initialized")

        url = f"{self.node_url}{endpoint}"
        payload = body.model_dump(by_alias=True) if body is not None else None
        try:
            response = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.Timeout as e:
            rate_limited_log(f"Timeout contacting node at {self.node_url}", logger_instance=logger)
            raise NodeTimeoutError(f"Node request to {endpoint} timed out: {e}") from e
        except requests.RequestException as e:
            rate_limited_log(f"Cannot reach node at {self.node_url}: {e}", logger_instance=logger)
            raise NodeConnectionError(f"Node request to {endpoint} failed: {e}") from e

        if response.status_code >= 400:
            raise self._fault(response)

        content_type = response.headers.get('Content-Type', '')
        if 'application/json' not in content_type:
            logger.warning(f"Unexpected Content-Type: {content_type} (expected application/json)")
        try:
            return response.json()
        except ValueError as e:
            raise NodeConnectionError(f"Invalid JSON response from node: {e}") from e

    def _fault(self, response: requests.Response) -> NodeError:
        try:
            error = ErrorModel.model_validate(response.json())
        except ValueError:
            logger.error(f"Node answered {response.status_code} without a fault descriptor")
            return NodeConnectionError(f"Node answered HTTP {response.status_code}: {response.text[:200]}")

        if error.kind == FaultKind.REJECTED.value:
            try:
                reason = RejectReason(error.reason)
            except ValueError:
                reason = RejectReason.UNKNOWN
            return RejectedError(error.message, reason)
        if error.kind == FaultKind.EXECUTION_REVERTED.value:
            return ExecutionRevertedError(error.message, error.exception_class_name)
        return NodeConnectionError(error.message)

    @staticmethod
    def _value(data: Any) -> Optional[StorageValueModel]:
        if data is None:
            return None
        try:
            return StorageValueModel.model_validate(data)
        except ValueError as e:
            raise NodeConnectionError(f"Malformed value from node: {e}") from e

    @staticmethod
    def _reference_token(data: Any) -> str:
        # The node answers either a bare token or {"token": ...}
        if isinstance(data, str) and data:
            return data
        if isinstance(data, dict) and isinstance(data.get("token"), str) and data["token"]:
            return data["token"]
        raise NodeConnectionError(f"Malformed reference from node: {data!r}")
