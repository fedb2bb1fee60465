"""
Remote Build Client - Submits BuildRequests to the compile service.

Each call to submit() performs exactly one POST to ``<endpoint>/api/build`` and
parses the multi-task response into a BuildResult. There is no retry and no
state shared between calls: a fresh httpx.Client is opened per request, so the
client can be used from many worker threads at once.

Usage:
    >>> client = RemoteBuildClient(endpoint="https://compile.example.net")
    >>> result = client.submit(request)
    >>> result.success
    True
"""

import logging
from typing import Any, Optional

import httpx

from .config import DEFAULT_CONNECT_TIMEOUT, DEFAULT_TIMEOUT, ENV_COMPILE_HOST, BuildConfig
from .errors import ConfigurationError, TransportError
from .models import BuildRequest, BuildResult, Task

logger = logging.getLogger(__name__)

BUILD_PATH = "/api/build"


def build_url(endpoint: str) -> str:
    """Join the service base URL and the build path."""
    return f"{endpoint.rstrip('/')}{BUILD_PATH}"


def parse_build_result(data: Any) -> BuildResult:
    """Parse a decoded JSON response body into a BuildResult.

    ``success`` flags are compared with ``is True``; any other value (including
    ``"true"`` or ``1``) counts as failure. ``output`` is discarded unless the
    build succeeded.

    Lenient fields, defaulted when absent or null: ``success`` (False),
    ``message`` (""), task ``console`` (""), task ``success`` (False).

    Raises:
        TransportError: If the body is not an object, ``tasks`` is missing or
            not a list, a task is not an object with a string ``name``, or a
            successful build carries no ``output``
    """
    if not isinstance(data, dict):
        raise TransportError(f"Malformed build response: expected a JSON object, got {type(data).__name__}")

    success = data.get("success") is True

    message = data.get("message")
    if message is None:
        message = ""
    elif not isinstance(message, str):
        message = str(message)

    raw_tasks = data.get("tasks")
    if not isinstance(raw_tasks, list):
        raise TransportError("Malformed build response: 'tasks' must be a list")
    tasks = tuple(_parse_task(raw, i) for i, raw in enumerate(raw_tasks))

    output = ""
    if success:
        output = data.get("output")
        if not isinstance(output, str) or not output:
            raise TransportError("Malformed build response: successful build has no 'output'")

    return BuildResult(success=success, message=message, output=output, tasks=tasks)


def _parse_task(raw: Any, index: int) -> Task:
    if not isinstance(raw, dict):
        raise TransportError(f"Malformed build response: task {index} is not an object")
    name = raw.get("name")
    if not isinstance(name, str):
        raise TransportError(f"Malformed build response: task {index} has no 'name'")
    console = raw.get("console")
    if console is None:
        console = ""
    elif not isinstance(console, str):
        console = str(console)
    return Task(name=name, console=console, success=raw.get("success") is True)


class RemoteBuildClient:
    """Client for the remote compile service.

    Args:
        endpoint: Base URL of the compile service (None if not configured)
        timeout: Total request timeout in seconds
        connect_timeout: Connection timeout in seconds
    """

    def __init__(
        self,
        endpoint: Optional[str],
        timeout: float = DEFAULT_TIMEOUT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
    ):
        self.endpoint = endpoint
        self.timeout = timeout
        self.connect_timeout = connect_timeout

    @classmethod
    def from_config(cls, config: BuildConfig) -> "RemoteBuildClient":
        return cls(endpoint=config.endpoint, timeout=config.timeout, connect_timeout=config.connect_timeout)

    def submit(self, request: BuildRequest) -> BuildResult:
        """Send one BuildRequest and parse the response.

        Args:
            request: The build request to send

        Returns:
            Parsed BuildResult (which may report a failed build)

        Raises:
            ConfigurationError: If no endpoint is configured or it is not a valid URL
                (raised before any network call)
            TransportError: On connection failure, timeout, HTTP error status, or malformed body
        """
        if not self.endpoint or not self.endpoint.strip():
            raise ConfigurationError(f"Environment variable {ENV_COMPILE_HOST} is not set")

        url = build_url(self.endpoint.strip())
        logger.debug(f"POST {url} ({request.unit.name}, {len(request.headers)} header(s))")

        try:
            with httpx.Client(timeout=httpx.Timeout(self.timeout, connect=self.connect_timeout)) as client:
                response = client.post(
                    url,
                    json=request.to_dict(),
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.InvalidURL as e:
            raise ConfigurationError(f"{ENV_COMPILE_HOST} is not a valid URL: {self.endpoint!r} ({e})") from e
        except httpx.HTTPStatusError as e:
            raise TransportError(f"Compile service returned HTTP {e.response.status_code} for {url}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Error sending build request to {url}: {e}") from e
        except ValueError as e:
            raise TransportError(f"Compile service returned a non-JSON body: {e}") from e

        result = parse_build_result(data)
        logger.debug(f"{request.unit.name}: success={result.success}, {len(result.tasks)} task(s)")
        return result
