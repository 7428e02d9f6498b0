"""Azure DevOps REST API utilities.

This module provides the shared pieces every Azure DevOps tool goes through:
credential resolution, Basic-Auth header construction, URL building and a
small HTTP client that issues one authenticated request per call.
"""

import base64
import json
import logging
from typing import Dict, Any, Optional, Callable
from urllib.parse import quote

import aiohttp

# Import configuration manager
from config import env_manager

from .errors import MissingCredentialError, UpstreamError

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
JSON_PATCH_CONTENT_TYPE = "application/json-patch+json"

# Methods whose failures carry the upstream body text
WRITE_METHODS = frozenset({"POST", "PUT", "PATCH"})

CredentialProvider = Callable[[], str]


def resolve_credential() -> str:
    """Resolve the personal access token from the configured environment.

    Returns:
        The PAT secret

    Raises:
        MissingCredentialError: If the token is absent or empty
    """
    pat = env_manager.ensure_loaded().get_azdo_parameter("pat")
    if not pat:
        raise MissingCredentialError()
    return pat


def build_auth_header(secret: str) -> str:
    """Build the Basic-Auth header value for a PAT (empty username)."""
    token = base64.b64encode(f":{secret}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def get_auth_headers(secret: str, content_type: str = JSON_CONTENT_TYPE) -> Dict[str, str]:
    """Get authentication headers for REST API calls.

    Args:
        secret: The PAT secret
        content_type: Content-Type header value (defaults to application/json for GET operations)

    Returns:
        Dictionary with authorization headers
    """
    return {
        "Authorization": build_auth_header(secret),
        "Content-Type": content_type,
        "Accept": JSON_CONTENT_TYPE,
    }


def _base_url(organization: str) -> str:
    if organization.startswith(("http://", "https://")):
        return organization.rstrip("/")
    return f"https://dev.azure.com/{organization}"


def build_api_url(organization: str, project: str, endpoint: str) -> str:
    """Build complete Azure DevOps REST API URL.

    This helper handles organization parameters that may be supplied either
    as a plain organization name (e.g. ``mycompany``) or a full URL
    (e.g. ``https://dev.azure.com/mycompany`` or a custom host).

    Args:
        organization: Azure DevOps organization name or URL
        project: Azure DevOps project name, quoted into the path
        endpoint: API endpoint path without leading slash

    Returns:
        Complete REST API URL
    """
    return f"{_base_url(organization)}/{quote(project, safe='')}/_apis/{endpoint}"


def build_web_url(organization: str, project: str, path: str) -> str:
    """Build a browser URL below a project, e.g. ``_git/<repo>/pullrequest/<id>``."""
    return f"{_base_url(organization)}/{quote(project, safe='')}/{path}"


class AzureDevOpsClient:
    """HTTP client for the Azure DevOps REST API.

    One client lives for the duration of a single tool invocation. Each call
    to :meth:`request` is exactly one HTTP exchange: no retries, no rate
    limiting, no caching.

    Example:
        async with AzureDevOpsClient(pat, "myorg", "myproject") as client:
            page = await client.request("GET", "git/repositories")
    """

    def __init__(
        self,
        credential: str,
        organization: str,
        project: str,
        api_version: str = "7.0",
        request_timeout: Optional[float] = None,
    ):
        """Initialize the client.

        Args:
            credential: PAT used for Basic auth
            organization: Azure DevOps organization name or URL
            project: Default project for requests
            api_version: Value of the api-version query parameter
            request_timeout: Total request timeout in seconds, None for transport defaults
        """
        self.credential = credential
        self.organization = organization
        self.project = project
        self.api_version = api_version
        self.request_timeout = request_timeout

        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "AzureDevOpsClient":
        session_kwargs: Dict[str, Any] = {"raise_for_status": False}
        if self.request_timeout is not None:
            session_kwargs["timeout"] = aiohttp.ClientTimeout(total=float(self.request_timeout))

        self._session = aiohttp.ClientSession(**session_kwargs)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def request(
        self,
        method: str,
        path: str,
        query: Optional[Dict[str, Any]] = None,
        body: Optional[Any] = None,
        project: Optional[str] = None,
    ) -> Any:
        """Issue one authenticated request and return the parsed JSON body.

        Args:
            method: HTTP method (GET, POST, PATCH, ...)
            path: Endpoint below ``_apis/``, already quoted
            query: Extra query parameters; api-version is always appended
            body: JSON-serializable body, sent as a JSON-patch document
            project: Project override for this request

        Returns:
            The response body parsed as JSON, unmodified

        Raises:
            UpstreamError: On a non-2xx status or an unparseable body
        """
        if self._session is None:
            raise RuntimeError("AzureDevOpsClient session not initialized. Use 'async with' context manager.")

        method = method.upper()
        is_write = method in WRITE_METHODS

        url = build_api_url(self.organization, project or self.project, path)
        params = dict(query or {})
        params["api-version"] = self.api_version

        headers = get_auth_headers(
            self.credential,
            content_type=JSON_PATCH_CONTENT_TYPE if is_write else JSON_CONTENT_TYPE,
        )

        request_kwargs: Dict[str, Any] = {"headers": headers, "params": params}
        if body is not None:
            request_kwargs["data"] = json.dumps(body)

        logger.debug(f"{method} {url} params={params}")

        async with self._session.request(method, url, **request_kwargs) as response:
            status = response.status
            reason = response.reason or ""
            logger.debug(f"{method} {url} -> {status}")

            if not 200 <= status < 300:
                body_text = None
                if is_write:
                    body_text = (await response.read()).decode("utf-8", errors="replace")
                raise UpstreamError(status, reason, body_text=body_text, url=url)

            raw_body = await response.read()

        # UnicodeDecodeError and JSONDecodeError are both ValueErrors
        try:
            return json.loads(raw_body.decode("utf-8"))
        except ValueError as e:
            logger.error(f"Failed to parse successful response as JSON: {e}")
            raise UpstreamError(
                status, reason, url=url, message=f"Failed to parse response: {e}"
            ) from e
