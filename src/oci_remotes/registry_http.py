"""
Registry HTTP Client for OCI Distribution API.

Every operation declares the statuses it accepts; anything else is turned
into an UnexpectedStatusError from the response. Requests are sent streamed
so that error bodies go through the bounded read and never get buffered whole.
"""
from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import httpx
from pydantic import ValidationError
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from . import __version__
from .errors import OciError, OciTransportError, new_unexpected_status_error
from .media_types import ACCEPTED_MANIFEST_TYPES, DIGEST_HEADER
from .models import TagList
from .settings import Settings

logger = logging.getLogger(__name__)

# Token lifetime when the token server omits expires_in (distribution token spec)
DEFAULT_TOKEN_EXPIRY_S = 60


@dataclass(frozen=True)
class ManifestResult:
    """Manifest fetched from a registry."""
    digest: Optional[str]
    media_type: Optional[str]
    content: bytes


class RegistryHTTP:
    """
    HTTP client for OCI Distribution API operations.

    Handles the Bearer token challenge flow transparently and retries
    transport timeouts. Registry answers with an unexpected status raise
    UnexpectedStatusError.
    """

    def __init__(self, settings: Settings, *, transport: Optional[httpx.BaseTransport] = None,
                 log: Optional[logging.Logger] = None):
        """
        Initialize registry HTTP client.

        Args:
            settings: Registry location, credentials and limits
            transport: Custom httpx transport (tests use httpx.MockTransport)
            log: Diagnostic sink, defaults to this module's logger
        """
        self.settings = settings
        self.log = log or logger

        self.client = httpx.Client(
            base_url=settings.base_url,
            timeout=httpx.Timeout(settings.http_timeout_s, connect=5.0, pool=5.0),
            follow_redirects=True,
            verify=not settings.registry_insecure,
            headers={"User-Agent": f"oci-remotes/{__version__}"},
            transport=transport,
        )

        # Token cache: {service:scope: (token, expiry_timestamp)}
        self._token_cache: Dict[str, Tuple[str, float]] = {}

        self.log.debug(f"Registry client for {settings.base_url}, timeout: {settings.http_timeout_s}s, "
                       f"insecure: {settings.registry_insecure}")

    def ping(self) -> None:
        """
        Check that the registry speaks the v2 API.

        Raises:
            UnexpectedStatusError: If /v2/ does not answer 200
            OciTransportError: On network failure
        """
        self._call("GET", "/v2/", expected=(200,))

    def head_manifest(self, repo: str, ref: str) -> Optional[str]:
        """
        Get manifest digest without downloading content.

        Returns:
            Docker-Content-Digest header value, None if the registry omits it
        """
        response = self._call("HEAD", f"/v2/{repo}/manifests/{ref}", expected=(200,),
                              headers={"Accept": ", ".join(ACCEPTED_MANIFEST_TYPES)})
        return response.headers.get(DIGEST_HEADER)

    def get_manifest(self, repo: str, ref: str) -> ManifestResult:
        """
        Fetch a manifest by tag or digest.

        Args:
            repo: Repository path (e.g. "library/alpine")
            ref: Tag or digest

        Returns:
            ManifestResult with digest, media type and raw content

        Raises:
            UnexpectedStatusError: If the registry does not answer 200
            OciTransportError: On network failure
        """
        response = self._call("GET", f"/v2/{repo}/manifests/{ref}", expected=(200,),
                              headers={"Accept": ", ".join(ACCEPTED_MANIFEST_TYPES)})
        media_type = response.headers.get("Content-Type")
        if media_type:
            media_type = media_type.split(";", 1)[0].strip()
        return ManifestResult(
            digest=response.headers.get(DIGEST_HEADER),
            media_type=media_type,
            content=response.content,
        )

    def get_blob(self, repo: str, digest: str) -> bytes:
        """Fetch blob by digest as raw bytes."""
        return self._call("GET", f"/v2/{repo}/blobs/{digest}", expected=(200,)).content

    def list_tags(self, repo: str) -> List[str]:
        """
        List tags of a repository.

        Raises:
            UnexpectedStatusError: If the registry does not answer 200
            OciError: If the tag list is not valid JSON
        """
        response = self._call("GET", f"/v2/{repo}/tags/list", expected=(200,))
        try:
            return TagList.model_validate_json(response.content).tags
        except ValidationError as e:
            raise OciError(f"Invalid tag list for {repo}: {e}") from e

    def _call(self, method: str, path: str, expected: Tuple[int, ...],
              headers: Optional[dict] = None) -> httpx.Response:
        """
        Send a request and return the fully read response.

        Raises:
            UnexpectedStatusError: If the final status is not in ``expected``
            OciTransportError: If the request or body read fails
        """
        try:
            response = self._send(method, path, headers=headers)
        except httpx.RequestError as e:
            raise OciTransportError(f"Network error on {method} {path}: {e}") from e

        try:
            if response.status_code not in expected:
                raise new_unexpected_status_error(response, log=self.log,
                                                  limit=self.settings.error_body_limit)
            response.read()
        except httpx.RequestError as e:
            raise OciTransportError(f"Network error reading {method} {path}: {e}") from e
        finally:
            response.close()
        return response

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(httpx.TimeoutException),
        reraise=True,
    )
    def _send(self, method: str, path: str, headers: Optional[dict] = None) -> httpx.Response:
        """
        Send a streamed request with transparent Bearer token auth flow.

        Handles 401 responses by:
        1. Parsing WWW-Authenticate header for Bearer realm/service/scope
        2. Exchanging configured credentials (or none) for a token
        3. Retrying the original request once with an Authorization header
        """
        request_headers = dict(headers or {})
        response = self.client.send(self.client.build_request(method, path, headers=request_headers),
                                    stream=True)

        if response.status_code == 401:
            challenge = response.headers.get("WWW-Authenticate", "")
            if challenge.startswith("Bearer "):
                try:
                    token = self._bearer_token(challenge)
                except Exception:
                    response.close()
                    raise
                if token:
                    response.close()
                    request_headers["Authorization"] = f"Bearer {token}"
                    response = self.client.send(
                        self.client.build_request(method, path, headers=request_headers),
                        stream=True,
                    )
        return response

    def _bearer_token(self, www_authenticate: str) -> Optional[str]:
        """
        Obtain a Bearer token for a WWW-Authenticate challenge.

        Returns:
            Token, or None if the challenge lacks a realm

        Raises:
            UnexpectedStatusError: If the token server does not answer 200
        """
        # Format: Bearer realm="...",service="...",scope="..."
        params = dict(re.findall(r'(\w+)="([^"]*)"', www_authenticate))
        realm = params.get("realm")
        if not realm:
            self.log.debug(f"Bearer challenge without realm: {www_authenticate}")
            return None
        service = params.get("service", "")
        scope = params.get("scope")

        cache_key = f"{service}:{scope or ''}"
        cached = self._token_cache.get(cache_key)
        if cached and time.time() < cached[1] - 5:
            return cached[0]

        query = {"service": service}
        if scope:
            query["scope"] = scope
        auth = None
        if self.settings.registry_user:
            auth = (self.settings.registry_user, self.settings.registry_pass)

        token_response = self.client.get(realm, params=query, auth=auth)
        if token_response.status_code != 200:
            raise new_unexpected_status_error(token_response, log=self.log,
                                              limit=self.settings.error_body_limit)

        try:
            token_data = token_response.json()
        except ValueError as e:
            raise OciError(f"Invalid token response from {realm}: {e}") from e
        if not isinstance(token_data, dict):
            raise OciError(f"Invalid token response from {realm}: expected a JSON object")
        token = token_data.get("token") or token_data.get("access_token")
        if not token:
            self.log.debug(f"Token response from {realm} carried no token")
            return None

        expires_in = token_data.get("expires_in") or DEFAULT_TOKEN_EXPIRY_S
        self._token_cache[cache_key] = (token, time.time() + expires_in)
        return token

    def close(self):
        """Close HTTP client."""
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


__all__ = ["RegistryHTTP", "ManifestResult", "DEFAULT_TOKEN_EXPIRY_S"]
