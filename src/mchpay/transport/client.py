"""Synchronous HTTP transport for the gateway's XML API.

``HTTPTransport`` posts a payload as an XML document and decodes the XML
reply into a flat mapping. It knows nothing about signatures: signing and
reply verification belong to :class:`mchpay.client.MchClient`.

Example:
    >>> from mchpay.transport.client import HTTPTransport
    >>>
    >>> with HTTPTransport() as transport:
    ...     reply = transport.post("https://api.mch.weixin.qq.com/pay/orderquery", payload)
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

import httpx

from mchpay.crypto.certs import ClientIdentity
from mchpay.errors import TransportError
from mchpay.models.constants import DEFAULT_TIMEOUT_SECONDS
from mchpay.observability import get_logger
from mchpay.transport.mtls import create_ssl_context
from mchpay.transport.xml import XMLDecodeError, decode_xml, encode_xml
from mchpay.utils.sanitization import sanitize_url

logger = get_logger(__name__)

XML_CONTENT_TYPE = "text/xml; charset=utf-8"


class Transport(Protocol):
    """What MchClient needs from a transport handle."""

    identity: ClientIdentity | None

    def post(
        self, url: str, payload: Mapping[str, str], *, timeout: float | None = None
    ) -> dict[str, str]: ...

    def close(self) -> None: ...


class HTTPTransport:
    """httpx-backed transport posting flat XML payloads.

    Attributes:
        identity: Client identity presented on the TLS handshake, or None
        timeout: Default request timeout in seconds
    """

    def __init__(
        self,
        identity: ClientIdentity | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        verify: bool = True,
        ca_certs: str | Path | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            identity: Client certificate for mutual TLS; None for server-only TLS.
            timeout: Default request timeout in seconds.
            verify: Verify the gateway's TLS certificate.
            ca_certs: Optional CA bundle replacing the system trust store.
            transport: Optional custom httpx transport (e.g. httpx.MockTransport in tests).

        Raises:
            CertificateFormatError: The TLS layer rejects ``identity``.
        """
        self.identity = identity
        self.timeout = timeout
        if transport is not None:
            self._client = httpx.Client(transport=transport, timeout=timeout)
        else:
            ssl_context = create_ssl_context(identity, verify=verify, ca_certs=ca_certs)
            self._client = httpx.Client(verify=ssl_context, timeout=timeout)

    def __enter__(self) -> "HTTPTransport":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def post(
        self, url: str, payload: Mapping[str, str], *, timeout: float | None = None
    ) -> dict[str, str]:
        """POST ``payload`` as XML and return the decoded reply.

        Raises:
            TransportError: Connection failure, timeout, non-2xx status or
                a body that is not a flat XML document.
        """
        safe_url = sanitize_url(url)
        request_timeout: Any = timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT
        if self._client.is_closed:
            raise TransportError(f"Transport to {safe_url} is closed", url=safe_url)
        start_time = time.perf_counter()

        try:
            response = self._client.post(
                url,
                content=encode_xml(payload),
                headers={"Content-Type": XML_CONTENT_TYPE},
                timeout=request_timeout,
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise TransportError(
                f"Request to {safe_url} timed out", url=safe_url, cause=e
            ) from e
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"HTTP status {e.response.status_code} from {safe_url}",
                url=safe_url,
                cause=e,
                details={"status_code": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(
                f"Connection error to {safe_url}: {e}", url=safe_url, cause=e
            ) from e

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(
            "mchpay.transport.response",
            url=safe_url,
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2),
            mutual_tls=self.identity is not None,
        )

        try:
            return decode_xml(response.content)
        except XMLDecodeError as e:
            raise TransportError(str(e), url=safe_url, cause=e) from e
