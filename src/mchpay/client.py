"""Merchant API client.

``MchClient`` owns the merchant credential and two long-lived transport
handles: a standard one (server-authenticated TLS) and a mutual-TLS one that
presents the merchant's client certificate. Every call is signed, routed to
the handle matching its sensitivity, and its reply is checked before being
returned.

Example:
    >>> from mchpay import MchClient
    >>>
    >>> client = MchClient.create("wx2421b1c4370ec43b", "10000100", "192006250b4c09247ec02edce69f6a2d")
    >>> client.load_cert_from_p12_file("apiclient_cert.p12")
    >>> reply = client.order().query(out_trade_no="20150806125346")
    >>> refund = client.refund().create(RefundParams(...))  # goes over mutual TLS
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from mchpay.config import ClientConfig, MchSettings
from mchpay.crypto.certs import (
    ClientIdentity,
    load_identity_from_p12_file,
    load_identity_from_pem,
    load_identity_from_pem_files,
)
from mchpay.crypto.reply import verify_reply
from mchpay.crypto.signing import resolve_sign_type, sign
from mchpay.errors import GatewayError
from mchpay.models.constants import (
    MCH_ID_FIELD,
    NONCE_SIZE,
    RESULT_SUCCESS,
    RETURN_CODE_FIELD,
    RETURN_MSG_FIELD,
    RSA_PUBLIC_KEY_URL,
    SIGN_FIELD,
    SIGN_TYPE_FIELD,
)
from mchpay.models.credential import Credential
from mchpay.models.enums import Sensitivity, SignType
from mchpay.observability import get_logger, sanitize_for_logging
from mchpay.operations import Order, Pappay, Redpack, Refund, Transfer
from mchpay.transport.client import HTTPTransport, Transport
from mchpay.utils.nonce import generate_nonce, unix_timestamp
from mchpay.utils.sanitization import sanitize_url

logger = get_logger(__name__)

TransportFactory = Callable[[ClientIdentity | None], Transport]


@dataclass
class _Handle:
    """A transport plus the number of calls currently using it."""

    transport: Transport
    active: int = 0
    retired: bool = False


class MchClient:
    """Signing, routing and reply verification for the merchant API.

    The credential never changes after construction. The mutual-TLS identity
    is replaced wholesale by the ``load_cert_*`` methods: a new transport is
    built first and swapped in under a lock, so a failed load leaves the
    previous identity installed, and calls already running finish on the
    transport they started with.

    Attributes:
        credential: Merchant appid, mch_id and signing key
        config: Transport settings used by the default transport factory
    """

    def __init__(
        self,
        credential: Credential,
        config: ClientConfig | None = None,
        *,
        transport_factory: TransportFactory | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            credential: Merchant credential.
            config: Transport settings (timeout, server verification, CA bundle).
            transport_factory: Builds a transport for a given identity (None for
                the standard handle). Defaults to :class:`HTTPTransport`; tests
                inject transports backed by ``httpx.MockTransport``.
        """
        self.credential = credential
        self.config = config or ClientConfig()
        self._transport_factory = transport_factory or self._default_transport
        self._lock = threading.Lock()
        self._handles: dict[Sensitivity, _Handle] = {
            Sensitivity.STANDARD: _Handle(self._transport_factory(None)),
            Sensitivity.MUTUAL_TLS: _Handle(self._transport_factory(None)),
        }

    @classmethod
    def create(
        cls, appid: str, mch_id: str, api_key: str, config: ClientConfig | None = None
    ) -> "MchClient":
        return cls(Credential(appid=appid, mch_id=mch_id, api_key=api_key), config)

    @classmethod
    def from_settings(
        cls, settings: MchSettings, *, transport_factory: TransportFactory | None = None
    ) -> "MchClient":
        """Build a client and load the certificate named by the settings, if any."""
        client = cls(settings.credential, settings.client, transport_factory=transport_factory)
        if settings.p12_file is not None:
            client.load_cert_from_p12_file(settings.p12_file)
        elif settings.cert_file is not None and settings.key_file is not None:
            client.load_cert_from_pem_files(settings.cert_file, settings.key_file)
        return client

    def _default_transport(self, identity: ClientIdentity | None) -> Transport:
        return HTTPTransport(
            identity,
            timeout=self.config.timeout,
            verify=self.config.verify,
            ca_certs=self.config.ca_certs,
        )

    def __enter__(self) -> "MchClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        with self._lock:
            handles = list(self._handles.values())
        for handle in handles:
            handle.transport.close()

    @property
    def identity(self) -> ClientIdentity | None:
        """Client identity currently installed on the mutual-TLS handle."""
        with self._lock:
            return self._handles[Sensitivity.MUTUAL_TLS].transport.identity

    def _install_identity(self, identity: ClientIdentity) -> None:
        transport = self._transport_factory(identity)
        with self._lock:
            old = self._handles[Sensitivity.MUTUAL_TLS]
            self._handles[Sensitivity.MUTUAL_TLS] = _Handle(transport)
            old.retired = True
            close_old = old.active == 0
        if close_old:
            old.transport.close()
        logger.info(
            "mchpay.client.identity_installed",
            mch_id=self.credential.mch_id,
            subject=identity.subject,
            fingerprint=identity.fingerprint(),
        )

    def load_cert_from_p12_file(self, path: str | Path) -> ClientIdentity:
        """Install the identity from a p12/pfx bundle unlocked with the merchant ID."""
        identity = load_identity_from_p12_file(path, self.credential.mch_id)
        self._install_identity(identity)
        return identity

    def load_cert_from_pem_files(self, cert_file: str | Path, key_file: str | Path) -> ClientIdentity:
        identity = load_identity_from_pem_files(cert_file, key_file)
        self._install_identity(identity)
        return identity

    def load_cert_from_pem(self, cert_pem: bytes, key_pem: bytes) -> ClientIdentity:
        identity = load_identity_from_pem(cert_pem, key_pem)
        self._install_identity(identity)
        return identity

    def _acquire(self, sensitivity: Sensitivity) -> _Handle:
        with self._lock:
            handle = self._handles[sensitivity]
            handle.active += 1
            return handle

    def _release(self, handle: _Handle) -> None:
        with self._lock:
            handle.active -= 1
            close_now = handle.retired and handle.active == 0
        if close_now:
            handle.transport.close()

    def sign(self, payload: dict[str, str]) -> str:
        """Signature of ``payload`` with the algorithm named by its sign_type (MD5 if absent)."""
        return sign(payload, self.credential.api_key, resolve_sign_type(payload.get(SIGN_TYPE_FIELD)))

    def verify_reply(self, reply: dict[str, str]) -> None:
        verify_reply(reply, self.credential)

    def call(
        self,
        url: str,
        payload: dict[str, str],
        sensitive: bool = False,
        timeout: float | None = None,
    ) -> dict[str, str]:
        """Sign ``payload``, send it and return the verified reply.

        ``payload["sign"]`` is set in place before sending.

        Args:
            url: Gateway endpoint.
            payload: Flat request mapping.
            sensitive: Route through the mutual-TLS handle.
            timeout: Per-call timeout overriding the transport default.

        Raises:
            UnsupportedAlgorithmError: payload's sign_type is unknown.
            TransportError: The round trip failed.
            GatewayError: return_code is not SUCCESS; the reply is not verified.
            SignatureMismatchError: The reply's signature does not match.
            IdentityMismatchError: The reply's appid or mch_id differ from ours.
        """
        sensitivity = Sensitivity.from_flag(sensitive)
        payload[SIGN_FIELD] = self.sign(payload)

        handle = self._acquire(sensitivity)
        try:
            logger.info(
                "mchpay.client.call",
                url=sanitize_url(url),
                sensitivity=sensitivity.value,
                mch_id=self.credential.mch_id,
            )
            logger.debug("mchpay.client.request", payload=sanitize_for_logging(payload))
            reply = handle.transport.post(url, payload, timeout=timeout)
        finally:
            self._release(handle)

        return_code = reply.get(RETURN_CODE_FIELD)
        if return_code != RESULT_SUCCESS:
            message = reply.get(RETURN_MSG_FIELD) or f"gateway returned return_code={return_code!r}"
            logger.warning(
                "mchpay.client.gateway_error",
                url=sanitize_url(url),
                return_code=return_code,
                return_msg=message,
                reply=sanitize_for_logging(reply),
            )
            raise GatewayError(message, return_code=return_code)

        self.verify_reply(reply)
        return reply

    def post(self, url: str, payload: dict[str, str], timeout: float | None = None) -> dict[str, str]:
        return self.call(url, payload, sensitive=False, timeout=timeout)

    def tls_post(self, url: str, payload: dict[str, str], timeout: float | None = None) -> dict[str, str]:
        return self.call(url, payload, sensitive=True, timeout=timeout)

    def app_api(self, prepay_id: str) -> dict[str, str]:
        """Parameters for a mobile app to launch payment of a prepaid order."""
        params = {
            "appid": self.credential.appid,
            "partnerid": self.credential.mch_id,
            "prepayid": prepay_id,
            "package": "Sign=WXPay",
            "noncestr": generate_nonce(NONCE_SIZE),
            "timestamp": unix_timestamp(),
        }
        params[SIGN_FIELD] = sign(params, self.credential.api_key, SignType.MD5)
        return params

    def js_api(self, prepay_id: str) -> dict[str, str]:
        """Parameters for an in-browser JS bridge to launch payment; signed under paySign."""
        params = {
            "appId": self.credential.appid,
            "nonceStr": generate_nonce(NONCE_SIZE),
            "package": f"prepay_id={prepay_id}",
            "signType": SignType.MD5.value,
            "timeStamp": unix_timestamp(),
        }
        params["paySign"] = sign(params, self.credential.api_key, SignType.MD5)
        return params

    def rsa_public_key(self, timeout: float | None = None) -> bytes:
        """Fetch the gateway's RSA public key (PEM) used to encrypt bank card data.

        Raises:
            GatewayError: The reply carries no pub_key.
        """
        payload = {
            MCH_ID_FIELD: self.credential.mch_id,
            "nonce_str": generate_nonce(NONCE_SIZE),
            SIGN_TYPE_FIELD: SignType.MD5.value,
        }
        reply = self.tls_post(RSA_PUBLIC_KEY_URL, payload, timeout=timeout)
        pub_key = reply.get("pub_key")
        if not pub_key:
            raise GatewayError("empty pub_key", return_code=reply.get(RETURN_CODE_FIELD))
        return pub_key.encode("utf-8")

    def order(self) -> Order:
        return Order(self.credential, self.call)

    def refund(self) -> Refund:
        return Refund(self.credential, self.call)

    def pappay(self) -> Pappay:
        return Pappay(self.credential, self.call)

    def transfer(self) -> Transfer:
        return Transfer(self.credential, self.call)

    def redpack(self) -> Redpack:
        return Redpack(self.credential, self.call)
