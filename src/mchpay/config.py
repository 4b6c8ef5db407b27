"""Configuration for mchpay clients.

``ClientConfig`` tunes the transports; ``MchSettings`` gathers everything
needed to build a ready client, typically from the environment.

Environment Variables (default prefix ``MCHPAY_``):
    MCHPAY_APPID, MCHPAY_MCH_ID, MCHPAY_API_KEY: required credential
    MCHPAY_P12_FILE: PKCS#12 bundle unlocked with the merchant ID
    MCHPAY_CERT_FILE, MCHPAY_KEY_FILE: PEM certificate and key (used together)
    MCHPAY_TIMEOUT: request timeout in seconds
    MCHPAY_CA_CERTS: CA bundle replacing the system trust store
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field, model_validator

from mchpay.models.constants import DEFAULT_TIMEOUT_SECONDS
from mchpay.models.credential import Credential

ENV_PREFIX = "MCHPAY_"


class ClientConfig(BaseModel):
    timeout: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS, gt=0, description="HTTP timeout in seconds"
    )
    verify: bool = Field(default=True, description="Verify the gateway's TLS certificate")
    ca_certs: Path | None = Field(
        default=None, description="CA bundle used instead of the system trust store"
    )


class MchSettings(BaseModel):
    appid: str = Field(..., min_length=1)
    mch_id: str = Field(..., min_length=1)
    api_key: str = Field(..., min_length=1, repr=False)
    p12_file: Path | None = Field(default=None, description="PKCS#12 client certificate bundle")
    cert_file: Path | None = Field(default=None, description="PEM client certificate")
    key_file: Path | None = Field(default=None, description="PEM client private key")
    client: ClientConfig = Field(default_factory=ClientConfig)

    @model_validator(mode="after")
    def _check_cert_sources(self) -> "MchSettings":
        if (self.cert_file is None) != (self.key_file is None):
            raise ValueError("cert_file and key_file must be set together")
        if self.p12_file is not None and self.cert_file is not None:
            raise ValueError("set either p12_file or cert_file/key_file, not both")
        return self

    @property
    def credential(self) -> Credential:
        return Credential(appid=self.appid, mch_id=self.mch_id, api_key=self.api_key)

    @classmethod
    def from_env(
        cls, prefix: str = ENV_PREFIX, environ: Mapping[str, str] | None = None
    ) -> "MchSettings":
        """Read settings from environment variables.

        Raises:
            ValueError: A required variable is unset or empty, or the values are invalid.
        """
        env = os.environ if environ is None else environ

        def _get(name: str) -> str | None:
            value = env.get(f"{prefix}{name}", "").strip()
            return value or None

        missing = [name for name in ("APPID", "MCH_ID", "API_KEY") if _get(name) is None]
        if missing:
            names = ", ".join(f"{prefix}{name}" for name in missing)
            raise ValueError(f"Environment variable(s) not set or empty: {names}")

        client_kwargs: dict[str, object] = {}
        if (timeout := _get("TIMEOUT")) is not None:
            client_kwargs["timeout"] = float(timeout)
        if (ca_certs := _get("CA_CERTS")) is not None:
            client_kwargs["ca_certs"] = ca_certs

        return cls(
            appid=_get("APPID"),
            mch_id=_get("MCH_ID"),
            api_key=_get("API_KEY"),
            p12_file=_get("P12_FILE"),
            cert_file=_get("CERT_FILE"),
            key_file=_get("KEY_FILE"),
            client=ClientConfig(**client_kwargs),
        )
