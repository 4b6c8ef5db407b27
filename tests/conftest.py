"""Shared pytest fixtures for mchpay tests.

Provides the merchant credential, freshly generated client certificates in
every format the certificate pipeline accepts, and a client wired to an
in-memory gateway.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from mchpay.client import MchClient
from mchpay.models.credential import Credential
from tests.factories import (
    TEST_API_KEY,
    TEST_APPID,
    TEST_MCH_ID,
    CertMaterial,
    FakeGateway,
    make_cert_material,
)


@pytest.fixture
def credential() -> Credential:
    return Credential(appid=TEST_APPID, mch_id=TEST_MCH_ID, api_key=TEST_API_KEY)


@pytest.fixture(scope="session")
def cert_material() -> CertMaterial:
    return make_cert_material()


@pytest.fixture(scope="session")
def other_cert_material() -> CertMaterial:
    return make_cert_material(common_name="other-merchant")


@pytest.fixture
def pem_files(tmp_path: Path, cert_material: CertMaterial) -> tuple[Path, Path]:
    cert_path = tmp_path / "apiclient_cert.pem"
    key_path = tmp_path / "apiclient_key.pem"
    cert_path.write_bytes(cert_material.cert_pem)
    key_path.write_bytes(cert_material.key_pem)
    key_path.chmod(0o600)
    return cert_path, key_path


@pytest.fixture
def p12_file(tmp_path: Path, cert_material: CertMaterial) -> Path:
    path = tmp_path / "apiclient_cert.p12"
    path.write_bytes(cert_material.p12(TEST_MCH_ID))
    path.chmod(0o600)
    return path


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def client(credential: Credential, gateway: FakeGateway) -> Iterator[MchClient]:
    mch = MchClient(credential, transport_factory=gateway.transport_factory)
    yield mch
    mch.close()
