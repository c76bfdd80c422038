"""
Shared test fixtures and helpers for the grootstore test suite.

Certificates are generated on the fly with cryptography (self-signed EC
roots), so no fixture files are needed and every test gets real DER.
"""

from __future__ import annotations

import datetime
from collections.abc import Callable
from pathlib import Path
from typing import TypeAlias

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from grootstore.domain.models import StorePaths

CertificateFactory: TypeAlias = Callable[[str], bytes]


def make_root_certificate(common_name: str) -> bytes:
    """Return the DER encoding of a fresh self-signed CA certificate."""
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.datetime.now(datetime.UTC)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=365))
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .sign(key, hashes.SHA256())
    )
    return certificate.public_bytes(serialization.Encoding.DER)


def der_to_pem(der_bytes: bytes) -> bytes:
    """PEM-encode DER via cryptography, independent of the code under test."""
    return x509.load_der_x509_certificate(der_bytes).public_bytes(serialization.Encoding.PEM)


@pytest.fixture()
def certificate_factory() -> CertificateFactory:
    """Factory producing DER-encoded self-signed roots by common name."""
    return make_root_certificate


@pytest.fixture()
def root_der() -> bytes:
    """A single DER-encoded root certificate."""
    return make_root_certificate("Test Root CA")


@pytest.fixture()
def store_paths(tmp_path: Path) -> StorePaths:
    """StorePaths rooted at an empty temporary directory."""
    return StorePaths(root=tmp_path)


@pytest.fixture()
def pem_encoder() -> Callable[[bytes], bytes]:
    """DER → PEM using cryptography's own serializer."""
    return der_to_pem
