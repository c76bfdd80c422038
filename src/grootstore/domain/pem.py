"""
PEM extraction — the only place PEM text is decoded into DER.

Uses asn1crypto.pem, which walks the buffer line by line: text outside
BEGIN/END markers is skipped, so vendor commentary between blocks is harmless.

A malformed block (bad base64, undecodable header) ends extraction: the
certificates decoded so far are returned and the rest of the buffer is ignored.
A buffer without any PEM block yields an empty list.
"""

from __future__ import annotations

import structlog
from asn1crypto import pem

log = structlog.get_logger()

CERTIFICATE = "CERTIFICATE"
BEGIN_CERTIFICATE = "-----BEGIN CERTIFICATE-----"
END_CERTIFICATE = "-----END CERTIFICATE-----"


def extract_certificates(data: bytes) -> list[bytes]:
    """Return the DER bytes of every CERTIFICATE block in `data`, in order."""
    certificates: list[bytes] = []
    try:
        for object_type, _headers, der_bytes in pem.unarmor(data, multiple=True):
            if object_type == CERTIFICATE:
                certificates.append(der_bytes)
    except ValueError as e:
        # asn1crypto raises on "no PEM data" as well as on corrupt blocks
        if certificates:
            log.debug("pem.extraction_stopped", extracted=len(certificates), reason=str(e))
    return certificates


def armor_certificate(der_bytes: bytes) -> bytes:
    """Wrap DER bytes in a CERTIFICATE PEM block (64-column base64, trailing newline)."""
    return pem.armor(CERTIFICATE, der_bytes)


def contains_pem(data: bytes) -> bool:
    """True when `data` looks like PEM text rather than raw DER."""
    return pem.detect(data)
