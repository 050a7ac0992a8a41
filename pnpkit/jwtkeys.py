"""Signing method and key settings for issuing JSON Web Tokens."""

from __future__ import annotations

import base64
import binascii
import os
import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa


class SigningKeyError(Exception):
    """Raised when the signing method or key cannot be used."""


_HMAC_METHODS = frozenset({"HS256", "HS384", "HS512"})
_RSA_METHODS = frozenset({"RS256", "RS384", "RS512", "PS256", "PS384", "PS512"})
_ECDSA_METHODS = frozenset({"ES256", "ES384", "ES512"})
_EDDSA_METHOD = "EdDSA"

_DER_INTEGER = 0x02
_DER_OCTET_STRING = 0x04
_DER_SEQUENCE = 0x30

_PEM_BLOCK = re.compile(
    r"-----BEGIN ([^\r\n-]*)-----\r?\n(.*?)-----END \1-----", re.DOTALL
)


@dataclass(frozen=True)
class JWTConfig:
    """The signing method name and the key text (a secret or a PEM block)."""

    signing_method: str
    signing_key: str

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None, prefix: str = "JWT_"
    ) -> "JWTConfig":
        """Read ``<prefix>SIGNING_METHOD`` and ``<prefix>SIGNING_KEY``; both must be non-empty."""
        source = os.environ if environ is None else environ
        values = {}
        for name in ("SIGNING_METHOD", "SIGNING_KEY"):
            variable = f"{prefix}{name}"
            value = source.get(variable, "")
            if not value:
                raise ValueError(f"required environment variable {variable} is empty")
            values[name] = value
        return cls(signing_method=values["SIGNING_METHOD"], signing_key=values["SIGNING_KEY"])


@dataclass(frozen=True)
class SignParams:
    """A signing method with the key object that signs for it."""

    method: str
    signing_key: Any


def _decode_pem(text: str) -> Optional[bytes]:
    """Return the bytes of the first decodable PEM block in ``text``."""
    for match in _PEM_BLOCK.finditer(text):
        body = "".join(
            line for line in match.group(2).splitlines() if ":" not in line
        )
        try:
            return base64.b64decode("".join(body.split()), validate=True)
        except binascii.Error:
            continue
    return None


def _der_length(data: bytes, pos: int) -> tuple[int, int]:
    first = data[pos]
    if first < 0x80:
        return first, pos + 1
    count = first & 0x7F
    return int.from_bytes(data[pos + 1 : pos + 1 + count], "big"), pos + 1 + count


def _second_element_tag(der: bytes) -> Optional[int]:
    """Tag of the second element inside the outer DER sequence."""
    try:
        if der[0] != _DER_SEQUENCE:
            return None
        _, first = _der_length(der, 1)
        length, start = _der_length(der, first + 1)
        return der[start + length]
    except IndexError:
        return None


def _pem_bytes(secret: str) -> bytes:
    der = _decode_pem(secret)
    if der is None:
        raise SigningKeyError("failed to parse PEM block containing the private key")
    return der


def _load_private_key(secret: str, expected_tag: int, key_type: type, kind: str) -> Any:
    der = _pem_bytes(secret)
    if _second_element_tag(der) != expected_tag:
        raise SigningKeyError(f"PEM block does not hold a {kind} private key")
    try:
        key = serialization.load_der_private_key(der, None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise SigningKeyError(str(exc)) from exc
    if not isinstance(key, key_type):
        raise SigningKeyError(f"PEM block does not hold a {kind} private key")
    return key


def _load_rsa_private_key(secret: str) -> rsa.RSAPrivateKey:
    return _load_private_key(secret, _DER_INTEGER, rsa.RSAPrivateKey, "PKCS #1 RSA")


def _load_ecdsa_private_key(secret: str) -> ec.EllipticCurvePrivateKey:
    return _load_private_key(
        secret, _DER_OCTET_STRING, ec.EllipticCurvePrivateKey, "SEC 1 EC"
    )


def new_sign_params(config: JWTConfig) -> SignParams:
    """Build signing parameters, loading the key in the form the method needs.

    HMAC methods sign with the key text's bytes; RSA and RSA-PSS need a PKCS #1
    PEM key, ECDSA a SEC 1 PEM key, and EdDSA takes the raw bytes of the PEM block.
    """
    method = config.signing_method
    try:
        if method in _HMAC_METHODS:
            key: Any = config.signing_key.encode("utf-8")
        elif method in _RSA_METHODS:
            kind = "RSA"
            key = _load_rsa_private_key(config.signing_key)
        elif method in _ECDSA_METHODS:
            kind = "ECDSA"
            key = _load_ecdsa_private_key(config.signing_key)
        elif method == _EDDSA_METHOD:
            kind = "EdDSA"
            key = _pem_bytes(config.signing_key)
        else:
            raise SigningKeyError(f"unsupported signing method: {method}")
    except SigningKeyError as exc:
        if method not in _HMAC_METHODS | _RSA_METHODS | _ECDSA_METHODS | {_EDDSA_METHOD}:
            raise
        raise SigningKeyError(f"error loading {kind} private key: {exc}") from exc
    return SignParams(method=method, signing_key=key)