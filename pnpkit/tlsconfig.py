"""Client and server TLS settings turned into ``ssl.SSLContext`` objects."""

from __future__ import annotations

import ssl
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class TLSConfigError(Exception):
    """Raised when TLS settings cannot be turned into a context."""


class ClientAuth(Enum):
    """How a server treats client certificates."""

    NO_CLIENT_CERT = "no_client_cert"
    REQUEST_CLIENT_CERT = "request_client_cert"
    REQUIRE_ANY_CLIENT_CERT = "require_any_client_cert"
    VERIFY_CLIENT_CERT_IF_GIVEN = "verify_client_cert_if_given"
    REQUIRE_AND_VERIFY_CLIENT_CERT = "require_and_verify_client_cert"

    @property
    def verify_mode(self) -> ssl.VerifyMode:
        """The closest ``ssl`` verification mode for this strategy."""
        return _VERIFY_MODES[self]


_VERIFY_MODES = {
    ClientAuth.NO_CLIENT_CERT: ssl.CERT_NONE,
    ClientAuth.REQUEST_CLIENT_CERT: ssl.CERT_OPTIONAL,
    ClientAuth.REQUIRE_ANY_CLIENT_CERT: ssl.CERT_OPTIONAL,
    ClientAuth.VERIFY_CLIENT_CERT_IF_GIVEN: ssl.CERT_OPTIONAL,
    ClientAuth.REQUIRE_AND_VERIFY_CLIENT_CERT: ssl.CERT_REQUIRED,
}


def _parse_client_auth(value: str) -> ClientAuth:
    if value == "":
        return ClientAuth.NO_CLIENT_CERT
    try:
        auth = ClientAuth(value)
    except ValueError:
        auth = ClientAuth.NO_CLIENT_CERT
    if auth is ClientAuth.NO_CLIENT_CERT:
        valid = ", ".join(item.value for item in ClientAuth)
        raise TLSConfigError(
            f"unknown client auth strategy: {value}. valid values are: [{valid}]"
        )
    return auth


def _load_key_pair(context: ssl.SSLContext, cert_path: str, key_path: str) -> None:
    try:
        context.load_cert_chain(cert_path, key_path)
    except (OSError, ValueError) as exc:
        raise TLSConfigError(f"load tls key pair: {exc}") from exc


def _load_ca_pool(
    context: ssl.SSLContext, paths: str, append_system: bool, purpose: ssl.Purpose
) -> None:
    """Load every ';'-separated PEM file into the context's trust store."""
    if append_system:
        try:
            context.load_default_certs(purpose)
        except ssl.SSLError as exc:
            raise TLSConfigError(f"can't load system x509 cert pool: {exc}") from exc

    for path in paths.split(";"):
        try:
            pem = Path(path).read_bytes()
        except OSError as exc:
            raise TLSConfigError(
                f"error loading or parsing root CA file {paths}: {exc}"
            ) from exc
        try:
            context.load_verify_locations(cadata=pem.decode("ascii"))
        except (ssl.SSLError, ValueError) as exc:
            raise TLSConfigError(
                f"failed to parse root certificate from {path!r}"
            ) from exc


@dataclass(frozen=True)
class ClientTLSConfig:
    """TLS settings for an outgoing connection."""

    enabled: bool = False
    cert_path: str = ""
    key_path: str = ""
    insecure_skip_verify: bool = False
    root_cas: str = ""
    append_system_cas_to_root: bool = False

    def ssl_context(self) -> Optional[ssl.SSLContext]:
        """Build a client context, or return ``None`` when TLS is disabled."""
        if not self.enabled:
            return None

        context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
        if self.insecure_skip_verify:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE

        _load_key_pair(context, self.cert_path, self.key_path)

        if self.root_cas:
            try:
                _load_ca_pool(
                    context,
                    self.root_cas,
                    self.append_system_cas_to_root,
                    ssl.Purpose.SERVER_AUTH,
                )
            except TLSConfigError as exc:
                raise TLSConfigError(f"load root CAs: {exc}") from exc
        else:
            context.load_default_certs(ssl.Purpose.SERVER_AUTH)
        return context


@dataclass(frozen=True)
class ServerTLSConfig:
    """TLS settings for a listening server."""

    enabled: bool = False
    cert_path: str = ""
    key_path: str = ""
    client_auth: str = ""
    client_cas: str = ""
    append_system_cas_to_client: bool = False

    def ssl_context(self) -> Optional[ssl.SSLContext]:
        """Build a server context, or return ``None`` when TLS is disabled."""
        if not self.enabled:
            return None

        auth = _parse_client_auth(self.client_auth)
        context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
        context.verify_mode = auth.verify_mode

        _load_key_pair(context, self.cert_path, self.key_path)

        if self.client_cas:
            try:
                _load_ca_pool(
                    context,
                    self.client_cas,
                    self.append_system_cas_to_client,
                    ssl.Purpose.CLIENT_AUTH,
                )
            except TLSConfigError as exc:
                raise TLSConfigError(f"load client CAs: {exc}") from exc
        return context