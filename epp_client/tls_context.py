"""SSLContext factory functions for the EPP client."""

import ssl

from epp_client.config import ClientConfig


def create_client_context_unverified() -> ssl.SSLContext:
    """Create an SSL context that skips certificate verification (dev use)."""
    ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return ctx


def create_client_context_verified(ca_file: str = "") -> ssl.SSLContext:
    """Create an SSL context that verifies the server cert.

    Uses ca_file when given, otherwise the system trust store.
    """
    ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    if ca_file:
        ctx.load_verify_locations(ca_file)
    else:
        ctx.load_default_certs()
    ctx.verify_mode = ssl.CERT_REQUIRED
    ctx.check_hostname = True
    return ctx


def build_client_context(config: ClientConfig) -> ssl.SSLContext:
    """Create the client context described by config, with the client cert if any."""
    if config.verify_certs:
        ctx = create_client_context_verified(config.ca_file)
    else:
        ctx = create_client_context_unverified()
    ctx.minimum_version = ssl.TLSVersion.TLSv1_2
    if config.cert_file:
        ctx.load_cert_chain(certfile=config.cert_file, keyfile=config.key_file or None)
    return ctx
