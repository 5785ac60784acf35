"""Shared pytest fixtures — an in-process EPP server on a random local port."""

import shutil
import socket
import ssl
import subprocess
import threading

import pytest

from epp_client.config import ClientConfig
from epp_client.errors import ProtocolError
from epp_client.protocol import HEADER_SIZE, decode_frame_body, decode_frame_header, encode_frame, recv_exact

GREETING = b"<epp><greeting/></epp>"


def create_server_context(cert_file: str, key_file: str) -> ssl.SSLContext:
    """TLS context for the fake server side of a connection."""
    ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    ctx.load_cert_chain(certfile=cert_file, keyfile=key_file)
    return ctx


class FakeEPPServer:
    """Sends a greeting to each client, records every frame it gets, and
    answers each one with the next queued reply (or an echo when none is left).

    ``greeting_wire`` and queued replies are raw bytes written as-is, so tests
    can hand out malformed or truncated frames. Setting ``hang_up_after`` to n
    makes the server close the connection after its n-th write.
    """

    def __init__(self, greeting_wire=None, ssl_context=None):
        self.ssl_context = ssl_context
        self.hang_up_after = None
        self.greeting_wire = encode_frame(GREETING) if greeting_wire is None else greeting_wire
        self.replies = []
        self.received = []
        self.wire = []
        self.handler_done = threading.Event()
        self._shutdown = threading.Event()
        self._srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._srv.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._srv.settimeout(1.0)
        self._srv.bind(("127.0.0.1", 0))
        self._srv.listen(5)
        self.host, self.port = self._srv.getsockname()
        self._thread = threading.Thread(target=self._accept_loop, daemon=True)

    def start(self):
        self._thread.start()
        return self

    def stop(self):
        self._shutdown.set()
        self._thread.join(timeout=5)

    def _accept_loop(self):
        while not self._shutdown.is_set():
            try:
                conn, _ = self._srv.accept()
            except socket.timeout:
                continue
            except OSError:
                break
            threading.Thread(target=self._handle, args=(conn,), daemon=True).start()
        self._srv.close()

    def _handle(self, conn):
        conn.settimeout(5.0)
        try:
            if self.ssl_context is not None:
                conn = self.ssl_context.wrap_socket(conn, server_side=True)
            conn.sendall(self.greeting_wire)
            writes = 1
            while not self._shutdown.is_set() and writes != self.hang_up_after:
                header = recv_exact(conn, HEADER_SIZE)
                body = decode_frame_body(conn, decode_frame_header(header))
                self.wire.append(header + body)
                self.received.append(body)
                reply = self.replies.pop(0) if self.replies else encode_frame(body)
                conn.sendall(reply)
                writes += 1
        except (ProtocolError, OSError):
            pass
        finally:
            conn.close()
            self.handler_done.set()


@pytest.fixture
def epp_server():
    server = FakeEPPServer().start()
    yield server
    server.stop()


@pytest.fixture
def server_config(epp_server):
    return ClientConfig(host=epp_server.host, port=epp_server.port)


@pytest.fixture
def unused_port():
    """A local port with nothing listening on it."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


@pytest.fixture
def make_server():
    """Factory for servers with a custom greeting on the wire."""
    servers = []

    def factory(greeting_wire=None, ssl_context=None):
        server = FakeEPPServer(greeting_wire, ssl_context).start()
        servers.append(server)
        return server

    yield factory
    for server in servers:
        server.stop()


@pytest.fixture(scope="session")
def cert_dir(tmp_path_factory):
    """Self-signed certificate for 127.0.0.1, generated with the openssl CLI."""
    if shutil.which("openssl") is None:
        pytest.skip("openssl not available")
    path = tmp_path_factory.mktemp("certs")
    result = subprocess.run(
        [
            "openssl", "req", "-x509", "-newkey", "rsa:2048", "-nodes",
            "-keyout", str(path / "server.key"),
            "-out", str(path / "server.crt"),
            "-days", "1",
            "-subj", "/CN=localhost",
            "-addext", "subjectAltName=DNS:localhost,IP:127.0.0.1",
        ],
        capture_output=True, text=True,
    )
    assert result.returncode == 0, f"Cert gen failed: {result.stderr}"
    return path


@pytest.fixture
def server_tls_context(cert_dir):
    return create_server_context(str(cert_dir / "server.crt"), str(cert_dir / "server.key"))
