"""Transport session — owns the socket and moves whole frames across it."""

import enum
import logging
import socket
import ssl

from epp_client.config import ClientConfig
from epp_client.errors import (
    EPPConnectionError,
    ProtocolError,
    ReceiveTimeoutError,
    TransportError,
)
from epp_client.protocol import encode_frame, read_frame
from epp_client.tls_context import build_client_context

logger = logging.getLogger(__name__)


class SessionState(enum.Enum):
    UNCONNECTED = "unconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    CLOSED = "closed"


class TransportSession:
    """A single EPP connection, plain TCP or TLS.

    No call is retried. Any failure on the stream leaves the session
    CLOSED, and a new ``open()`` is needed before frames can flow again.
    """

    def __init__(self, config: ClientConfig):
        self._config = config
        self._sock = None
        self._state = SessionState.UNCONNECTED

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def connected(self) -> bool:
        return self._state is SessionState.CONNECTED

    @property
    def peer(self):
        """Remote (host, port) of the live socket, or None."""
        if self._sock is None:
            return None
        try:
            return self._sock.getpeername()[:2]
        except OSError:
            return None

    @property
    def tls_version(self):
        if isinstance(self._sock, ssl.SSLSocket):
            return self._sock.version()
        return None

    def open(self, ssl_context=None, source_address=None, greeting_timeout=None) -> bytes:
        """Connect, complete the TLS handshake if configured, and return the greeting.

        The server speaks first on an EPP connection, so the greeting frame is
        read here before the session is handed back to the caller.
        """
        if self._state in (SessionState.CONNECTING, SessionState.CONNECTED):
            raise TransportError(
                f"Session to {self._config.host}:{self._config.port} is already open"
            )

        host, port = self._config.host, self._config.port
        self._state = SessionState.CONNECTING
        logger.debug("Connecting to %s:%d (ssl=%s)", host, port, self._config.ssl)

        raw_sock = None
        try:
            raw_sock = socket.create_connection(
                (host, port),
                timeout=self._config.connect_timeout,
                source_address=source_address,
            )
            if self._config.ssl:
                ctx = ssl_context or build_client_context(self._config)
                self._sock = ctx.wrap_socket(raw_sock, server_hostname=host)
            else:
                self._sock = raw_sock
            self._sock.settimeout(None)
        except (OSError, ssl.SSLError) as e:
            logger.warning("Connection to %s:%d failed: %s", host, port, e)
            if raw_sock is not None:
                raw_sock.close()
            self._sock = None
            self._state = SessionState.CLOSED
            raise EPPConnectionError(host, port, e) from e

        self._state = SessionState.CONNECTED
        if self.tls_version:
            logger.info("Connected to %s:%d over %s", host, port, self.tls_version)
        else:
            logger.info("Connected to %s:%d", host, port)

        return self.receive(timeout=greeting_timeout)

    def send(self, payload: bytes) -> bool:
        """Frame payload and write all of it to the stream."""
        self._require_connected()
        frame = encode_frame(payload)
        try:
            self._sock.sendall(frame)
        except OSError as e:
            logger.warning("Send to %s:%d failed: %s", self._config.host, self._config.port, e)
            self.close()
            raise TransportError(
                f"Write to {self._config.host}:{self._config.port} failed: {e}"
            ) from e
        logger.debug("Sent frame of %d bytes", len(frame))
        return True

    def receive(self, timeout=None) -> bytes:
        """Block until one whole frame has arrived and return its payload.

        With ``timeout=None`` this waits for as long as the peer stays silent.
        When a timeout expires, or the caller interrupts the read, the frame
        boundary is lost, so the session is closed rather than left for a retry.
        """
        self._require_connected()
        try:
            self._sock.settimeout(timeout)
            payload = read_frame(self._sock)
            self._sock.settimeout(None)
        except socket.timeout as e:
            self.close()
            raise ReceiveTimeoutError(
                f"No frame from {self._config.host}:{self._config.port} within {timeout}s"
            ) from e
        except ProtocolError:
            self.close()
            raise
        except OSError as e:
            self.close()
            raise ProtocolError(
                f"Read from {self._config.host}:{self._config.port} failed: {e}"
            ) from e
        except BaseException:
            # Interrupted by the caller (alarm, KeyboardInterrupt); the rest of
            # the frame may still be in flight.
            self.close()
            raise
        logger.debug("Received frame of %d bytes", len(payload) + 4)
        return payload

    def close(self):
        """Release the socket. Safe to call any number of times."""
        if self._sock is not None:
            try:
                self._sock.close()
            except OSError:
                pass
            self._sock = None
            logger.info("Disconnected from %s:%d", self._config.host, self._config.port)
        self._state = SessionState.CLOSED

    def _require_connected(self):
        if self._state is not SessionState.CONNECTED:
            raise TransportError(
                f"Not connected to {self._config.host}:{self._config.port} "
                f"(session is {self._state.value})"
            )
