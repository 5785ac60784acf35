"""Exception hierarchy for the EPP transport client."""


class EPPError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(EPPError, ValueError):
    """Missing or invalid connection parameters."""


class EPPConnectionError(EPPError, ConnectionError):
    """The TCP connection or TLS handshake could not be established."""

    def __init__(self, host: str, port: int, reason):
        self.host = host
        self.port = port
        self.reason = reason
        super().__init__(f'Connection to {host}:{port} failed: "{reason}"')


class ProtocolError(EPPError):
    """Malformed length header or a frame cut short by the peer."""


class ReceiveTimeoutError(ProtocolError, TimeoutError):
    """No complete frame arrived within the requested timeout."""


class TransportError(EPPError):
    """The session is not connected or a write to the stream failed."""


class XMLSyntaxError(EPPError, ValueError):
    """A frame is not well-formed XML.

    Carries the offending document in ``xml`` and the parser's
    ``(line, column)`` in ``position`` so the failure can be diagnosed
    without re-running.
    """

    def __init__(self, message: str, xml: str, position=None):
        self.message = message
        self.xml = xml
        self.position = position
        super().__init__(f'{message}\n\nThe XML looks like this:\n\n{xml}\n')
