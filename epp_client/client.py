"""EPP client — connect, exchange frames, disconnect.

    config = ClientConfig(host="epp.registry.tld", port=700, ssl=True)
    with EPPClient(config) as epp:
        greeting = epp.greeting
        epp.send_frame("login.xml")
        answer = epp.get_frame(timeout=30)

The caller owns the conversation: logging in and out are ordinary frames
sent through ``send_frame``.
"""

import logging

from epp_client.config import ClientConfig
from epp_client.frames import as_frame
from epp_client.representation import representation_for
from epp_client.session import TransportSession

logger = logging.getLogger(__name__)


class EPPClient:
    """Client for the EPP TCP transport.

    Not safe to share between threads; use one client per thread.
    """

    def __init__(self, config: ClientConfig, representation=None, scratch=None):
        self._config = config.validate()
        self._representation = representation or representation_for(config.dom, scratch)
        self._session = TransportSession(self._config)
        self._greeting = None

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def session(self) -> TransportSession:
        return self._session

    @property
    def connected(self) -> bool:
        return self._session.connected

    @property
    def greeting(self):
        """Greeting from the most recent connect(), or None."""
        return self._greeting

    def connect(self, **extra_options):
        """Open the connection and return the server's greeting.

        ``extra_options`` go to TransportSession.open (``ssl_context``,
        ``source_address``, ``greeting_timeout``). Like get_frame, this blocks
        until the greeting has arrived unless ``greeting_timeout`` is given.
        """
        payload = self._session.open(**extra_options)
        self._greeting = self._representation.convert(payload)
        return self._greeting

    def send_frame(self, frame) -> bool:
        """Send a request frame.

        frame may be a RawFrame, FileFrame or DocumentFrame, or a plain
        value that as_frame() knows how to wrap. Text and file content are
        checked for well-formedness first; nothing is written if the check
        fails.
        """
        payload = as_frame(frame).render()
        return self._session.send(payload)

    def get_frame(self, timeout=None):
        """Block until the next response frame arrives and return it."""
        payload = self._session.receive(timeout=timeout)
        return self._representation.convert(payload)

    def request(self, frame, timeout=None):
        """Send frame and return the response that follows it."""
        self.send_frame(frame)
        return self.get_frame(timeout=timeout)

    def disconnect(self) -> bool:
        self._session.close()
        return True

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.disconnect()
        return False
