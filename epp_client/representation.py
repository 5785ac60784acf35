"""How response frames are handed back to the caller: text or DOM document."""

import contextlib
import logging
import os
import tempfile
from xml.dom import minidom
from xml.parsers.expat import ExpatError

from epp_client.errors import XMLSyntaxError

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def scratch_file(data: bytes, suffix: str = ".xml"):
    """Write data to a uniquely named temp file and yield its path.

    The file is removed when the block exits, however it exits.
    """
    fd, path = tempfile.mkstemp(prefix="epp-", suffix=suffix)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        yield path
    finally:
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass


class RawRepresentation:
    """Responses as the exact octets the server sent."""

    def convert(self, payload: bytes) -> bytes:
        return payload


class DocumentRepresentation:
    """Responses as xml.dom.minidom Documents.

    Each response is parsed from its own scratch file; ``scratch`` lets the
    caller supply a different provider with the same contract.
    """

    def __init__(self, scratch=scratch_file):
        self._scratch = scratch

    def convert(self, payload: bytes):
        with self._scratch(payload) as path:
            try:
                return minidom.parse(path)
            except ExpatError as e:
                raise XMLSyntaxError(
                    f'Frame from server wasn\'t well formed: "{e}"',
                    payload.decode("utf-8", errors="replace"),
                    position=(e.lineno, e.offset),
                ) from e


def representation_for(dom: bool, scratch=None):
    """Pick the representation strategy for a client."""
    if not dom:
        return RawRepresentation()
    if scratch is None:
        return DocumentRepresentation()
    return DocumentRepresentation(scratch)
