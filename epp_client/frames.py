"""Request frame variants accepted by EPPClient.send_frame."""

import codecs
import logging
import os
import re
from dataclasses import dataclass
from typing import Union
from xml.dom.minidom import Document

from epp_client.errors import EPPError
from epp_client.validator import check_well_formed

logger = logging.getLogger(__name__)

_DECLARED_ENCODING = re.compile(r"""\A\s*<\?xml[^>]*?\sencoding\s*=\s*["']([A-Za-z][A-Za-z0-9._-]*)["']""")


def _encode_text(xml: str) -> bytes:
    """Encode XML text in the encoding its declaration names, UTF-8 if none."""
    match = _DECLARED_ENCODING.match(xml)
    encoding = match.group(1) if match else "utf-8"
    try:
        codecs.lookup(encoding)
    except LookupError as e:
        raise EPPError(f"Frame declares unknown encoding '{encoding}'") from e
    try:
        return xml.encode(encoding)
    except UnicodeEncodeError as e:
        raise EPPError(f"Frame text can't be encoded as declared '{encoding}': {e}") from e


@dataclass(frozen=True)
class RawFrame:
    """Hand-written XML text. Checked for well-formedness before sending.

    Text is encoded as its XML declaration says, UTF-8 when there is none.
    """

    xml: Union[str, bytes]

    def render(self) -> bytes:
        data = _encode_text(self.xml) if isinstance(self.xml, str) else self.xml
        check_well_formed(data)
        return data


@dataclass(frozen=True)
class FileFrame:
    """A file holding XML. Read, then checked like a RawFrame."""

    path: Union[str, os.PathLike]

    def render(self) -> bytes:
        try:
            with open(self.path, "rb") as f:
                data = f.read()
        except OSError as e:
            raise EPPError(f"Couldn't open file '{os.fspath(self.path)}' for reading: {e}") from e
        logger.debug("Read %d bytes from %s", len(data), os.fspath(self.path))
        check_well_formed(data)
        return data


@dataclass(frozen=True)
class DocumentFrame:
    """A DOM document. Well-formed by construction, so only serialized."""

    document: Document

    def render(self) -> bytes:
        return self.document.toxml(encoding="UTF-8")


Frame = Union[RawFrame, FileFrame, DocumentFrame]


def as_frame(value) -> Frame:
    """Wrap a plain value in the matching frame variant.

    Frames pass through untouched. A Document becomes a DocumentFrame, a
    path naming an existing file becomes a FileFrame, and any other string
    is taken to be XML text.
    """
    if isinstance(value, (RawFrame, FileFrame, DocumentFrame)):
        return value
    if isinstance(value, Document):
        return DocumentFrame(value)
    if isinstance(value, os.PathLike):
        return FileFrame(value)
    if isinstance(value, (str, bytes)):
        if _names_file(value):
            return FileFrame(value)
        return RawFrame(value)
    raise TypeError(f"Can't send a frame of type {type(value).__name__}")


def _names_file(value) -> bool:
    # XML text can be arbitrarily long or contain NUL, neither of which
    # os.path.isfile tolerates on every platform.
    try:
        return os.path.isfile(value)
    except (ValueError, OSError):
        return False
