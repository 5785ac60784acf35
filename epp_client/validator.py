"""XML well-formedness checks for outbound frames."""

import xml.etree.ElementTree as ET

from epp_client.errors import XMLSyntaxError


def _as_text(payload) -> str:
    if isinstance(payload, bytes):
        return payload.decode("utf-8", errors="replace")
    return payload


def check_well_formed(payload) -> None:
    """Raise XMLSyntaxError unless payload parses as XML.

    Only syntax is checked: no DTD is fetched and element names carry no
    meaning here. The error reports expat's first complaint and where it
    happened.
    """
    parser = ET.XMLParser()
    try:
        parser.feed(payload)
        parser.close()
    except ET.ParseError as e:
        raise XMLSyntaxError(
            f'Frame wasn\'t well formed: "{e}"',
            _as_text(payload),
            position=e.position,
        ) from e


def is_well_formed(payload) -> bool:
    try:
        check_well_formed(payload)
    except XMLSyntaxError:
        return False
    return True
