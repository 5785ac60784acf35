"""4-byte length-prefixed wire framing for the EPP TCP transport (RFC 5734).

The header carries the *total* frame length, header included, so a frame
holding ``n`` payload bytes starts with the big-endian value ``n + 4``.
"""

import struct

from epp_client.errors import ProtocolError

HEADER_SIZE = 4
MAX_FRAME_LENGTH = 0xFFFFFFFF


def encode_frame(payload: bytes) -> bytes:
    """Prepend a 4-byte big-endian total-length header to payload."""
    total_length = len(payload) + HEADER_SIZE
    if total_length > MAX_FRAME_LENGTH:
        raise ProtocolError(
            f"Payload of {len(payload)} bytes does not fit in a 32-bit frame header"
        )
    return struct.pack("!I", total_length) + payload


def decode_frame_header(header_bytes: bytes) -> int:
    """Parse the 4-byte big-endian header into the total frame length."""
    if len(header_bytes) != HEADER_SIZE:
        raise ProtocolError(
            f"Frame header must be exactly {HEADER_SIZE} bytes, got {len(header_bytes)}"
        )
    return struct.unpack("!I", header_bytes)[0]


def recv_exact(sock, num_bytes: int) -> bytes:
    """Receive exactly num_bytes from socket, raising if the peer hangs up first."""
    data = bytearray()
    while len(data) < num_bytes:
        chunk = sock.recv(num_bytes - len(data))
        if not chunk:
            raise ProtocolError(
                f"Connection closed after {len(data)} of {num_bytes} bytes"
            )
        data += chunk
    return bytes(data)


def decode_frame_body(sock, total_length: int) -> bytes:
    """Read the payload that follows a header announcing total_length."""
    remainder = total_length - HEADER_SIZE
    if remainder < 0:
        raise ProtocolError(
            f"Frame header announces {total_length} bytes, less than the header itself"
        )
    return recv_exact(sock, remainder)


def read_frame(sock) -> bytes:
    """Read one complete frame from sock and return its payload."""
    total_length = decode_frame_header(recv_exact(sock, HEADER_SIZE))
    return decode_frame_body(sock, total_length)
