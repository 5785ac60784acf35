"""EPP Client — entry point."""

import logging
import sys

from epp_client.client import EPPClient
from epp_client.config import build_parser, config_from_args
from epp_client.errors import EPPError

LOGOUT_FRAME = (
    '<?xml version="1.0" encoding="UTF-8" standalone="no"?>'
    '<epp xmlns="urn:ietf:params:xml:ns:epp-1.0"><command><logout/></command></epp>'
)


def _show(frame):
    """Print a frame: DOM documents pretty-printed, raw frames byte for byte."""
    if hasattr(frame, "toprettyxml"):
        print(frame.toprettyxml(indent="  "))
        return
    sys.stdout.flush()
    sys.stdout.buffer.write(frame + b"\n")
    sys.stdout.buffer.flush()


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        config = config_from_args(args)
        client = EPPClient(config)
    except EPPError as e:
        print(f"[CLIENT] Configuration error: {e}", file=sys.stderr)
        return 1

    try:
        print(f"[CLIENT] Connecting to {config.host}:{config.port}...")
        greeting = client.connect(greeting_timeout=args.timeout)
        _show(greeting)

        frames = list(args.frames)
        if args.logout:
            frames.append(LOGOUT_FRAME)

        for frame in frames:
            _show(client.request(frame, timeout=args.timeout))
    except EPPError as e:
        print(f"[CLIENT] Error: {e}", file=sys.stderr)
        return 1
    finally:
        client.disconnect()

    return 0


if __name__ == "__main__":
    sys.exit(main())
