"""Configuration module — frozen dataclass loaded from YAML, env vars and CLI args."""

import argparse
import os
from dataclasses import dataclass, fields
from typing import Optional

import yaml

from epp_client.errors import ConfigurationError

DEFAULT_PORT = 700


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class ClientConfig:
    host: Optional[str] = None
    port: Optional[int] = DEFAULT_PORT
    ssl: bool = False
    dom: bool = False
    verify_certs: bool = True
    ca_file: str = ""
    cert_file: str = ""
    key_file: str = ""
    connect_timeout: Optional[float] = None

    def validate(self) -> "ClientConfig":
        """Raise ConfigurationError if the parameters cannot describe a connection."""
        if not self.host:
            raise ConfigurationError("missing hostname")
        if self.port is None:
            raise ConfigurationError("missing port")
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise ConfigurationError(f"port must be an integer, got {self.port!r}")
        if not 1 <= self.port <= 65535:
            raise ConfigurationError(f"port {self.port} out of range 1-65535")
        if self.key_file and not self.cert_file:
            raise ConfigurationError("key_file given without cert_file")
        if self.connect_timeout is not None and self.connect_timeout <= 0:
            raise ConfigurationError("connect_timeout must be positive")
        return self


_ENV_VARS = {
    "host": "EPP_HOST",
    "port": "EPP_PORT",
    "ssl": "EPP_SSL",
    "dom": "EPP_DOM",
    "verify_certs": "EPP_VERIFY_CERTS",
    "ca_file": "EPP_CA_FILE",
    "cert_file": "EPP_CERT_FILE",
    "key_file": "EPP_KEY_FILE",
    "connect_timeout": "EPP_CONNECT_TIMEOUT",
}


def _coerce(name: str, value):
    if value is None:
        return None
    try:
        if name == "port":
            return int(value)
        if name == "connect_timeout":
            return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"invalid {name}: {value!r}") from e
    if name in ("ssl", "dom", "verify_certs"):
        return _parse_bool(value)
    return str(value)


def load_yaml(path: str) -> dict:
    """Load a YAML mapping of ClientConfig fields from path."""
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigurationError(f"Couldn't read config file '{path}': {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Config file '{path}' is not valid YAML: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file '{path}' must contain a mapping")

    known = {f.name for f in fields(ClientConfig)}
    unknown = set(data) - known
    if unknown:
        raise ConfigurationError(f"Unknown config keys in '{path}': {', '.join(sorted(unknown))}")
    return data


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser shared by load_client_config and client_main."""
    parser = argparse.ArgumentParser(
        prog="epp-client",
        description="Send EPP frames to a registry over the TCP transport.",
    )
    parser.add_argument("--config", type=str, default=None, help="YAML config file")
    parser.add_argument("--host", type=str, default=None)
    parser.add_argument("--port", type=int, default=None)
    parser.add_argument("--ssl", action="store_true", default=None, help="Use TLS")
    parser.add_argument("--dom", action="store_true", default=None,
                        help="Parse responses into DOM documents")
    parser.add_argument("--insecure", action="store_true", default=False,
                        help="Skip server certificate verification")
    parser.add_argument("--ca-file", type=str, default=None)
    parser.add_argument("--cert-file", type=str, default=None)
    parser.add_argument("--key-file", type=str, default=None)
    parser.add_argument("--connect-timeout", type=float, default=None)
    parser.add_argument("--timeout", type=float, default=None,
                        help="Seconds to wait for each response frame")
    parser.add_argument("--logout", action="store_true",
                        help="Send a logout frame before disconnecting")
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("frames", nargs="*", help="Frame files or inline XML to send")
    return parser


def config_from_args(args: argparse.Namespace) -> ClientConfig:
    """Layer defaults, YAML file, env vars and parsed CLI args into a ClientConfig."""
    values = {}

    config_path = args.config or os.environ.get("EPP_CONFIG")
    if config_path:
        values.update(load_yaml(config_path))

    for name, var in _ENV_VARS.items():
        if var in os.environ:
            values[name] = os.environ[var]

    cli = {
        "host": args.host,
        "port": args.port,
        "ssl": args.ssl,
        "dom": args.dom,
        "verify_certs": False if args.insecure else None,
        "ca_file": args.ca_file,
        "cert_file": args.cert_file,
        "key_file": args.key_file,
        "connect_timeout": args.connect_timeout,
    }
    values.update({k: v for k, v in cli.items() if v is not None})

    return ClientConfig(**{k: _coerce(k, v) for k, v in values.items()})


def load_client_config(argv=None) -> ClientConfig:
    """Build a ClientConfig from the YAML file, env vars, then CLI args."""
    return config_from_args(build_parser().parse_args(argv))
