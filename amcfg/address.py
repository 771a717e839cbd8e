import logging
import re
import sys
from argparse import Namespace
from datetime import timedelta
from enum import Enum
from urllib.parse import unquote, urlsplit

from .config_loader import dump_alerting_config
from .errors import AddressParseError
from .helpers import parse_duration, split_host_port
from .models import (
    DEFAULT_ALERTMANAGER_PORT,
    AlertingConfig,
    AlertmanagerConfig,
    BasicAuth,
    EndpointsConfig,
    HTTPClientConfig,
)


SCHEME_RE = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.\-]*):")
BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")
CONTROL_CHAR_RE = re.compile(r"[\x00-\x1f\x7f]")
PORT_RE = re.compile(r"^(:[0-9]*)?$")


class DiscoveryQType(Enum):
    """DNS query strategies the discovery resolver understands, in match order."""

    A = "dns"
    SRV = "dnssrv"
    SRV_NO_A = "dnssrvnoa"

    @property
    def prefix(self) -> str:
        return self.value + "+"

    @property
    def auto_port(self) -> bool:
        # SRV records carry the port themselves.
        return self is DiscoveryQType.A


def _parse_address(address: str):
    if CONTROL_CHAR_RE.search(address):
        raise AddressParseError(
            f"parse {address!r}: invalid control character in URL"
        )
    if not SCHEME_RE.match(address):
        raise AddressParseError(f"parse {address!r}: missing protocol scheme")
    if BAD_ESCAPE_RE.search(address):
        raise AddressParseError(f"parse {address!r}: invalid URL escape")

    try:
        parsed = urlsplit(address)
    except ValueError as e:
        raise AddressParseError(f"parse {address!r}: {e}") from e
    host = parsed.netloc.rpartition("@")[2]
    if not host:
        raise AddressParseError(f"parse {address!r}: missing host")
    if " " in host:
        raise AddressParseError(f"parse {address!r}: invalid character in host name")
    if host.startswith("["):
        port = host[host.find("]") + 1 :]
    else:
        port = host[host.rfind(":") :] if ":" in host else ""
    if not PORT_RE.match(port):
        raise AddressParseError(f"parse {address!r}: invalid port {port!r} after host")
    return parsed, host


def _basic_auth_from_netloc(netloc: str) -> BasicAuth:
    userinfo, at, _ = netloc.rpartition("@")
    if not at or not userinfo:
        return BasicAuth()
    # A password that is missing is an empty password.
    username, _, password = userinfo.partition(":")
    return BasicAuth(username=unquote(username), password=unquote(password))


def build_alertmanager_config(address: str, timeout: timedelta) -> AlertmanagerConfig:
    """
    Builds an Alertmanager client configuration from a single address.

    The address has the form
    ``[<dns type>+]<scheme>://[<user>[:<password>]@]<host>[:<port>][/<path>]``.
    A DNS discovery prefix is moved from the scheme to the host, so that
    ``dns+http://am:9093`` ends up with scheme ``http`` and the static address
    ``dns+am:9093``. Plain ``dns+`` lookups get the default Alertmanager port
    when the host has none. Unknown prefixes are left in the scheme as they are.

    Args:
        address: The address to normalise.
        timeout: Request timeout for the client.

    Returns:
        AlertmanagerConfig: A configuration with a single static address.

    Raises:
        AddressParseError: If the address is not a valid URL.
    """
    parsed, parsed_host = _parse_address(address)

    scheme = parsed.scheme
    host = parsed_host
    for qtype in DiscoveryQType:
        if scheme.lower().startswith(qtype.prefix):
            scheme = scheme[len(qtype.prefix) :]
            host = qtype.prefix + parsed_host
            if qtype.auto_port:
                try:
                    split_host_port(parsed_host)
                except ValueError:
                    host = f"{host}:{DEFAULT_ALERTMANAGER_PORT}"
            logging.debug(
                f"Address uses {qtype.name} discovery, resolver address is {host}"
            )
            break

    return AlertmanagerConfig(
        http_client_config=HTTPClientConfig(
            basic_auth=_basic_auth_from_netloc(parsed.netloc)
        ),
        endpoints_config=EndpointsConfig(
            scheme=scheme,
            path_prefix=unquote(parsed.path),
            static_addresses=(host,),
        ),
        timeout=timeout,
    )


def build(args: Namespace) -> int:
    try:
        timeout = parse_duration(args.timeout)
    except ValueError as e:
        logging.error(f"Invalid --timeout: {e}")
        return 1

    try:
        config = build_alertmanager_config(args.address, timeout)
    except AddressParseError as e:
        logging.error(f"Invalid address: {e}")
        return 1

    sys.stdout.write(dump_alerting_config(AlertingConfig(alertmanagers=(config,))))
    return 0
