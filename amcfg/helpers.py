import re
from datetime import timedelta
from typing import Tuple


DURATION_RE = re.compile(
    r"^(?:(\d+)y)?(?:(\d+)w)?(?:(\d+)d)?(?:(\d+)h)?(?:(\d+)m)?(?:(\d+)s)?(?:(\d+)ms)?$"
)

# Milliseconds per unit, largest first. A year is always 365 days.
DURATION_UNITS = [
    ("y", 365 * 24 * 60 * 60 * 1000),
    ("w", 7 * 24 * 60 * 60 * 1000),
    ("d", 24 * 60 * 60 * 1000),
    ("h", 60 * 60 * 1000),
    ("m", 60 * 1000),
    ("s", 1000),
    ("ms", 1),
]


def parse_duration(value: str) -> timedelta:
    """
    Parses a Prometheus style duration such as "10s", "1m30s" or "1d".

    Raises:
        ValueError: If the string is empty or not a valid duration.
    """
    if value == "0":
        return timedelta(0)
    match = DURATION_RE.match(value)
    if not value or not match:
        raise ValueError(f"not a valid duration string: {value!r}")

    total_ms = 0
    for group, (_, unit_ms) in zip(match.groups(), DURATION_UNITS):
        if group is not None:
            total_ms += int(group) * unit_ms
    return timedelta(milliseconds=total_ms)


def format_duration(value: timedelta) -> str:
    """Renders a timedelta in the same notation parse_duration accepts."""
    ms = value // timedelta(milliseconds=1)
    if ms == 0:
        return "0s"

    parts = []
    for unit, unit_ms in DURATION_UNITS:
        count, ms = divmod(ms, unit_ms)
        if count:
            parts.append(f"{count}{unit}")
    return "".join(parts)


def split_host_port(hostport: str) -> Tuple[str, str]:
    """
    Splits "host:port", "[v6-host]:port" into host and port.

    Raises:
        ValueError: If the port is missing, there are too many colons or the
                    brackets are unbalanced.
    """
    colon = hostport.rfind(":")
    if colon < 0:
        raise ValueError(f"address {hostport}: missing port in address")

    if hostport.startswith("["):
        end = hostport.find("]")
        if end < 0:
            raise ValueError(f"address {hostport}: missing ']' in address")
        if end + 1 == len(hostport):
            raise ValueError(f"address {hostport}: missing port in address")
        if end + 1 != colon:
            if hostport[end + 1] == ":":
                raise ValueError(f"address {hostport}: too many colons in address")
            raise ValueError(f"address {hostport}: missing port in address")
        host = hostport[1:end]
        if "[" in hostport[1:] or "]" in hostport[end + 1 :]:
            raise ValueError(f"address {hostport}: unexpected bracket in address")
    else:
        host = hostport[:colon]
        if ":" in host:
            raise ValueError(f"address {hostport}: too many colons in address")
        if "[" in hostport or "]" in hostport:
            raise ValueError(f"address {hostport}: unexpected bracket in address")

    return host, hostport[colon + 1 :]
