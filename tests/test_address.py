import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from datetime import timedelta

import pytest

from amcfg.address import DiscoveryQType, build_alertmanager_config
from amcfg.errors import AddressParseError
from amcfg.models import BasicAuth


def test_discovery_qtype_order():
    """Prefixes are tried in a fixed order and only A lookups get a default port."""
    assert [q.prefix for q in DiscoveryQType] == ["dns+", "dnssrv+", "dnssrvnoa+"]
    assert [q.auto_port for q in DiscoveryQType] == [True, False, False]


def test_dns_prefix_without_port():
    config = build_alertmanager_config("dns+http://example.com/api", timedelta(seconds=5))
    endpoints = config.endpoints_config
    assert endpoints.scheme == "http"
    assert endpoints.static_addresses == ("dns+example.com:9093",)
    assert endpoints.path_prefix == "/api"
    assert endpoints.file_sd_configs == ()
    assert config.timeout == timedelta(seconds=5)
    assert config.http_client_config.basic_auth == BasicAuth()


def test_dns_prefix_keeps_explicit_port():
    config = build_alertmanager_config("dns+https://example.com:1234", timedelta(seconds=10))
    assert config.endpoints_config.scheme == "https"
    assert config.endpoints_config.static_addresses == ("dns+example.com:1234",)


def test_dns_prefix_ipv6():
    config = build_alertmanager_config("dns+http://[::1]", timedelta(seconds=10))
    assert config.endpoints_config.static_addresses == ("dns+[::1]:9093",)


@pytest.mark.parametrize(
    "address, expected",
    [
        ("dnssrv+http://_am._tcp.example.com", "dnssrv+_am._tcp.example.com"),
        ("dnssrv+http://example.com:9093", "dnssrv+example.com:9093"),
        ("dnssrvnoa+https://_am._tcp.example.com", "dnssrvnoa+_am._tcp.example.com"),
        ("dnssrvnoa+http://example.com:9093", "dnssrvnoa+example.com:9093"),
    ],
)
def test_srv_prefixes_are_not_auto_ported(address, expected):
    config = build_alertmanager_config(address, timedelta(seconds=10))
    assert config.endpoints_config.static_addresses == (expected,)
    assert "+" not in config.endpoints_config.scheme


def test_prefix_matched_case_insensitively():
    config = build_alertmanager_config("DNS+HTTP://example.com", timedelta(seconds=10))
    assert config.endpoints_config.scheme == "http"
    assert config.endpoints_config.static_addresses == ("dns+example.com:9093",)


def test_static_address_with_auth():
    config = build_alertmanager_config(
        "https://user:pw@am.internal:9095", timedelta(seconds=10)
    )
    assert config.endpoints_config.scheme == "https"
    assert config.endpoints_config.static_addresses == ("am.internal:9095",)
    assert config.endpoints_config.path_prefix == ""
    assert config.http_client_config.basic_auth == BasicAuth(username="user", password="pw")


def test_static_address_gets_no_default_port():
    config = build_alertmanager_config("http://am.internal", timedelta(seconds=10))
    assert config.endpoints_config.static_addresses == ("am.internal",)


def test_user_without_password():
    config = build_alertmanager_config("http://user@am:9093", timedelta(seconds=10))
    assert config.http_client_config.basic_auth == BasicAuth(username="user", password="")


def test_empty_user_info():
    config = build_alertmanager_config("http://@am:9093", timedelta(seconds=10))
    assert config.http_client_config.basic_auth == BasicAuth()
    assert config.endpoints_config.static_addresses == ("am:9093",)


def test_escaped_user_info():
    config = build_alertmanager_config("http://us%40er:p%3Aw@am:9093", timedelta(seconds=10))
    assert config.http_client_config.basic_auth == BasicAuth(username="us@er", password="p:w")


def test_unknown_prefix_is_left_alone():
    config = build_alertmanager_config("consul+http://am:9093", timedelta(seconds=10))
    assert config.endpoints_config.scheme == "consul+http"
    assert config.endpoints_config.static_addresses == ("am:9093",)


@pytest.mark.parametrize(
    "address",
    [
        "://bad",
        "",
        "am.internal",
        "http://",
        "http:///path",
        "http://am:port",
        "http://am:9093/%zz",
        "http://am\n:9093",
        "1http://am:9093",
    ],
)
def test_invalid_address(address):
    with pytest.raises(AddressParseError):
        build_alertmanager_config(address, timedelta(seconds=10))


@pytest.mark.parametrize(
    "address, expected",
    [
        ("dns+http://am:70000", "dns+am:70000"),
        ("http://am:70000", "am:70000"),
        ("http://am:", "am:"),
        ("dns+http://[::1]:99999", "dns+[::1]:99999"),
    ],
)
def test_large_or_empty_port_is_accepted(address, expected):
    config = build_alertmanager_config(address, timedelta(seconds=1))
    assert config.endpoints_config.static_addresses == (expected,)


@pytest.mark.parametrize("address", ["http://am:90a", "http://[::1]x:9093", "http://am:+1"])
def test_non_numeric_port(address):
    with pytest.raises(AddressParseError):
        build_alertmanager_config(address, timedelta(seconds=1))
