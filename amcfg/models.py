from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict, Tuple

from .helpers import format_duration


DEFAULT_ALERTMANAGER_PORT = 9093
DEFAULT_TIMEOUT = timedelta(seconds=10)
DEFAULT_FILE_SD_REFRESH_INTERVAL = timedelta(minutes=5)


@dataclass(frozen=True)
class BasicAuth:
    username: str = ""
    password: str = ""
    password_file: str = ""

    def is_empty(self) -> bool:
        return not (self.username or self.password or self.password_file)

    def to_dict(self) -> Dict[str, Any]:
        data = {"username": self.username, "password": self.password}
        if self.password_file:
            data["password_file"] = self.password_file
        return data


@dataclass(frozen=True)
class TLSConfig:
    ca_file: str = ""
    cert_file: str = ""
    key_file: str = ""
    server_name: str = ""
    insecure_skip_verify: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ca_file": self.ca_file,
            "cert_file": self.cert_file,
            "key_file": self.key_file,
            "server_name": self.server_name,
            "insecure_skip_verify": self.insecure_skip_verify,
        }


@dataclass(frozen=True)
class HTTPClientConfig:
    """Transport settings handed to the HTTP client of a receiver."""

    basic_auth: BasicAuth = field(default_factory=BasicAuth)
    bearer_token: str = ""
    bearer_token_file: str = ""
    proxy_url: str = ""
    tls_config: TLSConfig = field(default_factory=TLSConfig)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if not self.basic_auth.is_empty():
            data["basic_auth"] = self.basic_auth.to_dict()
        if self.bearer_token:
            data["bearer_token"] = self.bearer_token
        if self.bearer_token_file:
            data["bearer_token_file"] = self.bearer_token_file
        if self.proxy_url:
            data["proxy_url"] = self.proxy_url
        if self.tls_config != TLSConfig():
            data["tls_config"] = self.tls_config.to_dict()
        return data


@dataclass(frozen=True)
class FileSDConfig:
    files: Tuple[str, ...] = ()
    refresh_interval: timedelta = DEFAULT_FILE_SD_REFRESH_INTERVAL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "files": list(self.files),
            "refresh_interval": format_duration(self.refresh_interval),
        }


@dataclass(frozen=True)
class EndpointsConfig:
    """
    Where a receiver lives.

    Static addresses may still carry a discovery prefix ("dns+", "dnssrv+",
    "dnssrvnoa+") for the resolver to expand later. The scheme never does.
    """

    scheme: str = "http"
    path_prefix: str = ""
    static_addresses: Tuple[str, ...] = ()
    file_sd_configs: Tuple[FileSDConfig, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scheme": self.scheme,
            "path_prefix": self.path_prefix,
            "static_configs": list(self.static_addresses),
            "file_sd_configs": [sd.to_dict() for sd in self.file_sd_configs],
        }


@dataclass(frozen=True)
class AlertmanagerConfig:
    """A client to a cluster of Alertmanager endpoints."""

    http_client_config: HTTPClientConfig = field(default_factory=HTTPClientConfig)
    endpoints_config: EndpointsConfig = field(default_factory=EndpointsConfig)
    timeout: timedelta = DEFAULT_TIMEOUT

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"http_config": self.http_client_config.to_dict()}
        # Endpoint fields are inlined into the receiver entry.
        data.update(self.endpoints_config.to_dict())
        data["timeout"] = format_duration(self.timeout)
        return data


@dataclass(frozen=True)
class AlertingConfig:
    alertmanagers: Tuple[AlertmanagerConfig, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"alertmanagers": [am.to_dict() for am in self.alertmanagers]}


def default_alertmanager_config() -> AlertmanagerConfig:
    return AlertmanagerConfig(
        endpoints_config=EndpointsConfig(
            scheme="http",
            static_addresses=(),
            file_sd_configs=(),
        ),
        timeout=DEFAULT_TIMEOUT,
    )
