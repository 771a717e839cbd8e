import dataclasses
import logging
import sys
from argparse import Namespace
from datetime import timedelta
from typing import Any, Callable, Dict, List, Tuple, Union

import yaml
from rich import print

from .errors import AmcfgError, ConfigParseError
from .helpers import parse_duration
from .models import (
    AlertingConfig,
    AlertmanagerConfig,
    BasicAuth,
    EndpointsConfig,
    FileSDConfig,
    HTTPClientConfig,
    TLSConfig,
    default_alertmanager_config,
)


ALERTMANAGER_KEYS = {
    "http_config",
    "scheme",
    "path_prefix",
    "static_configs",
    "file_sd_configs",
    "timeout",
}
HTTP_CONFIG_KEYS = {
    "basic_auth",
    "bearer_token",
    "bearer_token_file",
    "proxy_url",
    "tls_config",
}
BASIC_AUTH_KEYS = {"username", "password", "password_file"}
TLS_CONFIG_KEYS = {
    "ca_file",
    "cert_file",
    "key_file",
    "server_name",
    "insecure_skip_verify",
}
FILE_SD_KEYS = {"files", "refresh_interval"}

TRUE_WORDS = {"y", "yes", "true", "on"}


class ScalarBool(str):
    """A YAML boolean that keeps the text it was written as, e.g. "on"."""

    @property
    def truth(self) -> bool:
        return self.lower() in TRUE_WORDS


class StrictLoader(yaml.SafeLoader):
    """SafeLoader that rejects duplicated mapping keys."""

    def construct_mapping(self, node, deep=False):
        if isinstance(node, yaml.MappingNode):
            seen = set()
            for key_node, _ in node.value:
                if key_node.tag == "tag:yaml.org,2002:merge":
                    continue
                key = self.construct_object(key_node, deep=deep)
                try:
                    duplicate = key in seen
                except TypeError:
                    continue
                if duplicate:
                    raise yaml.constructor.ConstructorError(
                        "while constructing a mapping",
                        node.start_mark,
                        f"found duplicate key {key!r}",
                        key_node.start_mark,
                    )
                seen.add(key)
        return super().construct_mapping(node, deep=deep)

    def construct_scalar_bool(self, node):
        return ScalarBool(self.construct_scalar(node))


StrictLoader.add_constructor(
    "tag:yaml.org,2002:bool", StrictLoader.construct_scalar_bool
)


def _expect_mapping(value: Any, path: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigParseError(
            f"{path}: expected a mapping, but got {type(value).__name__}"
        )
    return value


def _check_keys(raw: Dict[str, Any], allowed: set, path: str) -> None:
    for key in raw:
        if key not in allowed:
            raise ConfigParseError(f"{path}: field {key} not found in type")


def _as_str(value: Any, path: str) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise ConfigParseError(
            f"{path}: expected a string, but got {type(value).__name__}"
        )
    return str(value)


def _as_bool(value: Any, path: str) -> bool:
    if value is None:
        return False
    if isinstance(value, ScalarBool):
        return value.truth
    if not isinstance(value, bool):
        raise ConfigParseError(
            f"{path}: expected a boolean, but got {type(value).__name__}"
        )
    return value


def _as_str_list(value: Any, path: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise ConfigParseError(
            f"{path}: expected a list, but got {type(value).__name__}"
        )
    return tuple(_as_str(item, f"{path}[{i}]") for i, item in enumerate(value))


def _as_duration(value: Any, path: str) -> timedelta:
    if value is None:
        return timedelta(0)
    text = _as_str(value, path)
    try:
        return parse_duration(text)
    except ValueError as e:
        raise ConfigParseError(f"{path}: {e}") from e


def _overlay(
    base: Any,
    raw: Dict[str, Any],
    allowed: set,
    path: str,
    fields: Dict[str, Tuple[str, Callable[[Any, str], Any]]],
) -> Any:
    """
    Applies the keys present in `raw` on top of `base`.

    `fields` maps a YAML key to the dataclass attribute it sets and the
    converter for its value. Keys missing from `raw` keep the value `base`
    already holds.
    """
    _check_keys(raw, allowed, path)
    changes = {}
    for key, value in raw.items():
        attr, convert = fields[key]
        changes[attr] = convert(value, f"{path}.{key}")
    return dataclasses.replace(base, **changes)


def overlay_basic_auth(base: BasicAuth, raw: Any, path: str) -> BasicAuth:
    return _overlay(
        base,
        _expect_mapping(raw, path),
        BASIC_AUTH_KEYS,
        path,
        {key: (key, _as_str) for key in BASIC_AUTH_KEYS},
    )


def overlay_tls_config(base: TLSConfig, raw: Any, path: str) -> TLSConfig:
    fields = {key: (key, _as_str) for key in TLS_CONFIG_KEYS}
    fields["insecure_skip_verify"] = ("insecure_skip_verify", _as_bool)
    return _overlay(base, _expect_mapping(raw, path), TLS_CONFIG_KEYS, path, fields)


def overlay_http_client_config(
    base: HTTPClientConfig, raw: Any, path: str
) -> HTTPClientConfig:
    fields = {
        "basic_auth": (
            "basic_auth",
            lambda value, p: overlay_basic_auth(base.basic_auth, value, p),
        ),
        "bearer_token": ("bearer_token", _as_str),
        "bearer_token_file": ("bearer_token_file", _as_str),
        "proxy_url": ("proxy_url", _as_str),
        "tls_config": (
            "tls_config",
            lambda value, p: overlay_tls_config(base.tls_config, value, p),
        ),
    }
    return _overlay(base, _expect_mapping(raw, path), HTTP_CONFIG_KEYS, path, fields)


def build_file_sd_config(raw: Any, path: str) -> FileSDConfig:
    return _overlay(
        FileSDConfig(),
        _expect_mapping(raw, path),
        FILE_SD_KEYS,
        path,
        {
            "files": ("files", _as_str_list),
            "refresh_interval": ("refresh_interval", _as_duration),
        },
    )


def _as_file_sd_configs(value: Any, path: str) -> Tuple[FileSDConfig, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise ConfigParseError(
            f"{path}: expected a list, but got {type(value).__name__}"
        )
    return tuple(
        build_file_sd_config(item, f"{path}[{i}]") for i, item in enumerate(value)
    )


def overlay_alertmanager_config(
    base: AlertmanagerConfig, raw: Any, path: str = "alertmanagers[0]"
) -> AlertmanagerConfig:
    """
    Overlays one YAML receiver entry on top of `base`.

    The endpoint keys (scheme, path_prefix, static_configs, file_sd_configs)
    sit directly in the entry and are applied to `base.endpoints_config`.

    Raises:
        ConfigParseError: On unknown keys or values of the wrong type.
    """
    raw = _expect_mapping(raw, path)
    _check_keys(raw, ALERTMANAGER_KEYS, path)

    endpoint_fields = {
        "scheme": ("scheme", _as_str),
        "path_prefix": ("path_prefix", _as_str),
        "static_configs": ("static_addresses", _as_str_list),
        "file_sd_configs": ("file_sd_configs", _as_file_sd_configs),
    }
    endpoints_raw = {k: v for k, v in raw.items() if k in endpoint_fields}
    endpoints: EndpointsConfig = _overlay(
        base.endpoints_config,
        endpoints_raw,
        set(endpoint_fields),
        path,
        endpoint_fields,
    )

    changes: Dict[str, Any] = {"endpoints_config": endpoints}
    if "http_config" in raw:
        changes["http_client_config"] = overlay_http_client_config(
            base.http_client_config, raw["http_config"], f"{path}.http_config"
        )
    if "timeout" in raw:
        changes["timeout"] = _as_duration(raw["timeout"], f"{path}.timeout")
    return dataclasses.replace(base, **changes)


def load_alerting_config(document: Union[bytes, str]) -> AlertingConfig:
    """
    Loads the list of Alertmanager clients from a YAML document.

    Every entry starts out as the default configuration and the fields found
    in the document are applied on top of it.

    Args:
        document: UTF-8 YAML content with an `alertmanagers` root key.

    Returns:
        AlertingConfig: The receivers in document order.

    Raises:
        ConfigParseError: If the document is not valid YAML or holds fields
                          that are not recognised.
    """
    if isinstance(document, bytes):
        try:
            document = document.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ConfigParseError(f"document is not valid UTF-8: {e}") from e

    try:
        content = yaml.load(document, Loader=StrictLoader)
    except yaml.YAMLError as e:
        raise ConfigParseError(f"error parsing YAML document: {e}") from e

    root = _expect_mapping(content, "document")
    _check_keys(root, {"alertmanagers"}, "document")

    entries = root.get("alertmanagers")
    if entries is None:
        entries = []
    if not isinstance(entries, list):
        raise ConfigParseError(
            f"alertmanagers: expected a list, but got {type(entries).__name__}"
        )

    alertmanagers: List[AlertmanagerConfig] = []
    for i, entry in enumerate(entries):
        cfg = overlay_alertmanager_config(
            default_alertmanager_config(), entry, f"alertmanagers[{i}]"
        )
        alertmanagers.append(cfg)
        logging.debug(
            f"Loaded alertmanager client {i}: scheme={cfg.endpoints_config.scheme} "
            f"addresses={list(cfg.endpoints_config.static_addresses)}"
        )

    logging.debug(f"Loaded {len(alertmanagers)} alertmanager clients.")
    return AlertingConfig(alertmanagers=tuple(alertmanagers))


def load_alerting_config_file(file_path: str) -> AlertingConfig:
    logging.debug(f"Attempting to read YAML file: {file_path}")
    with open(file_path, "rb") as file:
        return load_alerting_config(file.read())


def dump_alerting_config(config: AlertingConfig) -> str:
    """Renders the fully defaulted configuration back to YAML."""
    return yaml.safe_dump(
        config.to_dict(),
        indent=2,
        default_flow_style=False,
        sort_keys=False,
    )


def render(args: Namespace) -> int:
    try:
        config = load_alerting_config_file(args.file_path)
    except FileNotFoundError:
        print(f"[red]Error: Config file not found: {args.file_path}[/red]")
        return 1
    except OSError as e:
        logging.error(f"Error reading {args.file_path}: {e}")
        return 1
    except AmcfgError as e:
        logging.error(f"Error loading {args.file_path}: {e}")
        return 1

    sys.stdout.write(dump_alerting_config(config))
    return 0
