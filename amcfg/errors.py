class AmcfgError(Exception):
    """Base class for all errors raised while building receiver configuration."""


class ConfigParseError(AmcfgError):
    """Raised when a YAML document is malformed or holds unrecognised fields."""


class AddressParseError(AmcfgError):
    """Raised when an address string is not a syntactically valid URL."""
