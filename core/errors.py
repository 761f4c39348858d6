# Error types raised while loading config and naming portals


class BridgeConfigError(Exception):
    """Raised when the bridge config cannot be accepted. The bridge must not start."""


class TemplateError(BridgeConfigError):
    pass


class ConfigError(BridgeConfigError):
    pass


class ChannelLookupError(LookupError):
    """Raised when Discord metadata needed for a name could not be resolved."""
