class QtrnError(Exception):
    """Base class for failures that end a qtrn command."""


class ProviderError(QtrnError):
    """The historical quote provider failed (network, unknown symbol, rate limit...)."""


class EmptyResultError(QtrnError):
    """The provider answered but returned no bars for the requested range."""


class DisplayInitError(QtrnError):
    """The terminal display session could not be acquired."""
