"""Exception hierarchy shared by both pipelines."""


class PawgrabError(Exception):
    """Base class for every error the downloaders raise on purpose."""


class NetworkError(PawgrabError):
    """A request failed or came back with a non-success status."""


class StructureError(PawgrabError):
    """Expected content was missing from a fetched document."""


class ConfigError(PawgrabError):
    """An option value is not supported."""


class FilesystemError(PawgrabError):
    """A directory or file could not be created or written."""
