"""
Exception types shared across argocheck.
"""


class ArgocheckError(Exception):
    """Base class for all argocheck errors."""
    pass


class ConfigurationError(ArgocheckError):
    """Raised when a required setting is missing or invalid."""
    pass


class IndexingError(ArgocheckError):
    """Raised when the repository to application map cannot be built."""
    pass


class ArgoClientError(ArgocheckError):
    """Raised when the Argo CD application listing fails."""
    pass


class VcsError(ArgocheckError):
    """Raised when a VCS provider call fails (transport, auth, bad response)."""
    pass


class HookNotFoundError(VcsError):
    """Raised by a VCS client when no hook matches the requested URL."""
    pass


class InvalidRepoUrlError(ArgocheckError):
    """Raised when a repository URL cannot be parsed."""
    pass
