"""
VCS provider clients.
"""
from argocheck.errors import ConfigurationError, HookNotFoundError, VcsError
from argocheck.vcs_clients.base import Hook, VcsClient
from argocheck.vcs_clients.github import GitHubClient
from argocheck.vcs_clients.gitlab import GitLabClient


VCS_CLIENTS = {
    'github': GitHubClient,
    'gitlab': GitLabClient,
}


def get_vcs_client(cfg) -> VcsClient:
    """
    Build the VCS client selected by ``cfg.vcs_type``.

    Raises:
        ConfigurationError: If the VCS type is unknown
    """
    client_cls = VCS_CLIENTS.get(cfg.vcs_type)
    if client_cls is None:
        raise ConfigurationError(
            f"unknown vcs-type {cfg.vcs_type!r} (expected one of: {', '.join(sorted(VCS_CLIENTS))})"
        )

    return client_cls(
        token=cfg.vcs_token,
        base_url=cfg.vcs_base_url or None,
        timeout=cfg.vcs_timeout
    )


__all__ = [
    'GitHubClient',
    'GitLabClient',
    'Hook',
    'HookNotFoundError',
    'VcsClient',
    'VcsError',
    'get_vcs_client',
]
