"""
Base VCS client interface for webhook management.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import urlparse

from argocheck.errors import InvalidRepoUrlError, VcsError
from argocheck.repo_map import normalize_repo_url


@dataclass
class Hook:
    """A webhook registered on a remote repository."""
    url: str
    id: Optional[int] = None
    events: List[str] = field(default_factory=list)
    active: bool = True


def repo_path_from_url(repo_url: str) -> str:
    """
    Extract the ``owner/name`` path from a repository URL.

    Raises:
        VcsError: If the URL has no repository path
    """
    try:
        path = urlparse(normalize_repo_url(repo_url)).path.strip('/')
    except InvalidRepoUrlError as e:
        raise VcsError(str(e)) from e
    if '/' not in path:
        raise VcsError(f"cannot determine repository path from {repo_url!r}")
    return path


def decode_json(response, expected_type, what: str):
    """
    Decode a provider response body.

    Raises:
        VcsError: If the body is not JSON of the expected type (e.g. an SSO
            or proxy HTML page served with a 200)
    """
    try:
        data = response.json()
    except ValueError as e:
        raise VcsError(f"{what}: response is not valid JSON: {e}") from e

    if not isinstance(data, expected_type):
        raise VcsError(f"{what}: unexpected response payload {type(data).__name__}")
    return data


class VcsClient(ABC):
    """
    Abstract base class for VCS provider clients.

    Implementations talk to one provider's REST API and translate its
    responses into Hook records and argocheck errors.
    """

    @abstractmethod
    def get_hook_by_url(self, repo: str, url: str) -> Hook:
        """
        Find the hook on ``repo`` whose target is ``url``.

        Args:
            repo: Repository URL
            url: Hook callback URL

        Returns:
            Matching Hook

        Raises:
            HookNotFoundError: If no hook targets ``url``
            VcsError: If the provider call fails
        """
        pass

    @abstractmethod
    def create_hook(self, repo: str, url: str, secret: str) -> Hook:
        """
        Register a hook on ``repo`` that calls ``url`` signed with ``secret``.

        Raises:
            VcsError: If the provider call fails
        """
        pass
