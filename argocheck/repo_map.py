"""
Repository to Argo CD application mapping.

Keys are normalized repository URLs so that the same repository referenced
as ``git@github.com:org/repo.git`` and ``https://github.com/org/repo`` lands
under one entry.
"""
import re
from typing import Dict, Iterator, List
from urllib.parse import urlparse

from argocheck.argo_client import Application
from argocheck.errors import InvalidRepoUrlError


# scp-like git syntax: [user@]host:path
SCP_URL_PATTERN = re.compile(r'^(?:(?P<user>[^@/]+)@)?(?P<host>[^:/]+):(?P<path>[^/].*)$')


def normalize_repo_url(repo_url: str) -> str:
    """
    Normalize a git repository URL to ``https://<host>/<path>``.

    Handles https, http, ssh and scp-like (``git@host:org/repo``) forms.
    Credentials are dropped, a trailing ``.git`` or slash is removed, and
    the whole URL is lowercased: GitHub and GitLab resolve repository
    paths case-insensitively, so ``Org/Repo`` and ``org/repo`` are one repo.

    Args:
        repo_url: Repository URL as written in an Application source

    Returns:
        Normalized repository URL

    Raises:
        InvalidRepoUrlError: If the URL has no host or an invalid port
    """
    url = repo_url.strip()

    if '://' not in url:
        match = SCP_URL_PATTERN.match(url)
        if match:
            url = f"ssh://{match.group('host')}/{match.group('path')}"
        else:
            url = f"https://{url}"

    try:
        parsed = urlparse(url)
        port = parsed.port
    except ValueError as e:
        raise InvalidRepoUrlError(f"invalid repository URL {repo_url!r}: {e}") from e

    host = (parsed.hostname or '').lower()
    if not host:
        raise InvalidRepoUrlError(f"invalid repository URL {repo_url!r}: no host")

    # ssh ports do not carry over to the https form
    if port and parsed.scheme in ('http', 'https'):
        host = f"{host}:{port}"

    path = parsed.path.rstrip('/').lower()
    if path.endswith('.git'):
        path = path[:-len('.git')]
    path = path.rstrip('/')

    return f"https://{host}{path}"


class RepoToApplicationsMap:
    """Ordered mapping of normalized repository URL to its Applications."""

    def __init__(self):
        self.repos: Dict[str, List[Application]] = {}

    def add(self, app: Application) -> bool:
        """
        Add an application under its source repository.

        Returns:
            False if the application has no source repository and was skipped

        Raises:
            InvalidRepoUrlError: If the source repository URL cannot be parsed
        """
        if not app.repo_url:
            return False

        key = normalize_repo_url(app.repo_url)
        self.repos.setdefault(key, []).append(app)
        return True

    def apps_for(self, repo_url: str) -> List[Application]:
        """Applications sourced from ``repo_url`` (any URL form, empty if unparseable)."""
        try:
            key = normalize_repo_url(repo_url)
        except InvalidRepoUrlError:
            return []
        return list(self.repos.get(key, []))

    def __contains__(self, repo_url: str) -> bool:
        return bool(self.apps_for(repo_url))

    def __iter__(self) -> Iterator[str]:
        return iter(self.repos)

    def __len__(self) -> int:
        return len(self.repos)
