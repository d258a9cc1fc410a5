"""
GitLab webhook operations.
"""
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from argocheck.errors import HookNotFoundError, VcsError
from argocheck.vcs_clients.base import Hook, VcsClient, decode_json, repo_path_from_url


logger = logging.getLogger(__name__)

GITLAB_URL = "https://gitlab.com"
HOOK_EVENTS = ['merge_requests_events', 'note_events']


class GitLabClient(VcsClient):
    """Manages project webhooks through the GitLab v4 REST API."""

    def __init__(self, token: str, base_url: Optional[str] = None, timeout: float = 10.0):
        """
        Initialize GitLab client.

        Args:
            token: Personal or project access token with api scope
            base_url: GitLab instance URL, defaults to gitlab.com
            timeout: Per-request timeout in seconds
        """
        self.token = token
        self.api_base = f"{(base_url or GITLAB_URL).rstrip('/')}/api/v4"
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        return {'PRIVATE-TOKEN': self.token}

    def _hooks_url(self, repo: str) -> str:
        project = quote(repo_path_from_url(repo), safe='')
        return f"{self.api_base}/projects/{project}/hooks"

    def _list_hooks(self, repo: str) -> List[Dict[str, Any]]:
        hooks = []
        page = 1

        while page:
            try:
                response = requests.get(
                    self._hooks_url(repo),
                    headers=self._headers(),
                    params={'per_page': 100, 'page': page},
                    timeout=self.timeout
                )
            except requests.RequestException as e:
                raise VcsError(f"failed to list hooks for {repo}: {e}") from e

            if response.status_code != 200:
                raise VcsError(f"failed to list hooks for {repo}: HTTP {response.status_code}")

            hooks.extend(decode_json(response, list, f"failed to list hooks for {repo}"))

            next_page = response.headers.get('X-Next-Page')
            try:
                page = int(next_page) if next_page else None
            except ValueError as e:
                raise VcsError(f"failed to list hooks for {repo}: bad X-Next-Page {next_page!r}") from e

        return hooks

    def get_hook_by_url(self, repo: str, url: str) -> Hook:
        for hook in self._list_hooks(repo):
            if hook.get('url') == url:
                return Hook(
                    url=url,
                    id=hook.get('id'),
                    events=[event for event in HOOK_EVENTS if hook.get(event)]
                )

        raise HookNotFoundError(f"no hook for {url} on {repo}")

    def create_hook(self, repo: str, url: str, secret: str) -> Hook:
        payload = {'url': url, 'token': secret, 'enable_ssl_verification': True}
        payload.update({event: True for event in HOOK_EVENTS})

        try:
            response = requests.post(
                self._hooks_url(repo),
                headers=self._headers(),
                json=payload,
                timeout=self.timeout
            )
        except requests.RequestException as e:
            raise VcsError(f"failed to create hook for {repo}: {e}") from e

        if response.status_code != 201:
            raise VcsError(
                f"failed to create hook for {repo}: HTTP {response.status_code} {response.text}"
            )

        data = decode_json(response, dict, f"failed to create hook for {repo}")
        logger.info(f"Created GitLab hook {data.get('id')} on {repo}")
        return Hook(url=url, id=data.get('id'), events=list(HOOK_EVENTS))
