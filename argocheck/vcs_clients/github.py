"""
GitHub webhook operations.
"""
import logging
from typing import Any, Dict, List, Optional

import requests

from argocheck.errors import HookNotFoundError, VcsError
from argocheck.vcs_clients.base import Hook, VcsClient, decode_json, repo_path_from_url


logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
HOOK_EVENTS = ['pull_request']


class GitHubClient(VcsClient):
    """Manages repository webhooks through the GitHub REST API."""

    def __init__(self, token: str, base_url: Optional[str] = None, timeout: float = 10.0):
        """
        Initialize GitHub client.

        Args:
            token: GitHub token with admin:repo_hook scope
            base_url: API base URL (GitHub Enterprise), defaults to api.github.com
            timeout: Per-request timeout in seconds
        """
        self.token = token
        self.api_base = (base_url or GITHUB_API_URL).rstrip('/')
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        return {
            'Authorization': f'token {self.token}',
            'Accept': 'application/vnd.github.v3+json'
        }

    def _list_hooks(self, repo_path: str) -> List[Dict[str, Any]]:
        """List all hooks on a repository, following pagination."""
        hooks = []
        next_url = f"{self.api_base}/repos/{repo_path}/hooks?per_page=100"

        while next_url:
            try:
                response = requests.get(next_url, headers=self._headers(), timeout=self.timeout)
            except requests.RequestException as e:
                raise VcsError(f"failed to list hooks for {repo_path}: {e}") from e

            if response.status_code != 200:
                raise VcsError(f"failed to list hooks for {repo_path}: HTTP {response.status_code}")

            hooks.extend(decode_json(response, list, f"failed to list hooks for {repo_path}"))
            next_url = response.links.get('next', {}).get('url')

        return hooks

    def get_hook_by_url(self, repo: str, url: str) -> Hook:
        repo_path = repo_path_from_url(repo)

        for hook in self._list_hooks(repo_path):
            hook_config = hook.get('config') or {}
            if hook_config.get('url') == url:
                return Hook(
                    url=url,
                    id=hook.get('id'),
                    events=hook.get('events') or [],
                    active=hook.get('active', True)
                )

        raise HookNotFoundError(f"no hook for {url} on {repo_path}")

    def create_hook(self, repo: str, url: str, secret: str) -> Hook:
        repo_path = repo_path_from_url(repo)
        payload = {
            'name': 'web',
            'active': True,
            'events': HOOK_EVENTS,
            'config': {
                'url': url,
                'content_type': 'json',
                'secret': secret,
                'insecure_ssl': '0'
            }
        }

        try:
            response = requests.post(
                f"{self.api_base}/repos/{repo_path}/hooks",
                headers=self._headers(),
                json=payload,
                timeout=self.timeout
            )
        except requests.RequestException as e:
            raise VcsError(f"failed to create hook for {repo_path}: {e}") from e

        if response.status_code != 201:
            raise VcsError(
                f"failed to create hook for {repo_path}: HTTP {response.status_code} {response.text}"
            )

        data = decode_json(response, dict, f"failed to create hook for {repo_path}")
        logger.info(f"Created GitHub hook {data.get('id')} on {repo_path}")
        return Hook(url=url, id=data.get('id'), events=data.get('events') or HOOK_EVENTS)
