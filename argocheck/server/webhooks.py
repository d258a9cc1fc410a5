"""
Webhook reconciliation.

Makes sure every repository in the repository map has a webhook that calls
back into this service. Each repository is reconciled independently: a
failure on one is logged and the loop moves on.
"""
import logging
import posixpath
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List
from urllib.parse import urlparse, urlunparse

from argocheck.config import ServiceConfig
from argocheck.errors import ConfigurationError, HookNotFoundError, VcsError
from argocheck.vcs_clients.base import VcsClient


logger = logging.getLogger(__name__)

HOOKS_PATH_PREFIX = "/hooks"


class HookState(str, Enum):
    """Final reconciliation state of one repository."""
    EXISTS = "exists"       # hook already registered, nothing to do
    ENSURED = "ensured"     # hook created
    FAILED = "failed"


def hooks_prefix(url_prefix: str = "") -> str:
    """
    Path under which the hook-ingestion routes are mounted.

    Joins the optional prefix with ``/hooks``, collapsing duplicate
    separators, resolving ``.`` and ``..`` segments and dropping any
    trailing slash.

    Args:
        url_prefix: Optional path prefix (e.g. 'argocheck' or '/ci/')

    Returns:
        Absolute path such as '/hooks' or '/argocheck/hooks'
    """
    segments = [s for s in f"{url_prefix}/{HOOKS_PATH_PREFIX}".split('/') if s]
    return posixpath.normpath('/' + '/'.join(segments))


def webhook_url(url_base: str, url_prefix: str = "") -> str:
    """
    Externally reachable callback URL registered on each repository.

    Args:
        url_base: Public base URL of this service (e.g. 'https://ci.example.com')
        url_prefix: Optional path prefix

    Returns:
        Base URL joined with the hooks prefix

    Raises:
        ConfigurationError: If url_base is not an absolute http(s) URL
    """
    parsed = urlparse(url_base)
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        raise ConfigurationError(f"'webhook-url-base' must be an absolute http(s) URL, got {url_base!r}")

    base_segments = [s for s in parsed.path.split('/') if s]
    path = posixpath.normpath('/'.join([''] + base_segments) + hooks_prefix(url_prefix))

    return urlunparse(parsed._replace(path=path, params='', query='', fragment=''))


@dataclass
class ReconcileReport:
    """Outcome of one reconciliation pass."""
    webhook_url: str = ""
    states: Dict[str, HookState] = field(default_factory=dict)

    def repos_in(self, state: HookState) -> List[str]:
        return [repo for repo, s in self.states.items() if s == state]

    @property
    def failed(self) -> List[str]:
        return self.repos_in(HookState.FAILED)


class WebhookReconciler:
    """Ensures one webhook per monitored repository."""

    def __init__(self, cfg: ServiceConfig, vcs_client: VcsClient):
        self.cfg = cfg
        self.vcs_client = vcs_client

    def check_preconditions(self) -> str:
        """
        Validate settings needed to reconcile.

        Returns:
            The composed callback URL

        Raises:
            ConfigurationError: If monitor-all-applications is off or
                webhook-url-base is unset or invalid
        """
        if not self.cfg.monitor_all_applications:
            raise ConfigurationError("must enable 'monitor-all-applications' to create webhooks")

        if not self.cfg.webhook_url_base:
            raise ConfigurationError("must define 'webhook-url-base' to create webhooks")

        return webhook_url(self.cfg.webhook_url_base, self.cfg.url_prefix)

    def run(self) -> ReconcileReport:
        """
        Reconcile hooks for every repository in the current map.

        Returns:
            ReconcileReport with the final state of each repository
            (empty when ensure-webhooks is disabled)

        Raises:
            ConfigurationError: If required settings are missing
        """
        if not self.cfg.ensure_webhooks:
            return ReconcileReport()

        full_url = self.check_preconditions()
        report = ReconcileReport(webhook_url=full_url)

        repos = list(self.cfg.repo_map)
        logger.info(f"Ensuring webhooks for {len(repos)} repositories -> {full_url}")

        for repo in repos:
            report.states[repo] = self.reconcile_repo(repo, full_url)

        failed = report.failed
        if failed:
            logger.warning(f"Webhook reconciliation failed for {len(failed)} of {len(repos)} repositories")

        return report

    def reconcile_repo(self, repo: str, full_url: str) -> HookState:
        """Run one repository through lookup and, if absent, creation."""
        try:
            self.vcs_client.get_hook_by_url(repo, full_url)
            logger.debug(f"Hook already present for {repo}")
            return HookState.EXISTS
        except HookNotFoundError:
            logger.debug(f"No hook for {repo}, creating one")
        except VcsError as e:
            logger.warning(f"Failed to get hook for {repo}: {e}")
            return HookState.FAILED
        except Exception as e:
            logger.warning(f"Unexpected error getting hook for {repo}: {e!r}")
            return HookState.FAILED

        try:
            self.vcs_client.create_hook(repo, full_url, self.cfg.webhook_secret)
        except VcsError as e:
            logger.warning(f"Failed to create hook for {repo}: {e}")
            return HookState.FAILED
        except Exception as e:
            logger.warning(f"Unexpected error creating hook for {repo}: {e!r}")
            return HookState.FAILED

        logger.info(f"Created hook for {repo}")
        return HookState.ENSURED
