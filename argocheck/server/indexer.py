"""
Application indexer.

Builds the repository to application map from Argo CD so that inbound
webhook events can be resolved to the Applications they affect.
"""
import logging

from argocheck.argo_client import ArgoClient
from argocheck.config import ServiceConfig
from argocheck.errors import ArgoClientError, IndexingError, InvalidRepoUrlError
from argocheck.repo_map import RepoToApplicationsMap


logger = logging.getLogger(__name__)


class ApplicationIndexer:
    """Groups Argo CD Applications by their source repository."""

    def __init__(self, cfg: ServiceConfig, argo_client: ArgoClient):
        self.cfg = cfg
        self.argo_client = argo_client

    def run(self) -> None:
        """
        Rebuild the repository map and install it on the config.

        No-op when monitor-all-applications is disabled. The new map is
        built locally and swapped in once, so a failed fetch leaves the
        previous map in place. Applications with an unparseable repository
        URL are skipped with a warning.

        Raises:
            IndexingError: If the applications cannot be listed
        """
        if not self.cfg.monitor_all_applications:
            return

        try:
            apps = self.argo_client.get_applications()
        except ArgoClientError as e:
            raise IndexingError(f"failed to list applications: {e}") from e

        result = RepoToApplicationsMap()
        indexed = 0
        skipped = 0
        for app in apps:
            try:
                if result.add(app):
                    indexed += 1
                else:
                    skipped += 1
            except InvalidRepoUrlError as e:
                logger.warning(f"Skipping application {app.namespace}/{app.name}: {e}")
                skipped += 1

        self.cfg.replace_repo_map(result)
        logger.info(
            f"Indexed {indexed} applications across {len(result)} repositories "
            f"({skipped} skipped)"
        )
