"""
argocheck service.

Wires the application indexer and the webhook reconciler together and runs
them at startup, before the HTTP server starts accepting traffic.
"""
import logging
from typing import Optional

import uvicorn

from argocheck.argo_client import ArgoClient
from argocheck.config import ServiceConfig
from argocheck.errors import ArgocheckError, ArgoClientError, IndexingError
from argocheck.server.api import create_app
from argocheck.server.indexer import ApplicationIndexer
from argocheck.server.webhooks import ReconcileReport, WebhookReconciler, hooks_prefix
from argocheck.vcs_clients import VcsClient, get_vcs_client


logger = logging.getLogger(__name__)


class Server:
    """
    The check service process.

    Clients are injected for tests; when omitted they are built from the
    config the first time they are needed.
    """

    def __init__(
        self,
        cfg: ServiceConfig,
        argo_client: Optional[ArgoClient] = None,
        vcs_client: Optional[VcsClient] = None
    ):
        self.cfg = cfg
        self.argo_client = argo_client
        self.vcs_client = vcs_client

    def hooks_prefix(self) -> str:
        return hooks_prefix(self.cfg.url_prefix)

    def _get_argo_client(self) -> ArgoClient:
        if self.argo_client is None:
            self.argo_client = ArgoClient(
                namespace=self.cfg.argocd_namespace,
                in_cluster=self.cfg.in_cluster
            )
        return self.argo_client

    def _get_vcs_client(self) -> VcsClient:
        if self.vcs_client is None:
            self.vcs_client = get_vcs_client(self.cfg)
        return self.vcs_client

    def build_repo_map(self) -> None:
        """
        Rebuild the repository to application map.

        Raises:
            IndexingError: If Argo CD cannot be reached or listed
        """
        if not self.cfg.monitor_all_applications:
            return

        try:
            argo_client = self._get_argo_client()
        except ArgoClientError as e:
            raise IndexingError(str(e)) from e

        ApplicationIndexer(self.cfg, argo_client).run()

    def ensure_webhooks(self) -> ReconcileReport:
        """
        Reconcile webhooks for every indexed repository.

        Raises:
            ConfigurationError: If reconciliation is enabled but misconfigured
        """
        if not self.cfg.ensure_webhooks:
            return ReconcileReport()

        return WebhookReconciler(self.cfg, self._get_vcs_client()).run()

    def bootstrap(self) -> Optional[ReconcileReport]:
        """
        Index applications, then reconcile webhooks.

        Failures are logged and never raised, so the service can start and
        serve in a degraded state.

        Returns:
            The reconcile report, or None if reconciliation aborted
        """
        try:
            self.build_repo_map()
        except ArgocheckError as e:
            logger.warning(f"Failed to build repository map from Argo CD: {e}")
        except Exception as e:
            logger.warning(f"Unexpected error building repository map: {e!r}")

        try:
            return self.ensure_webhooks()
        except ArgocheckError as e:
            logger.warning(f"Failed to create webhooks: {e}")
            return None
        except Exception as e:
            logger.warning(f"Unexpected error creating webhooks: {e!r}")
            return None

    def reload(self) -> Optional[ReconcileReport]:
        """Re-run indexing and reconciliation against the live config."""
        logger.info("Reloading repository map and webhooks")
        return self.bootstrap()

    def start(self, hook_routers=()):
        """Run bootstrap, then serve the HTTP app until shutdown."""
        app = create_app(self, hook_routers=hook_routers)
        uvicorn.run(app, host=self.cfg.host, port=self.cfg.port)
