"""
Argo CD application client.

Lists ``applications.argoproj.io`` custom resources through the Kubernetes
API and turns them into lightweight Application records.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import HTTPError

from argocheck.errors import ArgoClientError


logger = logging.getLogger(__name__)

ARGO_GROUP = "argoproj.io"
ARGO_VERSION = "v1alpha1"
ARGO_PLURAL = "applications"


@dataclass
class Application:
    """An Argo CD Application, reduced to the fields argocheck needs."""
    name: str
    namespace: Optional[str] = None
    repo_url: Optional[str] = None  # None when the app has no spec.source
    path: Optional[str] = None
    target_revision: Optional[str] = None
    labels: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_manifest(cls, manifest: Dict[str, Any]) -> "Application":
        """
        Build an Application from a raw custom object.

        Args:
            manifest: Application resource as returned by the Kubernetes API

        Returns:
            Application record
        """
        metadata = manifest.get('metadata') or {}
        source = (manifest.get('spec') or {}).get('source')

        repo_url = None
        path = None
        target_revision = None
        if source:
            repo_url = source.get('repoURL') or None
            path = source.get('path')
            target_revision = source.get('targetRevision')

        return cls(
            name=metadata.get('name', ''),
            namespace=metadata.get('namespace'),
            repo_url=repo_url,
            path=path,
            target_revision=target_revision,
            labels=metadata.get('labels') or {}
        )


class ArgoClient:
    """Reads Argo CD Applications from the cluster."""

    def __init__(self, namespace: Optional[str] = None, in_cluster: bool = False):
        """
        Initialize Argo client.

        Args:
            namespace: Namespace to list Applications from (None for all namespaces)
            in_cluster: Whether running inside a K8s cluster
        """
        self.namespace = namespace

        try:
            if in_cluster:
                config.load_incluster_config()
            else:
                config.load_kube_config()
        except ConfigException as e:
            raise ArgoClientError(f"failed to load Kubernetes configuration: {e}") from e

        self.custom_api = client.CustomObjectsApi()

    def get_applications(self) -> List[Application]:
        """
        List all Applications in a single call.

        Returns:
            Applications in API order

        Raises:
            ArgoClientError: If the Kubernetes API call fails
        """
        try:
            if self.namespace:
                response = self.custom_api.list_namespaced_custom_object(
                    group=ARGO_GROUP,
                    version=ARGO_VERSION,
                    namespace=self.namespace,
                    plural=ARGO_PLURAL
                )
            else:
                response = self.custom_api.list_cluster_custom_object(
                    group=ARGO_GROUP,
                    version=ARGO_VERSION,
                    plural=ARGO_PLURAL
                )
        except ApiException as e:
            raise ArgoClientError(f"failed to list applications: {e.status} {e.reason}") from e
        except HTTPError as e:
            raise ArgoClientError(f"failed to reach the Kubernetes API: {e}") from e

        items = response.get('items') or []
        logger.debug(f"Listed {len(items)} Argo CD applications")
        return [Application.from_manifest(item) for item in items]
