"""
Unit tests for the Argo CD application client with a mocked Kubernetes client.
"""
import pytest
from unittest.mock import Mock, patch

from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import MaxRetryError

from argocheck.argo_client import Application, ArgoClient
from argocheck.errors import ArgoClientError


def manifest(name, repo_url=None, namespace="argocd"):
    """Raw Application custom object."""
    spec = {"destination": {"namespace": "default"}}
    if repo_url:
        spec["source"] = {"repoURL": repo_url, "path": f"apps/{name}", "targetRevision": "HEAD"}
    return {
        "apiVersion": "argoproj.io/v1alpha1",
        "kind": "Application",
        "metadata": {"name": name, "namespace": namespace, "labels": {"team": "infra"}},
        "spec": spec,
    }


class TestApplicationFromManifest:
    """Test Application construction from raw manifests."""

    def test_with_source(self):
        """Should pick up repo, path and revision from spec.source."""
        app = Application.from_manifest(manifest("web", "https://github.com/org/repo"))

        assert app.name == "web"
        assert app.namespace == "argocd"
        assert app.repo_url == "https://github.com/org/repo"
        assert app.path == "apps/web"
        assert app.target_revision == "HEAD"
        assert app.labels == {"team": "infra"}

    def test_without_source(self):
        """Applications with no spec.source have no repo_url."""
        app = Application.from_manifest(manifest("multi"))

        assert app.repo_url is None
        assert app.path is None

    def test_empty_repo_url_treated_as_missing(self):
        """An empty repoURL is the same as no source."""
        raw = manifest("web", "https://github.com/org/repo")
        raw["spec"]["source"]["repoURL"] = ""

        assert Application.from_manifest(raw).repo_url is None


class TestArgoClient:
    """Test Argo client with mocked Kubernetes client."""

    @patch('argocheck.argo_client.config')
    @patch('argocheck.argo_client.client')
    def test_get_applications_all_namespaces(self, mock_client, mock_config):
        """Should list cluster-wide when no namespace is configured."""
        mock_api = Mock()
        mock_client.CustomObjectsApi.return_value = mock_api
        mock_api.list_cluster_custom_object.return_value = {
            "items": [manifest("a", "https://github.com/org/a"), manifest("b")]
        }

        apps = ArgoClient().get_applications()

        assert [app.name for app in apps] == ["a", "b"]
        call_args = mock_api.list_cluster_custom_object.call_args
        assert call_args[1]['group'] == 'argoproj.io'
        assert call_args[1]['version'] == 'v1alpha1'
        assert call_args[1]['plural'] == 'applications'
        assert not mock_api.list_namespaced_custom_object.called
        assert mock_config.load_kube_config.called

    @patch('argocheck.argo_client.config')
    @patch('argocheck.argo_client.client')
    def test_get_applications_namespaced(self, mock_client, mock_config):
        """Should list a single namespace when configured."""
        mock_api = Mock()
        mock_client.CustomObjectsApi.return_value = mock_api
        mock_api.list_namespaced_custom_object.return_value = {"items": []}

        apps = ArgoClient(namespace="argocd", in_cluster=True).get_applications()

        assert apps == []
        assert mock_api.list_namespaced_custom_object.call_args[1]['namespace'] == 'argocd'
        assert mock_config.load_incluster_config.called

    @patch('argocheck.argo_client.config')
    @patch('argocheck.argo_client.client')
    def test_api_error_raises_argo_client_error(self, mock_client, mock_config):
        """Kubernetes API errors surface as ArgoClientError."""
        mock_api = Mock()
        mock_client.CustomObjectsApi.return_value = mock_api
        mock_api.list_cluster_custom_object.side_effect = ApiException(status=403, reason="Forbidden")

        with pytest.raises(ArgoClientError, match="403"):
            ArgoClient().get_applications()

    @patch('argocheck.argo_client.config')
    @patch('argocheck.argo_client.client')
    def test_connection_error_raises_argo_client_error(self, mock_client, mock_config):
        """Unreachable API servers surface as ArgoClientError."""
        mock_api = Mock()
        mock_client.CustomObjectsApi.return_value = mock_api
        mock_api.list_cluster_custom_object.side_effect = MaxRetryError(None, "/apis", "refused")

        with pytest.raises(ArgoClientError):
            ArgoClient().get_applications()

    @patch('argocheck.argo_client.config')
    @patch('argocheck.argo_client.client')
    def test_missing_kubeconfig_raises_argo_client_error(self, mock_client, mock_config):
        """A missing kubeconfig is reported as ArgoClientError."""
        mock_config.load_kube_config.side_effect = ConfigException("no kubeconfig")

        with pytest.raises(ArgoClientError, match="Kubernetes configuration"):
            ArgoClient()
