"""
Configuration for the argocheck service.

Values come from, highest precedence first: explicit arguments (CLI flags),
ARGOCHECK_* environment variables, an optional YAML config file, defaults.
"""
import os
import threading
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

import yaml

from argocheck.argo_client import Application
from argocheck.errors import ConfigurationError
from argocheck.repo_map import RepoToApplicationsMap


TRUE_VALUES = {'1', 'true', 'yes', 'on'}
FALSE_VALUES = {'0', 'false', 'no', 'off', ''}

# config-file key -> (environment variable, default)
SETTINGS = {
    'monitor-all-applications': ('ARGOCHECK_MONITOR_ALL_APPLICATIONS', False),
    'ensure-webhooks': ('ARGOCHECK_ENSURE_WEBHOOKS', False),
    'webhook-url-base': ('ARGOCHECK_WEBHOOK_URL_BASE', ''),
    'webhook-secret': ('ARGOCHECK_WEBHOOK_SECRET', ''),
    'url-prefix': ('ARGOCHECK_URL_PREFIX', ''),
    'vcs-type': ('ARGOCHECK_VCS_TYPE', 'github'),
    'vcs-base-url': ('ARGOCHECK_VCS_BASE_URL', ''),
    'vcs-token': ('ARGOCHECK_VCS_TOKEN', ''),
    'vcs-timeout': ('ARGOCHECK_VCS_TIMEOUT', 10.0),
    'argocd-namespace': ('ARGOCHECK_ARGOCD_NAMESPACE', ''),
    'in-cluster': ('ARGOCHECK_IN_CLUSTER', False),
    'host': ('ARGOCHECK_HOST', '0.0.0.0'),
    'port': ('ARGOCHECK_PORT', 8080),
}


def parse_bool(value: Any, name: str) -> bool:
    """
    Parse a boolean setting.

    Raises:
        ConfigurationError: If the value is not a recognised boolean
    """
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ConfigurationError(f"'{name}' must be a boolean, got {value!r}")


def load_config_file(path: Path) -> Dict[str, Any]:
    """
    Load a YAML config file.

    Args:
        path: Path to YAML file

    Returns:
        Settings dict keyed like the CLI flags (e.g. 'ensure-webhooks')

    Raises:
        ConfigurationError: If the file is missing or not a YAML mapping
    """
    path = Path(path).expanduser()
    if not path.is_file():
        raise ConfigurationError(f"Config file not found: {path}")

    with open(path, 'r') as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigurationError(f"Invalid config in {path}: must be a YAML dict")

    unknown = sorted(set(data) - set(SETTINGS))
    if unknown:
        raise ConfigurationError(f"Unknown settings in {path}: {', '.join(unknown)}")

    return data


class ServiceConfig:
    """
    Process-wide service configuration.

    Holds the feature toggles, webhook settings, client settings and the
    current repository to application map. The map is replaced wholesale
    under a lock so readers never see a half-built map.
    """

    def __init__(
        self,
        monitor_all_applications: Optional[bool] = None,
        ensure_webhooks: Optional[bool] = None,
        webhook_url_base: Optional[str] = None,
        webhook_secret: Optional[str] = None,
        url_prefix: Optional[str] = None,
        vcs_type: Optional[str] = None,
        vcs_base_url: Optional[str] = None,
        vcs_token: Optional[str] = None,
        vcs_timeout: Optional[float] = None,
        argocd_namespace: Optional[str] = None,
        in_cluster: Optional[bool] = None,
        host: Optional[str] = None,
        port: Optional[int] = None,
        file_settings: Optional[Dict[str, Any]] = None
    ):
        """
        Resolve configuration.

        Args:
            file_settings: Settings loaded from a YAML config file, if any.
                Other arguments override environment and file values when
                not None.
        """
        self._file_settings = file_settings or {}

        self.monitor_all_applications = parse_bool(
            self._resolve('monitor-all-applications', monitor_all_applications),
            'monitor-all-applications'
        )
        self.ensure_webhooks = parse_bool(
            self._resolve('ensure-webhooks', ensure_webhooks),
            'ensure-webhooks'
        )
        self.webhook_url_base = str(self._resolve('webhook-url-base', webhook_url_base)).strip()
        self.webhook_secret = str(self._resolve('webhook-secret', webhook_secret))
        self.url_prefix = str(self._resolve('url-prefix', url_prefix)).strip()

        self.vcs_type = str(self._resolve('vcs-type', vcs_type)).strip().lower()
        self.vcs_base_url = str(self._resolve('vcs-base-url', vcs_base_url)).strip()
        self.vcs_token = str(self._resolve('vcs-token', vcs_token))
        try:
            self.vcs_timeout = float(self._resolve('vcs-timeout', vcs_timeout))
        except ValueError:
            raise ConfigurationError("'vcs-timeout' must be a number of seconds")

        self.argocd_namespace = str(self._resolve('argocd-namespace', argocd_namespace)).strip() or None
        self.in_cluster = parse_bool(self._resolve('in-cluster', in_cluster), 'in-cluster')

        self.host = str(self._resolve('host', host))
        try:
            self.port = int(self._resolve('port', port))
        except ValueError:
            raise ConfigurationError("'port' must be an integer")

        self._repo_map = RepoToApplicationsMap()
        self._repo_map_lock = threading.RLock()

    def _resolve(self, key: str, explicit: Any) -> Any:
        if explicit is not None:
            return explicit

        env_var, default = SETTINGS[key]
        env_value = os.getenv(env_var)
        if env_value is not None:
            return env_value

        return self._file_settings.get(key, default)

    @property
    def repo_map(self) -> Mapping[str, List[Application]]:
        """Read-only view of the current repository to application map."""
        with self._repo_map_lock:
            return MappingProxyType(self._repo_map.repos)

    def replace_repo_map(self, repo_map: RepoToApplicationsMap) -> None:
        """Swap in a freshly built map."""
        with self._repo_map_lock:
            self._repo_map = repo_map

    def apps_for_repo(self, repo_url: str) -> List[Application]:
        """
        Resolve an inbound repository URL to the Applications it feeds.

        Args:
            repo_url: Repository URL in any supported form

        Returns:
            Applications sourced from the repository (empty if unknown)
        """
        with self._repo_map_lock:
            return self._repo_map.apps_for(repo_url)


def get_config(config_file: Optional[str] = None, **overrides) -> ServiceConfig:
    """
    Build the service configuration.

    Args:
        config_file: Optional YAML file path (falls back to ARGOCHECK_CONFIG_FILE)
        **overrides: Explicit values, typically from CLI flags

    Returns:
        ServiceConfig
    """
    config_file = config_file or os.getenv('ARGOCHECK_CONFIG_FILE')
    file_settings = load_config_file(Path(config_file)) if config_file else {}
    return ServiceConfig(file_settings=file_settings, **overrides)
