"""
CLI entrypoint for the argocheck service.

Usage:
    python -m argocheck.server --monitor-all-applications --ensure-webhooks \
        --webhook-url-base https://ci.example.com --vcs-type github
    python -m argocheck.server --config /etc/argocheck/config.yaml
"""
import argparse
import logging
import os
import signal
import sys

from argocheck.config import get_config
from argocheck.errors import ConfigurationError
from argocheck.server.service import Server


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="argocheck webhook service")
    parser.add_argument("--config", help="Path to YAML config file")
    parser.add_argument(
        "--log-level",
        default=os.getenv("ARGOCHECK_LOG_LEVEL", "INFO"),
        help="Logging level (default: INFO)"
    )

    # Unset flags fall through to environment / config file
    parser.add_argument(
        "--monitor-all-applications",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Index every Argo CD application by source repository"
    )
    parser.add_argument(
        "--ensure-webhooks",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Create missing webhooks on indexed repositories"
    )
    parser.add_argument("--webhook-url-base", help="Public base URL of this service")
    parser.add_argument("--webhook-secret", help="Shared secret for created webhooks")
    parser.add_argument("--url-prefix", help="Path prefix in front of /hooks")
    parser.add_argument("--vcs-type", choices=["github", "gitlab"], help="VCS provider")
    parser.add_argument("--vcs-base-url", help="VCS API base URL (self-hosted)")
    parser.add_argument("--vcs-token", help="VCS API token")
    parser.add_argument("--argocd-namespace", help="Namespace holding Argo CD applications")
    parser.add_argument(
        "--in-cluster",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Use in-cluster Kubernetes credentials"
    )
    parser.add_argument("--host", help="Bind address (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, help="Bind port (default: 8080)")
    return parser


def main(argv=None):
    """Run the argocheck service."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    overrides = {
        key: value
        for key, value in vars(args).items()
        if key not in ("config", "log_level") and value is not None
    }

    try:
        cfg = get_config(config_file=args.config, **overrides)
    except ConfigurationError as e:
        print(f"❌ Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    server = Server(cfg)

    if hasattr(signal, "SIGHUP"):
        signal.signal(signal.SIGHUP, lambda signum, frame: server.reload())

    server.start()


if __name__ == "__main__":
    main()
