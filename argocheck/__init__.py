"""
argocheck: webhook bootstrap for Argo CD managed repositories.

Indexes Argo CD Applications by source repository and makes sure every
repository has a webhook pointing back at the check service.
"""

__version__ = "0.1.0"
