"""
argocheck service: application indexing, webhook reconciliation and the
HTTP surface that hosts the hook-ingestion routes.
"""
