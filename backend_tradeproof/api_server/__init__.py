"""
API server package: HTTP interface over the analytics pipeline and report store.
"""
