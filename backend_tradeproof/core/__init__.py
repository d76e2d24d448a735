"""
Core utilities: shared exceptions used across ingestion, persistence, auth and API.
"""
