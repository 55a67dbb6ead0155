"""Ingestion of table exports into the Raw layer.

Reads CSV/JSON exports of the hosted backend's tables and upserts them into
MongoDB collections of the same name, keyed by the row `id`.
"""
