"""Unit tests for the translation resolver.

Tests use pytest with asyncio support. Vendor SDKs and HTTP calls are replaced through monkeypatch;
SQLite stores live in pytest's tmp_path.
"""
