"""
Test suite for Page Agent.

Covers configuration, extraction, analysis, storage, fetching,
the HTTP API and the CLI, with shared fixtures in conftest.py.
"""
