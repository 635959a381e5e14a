"""Test suite for lslogins.

Layout:
    tests/
    ├── conftest.py          # Shared pytest fixtures and fakes
    └── unit/                # Unit tests, no access to the real /etc or /var/log
"""
