"""
Test configuration package.

Holds the pytest marker registration shared by conftest.py.
"""
