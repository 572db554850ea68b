# Core package initialization
# This file makes the core directory a Python package.
# Submodules are imported explicitly (permissions depends on domain, which
# depends on core.exceptions).

from . import exceptions

__all__ = ["exceptions"]
