"""
Top-level package for sheetdash.

This package exposes the core architecture (table engine, services, UI adapters).
Most code should import from submodules such as:
    sheetdash.core
    sheetdash.services
    sheetdash.ui
"""

__all__: list[str] = []
