"""
UI adapters for the leads dashboard.

Provides the Dash web UI via create_dash_app().
"""

from .dash_app import create_dash_app

__all__ = ["create_dash_app"]
