"""Workbench Core Service.

Backend engine for a code editor shell: filter-aware text/regex search across
a project tree and supervised execution of build/run commands with live
output streaming.
"""

__version__ = "0.1.0"
__author__ = "Workbench Team"
__email__ = "dev@workbench.dev"

# Re-export main classes/functions for easier imports
from .main import create_app

__all__ = ["create_app", "__version__"]
