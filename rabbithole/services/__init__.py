"""
Command-level services for rabbithole: menus, search and setup.
"""

from .menu import choose_engine, prompt_query
from .search import SearchOutcome, build_search_url, run_search
from .setup import SetupReport, run_setup

__all__ = [
    "choose_engine",
    "prompt_query",
    "SearchOutcome",
    "build_search_url",
    "run_search",
    "SetupReport",
    "run_setup",
]
