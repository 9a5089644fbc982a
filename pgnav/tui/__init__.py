"""TUI (Terminal User Interface) module for pgnav.

A state machine over menu/action nodes driven through an incremental
fuzzy-search selector.
"""
from .navigator import Navigator
from .router import Router
from .selector import Selector
from .state import Action, Menu, NavigationTree, View

__all__ = ["Action", "Menu", "NavigationTree", "Navigator", "Router", "Selector", "View"]
