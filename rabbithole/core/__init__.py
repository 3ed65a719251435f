"""Core window tracking for rabbithole.

This package provides:
- Window id normalization and wmctrl/xdotool/xsel/xdpyinfo wrappers
- Window snapshots, bounded polling and new-window detection
- Selection capture and window geometry
- The SQLite-backed research window registry and search history
- The open-and-track / close-if-tracked orchestrator
"""
