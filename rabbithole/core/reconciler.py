"""
Registry reconciliation.

Tracked windows can disappear without rabbithole noticing (closed with the
mouse, browser crash). reconcile() drops registry rows whose window is no
longer in the live window list. It never touches live windows.
"""

import logging

from .registry import ResearchWindowRegistry
from .snapshot import WindowSnapshotSource

logger = logging.getLogger(__name__)


class RegistryReconciler:
    """Prune registry entries for windows that no longer exist."""

    def __init__(self, registry: ResearchWindowRegistry, source: WindowSnapshotSource):
        self.registry = registry
        self.source = source

    def reconcile(self) -> int:
        """
        Remove dead entries.

        The live set is the full window list, not filtered by signature,
        since a tracked id may belong to any window rabbithole detected.

        Returns:
            Number of entries removed

        Raises:
            ExternalToolError: If the live window list cannot be read
            StoreError: If the registry cannot be read or written
        """
        tracked = self.registry.list_all()
        if not tracked:
            return 0

        live = self.source.live_window_ids()
        dead = sorted(tracked - live)

        removed = 0
        for window_id in dead:
            self.registry.remove(window_id)
            removed += 1
            logger.info(f"Cleaned up dead research window: {window_id}")

        logger.debug(f"Reconciled {len(tracked)} tracked windows, removed {removed}")
        return removed
