"""Per-invocation application context.

Every command builds one AppContext and hands its parts to the components
that need them; nothing is kept in module globals.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import RabbitholeConfig, load_config, resolve_database_path
from .core.detector import NewWindowDetector
from .core.history import SearchHistory
from .core.lifecycle import LifecycleOrchestrator
from .core.reconciler import RegistryReconciler
from .core.registry import ResearchWindowRegistry
from .core.selection import SelectionResolver
from .core.snapshot import WindowSnapshotSource
from .core.store import Database
from .core.x11 import CommandRunner


@dataclass
class AppContext:
    config_path: Path
    config: RabbitholeConfig
    runner: CommandRunner
    db: Database
    registry: ResearchWindowRegistry
    history: SearchHistory
    source: WindowSnapshotSource
    detector: NewWindowDetector
    reconciler: RegistryReconciler
    orchestrator: LifecycleOrchestrator
    selection: SelectionResolver

    def close(self) -> None:
        self.db.close()


def build_app_context(
    *,
    config_path: Path,
    config: Optional[RabbitholeConfig] = None,
    runner: Optional[CommandRunner] = None,
    db: Optional[Database] = None,
) -> AppContext:
    """
    Wire up all components for one command.

    Args:
        config_path: Config file to load (when ``config`` is not given)
        config: Already-loaded configuration
        runner: Command runner (default: real subprocess runner)
        db: Open database (default: opened at the resolved path)

    Raises:
        ConfigError: If the configuration cannot be loaded
        StoreError: If the database cannot be opened
    """
    if config is None:
        config = load_config(config_path)
    if runner is None:
        runner = CommandRunner()
    if db is None:
        db = Database(resolve_database_path(config))

    behavior = config.behavior
    registry = ResearchWindowRegistry(db)
    source = WindowSnapshotSource(runner)
    detector = NewWindowDetector(
        source,
        interval=behavior.poll_interval,
        timeout=behavior.detection_timeout,
    )
    reconciler = RegistryReconciler(registry, source)
    orchestrator = LifecycleOrchestrator(
        runner=runner,
        behavior=behavior,
        source=source,
        detector=detector,
        registry=registry,
        reconciler=reconciler,
    )
    selection = SelectionResolver(
        runner,
        timeout=behavior.selection_timeout,
        log_selections=behavior.log_selections,
    )

    return AppContext(
        config_path=config_path,
        config=config,
        runner=runner,
        db=db,
        registry=registry,
        history=SearchHistory(db),
        source=source,
        detector=detector,
        reconciler=reconciler,
        orchestrator=orchestrator,
        selection=selection,
    )
