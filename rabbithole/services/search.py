"""
Search flow: selection → engine menu → query prompt → history → browser.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote_plus

from ..context import AppContext
from ..core.models import OpenResult, SelectionCandidate, SelectionSource
from ..errors import SelectionUnavailable, StoreError
from .menu import choose_engine, prompt_query

logger = logging.getLogger(__name__)

TRIGGER_SELECTION = "selection"
TRIGGER_MANUAL = "manual"


@dataclass
class SearchOutcome:
    """What the search command did."""

    query: str
    engine_name: str
    trigger_method: str
    opened: OpenResult


def build_search_url(template: str, query: str) -> str:
    """Substitute the form-encoded query into an engine URL template."""
    return template.replace("%s", quote_plus(query))


def capture_query(ctx: AppContext, empty: bool) -> Optional[SelectionCandidate]:
    """
    Try the configured selection policy; None means "prompt instead".
    """
    if empty:
        return None
    try:
        return ctx.selection.capture(ctx.config.behavior.selection_method)
    except SelectionUnavailable as e:
        logger.info(f"Selection capture failed, falling back to manual entry: {e}")
        return None


def run_search(ctx: AppContext, empty: bool = False) -> SearchOutcome:
    """
    Run the full search command.

    Raises:
        MenuCancelled: If a menu was dismissed
        ExternalToolError: If the menu launcher failed
        BrowserLaunchError: If the browser could not be started
    """
    candidate = capture_query(ctx, empty)

    engine = choose_engine(ctx.runner, ctx.config.interface, ctx.config.search_engines)

    if candidate is None:
        candidate = SelectionCandidate(
            prompt_query(ctx.runner, ctx.config.interface), SelectionSource.MANUAL
        )

    trigger = TRIGGER_MANUAL if candidate.source is SelectionSource.MANUAL else TRIGGER_SELECTION

    try:
        ctx.history.record(candidate.text, engine.name, engine.url, trigger)
    except StoreError as e:
        logger.warning(f"Failed to log search: {e}")

    url = build_search_url(engine.url, candidate.text)
    logger.info(f"Searching {engine.name} for {len(candidate.text)}-char query ({trigger})")
    opened = ctx.orchestrator.open_and_track(url)

    return SearchOutcome(
        query=candidate.text,
        engine_name=engine.name,
        trigger_method=trigger,
        opened=opened,
    )
