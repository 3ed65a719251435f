"""
dmenu-compatible menus.

Two menus are shown: the engine picker ("k: Kagi" per line) and, when no
selection was captured, a free-text query prompt with empty input.
"""

import logging
from typing import List, Sequence

from ..config import InterfaceConfig, SearchEngine
from ..core.x11 import CommandRunner
from ..errors import ConfigError, ExternalToolError, MenuCancelled

logger = logging.getLogger(__name__)

ENGINE_PROMPT = "Search with:"
QUERY_PROMPT = "Enter search query:"


def engine_menu_lines(engines: Sequence[SearchEngine]) -> List[str]:
    """Menu entries, one per engine."""
    return [f"{engine.key}: {engine.name}" for engine in engines]


def parse_engine_choice(selected: str, engines: Sequence[SearchEngine]) -> SearchEngine:
    """
    Map a menu answer back to an engine.

    Accepts either a full line ("k: Kagi") or a bare key typed by the user.

    Raises:
        MenuCancelled: If nothing was chosen or the key is unknown
    """
    selected = selected.strip()
    if not selected:
        raise MenuCancelled("no selection made")

    key = selected.split(":", 1)[0].strip()
    for engine in engines:
        if engine.key == key:
            return engine
    raise MenuCancelled(f"invalid selection: {selected}")


def _launcher_args(interface: InterfaceConfig, prompt: str, skip_duplicates: bool) -> List[str]:
    args = [interface.launcher, "-i", "-p", prompt]
    for arg in interface.dmenu_args:
        if skip_duplicates and arg in ("-i", "-p", ENGINE_PROMPT):
            continue
        args.append(arg)
    return args


def _run_menu(runner: CommandRunner, args: List[str], input_text: str) -> str:
    try:
        return runner.run(args, input_text=input_text, use_default_timeout=False)
    except ExternalToolError as e:
        # dmenu exits 1 when dismissed with Escape
        if e.returncode == 1:
            raise MenuCancelled("menu dismissed")
        raise


def choose_engine(
    runner: CommandRunner,
    interface: InterfaceConfig,
    engines: Sequence[SearchEngine],
) -> SearchEngine:
    """
    Show the engine menu and return the chosen engine.

    Raises:
        ConfigError: If no engines are configured
        MenuCancelled: If the menu was dismissed or the answer is unknown
        ExternalToolError: If the launcher itself failed
    """
    if not engines:
        raise ConfigError(
            "no search engines configured",
            "Add one with 'rabbithole add-engine NAME URL KEY'",
        )
    args = _launcher_args(interface, ENGINE_PROMPT, skip_duplicates=False)
    output = _run_menu(runner, args, "\n".join(engine_menu_lines(engines)))
    engine = parse_engine_choice(output, engines)
    logger.debug(f"Chose engine {engine.name} ({engine.key})")
    return engine


def prompt_query(runner: CommandRunner, interface: InterfaceConfig) -> str:
    """
    Ask for a query with an empty menu (typing or pasting).

    Raises:
        MenuCancelled: If the prompt was dismissed or left empty
        ExternalToolError: If the launcher itself failed
    """
    args = _launcher_args(interface, QUERY_PROMPT, skip_duplicates=True)
    query = _run_menu(runner, args, "").strip()
    if not query:
        raise MenuCancelled("empty query, aborting")
    return query
