"""
First-run setup: dependency check, default config and sxhkd hotkeys.
"""

import logging
import shutil
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from ..config import default_config, save_config
from ..errors import ConfigError

logger = logging.getLogger(__name__)

REQUIRED_TOOLS = ["sxhkd", "xdotool", "wmctrl", "xdpyinfo", "xsel", "dmenu"]

SXHKD_TEMPLATE = """# rabbithole hotkeys
ctrl + space
    {exe} search

ctrl + shift + space
    {exe} search --empty

# Close active research window
Escape
    {exe} close
"""


@dataclass
class SetupReport:
    """Result of running setup."""

    missing_tools: List[str] = field(default_factory=list)
    config_created: bool = False
    sxhkd_path: Optional[Path] = None


def find_missing_tools(which: Callable[[str], Optional[str]] = shutil.which) -> List[str]:
    """Required executables that are not on PATH."""
    return [tool for tool in REQUIRED_TOOLS if which(tool) is None]


def executable_path(which: Callable[[str], Optional[str]] = shutil.which) -> str:
    """How sxhkd should invoke rabbithole."""
    return which("rabbithole") or f"{sys.executable} -m rabbithole"


def render_sxhkdrc(exe: str) -> str:
    """sxhkd configuration binding the rabbithole hotkeys."""
    return SXHKD_TEMPLATE.format(exe=exe)


def ensure_config(config_path: Path) -> bool:
    """Write the default config if none exists. Returns True if created."""
    if config_path.exists():
        return False
    save_config(default_config(), config_path)
    return True


def run_setup(
    config_path: Path,
    sxhkd_dir: Path,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> SetupReport:
    """
    Prepare the desktop for rabbithole.

    Stops before writing anything when required tools are missing.

    Raises:
        ConfigError: If the default config or the sxhkd config cannot be
            written
    """
    report = SetupReport(missing_tools=find_missing_tools(which))
    if report.missing_tools:
        logger.warning(f"Missing dependencies: {', '.join(report.missing_tools)}")
        return report

    report.config_created = ensure_config(config_path)

    sxhkd_path = sxhkd_dir / "sxhkdrc"
    try:
        sxhkd_dir.mkdir(parents=True, exist_ok=True)
        sxhkd_path.write_text(render_sxhkdrc(executable_path(which)), encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"failed to write sxhkd config {sxhkd_path}: {e}")
    report.sxhkd_path = sxhkd_path
    logger.info(f"Wrote sxhkd config: {report.sxhkd_path}")

    return report
