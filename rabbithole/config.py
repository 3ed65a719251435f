"""
Configuration models and persistence for rabbithole.

The config file lives at ~/.config/rabbithole/config.json and is read fresh
by every command, so edits take effect on the next hotkey press.
"""

import json
import logging
import os
import pwd
import tempfile
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError, StoreLocationError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "RABBITHOLE_CONFIG"
DATABASE_FILENAME = "searches.db"

SelectionMethod = Literal["auto", "primary", "clipboard", "manual"]


class SearchEngine(BaseModel):
    """Search engine entry shown in the menu."""

    name: str = Field(..., min_length=1, description="Display name (e.g., Kagi)")
    url: str = Field(..., description="URL template with a %s query placeholder")
    key: str = Field(..., description="Single-character menu key")

    @field_validator('url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        """URL must contain the %s placeholder."""
        if "%s" not in v:
            raise ValueError("URL must contain %s placeholder for query substitution")
        return v

    @field_validator('key')
    @classmethod
    def validate_key(cls, v: str) -> str:
        """Key must be exactly one character."""
        if len(v) != 1:
            raise ValueError(f"key must be a single character, got: {v}")
        return v


class InterfaceConfig(BaseModel):
    """Menu launcher settings."""

    model_config = ConfigDict(extra="allow")

    launcher: str = Field("dmenu", description="dmenu-compatible menu executable")
    dmenu_args: List[str] = Field(default_factory=list, description="Extra launcher arguments")


class DatabaseConfig(BaseModel):
    """Database location override."""

    model_config = ConfigDict(extra="allow")

    path: Optional[str] = Field(None, description="Explicit database path")


class BehaviorConfig(BaseModel):
    """Window, browser and selection behaviour."""

    model_config = ConfigDict(extra="allow")

    window_width: int = Field(650, gt=0, le=10000, description="Research window width (pixels)")
    window_height: int = Field(900, gt=0, le=10000, description="Research window height (pixels)")
    margin_right: int = Field(120, ge=0, description="Gap to the right screen edge (pixels)")
    margin_top: int = Field(80, ge=0, description="Gap to the top screen edge (pixels)")

    browser_command: str = Field("firefox", description="Browser executable")
    firefox_profile: str = Field("", description="Browser profile passed via --profile")
    window_signature: str = Field(
        "Mozilla Firefox", description="Title substring identifying browser windows"
    )

    selection_method: SelectionMethod = Field("auto", description="Selection capture policy")
    selection_timeout_ms: int = Field(1000, gt=0, description="Per-read selection timeout")
    log_selections: bool = Field(False, description="Log a preview of captured text")

    detection_timeout_ms: int = Field(5000, gt=0, description="New-window detection deadline")
    poll_interval_ms: int = Field(100, gt=0, description="New-window poll interval")

    @property
    def selection_timeout(self) -> float:
        return self.selection_timeout_ms / 1000.0

    @property
    def detection_timeout(self) -> float:
        return self.detection_timeout_ms / 1000.0

    @property
    def poll_interval(self) -> float:
        return self.poll_interval_ms / 1000.0


class RabbitholeConfig(BaseModel):
    """Top-level configuration file contents.

    Unknown keys are kept so that saving never drops settings written by
    other versions.
    """

    model_config = ConfigDict(extra="allow")

    search_engines: List[SearchEngine] = Field(default_factory=list)
    interface: InterfaceConfig = Field(default_factory=InterfaceConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    behavior: BehaviorConfig = Field(default_factory=BehaviorConfig)

    def find_engine(self, key: str) -> Optional[SearchEngine]:
        """Return the engine bound to ``key``, if any."""
        for engine in self.search_engines:
            if engine.key == key:
                return engine
        return None

    def add_engine(self, engine: SearchEngine) -> None:
        """Append an engine.

        Raises:
            ConfigError: If the key is already taken
        """
        existing = self.find_engine(engine.key)
        if existing is not None:
            raise ConfigError(
                f"key '{engine.key}' already exists for engine '{existing.name}'",
                "Pick another key or use 'rabbithole edit-engine'",
            )
        self.search_engines.append(engine)

    def remove_engine(self, key: str) -> SearchEngine:
        """Remove and return the engine bound to ``key``.

        Raises:
            ConfigError: If no engine uses the key
        """
        engine = self.find_engine(key)
        if engine is None:
            raise ConfigError(
                f"no search engine found with key '{key}'",
                "Use 'rabbithole list-engines' to see configured keys",
            )
        self.search_engines.remove(engine)
        return engine

    def replace_engine(self, key: str, engine: SearchEngine) -> SearchEngine:
        """Replace the engine bound to ``key`` and return the old one.

        Raises:
            ConfigError: If ``key`` is unknown or the new key is taken
        """
        old = self.find_engine(key)
        if old is None:
            raise ConfigError(
                f"no search engine found with key '{key}'",
                "Use 'rabbithole list-engines' to see configured keys",
            )
        if engine.key != key:
            clash = self.find_engine(engine.key)
            if clash is not None:
                raise ConfigError(
                    f"key '{engine.key}' already exists for engine '{clash.name}'"
                )
        index = self.search_engines.index(old)
        self.search_engines[index] = engine
        return old


DEFAULT_ENGINES = [
    SearchEngine(name="DuckDuckGo", url="https://duckduckgo.com/?q=%s", key="d"),
    SearchEngine(name="Wikipedia", url="https://en.wikipedia.org/w/index.php?search=%s", key="w"),
    SearchEngine(name="Kagi", url="https://kagi.com/search?q=%s", key="k"),
]


def default_config() -> RabbitholeConfig:
    """Configuration written by ``rabbithole setup`` when none exists."""
    return RabbitholeConfig(search_engines=[e.model_copy() for e in DEFAULT_ENGINES])


def default_config_path() -> Path:
    """Config path, honouring the RABBITHOLE_CONFIG override."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "rabbithole" / "config.json"


def load_config(path: Path) -> RabbitholeConfig:
    """Load and validate the configuration file.

    Args:
        path: Path to config.json

    Returns:
        Validated configuration

    Raises:
        ConfigError: If the file is missing, not JSON, or fails validation
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError(
            f"can't read config file at {path}",
            "Run 'rabbithole setup' to create it",
        )
    except OSError as e:
        raise ConfigError(f"can't read config file at {path}: {e}")

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigError(
            f"failed to parse config file {path}: {e}",
            "Fix the JSON syntax or move the file aside and run 'rabbithole setup'",
        )

    try:
        config = RabbitholeConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid config file {path}:\n{e}")

    logger.debug(f"Loaded config from {path} ({len(config.search_engines)} engines)")
    return config


def save_config(config: RabbitholeConfig, path: Path) -> None:
    """Save configuration to disk.

    Creates the parent directory if needed and writes atomically using a
    temp file + rename.

    Raises:
        ConfigError: If the file cannot be written
    """
    data = config.model_dump(mode="json", exclude_none=True)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=".config-", suffix=".json")
    except OSError as e:
        raise ConfigError(f"failed to write config file {path}: {e}")

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())

        os.replace(temp_path, path)

    except OSError as e:
        if Path(temp_path).exists():
            os.unlink(temp_path)
        raise ConfigError(f"failed to write config file {path}: {e}")

    logger.info(f"Saved config to {path}")


def target_home() -> Path:
    """Home directory of the user rabbithole acts for.

    Under sudo this is the invoking user (SUDO_USER), otherwise the
    current user.
    """
    sudo_user = os.environ.get("SUDO_USER")
    if sudo_user:
        try:
            return Path(pwd.getpwnam(sudo_user).pw_dir)
        except KeyError:
            raise StoreLocationError(f"SUDO_USER '{sudo_user}' does not exist")
    return Path.home()


def resolve_database_path(config: RabbitholeConfig) -> Path:
    """Pick the database location and make sure its directory exists.

    Exactly one location is used per effective user; there is no
    fallback to a shared system directory.

    Raises:
        StoreLocationError: If the directory cannot be created
    """
    if config.database.path:
        db_path = Path(config.database.path).expanduser()
    else:
        db_path = target_home() / ".local" / "share" / "rabbithole" / DATABASE_FILENAME

    try:
        db_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StoreLocationError(
            f"cannot create database directory {db_path.parent}: {e}",
            "Set database.path in the config file to a writable location",
        )

    return db_path
