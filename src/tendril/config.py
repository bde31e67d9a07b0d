"""Configuration loader for tendril.toml."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

CONFIG_NAME = "tendril.toml"


@dataclass
class WikiConfig:
    """Where documents live."""
    root: Path


@dataclass
class ServerConfig:
    """Local API server settings."""
    host: str = "127.0.0.1"
    port: int = 8765


@dataclass
class EditorConfig:
    """Settings for the editing side's writes."""
    endpoint: str = "http://127.0.0.1:8765"
    timeout: float = 10.0


@dataclass
class RecentConfig:
    """Most-recently-used title list."""
    size: int = 8


@dataclass
class TendrilConfig:
    """Complete tendril configuration."""
    wiki: WikiConfig
    server: ServerConfig
    editor: EditorConfig
    recent: RecentConfig


def load_config(config_path: Path | None = None, wiki_path: Path | None = None) -> TendrilConfig:
    """
    Load configuration from tendril.toml.

    Search order:
    1. config_path (if provided)
    2. cwd/tendril.toml
    3. wiki_path/tendril.toml

    Args:
        config_path: Explicit path to config file
        wiki_path: Wiki root path for fallback search

    Returns:
        TendrilConfig with resolved settings
    """
    toml_data: dict[str, Any] = {}

    search_paths = []
    if config_path:
        search_paths.append(config_path)
    search_paths.append(Path.cwd() / CONFIG_NAME)
    if wiki_path:
        search_paths.append(wiki_path / CONFIG_NAME)

    for path in search_paths:
        if path.exists():
            with open(path, "rb") as f:
                toml_data = tomllib.load(f)
            break

    wiki_data = toml_data.get("wiki", {})
    wiki_config = WikiConfig(
        root=Path(wiki_data.get("root", wiki_path or Path("./wiki"))),
    )

    server_data = toml_data.get("server", {})
    server_config = ServerConfig(
        host=server_data.get("host", "127.0.0.1"),
        port=int(server_data.get("port", 8765)),
    )

    # Editor writes go to the local server unless configured otherwise
    editor_data = toml_data.get("editor", {})
    editor_config = EditorConfig(
        endpoint=editor_data.get(
            "endpoint", f"http://{server_config.host}:{server_config.port}"
        ),
        timeout=float(editor_data.get("timeout", 10.0)),
    )

    recent_data = toml_data.get("recent", {})
    recent_config = RecentConfig(
        size=int(recent_data.get("size", 8))
    )

    return TendrilConfig(
        wiki=wiki_config,
        server=server_config,
        editor=editor_config,
        recent=recent_config,
    )
