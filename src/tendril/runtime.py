"""Runtime wiring helper for CLI and server."""

from dataclasses import dataclass
from pathlib import Path

from .adapters.fs_storage import FsDocumentStore
from .adapters.http_writer import HttpDocumentWriter
from .adapters.recent import RecentTitles
from .adapters.yaml_codec import DocumentCodec, YamlFrontmatter
from .config import TendrilConfig, load_config


@dataclass
class Runtime:
    """Container for all wired components."""
    store: FsDocumentStore
    recent: RecentTitles
    config: TendrilConfig

    def writer(self, token: str | None = None) -> HttpDocumentWriter:
        """Writer aimed at the configured edit endpoint."""
        return HttpDocumentWriter(
            self.config.editor.endpoint,
            token=token,
            timeout=self.config.editor.timeout,
        )


def build_runtime(
    wiki_path: Path | None = None,
    config_path: Path | None = None,
) -> Runtime:
    """Build and wire all components for a wiki."""
    config = load_config(config_path=config_path, wiki_path=wiki_path)

    # Use config values if CLI args not provided
    if wiki_path is None:
        wiki_path = config.wiki.root

    store = FsDocumentStore(wiki_path, DocumentCodec(YamlFrontmatter()))
    recent = RecentTitles(limit=config.recent.size)

    return Runtime(
        store=store,
        recent=recent,
        config=config,
    )
