"""Runtime wiring helper for CLI and API applications."""

from dataclasses import dataclass
from pathlib import Path

from .adapters.fs_storage import FsStorage
from .adapters.html_renderer import EntryRenderer
from .adapters.idgen import HexId
from .adapters.sqlite_index import SQLiteIndex
from .adapters.yaml_codec import YamlEntryCodec
from .config import MarginaliaConfig, load_config
from .core.ports import Index
from .core.store import EntryStore


@dataclass
class Runtime:
    """Container for all wired components."""
    store: EntryStore
    index: Index
    renderer: EntryRenderer
    config: MarginaliaConfig


def build_runtime(
    store_path: Path | None = None,
    db_path: Path | None = None,
    config_path: Path | None = None,
) -> Runtime:
    """Build and wire all components for an entry store."""
    config = load_config(config_path=config_path, store_path=store_path)

    if store_path is None:
        store_path = config.store.root
    if db_path is None:
        db_path = config.store.db

    store = EntryStore(FsStorage(store_path), YamlEntryCodec(), HexId(nbytes=config.id.bytes))
    index = SQLiteIndex(db_path=db_path, store=store)
    renderer = EntryRenderer(store, link_base=config.render.link_base)

    return Runtime(store=store, index=index, renderer=renderer, config=config)
