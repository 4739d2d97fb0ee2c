import asyncio
import copy
from pathlib import Path
from typing import Union

from sprintrack.io import atomic_write, load_yaml_file
from sprintrack.logs import get_logger
from sprintrack.schema import validate_snapshot
from sprintrack.version import APP_SCHEMA_VERSION
from .memory import MemoryStore

log = get_logger("store.yaml_file")

class YamlFileStore(MemoryStore):
    """
    A MemoryStore persisted to a single YAML file after every write.

    The file is rewritten whole on a worker thread so the event loop keeps
    serving other fetches. Saves are serialized and each one takes its
    snapshot once the previous save finished, so the file always ends on the
    latest tree.
    """

    def __init__(self, file_path: Union[Path, str], latency: float = 0.0):
        self.file_path = Path(file_path).expanduser()
        snapshot = load_yaml_file(self.file_path)
        data = None
        if snapshot is not None:
            validate_snapshot(snapshot, source=str(self.file_path))
            data = snapshot.get("data") or {}
            log.info(f"Loaded store from {self.file_path}")
        super().__init__(data=data, latency=latency)
        self._save_lock = None
        self._save_loop = None

    async def _changed(self):
        # One lock per event loop; the CLI and tests run a fresh loop per call
        loop = asyncio.get_running_loop()
        if self._save_loop is not loop:
            self._save_lock = asyncio.Lock()
            self._save_loop = loop
        async with self._save_lock:
            snapshot = {
                "meta": {"schema_version": APP_SCHEMA_VERSION},
                "data": copy.deepcopy(self._root),
            }
            await asyncio.to_thread(atomic_write, self.file_path, snapshot)
