"""Persistence for migration flows, keyed by identifier."""

import json
import logging
import re
import threading
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from ..models.migration import MigrationFlow

logger = logging.getLogger(__name__)


class FlowStore(Protocol):
    """
    Key-value persistence for flows. Storage technology is up to the implementation.

    Implementations may set ``blocking_io = True`` to have the orchestrator
    call ``put`` from a worker thread with a detached snapshot of the flow.
    """

    def get(self, flow_id: str) -> Optional[MigrationFlow]:
        ...

    def put(self, flow_id: str, record: MigrationFlow) -> None:
        ...


class InMemoryStore:
    """Keeps flows in a dictionary; the live objects are returned as-is."""

    blocking_io = False

    def __init__(self):
        self._records: Dict[str, MigrationFlow] = {}
        self._lock = threading.Lock()

    def get(self, flow_id: str) -> Optional[MigrationFlow]:
        with self._lock:
            return self._records.get(flow_id)

    def put(self, flow_id: str, record: MigrationFlow) -> None:
        with self._lock:
            self._records[flow_id] = record

    def list_ids(self) -> List[str]:
        with self._lock:
            return list(self._records)

    def delete(self, flow_id: str) -> bool:
        with self._lock:
            return self._records.pop(flow_id, None) is not None


class JsonFileStore:
    """
    Stores each flow as ``<directory>/<flow_id>.json``.

    ``get`` returns a fresh ``MigrationFlow`` rebuilt from disk.
    """

    blocking_io = True

    _SAFE_ID = re.compile(r"^[A-Za-z0-9_.-]+$")

    def __init__(self, directory: str):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def _path(self, flow_id: str) -> Path:
        if not self._SAFE_ID.match(flow_id):
            raise ValueError(f"Invalid flow id: {flow_id!r}")
        return self.directory / f"{flow_id}.json"

    def get(self, flow_id: str) -> Optional[MigrationFlow]:
        filepath = self._path(flow_id)
        if not filepath.exists():
            return None
        with open(filepath) as f:
            return MigrationFlow.from_dict(json.load(f))

    def put(self, flow_id: str, record: MigrationFlow) -> None:
        filepath = self._path(flow_id)
        tmp_path = filepath.with_suffix(".json.tmp")
        data = record.to_dict()
        with self._lock:
            with open(tmp_path, 'w') as f:
                json.dump(data, f, indent=2, default=str)
            tmp_path.replace(filepath)
        logger.debug(f"Saved flow {flow_id} to {filepath}")

    def list_ids(self) -> List[str]:
        return sorted(p.stem for p in self.directory.glob("*.json"))

    def delete(self, flow_id: str) -> bool:
        filepath = self._path(flow_id)
        if filepath.exists():
            filepath.unlink()
            return True
        return False
