from __future__ import annotations
import json
import logging
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Dict, Iterable, List, Optional, Protocol, Tuple

from models.records import Sample
from settings import get_settings

logger = logging.getLogger(__name__)


class SampleStore(Protocol):
    """Read side of a document store holding sensor samples."""

    def query_range(self, device: str, start: datetime, end: datetime) -> list[Sample]:
        ...

    def latest(self, device: str) -> Optional[Sample]:
        ...

    def devices(self) -> list[str]:
        ...


class MockSampleContainer:
    """Append-only document container holding sensor samples per device.

    With a persistence path the file is the source of truth: every read
    reloads it when another writer (a second process, the ``import`` command)
    has changed it since the last load.
    """

    def __init__(self, name: str, persistence_path: Optional[Path] = None) -> None:
        self.name = name
        self._items: Dict[str, List[Sample]] = {}
        self.persistence_path = persistence_path
        self._lock = Lock()
        self._file_signature: Optional[Tuple[int, int]] = None
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._refresh_from_disk()

    def put_sample(self, sample: Sample) -> None:
        self.put_samples([sample])

    def put_samples(self, samples: Iterable[Sample]) -> int:
        count = 0
        with self._lock:
            self._refresh_from_disk()
            for sample in samples:
                self._items.setdefault(sample.device, []).append(sample)
                count += 1
            self._persist()
        return count

    def query_range(self, device: str, start: datetime, end: datetime) -> list[Sample]:
        """Return samples for ``device`` with ``start <= time <= end``, oldest first."""

        with self._lock:
            self._refresh_from_disk()
            candidates = list(self._items.get(device, ()))
        matching = [sample for sample in candidates if start <= sample.timestamp <= end]
        return sorted(matching, key=lambda sample: sample.timestamp)

    def latest(self, device: str) -> Optional[Sample]:
        with self._lock:
            self._refresh_from_disk()
            candidates = list(self._items.get(device, ()))
        if not candidates:
            return None
        return max(candidates, key=lambda sample: sample.timestamp)

    def devices(self) -> list[str]:
        with self._lock:
            self._refresh_from_disk()
            return sorted(device for device, items in self._items.items() if items)

    def _signature(self) -> Optional[Tuple[int, int]]:
        assert self.persistence_path is not None
        try:
            stat = self.persistence_path.stat()
        except FileNotFoundError:
            return None
        return stat.st_mtime_ns, stat.st_size

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        payload = [
            sample.to_document() for items in self._items.values() for sample in items
        ]
        self.persistence_path.write_text(json.dumps(payload, indent=2, sort_keys=True))
        self._file_signature = self._signature()

    def _refresh_from_disk(self) -> None:
        # Caller holds the lock (or is __init__).
        if not self.persistence_path:
            return
        signature = self._signature()
        if signature is None or signature == self._file_signature:
            return

        try:
            raw = self.persistence_path.read_text() or "[]"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning(
                "Ignoring unreadable sample file %s",
                self.persistence_path,
                extra={"reason": str(exc)},
            )
            data = []
        if not isinstance(data, list):
            logger.warning(
                "Ignoring sample file %s",
                self.persistence_path,
                extra={"reason": "expected a JSON array"},
            )
            data = []

        items: Dict[str, List[Sample]] = {}
        for index, document in enumerate(data):
            try:
                sample = Sample.from_document(document)
            except (AttributeError, ValueError) as exc:
                logger.warning(
                    "Skipping invalid sample document #%d in %s",
                    index,
                    self.persistence_path,
                    extra={"reason": str(exc)},
                )
                continue
            items.setdefault(sample.device, []).append(sample)

        self._items = items
        self._file_signature = signature


@lru_cache
def build_default_store(
    name: Optional[str] = None,
    path: Optional[str] = None,
) -> MockSampleContainer:
    settings = get_settings()
    store_name = settings.store_name if name is None else name
    store_path = settings.store_persistence_path if path is None else path
    persistence = Path(store_path) if store_path else None
    return MockSampleContainer(name=store_name, persistence_path=persistence)
