from __future__ import annotations

import csv
import json
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from medspa_seeder.config.logger import logger
from medspa_seeder.config.models.records import OUTPUT_FIELDS
from medspa_seeder.config.settings import StorageSettings
from medspa_seeder.storage.base import ActorStorage

INPUT_KEY = "INPUT"

_VALID_KEY = re.compile(r"^[A-Za-z0-9!\-_.'()]{1,256}$")


class LocalStorage(ActorStorage):
    """
    Filesystem-backed run storage.

    Layout under `settings.dir`:
      - key_value_store/<KEY>.json: one JSON document per key (INPUT, RUN-SUMMARY, ERROR)
      - <dataset_name>.json: the dataset as a JSON list, appended on every push
        and cleared by `purge()` at the start of each run
      - <dataset_name>.csv: the same dataset as CSV, rewritten on every push
    """

    def __init__(self, settings: Optional[StorageSettings] = None) -> None:
        """
        :param settings: Where to keep the files; read from the environment when omitted.
        """
        self.settings = settings or StorageSettings()
        self.root = Path(self.settings.dir).expanduser().resolve()
        self.kv_dir = self.root / "key_value_store"
        self.dataset_json = self.root / f"{self.settings.dataset_name}.json"
        self.dataset_csv = self.root / f"{self.settings.dataset_name}.csv"

    def _key_path(self, key: str) -> Path:
        if not _VALID_KEY.match(key):
            raise ValueError(f"Invalid key-value store key: {key!r}")
        return self.kv_dir / f"{key}.json"

    def get_input(self) -> Optional[Dict[str, Any]]:
        return self.get_value(INPUT_KEY)

    def get_value(self, key: str) -> Any:
        path = self._key_path(key)
        if not path.exists():
            return None
        logger.debug(f"Loading {path}")
        return json.loads(path.read_text(encoding="utf-8"))

    def set_value(self, key: str, value: Any) -> None:
        path = self._key_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Saving {path}")
        path.write_text(json.dumps(value, indent=2), encoding="utf-8")

    def load_dataset(self) -> List[Dict[str, Any]]:
        if not self.dataset_json.exists():
            return []
        return json.loads(self.dataset_json.read_text(encoding="utf-8"))

    def push_data(self, rows: List[Dict[str, Any]]) -> None:
        dataset = self.load_dataset()
        dataset.extend(rows)
        self.root.mkdir(parents=True, exist_ok=True)

        logger.debug(f"Saving {len(rows)} rows to {self.dataset_json}")
        self.dataset_json.write_text(json.dumps(dataset, indent=2), encoding="utf-8")

        with self.dataset_csv.open("w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=OUTPUT_FIELDS, extrasaction="ignore")
            writer.writeheader()
            writer.writerows(dataset)

    def purge(self) -> None:
        for path in (self.dataset_json, self.dataset_csv):
            if path.exists():
                logger.debug(f"Removing {path}")
                path.unlink()
        if not self.kv_dir.exists():
            return
        for path in self.kv_dir.glob("*.json"):
            if path.stem != INPUT_KEY:
                logger.debug(f"Removing {path}")
                path.unlink()
