# services/store/car_store.py
"""
Curated car list kept as a JSON array on disk.

Cars are unique on ``orderNo``.  Sold or withdrawn cars are never removed,
only flagged ``active: false``, and ``list_active`` hides them.
"""

import json
import threading
from pathlib import Path
from typing import Any, Dict, List, Mapping

from loguru import logger

from models.car import Car


class CarStore:
    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # File access
    # ------------------------------------------------------------------
    def _read(self) -> List[Dict[str, Any]]:
        """A missing, empty or unreadable file reads as an empty list."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as exc:
            logger.warning(f"Could not read car store {self.path}: {exc}")
            return []
        try:
            data = json.loads(raw or "[]")
        except ValueError as exc:
            logger.warning(f"Car store {self.path} is not valid JSON: {exc}")
            return []
        return data if isinstance(data, list) else []

    def _write(self, cars: List[Dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(cars, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp.replace(self.path)

    @staticmethod
    def _index_of(cars: List[Dict[str, Any]], order_no: str) -> int:
        for i, car in enumerate(cars):
            if isinstance(car, dict) and str(car.get("orderNo")) == order_no:
                return i
        return -1

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def list_active(self) -> List[Dict[str, Any]]:
        return [c for c in self._read() if isinstance(c, dict) and c.get("active") is not False]

    def upsert(self, record: Mapping[str, Any]) -> Dict[str, Any]:
        """Insert or merge ``record`` by ``orderNo``; the result is always active."""
        car = Car.model_validate(dict(record))
        incoming = {**car.to_dict(), "active": True}
        with self._lock:
            cars = self._read()
            i = self._index_of(cars, car.order_no)
            if i >= 0:
                cars[i] = {**cars[i], **incoming}
                stored = cars[i]
            else:
                cars.append(incoming)
                stored = incoming
            self._write(cars)
        logger.info(f"Upserted car {car.order_no}")
        return stored

    def deactivate(self, order_no: str) -> bool:
        """Flag a car inactive.  Unknown order numbers are a no-op (False)."""
        order_no = str(order_no).strip()
        with self._lock:
            cars = self._read()
            i = self._index_of(cars, order_no)
            if i < 0:
                return False
            cars[i]["active"] = False
            self._write(cars)
        logger.info(f"Deactivated car {order_no}")
        return True
