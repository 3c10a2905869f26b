import json
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

import pandas as pd
from loguru import logger

from store_check.models import MerchantRecord


class StoreRegistry:
    """
    Immutable snapshot of the affiliated store registry.
    Built once at startup and shared read-only across requests.
    """

    def __init__(self, records: Iterable[MerchantRecord]):
        self._records: Tuple[MerchantRecord, ...] = tuple(records)
        self._by_id: Dict[str, MerchantRecord] = {r.id: r for r in self._records}

    @property
    def records(self) -> Tuple[MerchantRecord, ...]:
        return self._records

    def get(self, store_id: str) -> Optional[MerchantRecord]:
        return self._by_id.get(str(store_id))

    def is_empty(self) -> bool:
        return not self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[MerchantRecord]:
        return iter(self._records)


def _parse_embedding(value) -> Optional[Tuple[float, ...]]:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        value = json.loads(value)
    try:
        return tuple(float(v) for v in value)
    except TypeError:
        # NaN from an empty CSV cell
        return None


def load_stores(file_path: str) -> StoreRegistry:
    """
    Load the store registry from a CSV or JSON file.

    Expected columns: id (optional, defaults to row position), name, category,
    address and optionally embedding (JSON list of floats).

    Args:
        file_path (str): Path to a .csv or .json registry file.

    Returns:
        StoreRegistry: Read-only registry snapshot.
    """
    if file_path.endswith(".json"):
        df = pd.read_json(file_path, dtype=False)
    else:
        df = pd.read_csv(file_path, dtype=str, keep_default_na=False)

    records: List[MerchantRecord] = []
    for position, row in df.iterrows():
        def safe_get(col):
            if col not in row.index:
                return ""
            val = row[col]
            if not isinstance(val, (list, tuple)) and pd.isna(val):
                return ""
            return val

        store_id = safe_get("id")
        records.append(
            MerchantRecord(
                id=str(store_id) if store_id != "" else str(position),
                name=str(safe_get("name")).strip(),
                category=str(safe_get("category")).strip(),
                address=str(safe_get("address")).strip(),
                embedding=_parse_embedding(safe_get("embedding") or None),
            )
        )

    logger.debug(f"📚 Loaded {len(records)} stores from {file_path}")
    return StoreRegistry(records)
