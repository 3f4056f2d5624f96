"""
Persistence for the uploaded sales dataset.

The dataset is kept as one JSON document (a list of records) in a
Supabase table with columns ``id`` and ``data``:

    id = "latest"           -> list of sales records
    id = "training_status"  -> {staff_id: status} edits

Every save overwrites the whole document (last write wins). When no
Supabase credentials are configured the same documents are kept in a
local JSON file instead.
"""

import json
import logging
from pathlib import Path
from typing import Any, Mapping

import httpx
import pandas as pd
from postgrest.exceptions import APIError
from supabase import Client, create_client

from .config import (
    COLUMN_DEFAULTS,
    LOCAL_STORE_FILE,
    RECORD_COLUMNS,
    RECORD_KEYS,
    ROW_NOT_FOUND_CODE,
    SALES_DOCUMENT_ID,
    SALES_TABLE,
    STATUS_DOCUMENT_ID,
    SUPABASE_KEY,
    SUPABASE_URL,
)
from .loaders.utils import normalise_code, normalise_month, normalise_text

logger = logging.getLogger(__name__)

_STORED_TO_COLUMN = {stored: column for column, stored in RECORD_KEYS.items()}


def get_supabase_client(url: str = SUPABASE_URL, key: str = SUPABASE_KEY) -> Client | None:
    """Create a Supabase client, or None when credentials are not configured."""
    if not (url.startswith("http") and key):
        logger.info("Supabase not configured, using local JSON store")
        return None
    return create_client(url, key)


# ---------------------------------------------------------------------------
# Record <-> DataFrame conversion
# ---------------------------------------------------------------------------
def records_from_frame(df: pd.DataFrame) -> list[dict[str, Any]]:
    """Convert the raw sales table to JSON-safe records with stored keys.

    NaN becomes null and timestamps become ISO strings.
    """
    if df.empty:
        return []
    renamed = df.rename(columns=RECORD_KEYS)
    return json.loads(renamed.to_json(orient="records", date_format="iso"))


def frame_from_records(records: list[dict[str, Any]] | None) -> pd.DataFrame:
    """Rebuild the raw sales table from stored records.

    Missing canonical fields get their defaults so records written by
    older uploads still aggregate.
    """
    if not records:
        return pd.DataFrame(columns=RECORD_COLUMNS)

    df = pd.DataFrame.from_records(records).rename(columns=_STORED_TO_COLUMN)
    for column in RECORD_COLUMNS:
        if column not in df.columns:
            df[column] = COLUMN_DEFAULTS[column]

    df["salesman_code"] = df["salesman_code"].map(normalise_code)
    df["bill_month"] = df["bill_month"].map(normalise_month)
    for column in ("salesman_name", "showroom", "counter", "training_status"):
        df[column] = df[column].map(normalise_text)

    extras = [c for c in df.columns if c not in RECORD_COLUMNS]
    return df[RECORD_COLUMNS + extras]


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------
class SalesStore:
    """Read and write the sales dataset and training-status edits.

    Usage:
        store = SalesStore.from_config()
        df = store.get_data()
        store.save_data(df)
    """

    def __init__(
        self,
        client: Client | None = None,
        table: str = SALES_TABLE,
        local_path: Path | str = LOCAL_STORE_FILE,
    ):
        self.client = client
        self.table = table
        self.local_path = Path(local_path)

    @classmethod
    def from_config(cls) -> "SalesStore":
        return cls(client=get_supabase_client())

    @property
    def backend(self) -> str:
        return "supabase" if self.client is not None else "local"

    # ------------------------------------------------------------------
    # Document access
    # ------------------------------------------------------------------
    def _fetch_document(self, doc_id: str) -> Any:
        """Return the stored payload for doc_id, or None if absent/unreadable."""
        if self.client is None:
            return self._read_local().get(doc_id)

        try:
            response = (
                self.client.table(self.table)
                .select("data")
                .eq("id", doc_id)
                .single()
                .execute()
            )
        except APIError as e:
            # Row not found just means nothing has been uploaded yet
            if e.code != ROW_NOT_FOUND_CODE:
                logger.error("Supabase fetch error for '%s': %s", doc_id, e)
            return None
        except httpx.HTTPError:
            logger.exception("Supabase fetch error for '%s'", doc_id)
            return None

        data = response.data or {}
        return data.get("data")

    def _write_document(self, doc_id: str, payload: Any) -> None:
        if self.client is None:
            documents = self._read_local()
            documents[doc_id] = payload
            self._write_local(documents)
            return

        try:
            self.client.table(self.table).upsert({"id": doc_id, "data": payload}).execute()
        except APIError:
            logger.exception("Supabase save error for '%s'", doc_id)
            raise

    def _read_local(self) -> dict[str, Any]:
        if not self.local_path.exists():
            return {}
        try:
            with open(self.local_path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError):
            logger.exception("Could not read local store %s", self.local_path)
            return {}

    def _write_local(self, documents: dict[str, Any]) -> None:
        self.local_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.local_path.with_suffix(self.local_path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(documents, f)
        tmp_path.replace(self.local_path)

    # ------------------------------------------------------------------
    # Sales dataset
    # ------------------------------------------------------------------
    def get_data(self) -> pd.DataFrame:
        """Load the latest dataset; empty frame when nothing is stored."""
        records = self._fetch_document(SALES_DOCUMENT_ID)
        df = frame_from_records(records)
        logger.info("Loaded %d sales rows from %s store", len(df), self.backend)
        return df

    def save_data(self, df: pd.DataFrame) -> None:
        """Overwrite the stored dataset with df."""
        records = records_from_frame(df)
        self._write_document(SALES_DOCUMENT_ID, records)
        logger.info("Saved %d sales rows to %s store", len(records), self.backend)

    def update_training_status(self, df: pd.DataFrame, edits: Mapping[str, str] | None = None) -> None:
        """Persist a dataset whose training statuses were edited.

        The dataset is written first; the edits are only added to the
        overrides document once that save has succeeded.
        """
        self.save_data(df)
        if edits:
            self.record_status_changes(edits)

    # ------------------------------------------------------------------
    # Training-status edits
    # ------------------------------------------------------------------
    def get_status_overrides(self) -> dict[str, str]:
        overrides = self._fetch_document(STATUS_DOCUMENT_ID)
        return dict(overrides) if isinstance(overrides, dict) else {}

    def save_status_overrides(self, overrides: dict[str, str]) -> None:
        self._write_document(STATUS_DOCUMENT_ID, dict(overrides))
        logger.info("Saved %d training status overrides", len(overrides))

    def record_status_changes(self, edits: Mapping[str, str]) -> dict[str, str]:
        """Merge edits into the overrides document and return the new mapping."""
        overrides = self.get_status_overrides()
        overrides.update(edits)
        self.save_status_overrides(overrides)
        return overrides
