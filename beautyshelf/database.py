# beautyshelf/database.py
"""
File-backed table store used by the local ("file") backend.

Each table is a CSV (or xlsx) file inside `data_dir`. Every value is stored as
a string; callers normalise types when reading. Read-modify-write cycles are
serialised with a FileLock per table file.

Usage:
    db = FileBackedDB(Path("data"))
    db.create_record("products", {"name": "Serum", "user_id": "u1"})
    db.update_record("products", {"id": pid, "user_id": "u1"}, {"rating": 5})
"""

from pathlib import Path
from typing import Any, Dict, List, Optional
import uuid

import pandas as pd
from filelock import FileLock


class FileBackedDB:
    """
    Manages CSV / Excel files inside data_dir.
    `tables` maps a logical table name to a file name; unknown tables fall
    back to `<table>.csv`.
    """

    def __init__(self, data_dir: Path, tables: Optional[Dict[str, str]] = None):
        self.data_dir = Path(data_dir)
        self.tables = dict(tables or {})

    def _file_path(self, table: str) -> Path:
        if table.endswith(".csv") or table.endswith(".xlsx"):
            return self.data_dir / Path(table)
        filename = self.tables.get(table, f"{table}.csv")
        return self.data_dir / Path(filename)

    def _lock_for(self, path: Path) -> FileLock:
        return FileLock(str(path) + ".lock")

    def _read_df(self, table: str) -> pd.DataFrame:
        path = self._file_path(table)
        if not path.exists():
            return pd.DataFrame()
        if path.suffix.lower() in (".xls", ".xlsx"):
            return pd.read_excel(path, dtype=str).fillna("")
        return pd.read_csv(path, dtype=str, keep_default_na=False).fillna("")

    def _write_df_nolock(self, table: str, df: pd.DataFrame) -> None:
        """Write without acquiring the lock; the caller must already hold it."""
        path = self._file_path(table)
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.suffix.lower() in (".xls", ".xlsx"):
            df.to_excel(path, index=False)
        else:
            df.to_csv(path, index=False)

    @staticmethod
    def _cell(value: Any) -> str:
        return "" if value is None else str(value)

    @staticmethod
    def _mask(df: pd.DataFrame, match: Dict[str, Any]) -> pd.Series:
        mask = pd.Series(True, index=df.index)
        for key, value in match.items():
            if key not in df.columns:
                return pd.Series(False, index=df.index)
            mask &= df[key].astype(str) == str(value)
        return mask

    @staticmethod
    def _row_dict(df: pd.DataFrame, idx) -> Dict[str, Any]:
        row = df.loc[idx].to_dict()
        return {k: (None if pd.isna(v) or v == "" else v) for k, v in row.items()}

    # --- high-level CRUD primitives ---

    def list_records(self, table: str) -> List[Dict[str, Any]]:
        df = self._read_df(table)
        if df.empty:
            return []
        return [self._row_dict(df, idx) for idx in df.index]

    def get_record(self, table: str, match: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        df = self._read_df(table)
        if df.empty:
            return None
        mask = self._mask(df, match)
        if not mask.any():
            return None
        return self._row_dict(df, df[mask].index[0])

    def create_record(self, table: str, data: Dict[str, Any], id_field: str = "id") -> Dict[str, Any]:
        """
        Create a new record. If id_field is missing from `data`, a uuid4 hex is generated.
        Returns the saved record (with id).
        """
        data = dict(data)
        if not data.get(id_field):
            data[id_field] = uuid.uuid4().hex
        path = self._file_path(table)
        path.parent.mkdir(parents=True, exist_ok=True)
        with self._lock_for(path):
            df = self._read_df(table)
            new_row = pd.DataFrame([{k: self._cell(v) for k, v in data.items()}], dtype=str)
            df = new_row if df.empty else pd.concat([df, new_row], ignore_index=True, sort=False)
            self._write_df_nolock(table, df.fillna(""))
        return data

    def update_record(self, table: str, match: Dict[str, Any], updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Update rows matching every key in `match`. Returns the first updated row or None.
        """
        path = self._file_path(table)
        with self._lock_for(path):
            df = self._read_df(table)
            if df.empty:
                return None
            mask = self._mask(df, match)
            if not mask.any():
                return None
            for k, v in updates.items():
                if k not in df.columns:
                    df[k] = ""
                df.loc[mask, k] = self._cell(v)
            self._write_df_nolock(table, df)
            return self._row_dict(df, df[mask].index[0])

    def delete_record(self, table: str, match: Dict[str, Any]) -> bool:
        """
        Delete all rows matching every key in `match`. Returns True if any rows were removed.
        """
        path = self._file_path(table)
        with self._lock_for(path):
            df = self._read_df(table)
            if df.empty:
                return False
            mask = self._mask(df, match)
            if not mask.any():
                return False
            self._write_df_nolock(table, df[~mask])
            return True
