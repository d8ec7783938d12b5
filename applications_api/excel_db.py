import logging
import os
import tempfile
import threading
from typing import Dict, List

import pandas as pd
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE

from .errors import PersistError, StoreCorruptError
from .schemas import Submission, SubmissionKind

logger = logging.getLogger(__name__)

TABLE_NAMES = {
    SubmissionKind.JOB: "Job_Applications",
    SubmissionKind.INTERNSHIP: "Intern_Applications",
}

HEADERS = {
    SubmissionKind.JOB: ["Name", "Email", "Phone", "Resume"],
    SubmissionKind.INTERNSHIP: ["Name", "Email", "Phone", "Cover Letter"],
}

# One lock per workbook file, shared by every store opened on that path.
_LOCKS: Dict[str, threading.RLock] = {}
_LOCKS_GUARD = threading.Lock()


def lock_for(path: str) -> threading.RLock:
    key = os.path.realpath(path)
    with _LOCKS_GUARD:
        lock = _LOCKS.get(key)
        if lock is None:
            lock = _LOCKS[key] = threading.RLock()
        return lock


def ensure_parent(path: str):
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)


def empty_table(kind: SubmissionKind) -> pd.DataFrame:
    return pd.DataFrame(columns=HEADERS[kind])


def clean_cell(value: str) -> str:
    """Drop control characters that xlsx cells cannot hold."""
    return ILLEGAL_CHARACTERS_RE.sub("", value)


def _store_as_text(worksheet):
    # openpyxl turns any string starting with "=" into a formula.
    for row in worksheet.iter_rows():
        for cell in row:
            if cell.data_type == "f":
                cell.data_type = "s"


class ExcelAppendStore:
    """Read-modify-write access to the applications workbook.

    The workbook holds one sheet per application kind; the first row of each
    sheet is its header. Every append reloads the whole document, adds one
    row and rewrites the file, serialized per path so concurrent requests
    never lose each other's rows. Writes go to a temporary file that
    replaces the workbook only once complete.
    """

    def __init__(self, path: str):
        self.path = path
        self._lock = lock_for(path)

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def load(self) -> Dict[str, pd.DataFrame]:
        if not self.exists():
            return {}
        try:
            return pd.read_excel(
                self.path,
                sheet_name=None,
                dtype=str,
                keep_default_na=False,
                engine="openpyxl",
            )
        except Exception as e:
            raise StoreCorruptError(f"Workbook {self.path} is unreadable: {e}") from e

    def save(self, sheets: Dict[str, pd.DataFrame]) -> None:
        if not sheets:
            raise PersistError("Refusing to write a workbook without sheets")
        with self._lock:
            ensure_parent(self.path)
            tmp_path = None
            try:
                fd, tmp_path = tempfile.mkstemp(
                    prefix=".tmp-", suffix=".xlsx", dir=os.path.dirname(os.path.abspath(self.path))
                )
                os.close(fd)
                with pd.ExcelWriter(tmp_path, engine="openpyxl") as writer:
                    for name, frame in sheets.items():
                        frame.to_excel(writer, sheet_name=name, index=False)
                        _store_as_text(writer.sheets[name])
                os.replace(tmp_path, self.path)
            except Exception as e:
                if tmp_path is not None and os.path.exists(tmp_path):
                    os.remove(tmp_path)
                raise PersistError(f"Could not write workbook {self.path}: {e}") from e

    def append(self, submission: Submission) -> int:
        """Append ``submission`` to its sheet; return the sheet's data row count."""
        table = TABLE_NAMES[submission.kind]
        header = HEADERS[submission.kind]
        row = pd.DataFrame([[clean_cell(v) for v in submission.row()]], columns=header)

        with self._lock:
            sheets = self.load()
            current = sheets.get(table)
            if current is None or current.columns.empty:
                logger.info("Creating sheet %s in %s", table, self.path)
                updated = row
            elif list(current.columns) != header:
                raise StoreCorruptError(
                    f"Sheet {table} has header {list(current.columns)}, expected {header}"
                )
            elif current.empty:
                updated = row
            else:
                updated = pd.concat([current, row], ignore_index=True)
            sheets[table] = updated
            self.save(sheets)

        logger.info("Appended row %d to %s", len(updated), table)
        return len(updated)

    def read_table(self, kind: SubmissionKind) -> pd.DataFrame:
        table = self.load().get(TABLE_NAMES[kind])
        if table is None or table.columns.empty:
            return empty_table(kind)
        return table

    def table_counts(self) -> Dict[str, int]:
        return {name: len(frame) for name, frame in self.load().items()}

    def rows(self, kind: SubmissionKind) -> List[List[str]]:
        return self.read_table(kind).values.tolist()
