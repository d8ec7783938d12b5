"""Tests for the workbook append store."""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor

import pandas as pd
import pytest

from applications_api.errors import PersistError, StoreCorruptError
from applications_api.excel_db import HEADERS, ExcelAppendStore, lock_for
from applications_api.schemas import InternshipSubmission, JobSubmission, SubmissionKind


def job(n: int = 1) -> JobSubmission:
    return JobSubmission(
        name=f"Applicant {n}",
        email=f"applicant{n}@example.com",
        phone=f"+1 555 010{n}",
        resume_filename=f"cv{n}_20240305140709.pdf",
    )


def intern(n: int = 1) -> InternshipSubmission:
    return InternshipSubmission(
        name=f"Intern {n}",
        email=f"intern{n}@example.com",
        phone=f"0{n}23456789",
        cover_letter=f"I would love to join, attempt {n}.",
    )


def raw_sheet(path, sheet: str):
    return pd.read_excel(path, sheet_name=sheet, header=None, dtype=str, engine="openpyxl").values.tolist()


def test_first_append_creates_workbook_with_header(store):
    assert not store.exists()

    assert store.append(job()) == 1

    assert raw_sheet(store.path, "Job_Applications") == [
        ["Name", "Email", "Phone", "Resume"],
        ["Applicant 1", "applicant1@example.com", "+1 555 0101", "cv1_20240305140709.pdf"],
    ]


def test_internship_goes_to_its_own_sheet(store):
    store.append(job())
    store.append(intern())

    assert raw_sheet(store.path, "Intern_Applications") == [
        ["Name", "Email", "Phone", "Cover Letter"],
        ["Intern 1", "intern1@example.com", "0123456789", "I would love to join, attempt 1."],
    ]
    assert store.table_counts() == {"Job_Applications": 1, "Intern_Applications": 1}


def test_append_adds_exactly_one_row(store):
    store.append(job(1))
    before = len(store.read_table(SubmissionKind.JOB))

    store.append(job(2))

    rows = store.rows(SubmissionKind.JOB)
    assert len(rows) == before + 1
    assert rows[-1] == job(2).row()


def test_sequential_appends_round_trip_in_order(store):
    submissions = [job(n) for n in range(1, 6)]
    for submission in submissions:
        store.append(submission)

    reloaded = ExcelAppendStore(store.path)
    assert reloaded.rows(SubmissionKind.JOB) == [s.row() for s in submissions]
    assert len(raw_sheet(store.path, "Job_Applications")) == len(submissions) + 1


def test_phone_numbers_stay_text(store):
    store.append(intern(0))

    assert store.rows(SubmissionKind.INTERNSHIP)[0][2] == "0023456789"


def test_missing_table_reads_as_header_only(store):
    store.append(job())

    table = store.read_table(SubmissionKind.INTERNSHIP)
    assert list(table.columns) == HEADERS[SubmissionKind.INTERNSHIP]
    assert table.empty


def test_existing_other_sheets_are_preserved(store):
    store.save({"Notes": pd.DataFrame([["keep me"]], columns=["Note"])})

    store.append(intern())

    sheets = store.load()
    assert list(sheets) == ["Notes", "Intern_Applications"]
    assert sheets["Notes"].values.tolist() == [["keep me"]]


def test_corrupt_workbook_is_not_overwritten(store):
    with open(store.path, "wb") as f:
        f.write(b"this is not a spreadsheet")

    with pytest.raises(StoreCorruptError):
        store.append(job())

    with open(store.path, "rb") as f:
        assert f.read() == b"this is not a spreadsheet"


def test_unexpected_header_is_rejected(store):
    store.save({"Job_Applications": pd.DataFrame(columns=["Who", "Mail"])})

    with pytest.raises(StoreCorruptError):
        store.append(job())


def test_failed_write_keeps_previous_workbook(store, monkeypatch):
    store.append(job(1))

    def explode(self, *args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(pd.DataFrame, "to_excel", explode)
    with pytest.raises(PersistError):
        store.append(job(2))
    monkeypatch.undo()

    assert store.rows(SubmissionKind.JOB) == [job(1).row()]
    leftovers = [p for p in os.listdir(os.path.dirname(store.path)) if p.startswith(".tmp-")]
    assert leftovers == []


def test_stores_on_same_path_share_a_lock(store):
    assert lock_for(store.path) is ExcelAppendStore(store.path)._lock


def test_concurrent_appends_lose_no_rows(store):
    jobs = [job(n) for n in range(10)]
    interns = [intern(n) for n in range(10)]

    def append(submission):
        return ExcelAppendStore(store.path).append(submission)

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(append, jobs + interns))

    assert store.table_counts() == {
        "Job_Applications": len(jobs),
        "Intern_Applications": len(interns),
    }
    assert sorted(map(tuple, store.rows(SubmissionKind.JOB))) == sorted(tuple(s.row()) for s in jobs)


def test_text_starting_with_equals_is_kept_as_text(store):
    submission = InternshipSubmission(
        name="=Ann", email="ann@example.com", phone="+1 555", cover_letter="=1+1 is my motto"
    )
    store.append(submission)
    store.append(intern(2))

    rows = ExcelAppendStore(store.path).rows(SubmissionKind.INTERNSHIP)
    assert rows[0] == ["=Ann", "ann@example.com", "+1 555", "=1+1 is my motto"]
    assert rows[1] == intern(2).row()


def test_control_characters_are_dropped(store):
    submission = InternshipSubmission(
        name="Ann\x0c", email="ann@example.com", phone="555", cover_letter="Dear team,\x0bI apply"
    )

    assert store.append(submission) == 1

    assert store.rows(SubmissionKind.INTERNSHIP) == [["Ann", "ann@example.com", "555", "Dear team,I apply"]]
