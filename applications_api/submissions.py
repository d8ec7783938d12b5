import logging
from typing import BinaryIO, Optional

from pydantic import ValidationError as PydanticValidationError

from .config import Settings
from .errors import ApplicationError, ValidationError
from .excel_db import TABLE_NAMES, ExcelAppendStore
from .schemas import (
    InternshipSubmission,
    JobSubmission,
    Submission,
    SubmissionKind,
    SubmissionResult,
)
from .storage import discard_upload, store_upload

logger = logging.getLogger(__name__)

RESUME_REQUIRED = "Resume file is required for job applications."
COVER_LETTER_REQUIRED = "Cover letter is required for internship applications."


def build_submission(
    kind: SubmissionKind,
    name: str,
    email: str,
    phone: str,
    resume_filename: Optional[str] = None,
    cover_letter: Optional[str] = None,
) -> Submission:
    try:
        if kind is SubmissionKind.JOB:
            return JobSubmission(name=name, email=email, phone=phone, resume_filename=resume_filename)
        return InternshipSubmission(name=name, email=email, phone=phone, cover_letter=cover_letter)
    except PydanticValidationError as e:
        fields = ", ".join(str(err["loc"][-1]) for err in e.errors() if err["loc"])
        raise ValidationError(f"Invalid {kind.value} application: {fields}") from e


def check_required(kind: SubmissionKind, has_resume: bool, cover_letter: Optional[str]):
    if kind is SubmissionKind.JOB and not has_resume:
        raise ValidationError(RESUME_REQUIRED)
    if kind is SubmissionKind.INTERNSHIP and not (cover_letter or "").strip():
        raise ValidationError(COVER_LETTER_REQUIRED)


def process_submission(
    settings: Settings,
    form_type: Optional[str],
    name: str,
    email: str,
    phone: str,
    cover_letter: Optional[str] = None,
    resume: Optional[BinaryIO] = None,
    resume_name: Optional[str] = None,
    store: Optional[ExcelAppendStore] = None,
) -> SubmissionResult:
    """Validate, store the resume (job applications) and append the row.

    Validation failures are raised before anything touches the disk. When
    the append fails after the resume was stored, the stored file is removed
    again so an aborted submission leaves nothing behind.
    """
    kind = SubmissionKind.from_form_type(form_type)
    has_resume = resume is not None and bool(resume_name)
    check_required(kind, has_resume, cover_letter)

    store = store or ExcelAppendStore(settings.workbook_path)
    stored = None
    if kind is SubmissionKind.JOB:
        stored = store_upload(resume, resume_name, settings.upload_dir)
        submission = build_submission(kind, name, email, phone, resume_filename=stored.assigned_name)
    else:
        submission = build_submission(kind, name, email, phone, cover_letter=cover_letter)

    try:
        row_count = store.append(submission)
    except ApplicationError:
        if stored is not None:
            logger.warning("Append failed, discarding upload %s", stored.assigned_name)
            discard_upload(stored)
        raise

    return SubmissionResult(
        kind=kind,
        table=TABLE_NAMES[kind],
        row_count=row_count,
        stored_file=stored,
    )
