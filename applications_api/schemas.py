from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class SubmissionKind(str, Enum):
    JOB = "jobs"
    INTERNSHIP = "internships"

    @classmethod
    def from_form_type(cls, form_type: Optional[str]) -> "SubmissionKind":
        # The form only ever distinguishes "jobs" from everything else.
        if form_type == cls.JOB.value:
            return cls.JOB
        return cls.INTERNSHIP


class _Applicant(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    phone: str


class JobSubmission(_Applicant):
    kind: Literal[SubmissionKind.JOB] = SubmissionKind.JOB
    resume_filename: str = Field(..., min_length=1)

    def row(self) -> List[str]:
        return [self.name, self.email, self.phone, self.resume_filename]


class InternshipSubmission(_Applicant):
    kind: Literal[SubmissionKind.INTERNSHIP] = SubmissionKind.INTERNSHIP
    cover_letter: str = Field(..., min_length=1)

    def row(self) -> List[str]:
        return [self.name, self.email, self.phone, self.cover_letter]


Submission = Annotated[Union[JobSubmission, InternshipSubmission], Field(discriminator="kind")]


class StoredFile(BaseModel):
    original_name: str
    assigned_name: str
    path: str
    size: int


class SubmissionResult(BaseModel):
    kind: SubmissionKind
    table: str
    row_count: int
    stored_file: Optional[StoredFile] = None


class WorkbookSummary(BaseModel):
    exists: bool
    tables: Dict[str, int] = Field(default_factory=dict)
