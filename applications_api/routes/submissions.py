from typing import Optional

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import PlainTextResponse

from ..submissions import process_submission

router = APIRouter()

SUCCESS_MESSAGE = "Application submitted successfully"


@router.post("/submit", response_class=PlainTextResponse)
def submit(
    request: Request,
    name: str = Form(...),
    email: str = Form(...),
    phone: str = Form(...),
    formType: Optional[str] = Form(None),
    coverLetter: Optional[str] = Form(None),
    resume: Optional[UploadFile] = File(None),
):
    process_submission(
        request.app.state.settings,
        formType,
        name,
        email,
        phone,
        cover_letter=coverLetter,
        resume=resume.file if resume is not None else None,
        resume_name=resume.filename if resume is not None else None,
    )
    return SUCCESS_MESSAGE
