class ApplicationError(Exception):
    """Base class for failures surfaced to the HTTP layer.

    ``status_code`` is the HTTP status the transport maps the failure to.
    Server-side failures (5xx) hide their details behind ``public_message``.
    """

    status_code = 500
    public_message = "Error submitting application."

    def __init__(self, message: str = ""):
        self.message = message or self.public_message
        super().__init__(self.message)

    def client_message(self) -> str:
        if self.status_code < 500:
            return self.message
        return self.public_message


class ValidationError(ApplicationError):
    """A required field for the chosen application kind is missing."""

    status_code = 400
    public_message = "Invalid application."


class UploadError(ApplicationError):
    """The attached file could not be written to the upload directory."""


class StoreCorruptError(ApplicationError):
    """The workbook exists but cannot be parsed."""


class PersistError(ApplicationError):
    """Writing the workbook back to disk failed."""
