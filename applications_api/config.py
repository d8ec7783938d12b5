import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _split_origins(value: str) -> List[str]:
    origins = [o.strip() for o in value.split(",") if o.strip()]
    return origins or ["*"]


@dataclass(frozen=True)
class Settings:
    storage_dir: str = "."
    workbook_name: str = "applications.xlsx"
    upload_dir_name: str = "uploads"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    dev_token: str = ""
    log_level: str = "INFO"

    @property
    def workbook_path(self) -> str:
        return os.path.join(self.storage_dir, self.workbook_name)

    @property
    def upload_dir(self) -> str:
        return os.path.join(self.storage_dir, self.upload_dir_name)


def get_settings() -> Settings:
    return Settings(
        storage_dir=os.getenv("STORAGE_DIR", "."),
        workbook_name=os.getenv("WORKBOOK_PATH", "applications.xlsx"),
        upload_dir_name=os.getenv("UPLOAD_DIR", "uploads"),
        cors_origins=_split_origins(os.getenv("CORS_ORIGINS", "*")),
        dev_token=os.getenv("DEV_TOKEN", ""),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
