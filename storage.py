import logging
import secrets
import time
from pathlib import Path
from typing import Optional

from starlette.datastructures import UploadFile

from errors import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".pdf", ".doc", ".docx"}
ALLOWED_CONTENT_TYPES = {
    "image/jpeg",
    "image/jpg",
    "image/png",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


class LocalFileStorage:
    """
    Stores uploaded documents on local disk.

    Files land in ``<root>/<category>/<field>-<millis>-<random><ext>``;
    save() returns the path relative to root, which is what entities keep
    and what the /uploads mount serves.
    """

    def __init__(self, root: str, max_bytes: int):
        self.root = Path(root)
        self.max_bytes = max_bytes

    def connect(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        logger.info("Upload storage ready at %s", self.root.absolute())

    def path_for(self, reference: str) -> Path:
        return self.root / reference

    def save(self, upload: UploadFile, category: str, field: str) -> str:
        filename = upload.filename or ""
        extension = Path(filename).suffix.lower()
        content_type = (upload.content_type or "").lower()

        if extension not in ALLOWED_EXTENSIONS or content_type not in ALLOWED_CONTENT_TYPES:
            raise ValidationError(
                "Invalid file type. Only JPEG, PNG, PDF, DOC, and DOCX files are allowed.",
                error=f"{field}: {filename} ({content_type or 'unknown type'})",
            )

        data = upload.file.read(self.max_bytes + 1)
        if len(data) > self.max_bytes:
            raise ValidationError(
                "File too large",
                error=f"{field}: limit is {self.max_bytes} bytes",
            )

        stored_name = f"{field}-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{extension}"
        directory = self.root / category
        directory.mkdir(parents=True, exist_ok=True)
        (directory / stored_name).write_bytes(data)

        reference = f"{category}/{stored_name}"
        logger.info("Stored upload %s (%d bytes)", reference, len(data))
        return reference

    def save_fields(
        self,
        files: dict[str, UploadFile],
        category: str,
        fields: tuple[str, ...],
    ) -> dict[str, str]:
        """Store whichever of fields were uploaded; returns field -> reference."""
        stored: dict[str, str] = {}
        for field in fields:
            upload: Optional[UploadFile] = files.get(field)
            if upload is None or not upload.filename:
                continue
            stored[field] = self.save(upload, category, field)
        return stored
