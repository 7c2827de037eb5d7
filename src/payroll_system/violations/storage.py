from __future__ import annotations

import os
import time
from typing import Optional

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from ..core.exceptions import ValidationError

ALLOWED_IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp"}
PUBLIC_PREFIX = "/Uploads"


class ImageStore:
    """Saves violation photos under the upload folder and returns their public URL."""

    def __init__(self, upload_folder: str):
        self._folder = upload_folder

    @property
    def folder(self) -> str:
        return self._folder

    def save(self, file: Optional[FileStorage]) -> Optional[str]:
        if file is None or not file.filename:
            return None
        original = secure_filename(file.filename)
        extension = original.rsplit(".", 1)[-1].lower() if "." in original else ""
        if extension not in ALLOWED_IMAGE_EXTENSIONS:
            raise ValidationError("Violation image must be a png, jpg, gif or webp file")

        os.makedirs(self._folder, exist_ok=True)
        name = f"{int(time.time() * 1000)}.{extension}"
        file.save(os.path.join(self._folder, name))
        return f"{PUBLIC_PREFIX}/{name}"
