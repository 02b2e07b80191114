# athletehub/storage/uploads.py
import logging
import os
import secrets
import time

from fastapi import HTTPException, UploadFile

from athletehub.settings import UPLOAD_FOLDER, MAX_UPLOAD_BYTES

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    "image/jpeg",
    "image/png",
    "image/gif",
    "video/mp4",
    "video/quicktime",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}

IMAGE_CONTENT_TYPES = {"image/jpeg", "image/png", "image/gif"}
VIDEO_CONTENT_TYPES = {"video/mp4", "video/quicktime"}


def _random_name(original: str) -> str:
    _, ext = os.path.splitext(original or "")
    return f"{int(time.time() * 1000)}-{secrets.token_hex(8)}{ext.lower()}"


def save_upload(file: UploadFile, folder: str, allowed: set | None = None) -> dict:
    """
    Validate and write an uploaded file under UPLOAD_FOLDER/<folder>.
    Returns the metadata stored on the owning document.
    """
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    allowed = allowed or ALLOWED_CONTENT_TYPES
    if file.content_type not in allowed:
        raise HTTPException(
            status_code=400,
            detail="Invalid file type. Only images, videos, PDFs, and documents are allowed.",
        )

    data = file.file.read(MAX_UPLOAD_BYTES + 1)
    if len(data) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="File too large. Maximum size is 10MB.")

    target_dir = os.path.join(UPLOAD_FOLDER, folder)
    os.makedirs(target_dir, exist_ok=True)
    name = _random_name(file.filename)
    with open(os.path.join(target_dir, name), "wb") as fh:
        fh.write(data)

    logger.info("stored upload %s/%s (%d bytes)", folder, name, len(data))
    return {
        "url": f"/uploads/{folder}/{name}",
        "filename": name,
        "original_name": file.filename,
        "content_type": file.content_type,
        "size": len(data),
    }


def delete_upload(url: str | None) -> None:
    """Remove a stored file given its public url. Missing files are ignored."""
    if not url or not url.startswith("/uploads/"):
        return
    path = os.path.join(UPLOAD_FOLDER, *url[len("/uploads/"):].split("/"))
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
