from fastapi import HTTPException, UploadFile


TRUTHY_VALUES = {"1", "true", "yes", "on"}


def parse_boolish(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in TRUTHY_VALUES


def validate_upload_file(file: UploadFile | None) -> UploadFile:
    if file is None:
        raise HTTPException(status_code=400, detail="file is required")
    if not (file.filename or "").strip():
        raise HTTPException(status_code=400, detail="file must have a filename")
    return file
