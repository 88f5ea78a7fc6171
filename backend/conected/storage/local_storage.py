import uuid
from pathlib import Path
from fastapi import UploadFile
from conected.core.config import settings


class LocalStorage:
    def __init__(self, upload_dir: str | None = None):
        self.upload_dir = Path(upload_dir or settings.UPLOAD_DIR)
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    async def save_file(self, file: UploadFile) -> str:
        """Save an uploaded image and return its stored filename"""
        # Generate unique filename, keeping the original extension
        file_ext = Path(file.filename).suffix.lower()
        unique_filename = f"{uuid.uuid4()}{file_ext}"
        file_path = self.upload_dir / unique_filename

        # Save file
        content = await file.read()
        with open(file_path, "wb") as f:
            f.write(content)

        return unique_filename

    def get_file_path(self, filename: str) -> Path:
        """Get full path to a file"""
        return self.upload_dir / filename

    def delete_file(self, filename: str) -> bool:
        """Delete a file"""
        file_path = self.get_file_path(filename)
        if file_path.exists():
            file_path.unlink()
            return True
        return False

    def file_exists(self, filename: str) -> bool:
        """Check if file exists"""
        return self.get_file_path(filename).exists()


storage = LocalStorage()
