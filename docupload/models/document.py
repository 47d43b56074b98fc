"""Document model for assembled uploads returned by the server."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import BaseModel


class Document(BaseModel):
    """A stored document, as returned by finalize or a simple upload."""

    id: str = Field(..., description="Document ID")
    original_name: str = Field(..., alias="originalName", description="Uploaded file name")
    mime_type: str = Field(..., alias="mimeType", description="MIME type")
    size: int = Field(..., ge=0, description="Size in bytes")
    file_path: str = Field(..., alias="filePath", description="Storage path on the server")
    file_url: Optional[str] = Field(None, alias="fileURL", description="Download URL")
    is_private: bool = Field(False, alias="isPrivate", description="Visible to owner only")
    created_at: datetime = Field(..., alias="createdAt", description="Creation timestamp")
    user_id: str = Field(..., alias="userId", description="Owner ID")
    author_nickname: Optional[str] = Field(
        None, alias="authorNickname", description="Owner display name"
    )

    @classmethod
    def table_columns(cls) -> list[str]:
        """Return columns for table output."""
        return ["id", "original_name", "mime_type", "size_display", "is_private"]

    def to_row(self, columns: list[str] | None = None) -> dict[str, str]:
        """Convert to row for table output."""
        cols = columns or self.table_columns()
        data = self.to_dict()
        data["size_display"] = self.size_display
        return {col: str(data.get(col, "")) for col in cols}

    @property
    def size_display(self) -> str:
        """Return human-readable file size."""
        size = float(self.size)
        for unit in ["B", "KB", "MB", "GB", "TB"]:
            if size < 1024:
                return f"{size:.1f} {unit}"
            size /= 1024
        return f"{size:.1f} PB"
