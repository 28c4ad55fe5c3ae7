"""
DirectoryUser model representing one entry of the user directory listing.
"""

from typing import Any

from pydantic import BaseModel, Field

UNKNOWN_USER_NAME = "Unknown User"


class DirectoryUser(BaseModel):
    """
    A user as listed by the UserDirectory.

    Attributes:
        id: User id (stringified)
        display_name: Name shown in reports
    """

    id: str = Field(..., min_length=1)
    display_name: str

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> "DirectoryUser":
        """
        Build a DirectoryUser from a directory payload.

        Accepts either the compact ``{id, displayName}`` shape or the full
        user shape (``firstName``, ``lastName``, ``email``...). The display
        name falls back to "first last", then the email, then
        "Unknown User".

        Raises:
            ValueError: If the payload has no id
        """
        user_id = raw.get("id")
        if user_id is None or isinstance(user_id, bool) or str(user_id).strip() == "":
            raise ValueError("Directory entry has no id")

        display_name = raw.get("displayName") or raw.get("display_name")
        if not display_name:
            full_name = f"{raw.get('firstName') or ''} {raw.get('lastName') or ''}".strip()
            display_name = full_name or raw.get("email") or UNKNOWN_USER_NAME

        return cls(id=str(user_id), display_name=str(display_name))

    class Config:
        json_schema_extra = {
            "example": {
                "id": "7",
                "display_name": "Jane Doe"
            }
        }
