import time
from typing import Any, ClassVar, Final, Self

from pydantic import BaseModel, ConfigDict

from src.gallery.store.base import Document

# Fields that may carry credentials on legacy public records
SECRET_FIELDS: Final[frozenset[str]] = frozenset({"password", "hashed_password", "password_hash"})


def now_ms() -> int:
    """Current epoch time in milliseconds."""
    return int(time.time() * 1000)


def strip_secret_fields(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if key not in SECRET_FIELDS}


class StoredModel(BaseModel):
    """Base for models read from the document store.

    Public models drop credential-shaped fields before validation, so a legacy
    record that still embeds a plaintext password never hands it to callers.
    """

    model_config = ConfigDict(extra="ignore")

    strip_secrets: ClassVar[bool] = True

    id: str

    @classmethod
    def from_document(cls, doc: Document, **extra: Any) -> Self:
        data = strip_secret_fields(doc.data) if cls.strip_secrets else dict(doc.data)
        return cls.model_validate({**data, **extra, "id": doc.id})
