"""Project schemas for registration and owner edits."""

from pydantic import BaseModel, Field, field_validator

from src.gallery.core.validators import (
    MAX_DESCRIPTION_LENGTH,
    MAX_TEAM_LENGTH,
    MAX_TITLE_LENGTH,
    normalize_tags,
    parse_members,
    require_text,
    validate_password_format,
)


def _clean_url(v: str | None) -> str | None:
    if v is None:
        return None
    v = v.strip()
    if not v:
        return None
    if not v.startswith(("http://", "https://")):
        raise ValueError("URL은 http:// 또는 https:// 로 시작해야 합니다.")
    return v


class ProjectCreate(BaseModel):
    """Schema for registering a project.

    `password` is hashed into the secret store and never written to the
    public record. `generation` falls back to the configured default.
    """

    title: str = Field(max_length=MAX_TITLE_LENGTH)
    description: str = Field(default="", max_length=MAX_DESCRIPTION_LENGTH)
    team: str = Field(max_length=MAX_TEAM_LENGTH)
    members: list[str] = []
    url: str
    image_url: str | None = None
    tags: list[str] = []
    password: str
    generation: int | None = Field(default=None, ge=1)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return require_text(v, "제목")

    @field_validator("team")
    @classmethod
    def validate_team(cls, v: str) -> str:
        return require_text(v, "팀 이름")

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        return v.strip()

    @field_validator("members", mode="before")
    @classmethod
    def validate_members(cls, v: str | list[str] | None) -> list[str]:
        return parse_members(v or [])

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        cleaned = _clean_url(v)
        if cleaned is None:
            raise ValueError("URL을 입력해주세요.")
        return cleaned

    @field_validator("image_url")
    @classmethod
    def validate_image_url(cls, v: str | None) -> str | None:
        return _clean_url(v)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str]) -> list[str]:
        return normalize_tags(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return validate_password_format(v)

    def public_fields(self) -> dict[str, object]:
        return self.model_dump(exclude={"password", "generation"})


class ProjectUpdate(BaseModel):
    """Schema for an owner edit. Omitted fields stay unchanged.

    There is no password field: a project's credential is fixed at registration.
    """

    title: str | None = Field(default=None, max_length=MAX_TITLE_LENGTH)
    description: str | None = Field(default=None, max_length=MAX_DESCRIPTION_LENGTH)
    team: str | None = Field(default=None, max_length=MAX_TEAM_LENGTH)
    members: list[str] | None = None
    url: str | None = None
    image_url: str | None = None
    tags: list[str] | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str | None:
        return require_text(v, "제목") if v is not None else None

    @field_validator("team")
    @classmethod
    def validate_team(cls, v: str | None) -> str | None:
        return require_text(v, "팀 이름") if v is not None else None

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else None

    @field_validator("members", mode="before")
    @classmethod
    def validate_members(cls, v: str | list[str] | None) -> list[str] | None:
        return parse_members(v) if v is not None else None

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str | None) -> str | None:
        if v is None:
            return None
        cleaned = _clean_url(v)
        if cleaned is None:
            raise ValueError("URL을 입력해주세요.")
        return cleaned

    @field_validator("image_url")
    @classmethod
    def validate_image_url(cls, v: str | None) -> str | None:
        return _clean_url(v)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str] | None) -> list[str] | None:
        return normalize_tags(v) if v is not None else None

    def changed_fields(self) -> dict[str, object]:
        """Fields the caller actually supplied (an explicit image_url=None clears it)."""
        return self.model_dump(exclude_unset=True)
