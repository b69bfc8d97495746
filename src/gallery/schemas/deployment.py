"""Deployment log schemas."""

from pydantic import BaseModel, Field, field_validator, model_validator

from src.gallery.core.validators import (
    MAX_DEPLOYMENT_CONTENT_LENGTH,
    require_text,
    validate_version,
)


class DeploymentLogCreate(BaseModel):
    """Schema for posting a deployment log (version must be major.minor.patch)."""

    version: str
    content: str = Field(max_length=MAX_DEPLOYMENT_CONTENT_LENGTH)

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        return validate_version(v)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return require_text(v, "배포 내용")


class DeploymentLogUpdate(BaseModel):
    """Schema for editing a deployment log. Omitted fields stay unchanged."""

    version: str | None = None
    content: str | None = Field(default=None, max_length=MAX_DEPLOYMENT_CONTENT_LENGTH)

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str | None) -> str | None:
        return validate_version(v) if v is not None else None

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str | None) -> str | None:
        return require_text(v, "배포 내용") if v is not None else None

    @model_validator(mode="after")
    def validate_not_empty(self) -> "DeploymentLogUpdate":
        if self.version is None and self.content is None:
            raise ValueError("수정할 내용이 없습니다.")
        return self

    def changed_fields(self) -> dict[str, str]:
        return self.model_dump(exclude_none=True)
