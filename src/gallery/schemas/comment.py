"""Comment schemas."""

from pydantic import BaseModel, Field, field_validator

from src.gallery.core.validators import (
    MAX_AUTHOR_LENGTH,
    MAX_COMMENT_LENGTH,
    require_text,
    validate_password_format,
)


class CommentCreate(BaseModel):
    """Schema for posting a comment with its own password."""

    author: str = Field(max_length=MAX_AUTHOR_LENGTH)
    password: str
    content: str = Field(max_length=MAX_COMMENT_LENGTH)

    @field_validator("author")
    @classmethod
    def validate_author(cls, v: str) -> str:
        return require_text(v, "닉네임")

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return require_text(v, "댓글 내용")

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return validate_password_format(v)


class CommentUpdate(BaseModel):
    """Schema for editing a comment's content. The credential never changes."""

    content: str = Field(max_length=MAX_COMMENT_LENGTH)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return require_text(v, "댓글 내용")
