"""Input validators shared by the gallery schemas."""

import re
from typing import Final

from src.gallery.core.exceptions import MSG_INVALID_VERSION

MAX_TITLE_LENGTH: Final[int] = 100
MAX_DESCRIPTION_LENGTH: Final[int] = 3000
MAX_TEAM_LENGTH: Final[int] = 20
MAX_TAGS: Final[int] = 3
MAX_TAG_LENGTH: Final[int] = 20
MAX_AUTHOR_LENGTH: Final[int] = 20
MAX_COMMENT_LENGTH: Final[int] = 100
MAX_DEPLOYMENT_CONTENT_LENGTH: Final[int] = 5000

# ASCII digits only; str patterns would otherwise match any Unicode digit
VERSION_REGEX: Final[str] = r"^[0-9]+\.[0-9]+\.[0-9]+$"
PASSWORD_REGEX: Final[str] = r"^[0-9]{4,6}$"

_VERSION_PATTERN: Final[re.Pattern[str]] = re.compile(VERSION_REGEX)
_PASSWORD_PATTERN: Final[re.Pattern[str]] = re.compile(PASSWORD_REGEX)


def is_valid_version(version: str) -> bool:
    """Strict major.minor.patch, digits only (no 'v' prefix, no pre-release suffix)."""
    return _VERSION_PATTERN.fullmatch(version) is not None


def validate_version(version: str) -> str:
    """Validate a deployment version string, trimming surrounding whitespace.

    Examples:
        >>> validate_version("1.0.0")  # Valid
        >>> validate_version("12.3.44")  # Valid
        >>> validate_version("v1.0.0")  # Invalid - prefix
        >>> validate_version("1.0.0-beta")  # Invalid - suffix
    """
    version = version.strip()
    if not is_valid_version(version):
        raise ValueError(MSG_INVALID_VERSION)
    return version


def validate_password_format(password: str) -> str:
    """Resource passwords are 4-6 digit PINs."""
    if not _PASSWORD_PATTERN.fullmatch(password):
        raise ValueError("비밀번호는 숫자 4~6자리여야 합니다.")
    return password


def normalize_tags(tags: list[str]) -> list[str]:
    """Trim tags, drop blanks and duplicates (keeping order), and cap the count."""
    normalized: list[str] = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in normalized:
            normalized.append(tag)
    if len(normalized) > MAX_TAGS:
        raise ValueError(f"태그는 최대 {MAX_TAGS}개까지만 등록 가능합니다.")
    for tag in normalized:
        if len(tag) > MAX_TAG_LENGTH:
            raise ValueError(f"태그는 {MAX_TAG_LENGTH}자 이하여야 합니다.")
    return normalized


def parse_members(members: str | list[str]) -> list[str]:
    """Accept a comma-separated string or a list; keep order, drop blanks."""
    if isinstance(members, str):
        members = members.split(",")
    return [m.strip() for m in members if m and m.strip()]


def require_text(value: str, field_label: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError(f"{field_label}을(를) 입력해주세요.")
    return value
