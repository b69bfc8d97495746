"""Error kinds raised by the gallery protocol, with their user-facing messages."""

from typing import Final

# User-facing messages (Korean, as shown in the gallery UI)
MSG_TOO_MANY_ATTEMPTS: Final[str] = "너무 많은 시도입니다. 1분 후에 다시 시도해주세요."
MSG_WRONG_PASSWORD: Final[str] = "비밀번호가 일치하지 않습니다."
MSG_INVALID_VERSION: Final[str] = "버전 형식이 올바르지 않습니다. (예: 1.0.0)"
MSG_PROFANITY: Final[str] = "부적절한 단어가 포함되어 있습니다."
MSG_INVALID_INPUT: Final[str] = "입력값이 올바르지 않습니다."
MSG_NOT_FOUND: Final[str] = "대상을 찾을 수 없습니다. 이미 삭제되었을 수 있습니다."
MSG_STORE_FAILURE: Final[str] = "요청을 처리하지 못했습니다. 잠시 후 다시 시도해주세요."


class GalleryError(Exception):
    """Base class for all protocol errors.

    `message` is always safe to show to the user.
    """

    default_message: str = MSG_STORE_FAILURE

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(GalleryError):
    """Input rejected before any write (bad version, profanity, empty field)."""

    default_message = MSG_INVALID_INPUT


class CredentialError(GalleryError):
    """Password did not match the stored credential."""

    default_message = MSG_WRONG_PASSWORD


class RateLimitError(GalleryError):
    """Session exceeded the verification attempt budget."""

    default_message = MSG_TOO_MANY_ATTEMPTS


class StoreError(GalleryError):
    """Document store read or write failed."""

    default_message = MSG_STORE_FAILURE


class NotFoundError(GalleryError):
    """Target document does not exist (possibly deleted mid-flow)."""

    default_message = MSG_NOT_FOUND
