"""Application context: the viewer's session id and view preferences.

Views receive this object explicitly. Preferences change only through the
`set_*` methods, which update the context and persist in one step.
"""

from dataclasses import dataclass
from enum import Enum

from src.gallery.core.logging import get_logger, session_ref
from src.gallery.core.security import generate_session_id
from src.gallery.core.storage import (
    GENERATION_FILTER_KEY,
    SESSION_ID_KEY,
    SORT_ORDER_KEY,
    THEME_KEY,
    LocalStorage,
)
from src.gallery.models.enums import SortOrder, Theme

logger = get_logger(__name__)


def _parse_enum[E: Enum](enum_cls: type[E], raw: str | None) -> E | None:
    if raw is None:
        return None
    try:
        return enum_cls(raw)
    except ValueError:
        logger.debug("Ignoring unknown stored preference", kind=enum_cls.__name__, value=raw)
        return None


def _parse_generation(raw: str | None) -> int | None:
    if raw is None or not raw.isdigit():
        return None
    return int(raw)


@dataclass
class AppContext:
    """Per-device state shared by every view.

    Attributes:
        storage: Device-local storage the preferences are persisted to
        session_id: Opaque id used for like dedup and throttling, never for auth
        theme: Light or dark UI theme
        sort_order: Gallery sort order
        generation_filter: Cohort shown in the gallery, None for all
    """

    storage: LocalStorage
    session_id: str
    theme: Theme = Theme.LIGHT
    sort_order: SortOrder = SortOrder.LATEST
    generation_filter: int | None = None

    @classmethod
    def load(cls, storage: LocalStorage, system_theme: Theme | None = None) -> "AppContext":
        """Build the context from storage.

        Each preference resolves as persisted value, then system preference
        (theme only), then default. A missing session id is generated and
        persisted immediately.
        """
        session_id = storage.get_item(SESSION_ID_KEY)
        if not session_id:
            session_id = generate_session_id()
            storage.set_item(SESSION_ID_KEY, session_id)
            logger.info("New session created", session=session_ref(session_id))

        theme = _parse_enum(Theme, storage.get_item(THEME_KEY)) or system_theme or Theme.LIGHT
        sort_order = _parse_enum(SortOrder, storage.get_item(SORT_ORDER_KEY)) or SortOrder.LATEST
        return cls(
            storage=storage,
            session_id=session_id,
            theme=theme,
            sort_order=sort_order,
            generation_filter=_parse_generation(storage.get_item(GENERATION_FILTER_KEY)),
        )

    def set_theme(self, theme: Theme | str) -> Theme:
        self.theme = Theme(theme)
        self.storage.set_item(THEME_KEY, self.theme.value)
        return self.theme

    def set_sort_order(self, sort_order: SortOrder | str) -> SortOrder:
        self.sort_order = SortOrder(sort_order)
        self.storage.set_item(SORT_ORDER_KEY, self.sort_order.value)
        return self.sort_order

    def set_generation_filter(self, generation: int | None) -> int | None:
        if generation is not None and generation < 1:
            raise ValueError("Generation must be a positive integer")
        self.generation_filter = generation
        if generation is None:
            self.storage.remove_item(GENERATION_FILTER_KEY)
        else:
            self.storage.set_item(GENERATION_FILTER_KEY, str(generation))
        return generation

    def toggle_theme(self) -> Theme:
        return self.set_theme(Theme.DARK if self.theme is Theme.LIGHT else Theme.LIGHT)
