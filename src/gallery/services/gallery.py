"""Gallery view: generation filter and sort order."""

from collections.abc import Iterable
from datetime import UTC, datetime

from src.gallery.models.enums import SortOrder
from src.gallery.models.project import Project

_EPOCH = datetime.min.replace(tzinfo=UTC)


def _created(project: Project) -> datetime:
    return project.created_at or _EPOCH


def arrange_projects(
    projects: Iterable[Project],
    sort_order: SortOrder = SortOrder.LATEST,
    generation: int | None = None,
) -> list[Project]:
    """Filter to one generation (None keeps all) and sort for display.

    LATEST is newest first; LIKES is most liked first, ties newest first.
    Records without a creation time sort as oldest.
    """
    selected = [p for p in projects if generation is None or p.generation == generation]
    if sort_order is SortOrder.LIKES:
        return sorted(selected, key=lambda p: (p.likes, _created(p)), reverse=True)
    return sorted(selected, key=_created, reverse=True)
