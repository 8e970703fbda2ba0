"""Module sections and the per-user reading bookmark."""
import re
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import TrainingError
from app.models.module import TrainingModule
from app.models.progress import ModuleProgress, STATUS_COMPLETED, STATUS_IN_PROGRESS
from app.schemas.module import SectionSchema
from app.services.scoring import section_progress

SECTION_RE = re.compile(r"^## ", re.MULTILINE)


def split_sections(content: str | None) -> list[SectionSchema]:
    """Split markdown content on '## ' headings; first line of each part is its title."""
    if not content:
        return []
    sections = []
    for part in SECTION_RE.split(content):
        if not part.strip():
            continue
        lines = part.split("\n")
        title = re.sub(r"^#+ ", "", lines[0]).strip()
        body = "\n".join(lines[1:]).strip()
        sections.append(SectionSchema(title=title, body=body))
    return sections


async def get_progress(db: AsyncSession, user_id: int, module_id: int) -> ModuleProgress | None:
    result = await db.execute(
        select(ModuleProgress).where(
            ModuleProgress.user_id == user_id,
            ModuleProgress.module_id == module_id,
        )
    )
    return result.scalar_one_or_none()


async def save_progress(
    db: AsyncSession,
    user_id: int,
    module: TrainingModule,
    section_index: int,
    completed: bool = False,
) -> ModuleProgress:
    """Upsert the bookmark at section_index; completed forces 100% and stamps completed_at."""
    sections = split_sections(module.content)
    if not sections:
        raise TrainingError("Module has no content sections")
    if section_index >= len(sections):
        raise TrainingError(
            f"Section {section_index} out of range",
            extra={"section_count": len(sections)},
        )

    now = datetime.now(timezone.utc)
    if completed:
        section_index = len(sections) - 1
    progress = await get_progress(db, user_id, module.id)
    if progress is None:
        progress = ModuleProgress(user_id=user_id, module_id=module.id, started_at=now)
        db.add(progress)

    # every save sets the status; a bookmark without completed reopens the module
    progress.last_section = sections[section_index].title
    progress.progress_percent = 100 if completed else section_progress(section_index, len(sections))
    progress.status = STATUS_COMPLETED if completed else STATUS_IN_PROGRESS
    progress.completed_at = now if completed else None

    await db.commit()
    await db.refresh(progress)
    return progress
