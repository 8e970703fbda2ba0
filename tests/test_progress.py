import pytest

from app.core.exceptions import TrainingError
from app.models.progress import STATUS_COMPLETED, STATUS_IN_PROGRESS
from app.services.progress import get_progress, save_progress, split_sections
from tests.utils import create_module_with_content, create_user


def test_split_sections():
    sections = split_sections("## Intro\nWhy it matters.\n\n## Rules\nLine one.\nLine two.")
    assert [s.title for s in sections] == ["Intro", "Rules"]
    assert sections[1].body == "Line one.\nLine two."


def test_split_sections_keeps_preamble():
    sections = split_sections("Welcome text\n## Only")
    assert [s.title for s in sections] == ["Welcome text", "Only"]


def test_split_sections_empty():
    assert split_sections(None) == []
    assert split_sections("   ") == []


async def test_save_progress_upserts_bookmark(db_session):
    user = await create_user(db_session)
    module = await create_module_with_content(db_session)
    assert await get_progress(db_session, user.id, module.id) is None

    progress = await save_progress(db_session, user.id, module, 0)
    assert progress.last_section == "Intro"
    assert progress.progress_percent == 33
    assert progress.status == STATUS_IN_PROGRESS

    again = await save_progress(db_session, user.id, module, 1)
    assert again.id == progress.id
    assert again.last_section == "Rules"
    assert again.progress_percent == 67


async def test_complete_then_reopen(db_session):
    user = await create_user(db_session)
    module = await create_module_with_content(db_session)

    first = await save_progress(db_session, user.id, module, 0)
    started = first.started_at
    assert started is not None
    assert first.completed_at is None

    done = await save_progress(db_session, user.id, module, 0, completed=True)
    assert done.progress_percent == 100
    assert done.last_section == "Summary"
    assert done.status == STATUS_COMPLETED
    assert done.completed_at is not None
    assert done.started_at == started

    revisit = await save_progress(db_session, user.id, module, 0)
    assert revisit.status == STATUS_IN_PROGRESS
    assert revisit.completed_at is None
    assert revisit.progress_percent == 33
    assert revisit.started_at == started


async def test_section_out_of_range(db_session):
    user = await create_user(db_session)
    module = await create_module_with_content(db_session)
    with pytest.raises(TrainingError):
        await save_progress(db_session, user.id, module, 3)
