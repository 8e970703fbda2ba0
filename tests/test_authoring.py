import pytest
from sqlalchemy import func, select

from app.core.exceptions import EmptyScenarioError, MalformedTreeError, ModuleInUseError, NotFoundError
from app.models.assessment import Assessment, Question
from app.models.attempt import Attempt
from app.models.certificate import Certificate
from app.models.module import TrainingModule
from app.models.progress import ModuleProgress
from app.models.scenario import Scenario, ScenarioNode
from app.schemas.module import ModuleUpdateSchema
from app.schemas.scenario import NodeInSchema, ScenarioCreateSchema
from app.services.authoring import (
    create_scenario,
    delete_assessment,
    delete_module,
    delete_scenario,
    update_module,
)
from app.services.certificates import build_certificate
from app.services.progress import save_progress
from app.services.scenario_player import ScenarioPlayer
from app.services.store import get_module, load_questions, load_scenario_tree
from app.services.submission import build_engine
from tests.utils import create_module_with_content, create_quiz, create_tree, create_user


async def test_create_scenario_links_parents(db_session):
    scenario = await create_tree(db_session)

    tree = await load_scenario_tree(db_session, scenario.id)
    player = ScenarioPlayer(tree)

    assert player.active_node().node_text.startswith("You lose a laptop")
    assert [c.node_text for c in player.children()] == ["Report the breach.", "Say nothing."]

    ignore = player.children()[1]
    player.choose(ignore.id)
    assert [c.node_text for c in player.children()] == ["A week later you tell IT.", "You wipe the backup."]


async def test_create_scenario_rejects_cycle(db_session):
    body = ScenarioCreateSchema(
        title="Loop",
        nodes=[
            NodeInSchema(key="root", node_text="start"),
            NodeInSchema(key="a", parent_key="b", node_text="a"),
            NodeInSchema(key="b", parent_key="a", node_text="b"),
        ],
    )
    with pytest.raises(MalformedTreeError):
        await create_scenario(db_session, body)

    count = (await db_session.execute(select(func.count(Scenario.id)))).scalar()
    assert count == 0


async def test_scenario_without_nodes(db_session):
    scenario = await create_scenario(db_session, ScenarioCreateSchema(title="Draft", nodes=[]))
    with pytest.raises(EmptyScenarioError) as exc:
        await load_scenario_tree(db_session, scenario.id)
    assert exc.value.error_code == "NO_DECISION_TREE"


async def test_scenario_for_unknown_module(db_session):
    with pytest.raises(NotFoundError):
        await create_scenario(
            db_session,
            ScenarioCreateSchema(title="Orphan", module_id=99, nodes=[]),
        )


async def test_delete_scenario_removes_nodes(db_session):
    scenario = await create_tree(db_session)
    await delete_scenario(db_session, scenario.id)

    remaining = (await db_session.execute(select(func.count(ScenarioNode.id)))).scalar()
    assert remaining == 0
    with pytest.raises(NotFoundError):
        await load_scenario_tree(db_session, scenario.id)


async def test_create_assessment_orders_questions(db_session):
    quiz = await create_quiz(db_session, correct=(2, 0, 1))

    assert quiz.question_count == 3
    questions = await load_questions(db_session, quiz.id)
    assert [q.question_text for q in questions] == ["Q1", "Q2", "Q3"]
    assert [q.correct_option for q in questions] == [2, 0, 1]
    assert questions[0].options == ["A", "B", "C", "D"]

    engine = await build_engine(db_session, quiz.id)
    assert engine.pass_threshold == 70
    assert engine.feedback_seconds == 1.5


async def test_delete_assessment_keeps_certificates(db_session):
    user = await create_user(db_session)
    module = await create_module_with_content(db_session)
    quiz = await create_quiz(db_session, module_id=module.id)
    attempt = Attempt(user_id=user.id, assessment_id=quiz.id, score=4, total_questions=4, passed=True, answers=[])
    db_session.add(attempt)
    await db_session.flush()
    db_session.add(build_certificate(user_id=user.id, module_id=module.id, attempt_id=attempt.id))
    await db_session.commit()

    await delete_assessment(db_session, quiz.id)

    assert (await db_session.execute(select(func.count(Question.id)))).scalar() == 0
    assert (await db_session.execute(select(func.count(Attempt.id)))).scalar() == 0
    certificate = (await db_session.execute(select(Certificate))).scalar_one()
    await db_session.refresh(certificate)
    assert certificate.attempt_id is None


async def test_update_module_writes_only_sent_fields(db_session):
    module = await create_module_with_content(db_session)
    assert module.version == "1.0"

    updated = await update_module(db_session, module.id, ModuleUpdateSchema(version="1.1", is_mandatory=False))
    assert updated.version == "1.1"
    assert updated.is_mandatory is False
    assert updated.title == "Data Protection Basics"
    assert updated.content.startswith("## Intro")


def test_module_update_rejects_null_required_field():
    with pytest.raises(ValueError):
        ModuleUpdateSchema(title=None)
    assert ModuleUpdateSchema(description=None).model_dump(exclude_unset=True) == {"description": None}


async def test_delete_module_unlinks_content(db_session):
    user = await create_user(db_session)
    module = await create_module_with_content(db_session)
    module_id = module.id
    quiz = await create_quiz(db_session, module_id=module_id)
    scenario = await create_tree(db_session, module_id=module_id)
    await save_progress(db_session, user.id, module, 0)

    await delete_module(db_session, module_id)

    with pytest.raises(NotFoundError):
        await get_module(db_session, module_id)
    assert (await db_session.execute(select(func.count(ModuleProgress.id)))).scalar() == 0
    linked = await db_session.execute(
        select(func.count(Scenario.id)).where(Scenario.id == scenario.id, Scenario.module_id.is_(None))
    )
    assert linked.scalar() == 1
    linked = await db_session.execute(
        select(func.count(Assessment.id)).where(Assessment.id == quiz.id, Assessment.module_id.is_(None))
    )
    assert linked.scalar() == 1


async def test_delete_module_with_certificates_is_refused(db_session):
    user = await create_user(db_session)
    module = await create_module_with_content(db_session)
    module_id = module.id
    db_session.add(build_certificate(user_id=user.id, module_id=module_id, attempt_id=None))
    await db_session.commit()

    with pytest.raises(ModuleInUseError) as exc:
        await delete_module(db_session, module_id)
    assert exc.value.status_code == 409
    assert exc.value.extra == {"module_id": module_id, "certificates": 1}

    assert (await db_session.execute(select(func.count(TrainingModule.id)))).scalar() == 1
    assert (await db_session.execute(select(func.count(Certificate.id)))).scalar() == 1
