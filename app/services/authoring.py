"""Admin authoring: modules, scenario trees and assessments."""
import logging

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.exceptions import MalformedTreeError, ModuleInUseError
from app.models.assessment import Assessment, Question
from app.models.attempt import Attempt
from app.models.certificate import Certificate
from app.models.module import TrainingModule
from app.models.progress import ModuleProgress
from app.models.scenario import Scenario, ScenarioNode
from app.schemas.assessment import AssessmentCreateSchema
from app.schemas.module import ModuleCreateSchema, ModuleUpdateSchema
from app.schemas.scenario import ScenarioCreateSchema
from app.services.store import get_module, get_or_404, get_scenario

logger = logging.getLogger(__name__)


async def create_module(db: AsyncSession, body: ModuleCreateSchema) -> TrainingModule:
    module = TrainingModule(**body.model_dump())
    db.add(module)
    await db.commit()
    await db.refresh(module)
    logger.info("Module %s created: %s", module.id, module.title)
    return module


async def update_module(db: AsyncSession, module_id: int, body: ModuleUpdateSchema) -> TrainingModule:
    module = await get_module(db, module_id)
    changes = body.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(module, field, value)
    await db.commit()
    await db.refresh(module)
    logger.info("Module %s updated: %s", module_id, ", ".join(sorted(changes)) or "no changes")
    return module


async def delete_module(db: AsyncSession, module_id: int) -> None:
    """Delete a module and its bookmarks; linked scenarios and assessments are kept unlinked.

    Modules with issued certificates are refused so certificate history survives.
    """
    await get_module(db, module_id)
    result = await db.execute(select(func.count(Certificate.id)).where(Certificate.module_id == module_id))
    certificates = result.scalar() or 0
    if certificates:
        raise ModuleInUseError(module_id, certificates)

    await db.execute(delete(ModuleProgress).where(ModuleProgress.module_id == module_id))
    await db.execute(update(Scenario).where(Scenario.module_id == module_id).values(module_id=None))
    await db.execute(update(Assessment).where(Assessment.module_id == module_id).values(module_id=None))
    await db.execute(delete(TrainingModule).where(TrainingModule.id == module_id))
    await db.commit()
    logger.info("Module %s deleted", module_id)


async def create_scenario(db: AsyncSession, body: ScenarioCreateSchema) -> Scenario:
    """Insert a scenario and its nodes, parents before children."""
    if body.module_id is not None:
        await get_module(db, body.module_id)

    scenario = Scenario(title=body.title, description=body.description, module_id=body.module_id)
    db.add(scenario)
    await db.flush()

    ids: dict[str, int] = {}
    pending = list(body.nodes)
    while pending:
        ready = [n for n in pending if n.parent_key is None or n.parent_key in ids]
        if not ready:
            await db.rollback()
            raise MalformedTreeError(
                "Scenario nodes contain a cycle",
                extra={"keys": [n.key for n in pending]},
            )
        rows = []
        for node in ready:
            row = ScenarioNode(
                scenario_id=scenario.id,
                parent_node_id=ids.get(node.parent_key) if node.parent_key else None,
                is_root=node.parent_key is None,
                node_text=node.node_text,
                is_compliant=node.is_compliant,
                explanation=node.explanation,
                sort_order=node.sort_order,
            )
            db.add(row)
            rows.append((node.key, row))
        await db.flush()
        for key, row in rows:
            ids[key] = row.id
        pending = [n for n in pending if n.key not in ids]

    await db.commit()
    await db.refresh(scenario)
    logger.info("Scenario %s created with %d node(s)", scenario.id, len(ids))
    return scenario


async def delete_scenario(db: AsyncSession, scenario_id: int) -> None:
    scenario = await get_scenario(db, scenario_id)
    await db.execute(delete(ScenarioNode).where(ScenarioNode.scenario_id == scenario_id))
    await db.delete(scenario)
    await db.commit()
    logger.info("Scenario %s deleted", scenario_id)


async def create_assessment(db: AsyncSession, body: AssessmentCreateSchema) -> Assessment:
    if body.module_id is not None:
        await get_module(db, body.module_id)

    threshold = body.pass_threshold
    if threshold is None:
        threshold = get_settings().default_pass_threshold
    assessment = Assessment(
        title=body.title,
        pass_threshold=threshold,
        module_id=body.module_id,
        question_count=len(body.questions),
    )
    db.add(assessment)
    await db.flush()
    for index, q in enumerate(body.questions):
        db.add(
            Question(
                assessment_id=assessment.id,
                question_text=q.question_text,
                options=list(q.options),
                correct_option=q.correct_option,
                explanation=q.explanation,
                sort_order=index,
            )
        )
    await db.commit()
    await db.refresh(assessment)
    logger.info("Assessment %s created with %d question(s)", assessment.id, assessment.question_count)
    return assessment


async def delete_assessment(db: AsyncSession, assessment_id: int) -> None:
    """Delete an assessment with its questions and attempts; certificates keep no attempt link."""
    assessment = await get_or_404(db, Assessment, assessment_id, "Assessment")
    attempt_ids = select(Attempt.id).where(Attempt.assessment_id == assessment_id)
    await db.execute(
        update(Certificate).where(Certificate.attempt_id.in_(attempt_ids)).values(attempt_id=None)
    )
    await db.execute(delete(Question).where(Question.assessment_id == assessment_id))
    await db.execute(delete(Attempt).where(Attempt.assessment_id == assessment_id))
    await db.delete(assessment)
    await db.commit()
    logger.info("Assessment %s deleted", assessment_id)
