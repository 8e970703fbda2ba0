"""Read side of the data store: fetch rows and parse them into typed records."""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.models.assessment import Assessment, Question
from app.models.module import TrainingModule
from app.models.scenario import Scenario, ScenarioNode
from app.schemas.assessment import AssessmentSchema, QuestionSchema
from app.schemas.scenario import DecisionNodeSchema
from app.services.scenario_player import ScenarioTree


async def get_or_404(db: AsyncSession, model, entity_id: int, label: str):
    result = await db.execute(select(model).where(model.id == entity_id))
    row = result.scalar_one_or_none()
    if row is None:
        raise NotFoundError(label, entity_id)
    return row


async def get_module(db: AsyncSession, module_id: int) -> TrainingModule:
    return await get_or_404(db, TrainingModule, module_id, "Module")


async def get_scenario(db: AsyncSession, scenario_id: int) -> Scenario:
    return await get_or_404(db, Scenario, scenario_id, "Scenario")


async def load_scenario_nodes(db: AsyncSession, scenario_id: int) -> list[DecisionNodeSchema]:
    result = await db.execute(
        select(ScenarioNode)
        .where(ScenarioNode.scenario_id == scenario_id)
        .order_by(ScenarioNode.sort_order, ScenarioNode.id)
    )
    return [DecisionNodeSchema.model_validate(n) for n in result.scalars().all()]


async def load_scenario_tree(db: AsyncSession, scenario_id: int) -> ScenarioTree:
    """Fetch a scenario's nodes and index them; raises when none are configured."""
    await get_scenario(db, scenario_id)
    nodes = await load_scenario_nodes(db, scenario_id)
    return ScenarioTree(scenario_id, nodes)


async def load_assessment(db: AsyncSession, assessment_id: int) -> AssessmentSchema:
    row = await get_or_404(db, Assessment, assessment_id, "Assessment")
    return AssessmentSchema.model_validate(row)


async def load_questions(db: AsyncSession, assessment_id: int) -> list[QuestionSchema]:
    result = await db.execute(
        select(Question)
        .where(Question.assessment_id == assessment_id)
        .order_by(Question.sort_order, Question.id)
    )
    return [QuestionSchema.model_validate(q) for q in result.scalars().all()]
