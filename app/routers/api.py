"""API routes: modules, scenario player, assessments, certificates, dashboard."""
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.models.assessment import Assessment
from app.models.module import TrainingModule
from app.models.scenario import Scenario
from app.models.user import ROLE_ADMIN, ROLE_COMPLIANCE_OFFICER
from app.routers.auth import get_session_context
from app.schemas.assessment import (
    AnswerSchema,
    AssessmentOutSchema,
    AssessmentSchema,
    AttemptResultSchema,
    CheckResultSchema,
    QuestionOutSchema,
    SubmitSchema,
)
from app.schemas.auth import SessionContextSchema
from app.schemas.module import ModuleDetailSchema, ModuleOutSchema, ProgressOutSchema, ProgressUpdateSchema
from app.schemas.scenario import PlayerStateSchema, PlayRequestSchema, ScenarioOutSchema
from app.schemas.stats import CertificateOutSchema, DashboardOutSchema
from app.services.certificates import list_certificates
from app.services.progress import get_progress, save_progress, split_sections
from app.services.reports import build_dashboard
from app.services.scenario_player import ScenarioPlayer
from app.services.store import get_module, load_assessment, load_questions, load_scenario_tree
from app.services.submission import check_answer, submit_assessment

router = APIRouter(prefix="/api", tags=["api"])

Session = Annotated[SessionContextSchema, Depends(get_session_context)]
Db = Annotated[AsyncSession, Depends(get_db)]


# ---------- modules ----------

@router.get("/modules", response_model=list[ModuleOutSchema])
async def list_modules(db: Db, ctx: Session):
    result = await db.execute(select(TrainingModule).order_by(TrainingModule.id))
    return [ModuleOutSchema.model_validate(m) for m in result.scalars().all()]


@router.get("/modules/{module_id}", response_model=ModuleDetailSchema)
async def get_module_detail(module_id: int, db: Db, ctx: Session):
    """Module with its sections and the caller's bookmark."""
    module = await get_module(db, module_id)
    progress = await get_progress(db, ctx.user_id, module_id)
    base = ModuleOutSchema.model_validate(module)
    return ModuleDetailSchema(
        **base.model_dump(),
        sections=split_sections(module.content),
        last_section=progress.last_section if progress else None,
        progress_percent=progress.progress_percent if progress else 0,
        status=progress.status if progress else None,
    )


@router.put("/modules/{module_id}/progress", response_model=ProgressOutSchema)
async def update_module_progress(module_id: int, body: ProgressUpdateSchema, db: Db, ctx: Session):
    module = await get_module(db, module_id)
    progress = await save_progress(db, ctx.user_id, module, body.section_index, completed=body.completed)
    return ProgressOutSchema(
        module_id=module_id,
        last_section=progress.last_section,
        progress_percent=progress.progress_percent,
        status=progress.status,
        started_at=progress.started_at,
        completed_at=progress.completed_at,
    )


# ---------- scenarios ----------

@router.get("/scenarios", response_model=list[ScenarioOutSchema])
async def list_scenarios(db: Db, ctx: Session):
    result = await db.execute(select(Scenario).order_by(Scenario.id))
    return [ScenarioOutSchema.model_validate(s) for s in result.scalars().all()]


@router.post("/scenarios/{scenario_id}/play", response_model=PlayerStateSchema)
async def play_scenario(scenario_id: int, body: PlayRequestSchema, db: Db, ctx: Session):
    """Replay ``path``, then apply ``restart`` or ``choice_id``; return the new state."""
    tree = await load_scenario_tree(db, scenario_id)
    player = ScenarioPlayer.replay(tree, body.path)
    if body.restart:
        player.restart()
    elif body.choice_id is not None:
        player.choose(body.choice_id)
    return player.state()


# ---------- assessments ----------

@router.get("/assessments", response_model=list[AssessmentSchema])
async def list_assessments(db: Db, ctx: Session):
    result = await db.execute(select(Assessment).order_by(Assessment.id))
    return [AssessmentSchema.model_validate(a) for a in result.scalars().all()]


@router.get("/assessments/{assessment_id}", response_model=AssessmentOutSchema)
async def get_assessment(assessment_id: int, db: Db, ctx: Session):
    """Assessment with its ordered questions, answer key withheld."""
    assessment = await load_assessment(db, assessment_id)
    questions = await load_questions(db, assessment_id)
    return AssessmentOutSchema(
        **assessment.model_dump(),
        questions=[
            QuestionOutSchema(id=q.id, question_text=q.question_text, options=q.options, sort_order=q.sort_order)
            for q in questions
        ],
    )


@router.post("/assessments/{assessment_id}/check", response_model=CheckResultSchema)
async def check_assessment_answer(assessment_id: int, body: AnswerSchema, db: Db, ctx: Session):
    return await check_answer(db, assessment_id, body)


@router.post("/assessments/{assessment_id}/submit", response_model=AttemptResultSchema)
async def submit(assessment_id: int, body: SubmitSchema, db: Db, ctx: Session):
    return await submit_assessment(db, assessment_id, ctx.user_id, body.answers)


# ---------- certificates / dashboard ----------

@router.get("/certificates", response_model=list[CertificateOutSchema])
async def my_certificates(db: Db, ctx: Session):
    return await list_certificates(db, ctx.user_id)


@router.get("/dashboard", response_model=DashboardOutSchema)
async def dashboard(db: Db, ctx: Session):
    """Own counts and to-do lists; admins and officers also get the organisation overview."""
    return await build_dashboard(db, ctx.user_id, include_org=ctx.has_role(ROLE_ADMIN, ROLE_COMPLIANCE_OFFICER))
