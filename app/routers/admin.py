"""Admin routes: authoring, reports, certificate reconciliation, users."""
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.models.user import ROLE_ADMIN, ROLE_COMPLIANCE_OFFICER
from app.routers.auth import require_roles
from app.schemas.assessment import AssessmentCreateSchema, AssessmentSchema
from app.schemas.auth import SessionContextSchema
from app.schemas.module import ModuleCreateSchema, ModuleOutSchema, ModuleUpdateSchema
from app.schemas.scenario import ScenarioCreateSchema, ScenarioOutSchema
from app.schemas.stats import ReconcileOutSchema, ReportOutSchema
from app.schemas.user import RoleUpdateSchema, UserOutSchema
from app.services import authoring, users
from app.services.certificates import reconcile_missing_certificates
from app.services.reports import build_report

router = APIRouter(prefix="/admin", tags=["admin"])

Db = Annotated[AsyncSession, Depends(get_db)]
Admin = Annotated[SessionContextSchema, Depends(require_roles(ROLE_ADMIN))]
Officer = Annotated[SessionContextSchema, Depends(require_roles(ROLE_ADMIN, ROLE_COMPLIANCE_OFFICER))]


@router.post("/modules", response_model=ModuleOutSchema, status_code=status.HTTP_201_CREATED)
async def create_module(body: ModuleCreateSchema, db: Db, ctx: Admin):
    module = await authoring.create_module(db, body)
    return ModuleOutSchema.model_validate(module)


@router.put("/modules/{module_id}", response_model=ModuleOutSchema)
async def update_module(module_id: int, body: ModuleUpdateSchema, db: Db, ctx: Admin):
    module = await authoring.update_module(db, module_id, body)
    return ModuleOutSchema.model_validate(module)


@router.delete("/modules/{module_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_module(module_id: int, db: Db, ctx: Admin):
    await authoring.delete_module(db, module_id)


@router.post("/scenarios", response_model=ScenarioOutSchema, status_code=status.HTTP_201_CREATED)
async def create_scenario(body: ScenarioCreateSchema, db: Db, ctx: Admin):
    scenario = await authoring.create_scenario(db, body)
    return ScenarioOutSchema.model_validate(scenario)


@router.delete("/scenarios/{scenario_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_scenario(scenario_id: int, db: Db, ctx: Admin):
    await authoring.delete_scenario(db, scenario_id)


@router.post("/assessments", response_model=AssessmentSchema, status_code=status.HTTP_201_CREATED)
async def create_assessment(body: AssessmentCreateSchema, db: Db, ctx: Admin):
    assessment = await authoring.create_assessment(db, body)
    return AssessmentSchema.model_validate(assessment)


@router.delete("/assessments/{assessment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_assessment(assessment_id: int, db: Db, ctx: Admin):
    await authoring.delete_assessment(db, assessment_id)


@router.get("/reports", response_model=ReportOutSchema)
async def reports(db: Db, ctx: Officer):
    """Pass/fail distribution and certificates per module."""
    return await build_report(db)


@router.post("/certificates/reconcile", response_model=ReconcileOutSchema)
async def reconcile_certificates(db: Db, ctx: Admin):
    issued = await reconcile_missing_certificates(db)
    return ReconcileOutSchema(issued=len(issued), certificate_numbers=[c.certificate_number for c in issued])


# ---------- users ----------

@router.get("/users", response_model=list[UserOutSchema])
async def list_users(db: Db, ctx: Admin):
    """All accounts, newest first."""
    return [UserOutSchema.model_validate(u) for u in await users.list_users(db)]


@router.put("/users/{user_id}/role", response_model=UserOutSchema)
async def set_user_role(user_id: int, body: RoleUpdateSchema, db: Db, ctx: Admin):
    user = await users.set_role(db, user_id, body.role, acting_user_id=ctx.user_id)
    return UserOutSchema.model_validate(user)
