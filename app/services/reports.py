"""Aggregate counts for the learner dashboard and the admin report."""
from collections import defaultdict

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.attempt import Attempt
from app.models.certificate import Certificate
from app.models.module import TrainingModule
from app.models.progress import ModuleProgress, STATUS_COMPLETED, STATUS_IN_PROGRESS
from app.models.scenario import Scenario
from app.models.user import User, ROLES
from app.schemas.module import ModuleRefSchema
from app.schemas.stats import (
    DashboardOutSchema,
    ModuleCertificateCountSchema,
    OrgOverviewSchema,
    ReportOutSchema,
)
from app.services.certificates import count_attempts_missing_certificate, list_certificates
from app.services.scoring import compute_percentage

EXPIRING_CERTIFICATES_SHOWN = 5


async def _count(db: AsyncSession, stmt) -> int:
    result = await db.execute(stmt)
    return int(result.scalar() or 0)


async def _mandatory_modules(db: AsyncSession) -> list[ModuleRefSchema]:
    result = await db.execute(
        select(TrainingModule.id, TrainingModule.title)
        .where(TrainingModule.is_mandatory == True)  # noqa: E712
        .order_by(TrainingModule.id)
    )
    return [ModuleRefSchema(id=mid, title=title) for mid, title in result.all()]


async def build_org_overview(db: AsyncSession, mandatory_ids: set[int]) -> OrgOverviewSchema:
    """Organisation-wide completion and pass rates.

    A user counts as "mandatory done" once every mandatory module is completed.
    """
    result = await db.execute(select(User.role, func.count(User.id)).group_by(User.role))
    roles = {role: 0 for role in ROLES}
    for role, cnt in result.all():
        roles[role] = cnt

    result = await db.execute(select(ModuleProgress.user_id, ModuleProgress.module_id, ModuleProgress.status))
    rows = result.all()
    completed_by_user: dict[int, set[int]] = defaultdict(set)
    for user_id, module_id, status in rows:
        if status == STATUS_COMPLETED:
            completed_by_user[user_id].add(module_id)
    completed_rows = sum(1 for _, _, status in rows if status == STATUS_COMPLETED)

    attempts = await _count(db, select(func.count(Attempt.id)))
    passed = await _count(db, select(func.count(Attempt.id)).where(Attempt.passed == True))  # noqa: E712

    return OrgOverviewSchema(
        users_total=sum(roles.values()),
        roles=roles,
        completion_rate=compute_percentage(completed_rows, len(rows)),
        attempts=attempts,
        attempts_passed=passed,
        pass_rate=compute_percentage(passed, attempts),
        users_in_training=len({user_id for user_id, _, _ in rows}),
        users_mandatory_done=sum(
            1 for done in completed_by_user.values() if mandatory_ids and mandatory_ids <= done
        ),
    )


async def build_dashboard(db: AsyncSession, user_id: int, include_org: bool = False) -> DashboardOutSchema:
    """Counts and to-do lists for one user; ``include_org`` adds the organisation overview."""
    result = await db.execute(
        select(ModuleProgress.module_id, ModuleProgress.status, TrainingModule.title)
        .join(TrainingModule, ModuleProgress.module_id == TrainingModule.id)
        .where(ModuleProgress.user_id == user_id)
        .order_by(ModuleProgress.module_id)
    )
    progress = result.all()
    completed_ids = {mid for mid, status, _ in progress if status == STATUS_COMPLETED}
    in_progress = [
        ModuleRefSchema(id=mid, title=title) for mid, status, title in progress if status == STATUS_IN_PROGRESS
    ]

    mandatory = await _mandatory_modules(db)
    mandatory_done = [m for m in mandatory if m.id in completed_ids]

    return DashboardOutSchema(
        modules_total=await _count(db, select(func.count(TrainingModule.id))),
        modules_completed=len(completed_ids),
        scenarios_total=await _count(db, select(func.count(Scenario.id))),
        attempts=await _count(db, select(func.count(Attempt.id)).where(Attempt.user_id == user_id)),
        attempts_passed=await _count(
            db,
            select(func.count(Attempt.id)).where(Attempt.user_id == user_id, Attempt.passed == True),  # noqa: E712
        ),
        certificates=await _count(db, select(func.count(Certificate.id)).where(Certificate.user_id == user_id)),
        mandatory_total=len(mandatory),
        mandatory_completed=len(mandatory_done),
        mandatory_completion_percent=compute_percentage(len(mandatory_done), len(mandatory)),
        overdue_modules=[m for m in mandatory if m.id not in completed_ids],
        in_progress_modules=in_progress,
        expiring_certificates=await list_certificates(
            db, user_id, expiring_first=True, limit=EXPIRING_CERTIFICATES_SHOWN
        ),
        org=await build_org_overview(db, {m.id for m in mandatory}) if include_org else None,
    )


async def build_report(db: AsyncSession) -> ReportOutSchema:
    """Pass/fail distribution over all attempts and certificates per module."""
    total = await _count(db, select(func.count(Attempt.id)))
    passed = await _count(db, select(func.count(Attempt.id)).where(Attempt.passed == True))  # noqa: E712

    result = await db.execute(
        select(TrainingModule.id, TrainingModule.title, func.count(Certificate.id).label("cnt"))
        .join(Certificate, Certificate.module_id == TrainingModule.id)
        .group_by(TrainingModule.id, TrainingModule.title)
        .order_by(TrainingModule.title)
    )
    by_module = [
        ModuleCertificateCountSchema(module_id=mid, module_title=title, certificates=cnt)
        for mid, title, cnt in result.all()
    ]

    return ReportOutSchema(
        total_attempts=total,
        passed=passed,
        failed=total - passed,
        pass_rate=round(passed / total * 100, 1) if total else 0.0,
        certificates_by_module=by_module,
        attempts_missing_certificate=await count_attempts_missing_certificate(db),
    )
