"""Pydantic schemas for certificates, dashboard counts and admin reports."""
from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.module import ModuleRefSchema


class CertificateOutSchema(BaseModel):
    id: int
    certificate_number: str
    module_id: int
    module_title: str | None = None
    attempt_id: int | None = None
    issued_at: datetime
    valid_until: datetime
    is_valid: bool


class OrgOverviewSchema(BaseModel):
    """Organisation-wide figures shown to admins and compliance officers."""

    users_total: int
    roles: dict[str, int]
    completion_rate: int
    attempts: int
    attempts_passed: int
    pass_rate: int
    users_in_training: int
    users_mandatory_done: int


class DashboardOutSchema(BaseModel):
    modules_total: int
    modules_completed: int
    scenarios_total: int
    attempts: int
    attempts_passed: int
    certificates: int
    mandatory_total: int
    mandatory_completed: int
    mandatory_completion_percent: int
    overdue_modules: list[ModuleRefSchema] = Field(default_factory=list)
    in_progress_modules: list[ModuleRefSchema] = Field(default_factory=list)
    expiring_certificates: list[CertificateOutSchema] = Field(default_factory=list)
    org: OrgOverviewSchema | None = None


class ModuleCertificateCountSchema(BaseModel):
    module_id: int
    module_title: str
    certificates: int


class ReportOutSchema(BaseModel):
    total_attempts: int
    passed: int
    failed: int
    pass_rate: float
    certificates_by_module: list[ModuleCertificateCountSchema]
    attempts_missing_certificate: int = 0


class ReconcileOutSchema(BaseModel):
    issued: int
    certificate_numbers: list[str]
