"""Pydantic schemas for training modules and progress bookmarks."""
from datetime import datetime

from pydantic import BaseModel, Field, model_validator

REQUIRED_MODULE_FIELDS = ("title", "dpdp_section", "duration_minutes", "is_mandatory", "version")


class ModuleOutSchema(BaseModel):
    id: int
    title: str
    description: str | None = None
    dpdp_section: str = ""
    duration_minutes: int = 15
    is_mandatory: bool = True
    objectives: list[str] | None = None
    version: str = "1.0"

    class Config:
        from_attributes = True


class ModuleRefSchema(BaseModel):
    id: int
    title: str


class SectionSchema(BaseModel):
    title: str
    body: str


class ModuleDetailSchema(ModuleOutSchema):
    sections: list[SectionSchema] = Field(default_factory=list)
    last_section: str | None = None
    progress_percent: int = 0
    status: str | None = None


class ModuleCreateSchema(BaseModel):
    title: str = Field(min_length=1)
    description: str | None = None
    content: str | None = None
    dpdp_section: str = ""
    duration_minutes: int = Field(default=15, ge=1)
    is_mandatory: bool = True
    objectives: list[str] | None = None
    version: str = Field(default="1.0", min_length=1, max_length=16)


class ModuleUpdateSchema(BaseModel):
    """Partial update: only fields present in the request body are written."""

    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    content: str | None = None
    dpdp_section: str | None = None
    duration_minutes: int | None = Field(default=None, ge=1)
    is_mandatory: bool | None = None
    objectives: list[str] | None = None
    version: str | None = Field(default=None, min_length=1, max_length=16)

    @model_validator(mode="after")
    def check_required_not_null(self):
        for name in REQUIRED_MODULE_FIELDS:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class ProgressUpdateSchema(BaseModel):
    section_index: int = Field(ge=0)
    completed: bool = False


class ProgressOutSchema(BaseModel):
    module_id: int
    last_section: str | None
    progress_percent: int
    status: str
    started_at: datetime | None = None
    completed_at: datetime | None = None
