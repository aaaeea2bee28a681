"""Pydantic models for the planner's HTTP and agent payloads."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SchoolPayload(_CamelModel):
    id: Optional[str] = None
    name: str
    short_name: Optional[str] = Field(default=None, alias="shortName")
    catalog_url: Optional[str] = Field(default=None, alias="catalogUrl")
    location: Optional[str] = None


class CompletedCoursePayload(_CamelModel):
    code: str
    name: str = ""
    credits: float = 0
    grade: Optional[str] = None
    semester: Optional[str] = None


class SchedulePreferencesPayload(_CamelModel):
    starting_semester: str = Field(alias="startingSemester")
    credits_per_semester: Literal["light", "standard", "accelerated"] = Field(
        default="standard", alias="creditsPerSemester"
    )
    coop_plan: Literal["none", "one", "two", "three"] = Field(default="none", alias="coopPlan")
    additional_notes: Optional[str] = Field(default=None, alias="additionalNotes")
    email: Optional[str] = None


class GenerateScheduleRequest(_CamelModel):
    school: SchoolPayload
    major: str = Field(min_length=1)
    completed_courses: List[CompletedCoursePayload] = Field(default_factory=list, alias="completedCourses")
    preferences: SchedulePreferencesPayload
    is_freshman: bool = Field(default=False, alias="isFreshman")

    @model_validator(mode="before")
    @classmethod
    def _accept_plain_school_name(cls, values: Any) -> Any:
        if isinstance(values, dict) and isinstance(values.get("school"), str):
            values = {**values, "school": {"name": values["school"]}}
        return values


class NormalizeScheduleRequest(_CamelModel):
    raw: Any = Field(description="Agent output: a schedule object or the raw response text.")
    school: Optional[str] = None
    major: Optional[str] = None
    store: bool = True


class PatchScheduleRequest(_CamelModel):
    current_schedule: Dict[str, Any] = Field(alias="currentSchedule")
    edit_request: str = Field(alias="editRequest", min_length=1)


class EditScheduleRequest(_CamelModel):
    current_schedule: Optional[Dict[str, Any]] = Field(default=None, alias="currentSchedule")
    schedule_id: Optional[str] = Field(default=None, alias="scheduleId")
    edit_request: str = Field(alias="editRequest", min_length=1)

    @model_validator(mode="after")
    def _require_schedule_source(self) -> "EditScheduleRequest":
        if self.current_schedule is None and not self.schedule_id:
            raise ValueError("Either currentSchedule or scheduleId is required")
        return self


class ScheduleEnvelope(_CamelModel):
    schedule_id: Optional[str] = Field(default=None, alias="scheduleId")
    schedule: Dict[str, Any]
    version: Optional[int] = None
    last_action: Optional[str] = Field(default=None, alias="lastAction")


class EditScheduleResponse(_CamelModel):
    schedule_id: str = Field(alias="scheduleId")
    answer: str = ""
    schedule: Dict[str, Any]
    version: int
    last_action: Optional[str] = Field(default=None, alias="lastAction")


class ToolResponse(BaseModel):
    success: bool
    message: str
    data: Optional[Any] = None
    schedule: Optional[Dict[str, Any]] = None
    field: Optional[str] = None
    error: Optional[str] = None


class SavedScheduleRequest(_CamelModel):
    email: str = Field(min_length=3)
    schedule: Dict[str, Any]


class SavedScheduleResponse(_CamelModel):
    exists: bool
    schedule: Optional[Dict[str, Any]] = None
    school: Optional[str] = None
    major: Optional[str] = None
    saved_at: Optional[str] = Field(default=None, alias="savedAt")


__all__ = [
    "CompletedCoursePayload",
    "EditScheduleRequest",
    "EditScheduleResponse",
    "GenerateScheduleRequest",
    "NormalizeScheduleRequest",
    "PatchScheduleRequest",
    "SavedScheduleRequest",
    "SavedScheduleResponse",
    "ScheduleEnvelope",
    "SchedulePreferencesPayload",
    "SchoolPayload",
    "ToolResponse",
]
