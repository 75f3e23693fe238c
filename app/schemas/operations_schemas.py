"""
Pydantic schemas for clients, farms, jobs, catalog, equipment and attendance.
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime, date
from enum import Enum


# ==================== ENUMS ====================

class JobStatusEnum(str, Enum):
    """Job workflow status."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class StaffRoleEnum(str, Enum):
    PILOT = "pilot"
    ASSISTANT = "assistant"


class ActivityTypeEnum(str, Enum):
    """Field activity of an attendance record."""
    SPRAYING = "spraying"
    MAPPING = "mapping"
    SCOUTING = "scouting"


TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d(:[0-5]\d)?$"


def require_value(value):
    """Explicit null is rejected for fields whose column is NOT NULL."""
    if value is None:
        raise ValueError("no puede ser nulo")
    return value


# ==================== CLIENTS & FARMS ====================

class ClientBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    razon_social: Optional[str] = Field(None, max_length=200)
    cuit: Optional[str] = Field(None, max_length=20)
    contacto_principal: Optional[str] = Field(None, max_length=200)
    puesto: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=2000)


class ClientCreate(ClientBase):
    pass


class ClientUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    razon_social: Optional[str] = Field(None, max_length=200)
    cuit: Optional[str] = Field(None, max_length=20)
    contacto_principal: Optional[str] = Field(None, max_length=200)
    puesto: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("name")
    @classmethod
    def reject_null(cls, v):
        return require_value(v)


class ClientResponse(ClientBase):
    id: str
    organization_id: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FarmBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    cultivo: Optional[str] = Field(None, max_length=100)
    area_hectares: Optional[float] = Field(None, ge=0)
    localidad: Optional[str] = Field(None, max_length=200)
    location: Optional[str] = Field(None, max_length=200, description="lat,lng")


class FarmCreate(FarmBase):
    pass


class FarmUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    cultivo: Optional[str] = Field(None, max_length=100)
    area_hectares: Optional[float] = Field(None, ge=0)
    localidad: Optional[str] = Field(None, max_length=200)
    location: Optional[str] = Field(None, max_length=200)

    @field_validator("name")
    @classmethod
    def reject_null(cls, v):
        return require_value(v)


class FarmResponse(FarmBase):
    id: str
    client_id: str
    organization_id: str
    created_at: datetime

    class Config:
        from_attributes = True


# ==================== JOBS ====================

class JobBase(BaseModel):
    client_id: str
    farm_id: str
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    task: Optional[str] = Field(None, max_length=100)
    application_dose: Optional[str] = Field(None, max_length=50, description="Caldo dose as entered, e.g. '12'")
    cuadro: Optional[str] = Field(None, max_length=100)
    cultivo: Optional[str] = Field(None, max_length=100)
    superficie_teorica_has: Optional[float] = Field(None, ge=0)
    superficie_aplicada_has: Optional[float] = Field(None, ge=0)
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    status: JobStatusEnum = JobStatusEnum.PENDING
    notes: Optional[str] = None


class JobCreate(JobBase):
    pass


class JobUpdate(BaseModel):
    client_id: Optional[str] = None
    farm_id: Optional[str] = None
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    task: Optional[str] = Field(None, max_length=100)
    application_dose: Optional[str] = Field(None, max_length=50)
    cuadro: Optional[str] = Field(None, max_length=100)
    cultivo: Optional[str] = Field(None, max_length=100)
    superficie_teorica_has: Optional[float] = Field(None, ge=0)
    superficie_aplicada_has: Optional[float] = Field(None, ge=0)
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    status: Optional[JobStatusEnum] = None
    notes: Optional[str] = None

    @field_validator("client_id", "farm_id", "title", "status")
    @classmethod
    def reject_null(cls, v):
        return require_value(v)


class JobResponse(JobBase):
    id: str
    organization_id: str
    calc_hectares: Optional[float] = None
    dose_caldo_l_ha: Optional[float] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AgrochemicalUsedBase(BaseModel):
    agrochemical_id: Optional[str] = Field(None, description="Catalog product id")
    product_name: str = Field(..., min_length=1, max_length=200)
    dose: float = Field(..., ge=0)
    unit: str = Field(..., min_length=1, max_length=20)
    application_order: int = Field(default=0, ge=0)
    cost_per_unit: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None


class AgrochemicalUsedCreate(AgrochemicalUsedBase):
    pass


class AgrochemicalUsedUpdate(BaseModel):
    agrochemical_id: Optional[str] = None
    product_name: Optional[str] = Field(None, min_length=1, max_length=200)
    dose: Optional[float] = Field(None, ge=0)
    unit: Optional[str] = Field(None, min_length=1, max_length=20)
    application_order: Optional[int] = Field(None, ge=0)
    cost_per_unit: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None

    @field_validator("product_name", "dose", "unit", "application_order")
    @classmethod
    def reject_null(cls, v):
        return require_value(v)


class AgrochemicalUsedResponse(AgrochemicalUsedBase):
    id: str
    job_id: str
    created_at: datetime

    class Config:
        from_attributes = True


# ==================== CATALOG ====================

class CatalogProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    active_ingredient: Optional[str] = Field(None, max_length=200)
    category: Optional[str] = Field(None, max_length=100)
    mode_of_action: Optional[str] = Field(None, max_length=200)
    toxicological_class: Optional[str] = Field(None, max_length=50)
    manufacturer: Optional[str] = Field(None, max_length=200)
    function: Optional[str] = Field(None, max_length=200)
    safety_precautions: Optional[str] = None
    label_url: Optional[str] = Field(None, max_length=500)
    standard_dose: Optional[float] = Field(None, ge=0)
    unit: str = Field(default="L/ha", min_length=1, max_length=20)
    formulation_code: Optional[str] = Field(None, max_length=20)


class CatalogProductCreate(CatalogProductBase):
    pass


class CatalogProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    active_ingredient: Optional[str] = Field(None, max_length=200)
    category: Optional[str] = Field(None, max_length=100)
    mode_of_action: Optional[str] = Field(None, max_length=200)
    toxicological_class: Optional[str] = Field(None, max_length=50)
    manufacturer: Optional[str] = Field(None, max_length=200)
    function: Optional[str] = Field(None, max_length=200)
    safety_precautions: Optional[str] = None
    label_url: Optional[str] = Field(None, max_length=500)
    standard_dose: Optional[float] = Field(None, ge=0)
    unit: Optional[str] = Field(None, min_length=1, max_length=20)
    formulation_code: Optional[str] = Field(None, max_length=20)

    @field_validator("name", "unit")
    @classmethod
    def reject_null(cls, v):
        return require_value(v)


class CatalogProductResponse(CatalogProductBase):
    id: str
    organization_id: str
    created_at: datetime

    class Config:
        from_attributes = True


# ==================== EQUIPMENT & TEAM ====================

class DroneCreate(BaseModel):
    model: str = Field(..., min_length=1, max_length=200)
    serial_number: Optional[str] = Field(None, max_length=100)


class DroneUpdate(BaseModel):
    """total_hours is derived from attendance and cannot be edited."""
    model: Optional[str] = Field(None, min_length=1, max_length=200)
    serial_number: Optional[str] = Field(None, max_length=100)

    @field_validator("model")
    @classmethod
    def reject_null(cls, v):
        return require_value(v)


class DroneResponse(DroneCreate):
    id: str
    organization_id: str
    total_hours: float
    created_at: datetime

    class Config:
        from_attributes = True


class GeneratorCreate(BaseModel):
    brand: str = Field(..., min_length=1, max_length=200)
    internal_code: Optional[str] = Field(None, max_length=100)


class GeneratorUpdate(BaseModel):
    """total_hours is derived from attendance and cannot be edited."""
    brand: Optional[str] = Field(None, min_length=1, max_length=200)
    internal_code: Optional[str] = Field(None, max_length=100)

    @field_validator("brand")
    @classmethod
    def reject_null(cls, v):
        return require_value(v)


class GeneratorResponse(GeneratorCreate):
    id: str
    organization_id: str
    total_hours: float
    created_at: datetime

    class Config:
        from_attributes = True


class WorkTeamCreate(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=200)
    role: StaffRoleEnum
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=255)


class WorkTeamUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=1, max_length=200)
    role: Optional[StaffRoleEnum] = None
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=255)

    @field_validator("full_name", "role")
    @classmethod
    def reject_null(cls, v):
        return require_value(v)


class WorkTeamResponse(WorkTeamCreate):
    id: str
    organization_id: str
    created_at: datetime

    class Config:
        from_attributes = True


# ==================== ATTENDANCE ====================

class AttendanceBase(BaseModel):
    job_id: str
    start_date: date
    check_in_time: Optional[str] = Field(None, pattern=TIME_PATTERN, description="HH:MM")
    check_out_time: Optional[str] = Field(None, pattern=TIME_PATTERN, description="HH:MM")
    activity_type: Optional[ActivityTypeEnum] = None
    pilot_id: Optional[str] = None
    assistant_id: Optional[str] = None
    drone_id: Optional[str] = None
    generator_id: Optional[str] = None
    gen_usage_hours: Optional[float] = Field(None, ge=0)
    hectares_done: Optional[float] = Field(None, ge=0)
    agronomic_obs: Optional[str] = None
    technical_obs: Optional[str] = None
    is_reviewed: bool = False


class AttendanceCreate(AttendanceBase):
    pass


class AttendanceUpdate(BaseModel):
    job_id: Optional[str] = None
    start_date: Optional[date] = None
    check_in_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    check_out_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    activity_type: Optional[ActivityTypeEnum] = None
    pilot_id: Optional[str] = None
    assistant_id: Optional[str] = None
    drone_id: Optional[str] = None
    generator_id: Optional[str] = None
    gen_usage_hours: Optional[float] = Field(None, ge=0)
    hectares_done: Optional[float] = Field(None, ge=0)
    agronomic_obs: Optional[str] = None
    technical_obs: Optional[str] = None
    is_reviewed: Optional[bool] = None

    @field_validator("job_id", "start_date", "is_reviewed")
    @classmethod
    def reject_null(cls, v):
        return require_value(v)


class AttendanceResponse(AttendanceBase):
    id: str
    organization_id: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AttendanceWriteResponse(BaseModel):
    """Saved record plus advisory messages for the user."""
    record: AttendanceResponse
    message: str
    warnings: List[str] = Field(default_factory=list)


class HectaresSummaryResponse(BaseModel):
    job_id: str
    total_hectares_done: float
    job_theoretical_hectares: Optional[float] = None
    job_applied_hectares: Optional[float] = None
    exceeds_theoretical: bool
    exceeds_applied: bool
