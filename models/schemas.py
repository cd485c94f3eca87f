from enum import Enum
from typing import Annotated, List, Dict, Optional, Any, Union, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from config import settings


class ScheduleEntry(BaseModel):
    """One line of a complex dosing schedule."""
    model_config = ConfigDict(frozen=True)

    dose: float = Field(gt=0, allow_inf_nan=False)
    max_dose: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False)
    frequency: int = Field(ge=0)
    time_of_day: Optional[str] = None
    day_range: Optional[str] = None  # "day 1", "days 2-5", "days 2+"
    prn: Optional[bool] = None


class _DosingBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    dose: float = Field(gt=0, allow_inf_nan=False)
    unit: str
    frequency: int = Field(ge=0)
    prn: bool = False
    instructions: str = ""

    @computed_field
    @property
    def is_complex(self) -> bool:
        return getattr(self, "kind", None) == "complex"


class SimpleDosing(_DosingBase):
    """Fixed dose at a fixed number of administrations per day."""
    kind: Literal["simple"] = "simple"
    average_daily_dose: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)


class RangeDosing(_DosingBase):
    """Dose given as a range, e.g. "1-2 tablets", usually as needed."""
    kind: Literal["range"] = "range"
    max_dose: float = Field(gt=0, allow_inf_nan=False)
    average_daily_dose: float = Field(ge=0, allow_inf_nan=False)


class ComplexDosing(_DosingBase):
    """Dosing that varies by time of day or by day of therapy."""
    kind: Literal["complex"] = "complex"
    schedule: List[ScheduleEntry] = Field(min_length=1)
    average_daily_dose: float = Field(ge=0, allow_inf_nan=False)


ParsedDosing = Annotated[
    Union[SimpleDosing, RangeDosing, ComplexDosing],
    Field(discriminator="kind"),
]


class Package(BaseModel):
    """Package record supplied by the NDC collaborator for one request."""
    identifier: str
    unit: str
    quantity_per_package: Optional[int] = None
    active: bool = True
    product_name: Optional[str] = None
    dosage_form: Optional[str] = None
    description: Optional[str] = None

    @field_validator("quantity_per_package", mode="before")
    @classmethod
    def coerce_quantity(cls, value: Any) -> Optional[int]:
        """Unknown, unparseable or non-positive sizes mean "not selectable"."""
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, str):
            value = value.strip()
            if not value.isdigit():
                return None
            value = int(value)
        if isinstance(value, float):
            if not value.is_integer():
                return None
            value = int(value)
        if not isinstance(value, int) or value <= 0:
            return None
        return value


class DispensePlanItem(BaseModel):
    """A package and how many of it to dispense."""
    package: Package
    count: int = Field(ge=1)
    total_quantity: float
    unit: str
    exact_match: bool = False
    overfill: Optional[float] = None
    underfill: Optional[float] = None
    variance_percentage: Optional[float] = None


class WarningType(str, Enum):
    OVERFILL = "OVERFILL"
    UNDERFILL = "UNDERFILL"
    INACTIVE_NDC = "INACTIVE_NDC"
    PACKAGE_MISMATCH = "PACKAGE_MISMATCH"
    UNUSUAL_QUANTITY = "UNUSUAL_QUANTITY"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class DosageForm(str, Enum):
    LIQUID = "LIQUID"
    INHALER = "INHALER"
    INSULIN = "INSULIN"
    TABLET = "TABLET"
    CAPSULE = "CAPSULE"
    OTHER = "OTHER"


class DispenseWarning(BaseModel):
    """Warning attached to a calculation result."""
    type: WarningType
    message: str
    severity: Severity
    details: Dict[str, Any] = {}


class SigRequest(BaseModel):
    """Request body for parsing a SIG on its own."""
    sig: str = Field(min_length=1, max_length=500)


class CalculationRequest(BaseModel):
    """Input for a full quantity calculation."""
    drug_name: Optional[str] = None
    ndc: Optional[str] = None
    sig: str = Field(min_length=3, max_length=500)
    days_supply: int = Field(gt=0, le=settings.max_days_supply)
    packages: List[Package] = []
    dosage_form: Optional[DosageForm] = None

    @field_validator("sig")
    @classmethod
    def strip_sig(cls, value: str) -> str:
        if len(value.strip()) < 3:
            raise ValueError("SIG must be at least 3 characters")
        return value


class CalculationResult(BaseModel):
    """Structured output of the dispense calculation pipeline."""
    drug_name: str
    parsed_dosing: ParsedDosing
    total_quantity: float
    unit: str
    days_supply: int
    dispense_plan: List[DispensePlanItem] = []
    available_packages: List[Package] = []
    warnings: List[DispenseWarning] = []
    success: bool = True


class CalculationResponse(BaseModel):
    """API response model for a calculation."""
    success: bool
    result: Optional[CalculationResult] = None
    error: Optional[str] = None
    processing_time_ms: Optional[float] = None
