import re
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ReprintForm(BaseModel):
    """Applicant fields posted alongside the card photo."""
    model_config = ConfigDict(str_strip_whitespace=True)

    full_name: str = Field(min_length=1, max_length=200)
    age: int = Field(ge=1, le=120)
    phone: str
    address: str = Field(default="", max_length=500)
    province: str = Field(min_length=1, max_length=100)
    district: str = Field(min_length=1, max_length=100)
    subdistrict: str = Field(min_length=1, max_length=100)
    vehicle_type: str = Field(min_length=1, max_length=50)
    vehicle_brand: Optional[str] = Field(default=None, max_length=100)
    license_plate: str = Field(min_length=1, max_length=50)
    consent: bool = False

    @field_validator("phone")
    @classmethod
    def phone_digits(cls, v: str) -> str:
        digits = re.sub(r"[\s\-()]", "", v)
        if not re.fullmatch(r"\d{9,10}", digits):
            raise ValueError("phone must be 9-10 digits")
        return digits

    @field_validator("vehicle_brand")
    @classmethod
    def blank_brand(cls, v):
        return v or None

    @field_validator("consent")
    @classmethod
    def consent_given(cls, v: bool) -> bool:
        if not v:
            raise ValueError("consent is required")
        return v


class SubmissionOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str
    request_id: str = Field(alias="requestId")
    message: str


# Shape of GET /api/diag
class DiagReport(BaseModel):
    ok: bool = True
    env: Dict[str, bool] = Field(default_factory=dict)
    checks: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    note: Optional[str] = None
