"""
Gym Roster — Pydantic Models for Client Records
"""

import math
import re
from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from app.utils.dates import parse_date
from app.utils.security import sanitize_input

CONTACT_PATTERN = re.compile(r"^[0-9]{10}$")
AADHAAR_PATTERN = re.compile(r"^[0-9]{12}$")

# Longest single membership term (ten years)
MAX_MEMBERSHIP_MONTHS = 120


class Goal(str, Enum):
    GAIN_WEIGHT = "Gain Weight"
    LOSE_WEIGHT = "Lose Weight"
    MAINTAIN_WEIGHT = "Maintain Weight"
    POWERLIFTING = "Powerlifting"
    BODYBUILDING = "Bodybuilding"


class PTTier(str, Enum):
    """Personal-training service level."""
    NONE = "None"
    STANDARD = "Standard"
    ADVANCED = "Advanced"


# ══════════════════════════════════════════
# Request input (flat form fields)
# ══════════════════════════════════════════

class ClientInput(BaseModel):
    """
    Flat record fields as submitted by the roster form (POST and PUT).
    Validate with `model_validate(body, context={"today": <date>})` so the
    fee date can be checked against the current day.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        use_enum_values=True,
    )

    name: str
    contact: str
    aadhaar: str
    height_ft: Optional[int] = Field(None, ge=0)
    height_in: Optional[int] = Field(None, ge=0, lt=12)
    weight: Optional[float] = Field(None, gt=0, allow_inf_nan=False)
    goal: Goal
    has_medical_condition: bool = False
    medical_condition_details: str = Field(
        "",
        validation_alias=AliasChoices("medicalConditionDetails", "conditionDetails", "medical_condition_details"),
    )
    fees_submitted: float = Field(ge=0, allow_inf_nan=False)
    fees_due: float = Field(0.0, ge=0, allow_inf_nan=False)
    pt: PTTier = PTTier.NONE
    months: int = Field(ge=1, le=MAX_MEMBERSHIP_MONTHS)
    fee_date: date

    @field_validator("name", mode="before")
    @classmethod
    def _clean_name(cls, v):
        if v is None:
            raise ValueError("Name is required")
        if isinstance(v, str):
            v = sanitize_input(v, max_length=120)
            if not v:
                raise ValueError("Name is required")
        return v

    @field_validator("contact", mode="before")
    @classmethod
    def _check_contact(cls, v):
        if v is None:
            raise ValueError("Contact number is required")
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("Contact number is required")
            if not CONTACT_PATTERN.match(v):
                raise ValueError("Contact number must be exactly 10 digits")
        return v

    @field_validator("aadhaar", mode="before")
    @classmethod
    def _check_aadhaar(cls, v):
        if v is None:
            raise ValueError("Aadhaar number is required")
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("Aadhaar number is required")
            if not AADHAAR_PATTERN.match(v):
                raise ValueError("Aadhaar number must be exactly 12 digits")
        return v

    @field_validator("height_ft", "height_in", "weight", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        # Empty number inputs arrive as "" or null
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return v

    @field_validator("fees_due", mode="before")
    @classmethod
    def _due_defaults_to_zero(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return 0.0
        return v

    @field_validator("weight", "fees_submitted", "fees_due", "months", "height_ft", "height_in", mode="before")
    @classmethod
    def _reject_bool_and_nan(cls, v):
        if isinstance(v, bool):
            raise ValueError("must be a number")
        if isinstance(v, float) and math.isnan(v):
            raise ValueError("must be a number")
        return v

    @field_validator("pt", mode="before")
    @classmethod
    def _pt_default(cls, v):
        if v is None or v == "":
            return PTTier.NONE
        return v

    @field_validator("has_medical_condition", mode="before")
    @classmethod
    def _flag_default(cls, v):
        return False if v is None or v == "" else v

    @field_validator("medical_condition_details", mode="before")
    @classmethod
    def _clean_details(cls, v):
        if v is None:
            return ""
        if isinstance(v, str):
            return sanitize_input(v, max_length=1000)
        return v

    @field_validator("fee_date", mode="before")
    @classmethod
    def _parse_fee_date(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("Fee date is required")
        if not isinstance(v, (str, date)):
            raise ValueError("Fee date must be a valid ISO date (YYYY-MM-DD)")
        try:
            return parse_date(v)
        except ValueError:
            raise ValueError("Fee date must be a valid ISO date (YYYY-MM-DD)")

    @field_validator("fee_date")
    @classmethod
    def _fee_date_not_in_future(cls, v: date, info: ValidationInfo) -> date:
        today = (info.context or {}).get("today") or date.today()
        if v > today:
            raise ValueError("Fee submission date cannot be in the future")
        return v

    @model_validator(mode="after")
    def _clear_details_without_condition(self):
        if not self.has_medical_condition:
            self.medical_condition_details = ""
        return self

    def to_document(self, end_date: date) -> dict:
        """Nested record document (without id/timestamps) for the store."""
        return {
            "name": self.name,
            "contact": self.contact,
            "aadhaar": self.aadhaar,
            "height": {"ft": self.height_ft, "in": self.height_in},
            "weight": self.weight,
            "goal": Goal(self.goal).value,
            "medicalCondition": {
                "hasMedicalCondition": self.has_medical_condition,
                "conditionDetails": self.medical_condition_details,
            },
            "fees": {"submitted": self.fees_submitted, "due": self.fees_due},
            "pt": PTTier(self.pt).value,
            "membership": {
                "months": self.months,
                "feeDate": self.fee_date,
                "endDate": end_date,
            },
        }


# ══════════════════════════════════════════
# Stored record (nested shape returned by the API)
# ══════════════════════════════════════════

class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, use_enum_values=True)


class Height(_CamelModel):
    ft: Optional[int] = None
    inches: Optional[int] = Field(None, alias="in")


class MedicalCondition(_CamelModel):
    has_medical_condition: bool = False
    condition_details: str = ""


class Fees(_CamelModel):
    submitted: float
    due: float = 0.0


class Membership(_CamelModel):
    months: int
    fee_date: date
    end_date: date

    @field_validator("fee_date", "end_date", mode="before")
    @classmethod
    def _parse(cls, v):
        return parse_date(v) if isinstance(v, (str, datetime)) else v


class ClientRecord(_CamelModel):
    """One gym member as persisted."""
    id: str
    name: str
    contact: str
    aadhaar: str
    height: Height = Field(default_factory=Height)
    weight: Optional[float] = None
    goal: Goal
    medical_condition: MedicalCondition = Field(default_factory=MedicalCondition)
    fees: Fees
    pt: PTTier = PTTier.NONE
    membership: Membership
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_response(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class DeletedClient(BaseModel):
    id: str
    name: str


class DeleteResponse(BaseModel):
    message: str
    deleted_client: DeletedClient = Field(serialization_alias="deletedClient")
