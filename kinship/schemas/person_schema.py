from pydantic import BaseModel, field_validator
from typing import Optional, Literal
import re


# Partial dates are allowed: YYYY, YYYY-MM or YYYY-MM-DD
PARTIAL_DATE_RE = re.compile(r"^\d{4}(-\d{2}(-\d{2})?)?$")


# --------------------------------------------------
# PERSON (read-only input to the graph layer)
# --------------------------------------------------
class Person(BaseModel):
    id: str
    name: str = ""
    gender: Optional[Literal["male", "female", "other"]] = None
    date_of_birth: Optional[str] = None
    date_of_death: Optional[str] = None
    donor: bool = False
    is_self: bool = False
    status: Literal["living", "deceased"] = "living"

    class Config:
        from_attributes = True

    @field_validator("date_of_birth", "date_of_death")
    @classmethod
    def check_partial_date(cls, value: Optional[str]) -> Optional[str]:
        if value in (None, ""):
            return None
        if not PARTIAL_DATE_RE.match(value):
            raise ValueError("Dates must be YYYY, YYYY-MM or YYYY-MM-DD")
        return value

    @property
    def surname(self) -> Optional[str]:
        parts = self.name.split()
        return parts[-1] if parts else None
