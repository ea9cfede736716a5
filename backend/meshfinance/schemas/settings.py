from pydantic import BaseModel, field_validator
from typing import Literal

class CardSettingsIn(BaseModel):
    closing_day: int
    due_day: int
    scope: Literal["future", "all"] = "future"

    @field_validator("closing_day", "due_day")
    @classmethod
    def day_of_month(cls, v: int):
        if v < 1 or v > 31:
            raise ValueError("day must be between 1 and 31")
        return v

class CardSettingsOut(BaseModel):
    closing_day: int
    due_day: int
    rebased: int = 0
