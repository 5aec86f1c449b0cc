# backend/modules/reservations/schemas/admin_schemas.py

"""
Schemas for table, opening hours and holiday administration.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator
from datetime import date, time, datetime
from typing import Optional


class TableCreate(BaseModel):
    table_number: str = Field(..., min_length=1, max_length=20)
    capacity: int = Field(..., ge=1, le=100)
    section: Optional[str] = Field("main", max_length=50)
    is_active: bool = True


class TableUpdate(BaseModel):
    table_number: Optional[str] = Field(None, min_length=1, max_length=20)
    capacity: Optional[int] = Field(None, ge=1, le=100)
    section: Optional[str] = Field(None, max_length=50)
    is_active: Optional[bool] = None


class TableResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    table_number: str
    capacity: int
    section: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None


class OpeningHoursSet(BaseModel):
    """Hours for one weekday; closing must be later the same day"""

    open_time: time
    close_time: time

    @model_validator(mode="after")
    def validate_range(self):
        if self.close_time <= self.open_time:
            raise ValueError("close_time must be after open_time")
        return self


class OpeningHoursResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    day_of_week: int
    open_time: time
    close_time: time


class HolidayBase(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    is_closed: bool = False
    open_time: Optional[time] = None
    close_time: Optional[time] = None
    requires_deposit: bool = False
    notes: Optional[str] = Field(None, max_length=500)


class HolidayCreate(HolidayBase):
    date: date

    @model_validator(mode="after")
    def validate_hours(self):
        if (self.open_time is None) != (self.close_time is None):
            raise ValueError("open_time and close_time must be given together")
        if self.open_time and self.close_time <= self.open_time:
            raise ValueError("close_time must be after open_time")
        return self


class HolidayUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    is_closed: Optional[bool] = None
    open_time: Optional[time] = None
    close_time: Optional[time] = None
    requires_deposit: Optional[bool] = None
    notes: Optional[str] = Field(None, max_length=500)


class HolidayResponse(HolidayBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    date: date
