# schemas/tracking.py
from pydantic import BaseModel, Field


class DailyTracking(BaseModel):
    date: str
    water_intake: float = 0
    steps: int = 0
    weight_kg: float | None = None
    distance_km: float | None = None


class TrackingUpdate(BaseModel):
    water_intake: float | None = Field(default=None, ge=0)
    steps: int | None = Field(default=None, ge=0)
    weight_kg: float | None = Field(default=None, gt=0)
    distance_km: float | None = Field(default=None, ge=0)


class WaterIntake(BaseModel):
    amount: float = Field(gt=0)
