# schemas/user.py
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

ExperienceLevel = Literal["beginner", "intermediate", "advanced"]


class NoEquipment(BaseModel):
    kind: Literal["none"] = "none"


class HomeGym(BaseModel):
    kind: Literal["home_gym"] = "home_gym"
    items: list[str] = []


class FullGym(BaseModel):
    kind: Literal["full_gym"] = "full_gym"


EquipmentAccess = Annotated[Union[NoEquipment, HomeGym, FullGym], Field(discriminator="kind")]


def has_equipment(access) -> bool:
    return access is not None and access.kind != "none"


class UserProfile(BaseModel):
    id: int
    external_id: str
    name: str = ""
    email: str = ""
    avatar: str | None = None
    weight_kg: float | None = None
    height_cm: float | None = None
    age: int | None = None
    experience_level: ExperienceLevel | None = None
    equipment_access: EquipmentAccess | None = None
    injuries: list[str] = []
    workout_days_per_week: int | None = None


class ProfileUpdate(BaseModel):
    name: str | None = None
    weight_kg: float | None = Field(default=None, gt=0)
    height_cm: float | None = Field(default=None, gt=0)
    age: int | None = Field(default=None, gt=0)
    experience_level: ExperienceLevel | None = None
    equipment_access: EquipmentAccess | None = None
    injuries: list[str] | None = None
    workout_days_per_week: int | None = Field(default=None, ge=1, le=7)


class UserSync(BaseModel):
    external_id: str
    name: str = ""
    email: str = ""
    avatar: str | None = None
