"""Pydantic request/response models for API endpoints."""

from pydantic import BaseModel

from raising_sim.models import Preset


class CreateGame(BaseModel):
    title: str


class CreateCharacter(BaseModel):
    name: str = ""
    birth_month: int = 1
    birth_day: int = 1
    personality: str = "INFP"


class UpdateCharacter(BaseModel):
    name: str | None = None
    personality: str | None = None
    birth_month: int | None = None
    birth_day: int | None = None


class SetPreset(BaseModel):
    preset: Preset


class UpdateGameSettings(BaseModel):
    use_narrative: bool | None = None
    narrative_url: str | None = None
    extra_cards: int | None = None


class AdvanceBody(BaseModel):
    schedules: dict[str, str] = {}


class ChoiceBody(BaseModel):
    tag: str


class UpdateSettings(BaseModel):
    narrative_url: str | None = None
    narrative_timeout: float | None = None
