"""Core domain models.

All engine stages and storage functions operate on these types.
Pydantic is used for validation and serialisation at every data boundary.
Input validation clamps or defaults instead of raising: a birthday of 13/40
becomes 12/31, an unknown personality becomes INTJ.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
)

from raising_sim.timeline import MAX_MONTHS, MONEY_CEILING, clamp, zodiac_from_birthday

MAX_CHARS = 4

PERSONALITIES = [
    "INTJ", "INTP", "ENTJ", "ENTP",
    "INFJ", "INFP", "ENFJ", "ENFP",
    "ISTJ", "ISFJ", "ESTJ", "ESFJ",
    "ISTP", "ISFP", "ESTP", "ESFP",
]

StatName = Literal["intellect", "charm", "strength", "art", "morality", "stress"]
STAT_NAMES: tuple[StatName, ...] = ("intellect", "charm", "strength", "art", "morality", "stress")

Preset = Literal["acquaintance", "rival", "family", "one_sided_crush"]

Stage = Literal[
    "strangers",
    "friends",
    "close",
    "rivals",
    "broken",
    "crush",
    "dating",
    "partners",
    "family",
]

CardType = Literal[
    "action",
    "event",
    "relationship",
    "birthday",
    "tournament",
    "highlight",
]


class Activity(str, Enum):
    """Monthly schedule activities."""

    STUDY = "study"
    WORK = "work"
    REST = "rest"
    ART = "art"
    TRAIN = "train"


def new_id(prefix: str = "c") -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def _int_or(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


# ---------------------------------------------------------------------------
# Characters
# ---------------------------------------------------------------------------

class Birthday(BaseModel):
    month: int = 1
    day: int = 1

    @field_validator("month", mode="before")
    @classmethod
    def _clamp_month(cls, v: Any) -> int:
        return int(clamp(_int_or(v, 1) or 1, 1, 12))

    @field_validator("day", mode="before")
    @classmethod
    def _clamp_day(cls, v: Any) -> int:
        return int(clamp(_int_or(v, 1) or 1, 1, 31))


class Stats(BaseModel):
    intellect: int = 10
    charm: int = 10
    strength: int = 10
    art: int = 10
    morality: int = 10
    stress: int = 10

    @field_validator("*", mode="before")
    @classmethod
    def _clamp_stat(cls, v: Any) -> int:
        return int(clamp(_int_or(v, 0), 0, 100))

    def get(self, name: StatName) -> int:
        return getattr(self, name)

    def total(self) -> int:
        return sum(self.get(n) for n in STAT_NAMES)

    def tournament_score(self) -> int:
        return self.intellect + self.charm + self.strength + self.art + self.morality - self.stress


class SkillProgress(BaseModel):
    level: int = Field(default=0, ge=0)
    exp: int = Field(default=0, ge=0)


def _default_skills() -> dict[Activity, SkillProgress]:
    return {a: SkillProgress() for a in Activity}


class Flags(BaseModel):
    blessing: str | None = None


class Character(BaseModel):
    """A raised character. The zodiac sign is always derived from the birthday."""

    id: str = Field(default_factory=new_id)
    name: str = "Hero"
    birthday: Birthday = Field(default_factory=Birthday)
    personality: str = "INTJ"
    stats: Stats = Field(default_factory=Stats)
    skills: dict[Activity, SkillProgress] = Field(default_factory=_default_skills)
    flags: Flags = Field(default_factory=Flags)

    @field_validator("name", mode="before")
    @classmethod
    def _trim_name(cls, v: Any) -> str:
        return str(v or "Hero")[:20]

    @field_validator("personality", mode="before")
    @classmethod
    def _known_personality(cls, v: Any) -> str:
        code = str(v or "").upper()
        return code if code in PERSONALITIES else "INTJ"

    @field_validator("skills")
    @classmethod
    def _fill_skills(cls, v: dict[Activity, SkillProgress]) -> dict[Activity, SkillProgress]:
        for activity in Activity:
            v.setdefault(activity, SkillProgress())
        return v

    @computed_field  # type: ignore[prop-decorator]
    @property
    def zodiac(self) -> str:
        return zodiac_from_birthday(self.birthday.month, self.birthday.day)


# ---------------------------------------------------------------------------
# Relationships
# ---------------------------------------------------------------------------

class Relationship(BaseModel):
    """Directed relationship record: how `from_id` feels about `to_id`."""

    from_id: str
    to_id: str
    preset: Preset = "acquaintance"
    stage: Stage = "strangers"
    affinity: int = 0    # -100..100
    trust: int = 20      # 0..100
    tension: int = 10    # 0..100
    romance: int = 0     # 0..100

    @field_validator("affinity", mode="before")
    @classmethod
    def _clamp_affinity(cls, v: Any) -> int:
        return int(clamp(_int_or(v, 0), -100, 100))

    @field_validator("trust", "tension", "romance", mode="before")
    @classmethod
    def _clamp_score(cls, v: Any) -> int:
        return int(clamp(_int_or(v, 0), 0, 100))

    @property
    def key(self) -> tuple[str, str]:
        return (self.from_id, self.to_id)


# ---------------------------------------------------------------------------
# Log cards
# ---------------------------------------------------------------------------

class DialogueLine(BaseModel):
    speaker: str
    line: str


class Choice(BaseModel):
    tag: str
    label: str


class CardMeta(BaseModel):
    """Everything the choice resolver needs to apply an effect later."""

    model_config = ConfigDict(extra="allow")

    kind: str = ""
    char_ids: list[str] = Field(default_factory=list)
    from_id: str | None = None
    to_id: str | None = None
    payload: dict[str, Any] = Field(default_factory=dict)
    source: str = "engine"


class Card(BaseModel):
    """A narrative log entry. Immutable once logged, except `choice_made`."""

    id: str
    type: CardType
    year: int
    month: int
    title: str
    narration: str = ""
    dialogues: list[DialogueLine] = Field(default_factory=list)
    choices: list[Choice] = Field(default_factory=list)
    choice_made: str | None = None
    meta: CardMeta = Field(default_factory=CardMeta)

    @field_validator("choices")
    @classmethod
    def _none_or_three(cls, v: list[Choice]) -> list[Choice]:
        if len(v) not in (0, 3):
            raise ValueError(f"A card offers either 0 or 3 choices, got {len(v)}")
        return v

    def choice_tags(self) -> list[str]:
        return [c.tag for c in self.choices]


# ---------------------------------------------------------------------------
# Game state
# ---------------------------------------------------------------------------

class Settings(BaseModel):
    use_narrative: bool = False
    narrative_url: str = ""  # empty → global config
    extra_cards: int | None = None


class GameState(BaseModel):
    """The single root of a running game."""

    version: int = 4
    setup_unlocked: bool = True
    month_index: int = 0
    money: int = 100
    characters: list[Character] = Field(default_factory=list)
    relations: list[Relationship] = Field(default_factory=list)
    settings: Settings = Field(default_factory=Settings)
    log: list[Card] = Field(default_factory=list)
    last_run: datetime | None = None

    @field_validator("month_index", mode="before")
    @classmethod
    def _clamp_month_index(cls, v: Any) -> int:
        return int(clamp(_int_or(v, 0), 0, MAX_MONTHS))

    @field_validator("money", mode="before")
    @classmethod
    def _clamp_money(cls, v: Any) -> int:
        return int(clamp(_int_or(v, 0), 0, MONEY_CEILING))

    def get_character(self, char_id: str) -> Character | None:
        for c in self.characters:
            if c.id == char_id:
                return c
        return None

    def get_relation(self, from_id: str, to_id: str) -> Relationship | None:
        for rel in self.relations:
            if rel.from_id == from_id and rel.to_id == to_id:
                return rel
        return None

    def relations_from(self, char_id: str) -> list[Relationship]:
        return [r for r in self.relations if r.from_id == char_id]

    def find_card(self, card_id: str) -> Card | None:
        for card in self.log:
            if card.id == card_id:
                return card
        return None
