"""Tests for raising_sim.models — validation clamps, defaults, zodiac derivation."""

import pytest
from pydantic import ValidationError

from raising_sim.models import (
    Activity,
    Birthday,
    Card,
    Character,
    GameState,
    Relationship,
    Stats,
    new_id,
)


# ── Characters ───────────────────────────────────────────────


class TestCharacter:
    def test_defaults(self) -> None:
        char = Character()
        assert char.name == "Hero"
        assert char.personality == "INTJ"
        assert char.stats.intellect == 10
        assert set(char.skills) == set(Activity)
        assert char.flags.blessing is None

    def test_name_trimmed_to_20(self) -> None:
        char = Character(name="A" * 30)
        assert len(char.name) == 20

    def test_empty_name_becomes_hero(self) -> None:
        assert Character(name="").name == "Hero"

    def test_personality_normalised(self) -> None:
        assert Character(personality="enfp").personality == "ENFP"
        assert Character(personality="XXXX").personality == "INTJ"

    def test_zodiac_derived_from_birthday(self) -> None:
        char = Character(birthday=Birthday(month=1, day=20))
        assert char.zodiac == "Aquarius"
        char.birthday = Birthday(month=1, day=19)
        assert char.zodiac == "Capricorn"

    def test_stored_zodiac_ignored(self) -> None:
        char = Character.model_validate({"birthday": {"month": 8, "day": 1}, "zodiac": "Pisces"})
        assert char.zodiac == "Leo"

    def test_zodiac_serialised(self) -> None:
        data = Character(birthday=Birthday(month=3, day=25)).model_dump()
        assert data["zodiac"] == "Aries"

    def test_partial_skills_filled(self) -> None:
        char = Character.model_validate({"skills": {"study": {"level": 2, "exp": 1}}})
        assert char.skills[Activity.STUDY].level == 2
        assert char.skills[Activity.WORK].level == 0


class TestBirthday:
    def test_clamped(self) -> None:
        b = Birthday(month=13, day=40)
        assert (b.month, b.day) == (12, 31)

    def test_zero_and_garbage(self) -> None:
        b = Birthday.model_validate({"month": 0, "day": "x"})
        assert (b.month, b.day) == (1, 1)


class TestStats:
    def test_clamped_on_load(self) -> None:
        s = Stats(intellect=150, stress=-5)
        assert s.intellect == 100
        assert s.stress == 0

    def test_tournament_score(self) -> None:
        s = Stats(intellect=20, charm=20, strength=20, art=20, morality=20, stress=30)
        assert s.tournament_score() == 70
        assert s.total() == 130


# ── Relationships ────────────────────────────────────────────


class TestRelationship:
    def test_defaults(self) -> None:
        rel = Relationship(from_id="a", to_id="b")
        assert rel.stage == "strangers"
        assert rel.preset == "acquaintance"
        assert (rel.affinity, rel.trust, rel.tension, rel.romance) == (0, 20, 10, 0)
        assert rel.key == ("a", "b")

    def test_scores_clamped_on_load(self) -> None:
        rel = Relationship(from_id="a", to_id="b", affinity=-300, trust=120, tension=-1, romance=101)
        assert rel.affinity == -100
        assert rel.trust == 100
        assert rel.tension == 0
        assert rel.romance == 100

    def test_unknown_stage_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Relationship(from_id="a", to_id="b", stage="enemies")


# ── Cards ────────────────────────────────────────────────────


class TestCard:
    def _choices(self, n: int) -> list[dict]:
        return [{"tag": t, "label": t} for t in "ABCD"[:n]]

    def test_zero_or_three_choices(self) -> None:
        Card(id="x", type="event", year=1, month=1, title="t", choices=[])
        card = Card(id="x", type="event", year=1, month=1, title="t", choices=self._choices(3))
        assert card.choice_tags() == ["A", "B", "C"]

    def test_two_choices_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Card(id="x", type="event", year=1, month=1, title="t", choices=self._choices(2))

    def test_meta_keeps_extra_keys(self) -> None:
        card = Card.model_validate({
            "id": "x", "type": "highlight", "year": 1, "month": 1, "title": "t",
            "meta": {"source": "remote", "mood": "calm"},
        })
        assert card.meta.model_dump()["mood"] == "calm"


# ── Game state ───────────────────────────────────────────────


class TestGameState:
    def test_defaults(self) -> None:
        state = GameState()
        assert state.month_index == 0
        assert state.money == 100
        assert state.setup_unlocked is True
        assert state.log == []

    def test_month_index_clamped(self) -> None:
        assert GameState(month_index=500).month_index == 120
        assert GameState(month_index=-3).month_index == 0

    def test_money_clamped(self) -> None:
        assert GameState(money=-10).money == 0
        assert GameState(money=5_000_000).money == 999_999

    def test_lookups(self) -> None:
        a, b = Character(id="a"), Character(id="b")
        state = GameState(
            characters=[a, b],
            relations=[Relationship(from_id="a", to_id="b"), Relationship(from_id="b", to_id="a")],
        )
        assert state.get_character("b") is b
        assert state.get_character("zz") is None
        assert state.get_relation("b", "a").from_id == "b"
        assert state.get_relation("a", "a") is None
        assert [r.to_id for r in state.relations_from("a")] == ["b"]


def test_new_id_prefix_and_unique():
    ids = {new_id("act") for _ in range(50)}
    assert len(ids) == 50
    assert all(i.startswith("act_") for i in ids)
