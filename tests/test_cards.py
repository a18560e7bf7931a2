"""Tests for raising_sim.cards — card structure and stamping."""

from raising_sim import cards
from raising_sim.models import Activity, Birthday, Character, Relationship
from raising_sim.rules import ScheduleOutcome


def _char(cid: str = "c1", name: str = "Hana", **fields) -> Character:
    return Character(id=cid, name=name, **fields)


# ── Action cards ─────────────────────────────────────────────


class TestActionCard:
    def test_stamped_with_played_month(self) -> None:
        outcome = ScheduleOutcome(activity=Activity.STUDY, stat_deltas={"intellect": 3})
        card = cards.action_card(13, _char(), outcome)
        assert (card.year, card.month) == (2, 2)
        assert card.type == "action"
        assert card.choices == []

    def test_meta(self) -> None:
        outcome = ScheduleOutcome(activity=Activity.WORK, money_delta=50)
        card = cards.action_card(0, _char(), outcome)
        assert card.meta.kind == "action"
        assert card.meta.char_ids == ["c1"]
        assert card.meta.payload["activity"] == "work"
        assert card.meta.payload["money_delta"] == 50
        assert "Money +50." in card.narration

    def test_level_up_mentioned(self) -> None:
        outcome = ScheduleOutcome(activity=Activity.ART, leveled_up=True, level=1)
        card = cards.action_card(0, _char(), outcome)
        assert "level 1" in card.narration

    def test_name_in_narration(self) -> None:
        outcome = ScheduleOutcome(activity=Activity.REST)
        card = cards.action_card(0, _char(name="Ana & Bo"), outcome)
        assert "Ana & Bo" in card.narration


# ── Event cards ──────────────────────────────────────────────


class TestEventCards:
    def test_birthday(self) -> None:
        card = cards.birthday_card(5, _char(), ["Mina"])
        assert card.type == "birthday"
        assert card.choice_tags() == ["A", "B", "C"]
        assert card.dialogues[0].speaker == "Mina"
        assert card.meta.kind == "birthday"

    def test_birthday_alone(self) -> None:
        card = cards.birthday_card(5, _char(), [])
        assert card.dialogues[0].speaker == "Someone"

    def test_blessing_follows_zodiac(self) -> None:
        char = _char(birthday=Birthday(month=8, day=1))
        card = cards.blessing_card(0, char)
        assert card.type == "event"
        assert card.meta.kind == "blessing"
        assert card.meta.payload == {"blessing": "Radiance of Leo", "zodiac": "Leo"}
        assert len(card.choices) == 3

    def test_personal(self) -> None:
        event = cards.PERSONAL_EVENTS[0]
        card = cards.personal_card(0, _char(), event)
        assert card.meta.kind == "personal"
        assert card.meta.payload["event"] == event["id"]
        assert len(card.choices) == 3

    def test_every_personal_event_renders(self) -> None:
        for event in cards.PERSONAL_EVENTS:
            card = cards.personal_card(0, _char(), event)
            assert "Hana" in card.narration


# ── Relationship cards ───────────────────────────────────────


class TestRelationCards:
    def test_flavor_card(self) -> None:
        a, b = _char("a", "Hana"), _char("b", "Mina")
        rel = Relationship(from_id="a", to_id="b", stage="friends")
        for flavor in cards.RELATION_FLAVORS:
            card = cards.relation_card(0, a, b, flavor, rel)
            assert card.type == "relationship"
            assert card.meta.kind == "relationship"
            assert (card.meta.from_id, card.meta.to_id) == ("a", "b")
            assert card.meta.payload["flavor"] == flavor
            assert len(card.choices) == 3
            assert "[Stage: friends]" in card.narration

    def test_stage_change_has_no_choices(self) -> None:
        a, b = _char("a", "Hana"), _char("b", "Mina")
        card = cards.stage_change_card(3, a, b, "strangers", "friends")
        assert card.choices == []
        assert card.meta.kind == "stage_change"
        assert card.meta.payload == {"previous": "strangers", "new": "friends"}
        assert "strangers" in card.narration and "friends" in card.narration


# ── Tournament ───────────────────────────────────────────────


class TestTournamentCards:
    def test_roster_padded_to_six(self) -> None:
        roster = cards.tournament_roster([_char("a", "Hana"), _char("b", "Mina")])
        assert len(roster) == cards.TOURNAMENT_SIZE
        assert roster[:2] == ["Hana", "Mina"]
        assert len(set(roster)) == cards.TOURNAMENT_SIZE

    def test_roster_skips_filler_name_collisions(self) -> None:
        roster = cards.tournament_roster([_char("a", "Aria")])
        assert roster.count("Aria") == 1
        assert len(roster) == cards.TOURNAMENT_SIZE

    def test_roster_card(self) -> None:
        chars = [_char("a", "Hana")]
        roster = cards.tournament_roster(chars)
        card = cards.tournament_card(11, chars, roster)
        assert (card.year, card.month) == (1, 12)
        assert card.meta.kind == "tournament"
        assert card.meta.payload["roster"] == roster
        assert card.choice_tags() == ["A", "B", "C"]
        assert "Hana, Aria" in card.narration

    def test_result_card(self) -> None:
        card = cards.tournament_result_card(
            11, _char(), won=True, score=250, win_chance=0.4666666, reward=120
        )
        assert card.meta.kind == "tournament_result"
        assert card.meta.payload["reward"] == 120
        assert card.meta.payload["win_chance"] == 0.4667
        assert card.choices == []

    def test_lost_result_has_no_reward(self) -> None:
        card = cards.tournament_result_card(
            11, _char(), won=False, score=100, win_chance=0.15, reward=120
        )
        assert card.meta.payload["won"] is False
        assert card.meta.payload["reward"] == 0


# ── Stamping ─────────────────────────────────────────────────


def test_every_builder_stamps_year_and_month():
    a, b = _char("a", "Hana"), _char("b", "Mina")
    rel = Relationship(from_id="a", to_id="b")
    built = [
        cards.action_card(13, a, ScheduleOutcome(activity=Activity.REST)),
        cards.birthday_card(13, a, ["Mina"]),
        cards.blessing_card(13, a),
        cards.personal_card(13, a, cards.PERSONAL_EVENTS[1]),
        cards.relation_card(13, a, b, "coop", rel),
        cards.stage_change_card(13, a, b, "strangers", "friends"),
        cards.tournament_card(13, [a, b], cards.tournament_roster([a, b])),
        cards.tournament_result_card(13, a, won=False, score=40, win_chance=0.15, reward=120),
    ]
    assert [(c.year, c.month) for c in built] == [(2, 2)] * len(built)
    assert len({c.id for c in built}) == len(built)
