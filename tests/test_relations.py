"""Tests for raising_sim.relations — presets, drift, stage machine, romance gates."""

import random

import pytest

from raising_sim.models import Character, GameState, Relationship
from raising_sim.relations import (
    DATING_CHANCE,
    DriftContext,
    adjust_relation,
    advance_romance,
    apply_preset,
    drop_relations_for,
    ensure_relations,
    evolve_relation,
    monthly_relation_drift,
    relation_summary,
)
from tests.helpers import FixedRandom


def _rel(**fields) -> Relationship:
    return Relationship(from_id="a", to_id="b", **fields)


# ── Roster bookkeeping ───────────────────────────────────────


class TestEnsureRelations:
    def test_creates_both_directions(self) -> None:
        state = GameState(characters=[Character(id="a"), Character(id="b"), Character(id="c")])
        assert ensure_relations(state) == 6
        assert {r.key for r in state.relations} == {
            ("a", "b"), ("b", "a"), ("a", "c"), ("c", "a"), ("b", "c"), ("c", "b"),
        }

    def test_idempotent(self) -> None:
        state = GameState(characters=[Character(id="a"), Character(id="b")])
        ensure_relations(state)
        state.relations[0].affinity = 33
        assert ensure_relations(state) == 0
        assert state.relations[0].affinity == 33

    def test_drops_stale_records(self) -> None:
        state = GameState(
            characters=[Character(id="a"), Character(id="b")],
            relations=[_rel(), Relationship(from_id="a", to_id="gone")],
        )
        ensure_relations(state)
        assert state.get_relation("a", "gone") is None
        assert len(state.relations) == 2

    def test_drop_relations_for(self) -> None:
        state = GameState(characters=[Character(id="a"), Character(id="b")])
        ensure_relations(state)
        drop_relations_for(state, "b")
        assert state.relations == []


# ── Presets ──────────────────────────────────────────────────


class TestPresets:
    def test_rival(self) -> None:
        rel = apply_preset(_rel(), "rival")
        assert (rel.stage, rel.tension, rel.affinity) == ("rivals", 40, -5)

    def test_family(self) -> None:
        rel = apply_preset(_rel(), "family")
        assert (rel.stage, rel.affinity, rel.trust) == ("family", 30, 60)

    def test_one_sided_crush(self) -> None:
        rel = apply_preset(_rel(), "one_sided_crush")
        assert (rel.stage, rel.affinity, rel.romance) == ("crush", 20, 35)

    def test_acquaintance_resets(self) -> None:
        rel = apply_preset(_rel(), "family")
        apply_preset(rel, "acquaintance")
        assert rel.stage == "strangers"
        assert (rel.affinity, rel.trust, rel.tension, rel.romance) == (0, 20, 10, 0)

    def test_preset_only_touches_one_direction(self) -> None:
        state = GameState(characters=[Character(id="a"), Character(id="b")])
        ensure_relations(state)
        apply_preset(state.get_relation("a", "b"), "one_sided_crush")
        assert state.get_relation("b", "a").stage == "strangers"


# ── Drift ────────────────────────────────────────────────────


class TestDrift:
    def test_same_group(self) -> None:
        rel = _rel()
        monthly_relation_drift(rel, DriftContext(same_group=True))
        assert (rel.trust, rel.affinity) == (22, 1)

    def test_growth_gap(self) -> None:
        rel = _rel()
        monthly_relation_drift(rel, DriftContext(growth_gap=True))
        assert rel.tension == 12

    def test_high_stress(self) -> None:
        rel = _rel()
        monthly_relation_drift(rel, DriftContext(any_high_stress=True))
        assert (rel.tension, rel.trust) == (12, 19)

    def test_rivals(self) -> None:
        rel = _rel(stage="rivals")
        monthly_relation_drift(rel, DriftContext(is_rivals=True))
        assert (rel.tension, rel.affinity) == (11, -1)

    def test_drift_clamped(self) -> None:
        rel = _rel(trust=0, tension=100, affinity=-100)
        monthly_relation_drift(
            rel, DriftContext(growth_gap=True, any_high_stress=True, is_rivals=True)
        )
        assert (rel.trust, rel.tension, rel.affinity) == (0, 100, -100)

    def test_adjust_relation_clamps(self) -> None:
        rel = _rel(affinity=95)
        adjust_relation(rel, affinity=20, romance=-5)
        assert (rel.affinity, rel.romance) == (100, 0)


# ── Stage machine ────────────────────────────────────────────


class TestEvolve:
    def test_strangers_to_friends(self) -> None:
        rel = _rel(affinity=15, trust=25)
        change = evolve_relation(rel)
        assert change.changed
        assert (change.previous, change.new) == ("strangers", "friends")

    def test_strangers_stay_below_threshold(self) -> None:
        rel = _rel(affinity=14, trust=25)
        assert not evolve_relation(rel).changed
        assert rel.stage == "strangers"

    def test_sequential_strangers_to_close(self) -> None:
        rel = _rel(affinity=40, trust=50, tension=20)
        change = evolve_relation(rel)
        assert change.new == "close"

    def test_friends_to_close_blocked_by_tension(self) -> None:
        rel = _rel(stage="friends", affinity=40, trust=50, tension=51)
        evolve_relation(rel)
        assert rel.stage == "friends"

    def test_rivals_to_friends(self) -> None:
        rel = _rel(stage="rivals", tension=25, affinity=10)
        evolve_relation(rel)
        assert rel.stage == "friends"

    @pytest.mark.parametrize("stage", ["strangers", "friends", "close", "rivals", "crush", "dating"])
    def test_high_tension_breaks(self, stage) -> None:
        rel = _rel(stage=stage, tension=85, trust=50)
        change = evolve_relation(rel)
        assert change.new == "broken"

    def test_low_trust_breaks(self) -> None:
        rel = _rel(stage="friends", trust=10)
        evolve_relation(rel)
        assert rel.stage == "broken"

    def test_break_overrides_promotion(self) -> None:
        rel = _rel(affinity=50, trust=60, tension=90)
        evolve_relation(rel)
        assert rel.stage == "broken"

    def test_family_is_sticky(self) -> None:
        rel = _rel(stage="family", tension=100, trust=0)
        assert not evolve_relation(rel).changed
        assert rel.stage == "family"

    def test_broken_is_sticky(self) -> None:
        rel = _rel(stage="broken", affinity=80, trust=90, tension=0)
        evolve_relation(rel)
        assert rel.stage == "broken"

    def test_fresh_record_is_stable(self) -> None:
        rel = _rel()
        assert not evolve_relation(rel).changed


# ── Romance ──────────────────────────────────────────────────


class TestRomance:
    def _ready_crush(self) -> Relationship:
        return _rel(stage="crush", romance=60, trust=55, affinity=45, tension=35)

    def test_romance_drift(self) -> None:
        rel = _rel(affinity=40, trust=50, tension=40, romance=10)
        advance_romance(rel, FixedRandom(0.99))
        assert rel.romance == 12

    def test_no_drift_with_tension(self) -> None:
        rel = _rel(affinity=40, trust=50, tension=41, romance=10)
        advance_romance(rel, FixedRandom(0.99))
        assert rel.romance == 10

    def test_crush_to_dating_when_roll_passes(self) -> None:
        rel = self._ready_crush()
        change = advance_romance(rel, FixedRandom(0.0))
        assert (change.previous, change.new) == ("crush", "dating")

    def test_crush_stays_when_roll_fails(self) -> None:
        rel = self._ready_crush()
        assert not advance_romance(rel, FixedRandom(DATING_CHANCE)).changed
        assert rel.stage == "crush"

    def test_dating_not_skipped_to_partners(self) -> None:
        rel = _rel(stage="crush", romance=90, trust=90, affinity=90, tension=0)
        advance_romance(rel, FixedRandom(0.0))
        assert rel.stage == "dating"

    def test_dating_to_partners(self) -> None:
        rel = _rel(stage="dating", romance=80, trust=70)
        advance_romance(rel, FixedRandom(0.0))
        assert rel.stage == "partners"

    def test_family_never_dates(self) -> None:
        rel = _rel(stage="family", romance=90, trust=90, affinity=90, tension=0)
        advance_romance(rel, FixedRandom(0.0))
        assert rel.stage == "family"

    def test_dating_gate_frequency(self) -> None:
        rng = random.Random(1234)
        hits = 0
        trials = 4000
        for _ in range(trials):
            rel = self._ready_crush()
            if advance_romance(rel, rng).changed:
                hits += 1
        assert abs(hits / trials - DATING_CHANCE) < 0.03


def test_relation_summary_uses_names():
    chars = [Character(id="a", name="Hana"), Character(id="b", name="Mina")]
    summary = relation_summary(_rel(stage="friends"), chars)
    assert summary["from"] == "Hana"
    assert summary["to"] == "Mina"
    assert summary["stage"] == "friends"
