"""Card builders for every log entry the engine emits.

Each builder returns a Card stamped with the month being played. Text comes
from Handlebars templates (see raising_sim.templates); the structural contract
is what matters to the rest of the engine:

    type           action | event | relationship | birthday | tournament
    meta.kind      what the choice resolver dispatches on
    meta.char_ids  characters referenced by id only
    meta.payload   event-specific data the resolver needs later
    choices        [] or exactly A/B/C
"""

from __future__ import annotations

from typing import Any

from raising_sim.models import (
    Activity,
    Card,
    CardMeta,
    Character,
    Choice,
    DialogueLine,
    Relationship,
    new_id,
)
from raising_sim.rules import SCHEDULES, ScheduleOutcome
from raising_sim.templates import render
from raising_sim.timeline import month_to_year_month

TOURNAMENT_SIZE = 6
TOURNAMENT_FILLERS = ["Aria", "Bram", "Cyril", "Dahlia", "Ezra", "Fern"]

# Personality colours the narration only
_TONES: dict[str, tuple[str, str]] = {
    "INTJ": ("quiet resolve", "orderly thinking"),
    "INFP": ("gentle stubbornness", "faith in an ideal"),
    "ENFP": ("bright momentum", "warm impulse"),
    "ISTJ": ("steadiness", "honest repetition"),
}
_DEFAULT_TONE = ("calm", "the basics")

ZODIAC_BLESSINGS: dict[str, str] = {
    "Aries": "Spark of Aries",
    "Taurus": "Patience of Taurus",
    "Gemini": "Wit of Gemini",
    "Cancer": "Shelter of Cancer",
    "Leo": "Radiance of Leo",
    "Virgo": "Precision of Virgo",
    "Libra": "Balance of Libra",
    "Scorpio": "Resolve of Scorpio",
    "Sagittarius": "Arrow of Sagittarius",
    "Capricorn": "Summit of Capricorn",
    "Aquarius": "Current of Aquarius",
    "Pisces": "Dream of Pisces",
}

_ACTION_PACKS: dict[Activity, dict[str, str]] = {
    Activity.STUDY: {
        "title": "A page that turns quietly",
        "narration": "Year {{year}}, month {{month}}. The desk lamp hums. "
                     "{{{name}}} carries {{tone1}} and builds the day on {{tone2}}.",
        "line": "If I focus now, future me will cry a little less.",
    },
    Activity.WORK: {
        "title": "Hands that remember the work",
        "narration": "Year {{year}}, month {{month}}. The day trades effort for a small reward. "
                     "{{{name}}} swallows a complaint and keeps moving.",
        "line": "Just a bit more. Let's get through this month.",
    },
    Activity.REST: {
        "title": "A month of real rest",
        "narration": "Year {{year}}, month {{month}}. The world is not ending. "
                     "{{{name}}} breathes out and lets the shoulders drop.",
        "line": "It's fine. Resting is progress too.",
    },
    Activity.ART: {
        "title": "When feelings take shape",
        "narration": "Year {{year}}, month {{month}}. One line makes a mood, and the mood "
                     "becomes a story. {{{name}}} sorts out the heart with the fingertips.",
        "line": "If I can't say it, I can at least draw it.",
    },
    Activity.TRAIN: {
        "title": "The body keeps its promise",
        "narration": "Year {{year}}, month {{month}}. Breath, heartbeat, repetition. "
                     "{{{name}}} gets stronger, slowly but surely.",
        "line": "One more. Just one more.",
    },
}

PERSONAL_EVENTS: list[dict[str, str]] = [
    {
        "id": "lost_wallet",
        "title": "A wallet on the pavement",
        "narration": "Year {{year}}, month {{month}}. {{{name}}} spots a fat wallet lying by the road.",
        "line": "Whose is this...?",
    },
    {
        "id": "late_night",
        "title": "Another late night",
        "narration": "Year {{year}}, month {{month}}. The clock says 2 a.m. and {{{name}}} is still awake.",
        "line": "Sleep can wait. Or can it?",
    },
    {
        "id": "street_musician",
        "title": "The street musician",
        "narration": "Year {{year}}, month {{month}}. A melody from the corner stops {{{name}}} mid-step.",
        "line": "That song... I know that song.",
    },
    {
        "id": "rainy_errand",
        "title": "Errand in the rain",
        "narration": "Year {{year}}, month {{month}}. A neighbour asks {{{name}}} to fetch medicine in the downpour.",
        "line": "Fine, but you owe me tea.",
    },
    {
        "id": "old_notebook",
        "title": "An old notebook",
        "narration": "Year {{year}}, month {{month}}. Cleaning up, {{{name}}} finds a notebook full of childhood plans.",
        "line": "I really wanted to be an astronaut, huh.",
    },
    {
        "id": "part_time_offer",
        "title": "A sudden job offer",
        "narration": "Year {{year}}, month {{month}}. A shopkeeper offers {{{name}}} a quick, well-paid weekend shift.",
        "line": "Tempting. Very tempting.",
    },
    {
        "id": "stray_cat",
        "title": "A stray cat",
        "narration": "Year {{year}}, month {{month}}. A thin cat follows {{{name}}} home and sits at the door.",
        "line": "Don't look at me like that.",
    },
    {
        "id": "festival",
        "title": "Lanterns at the festival",
        "narration": "Year {{year}}, month {{month}}. The town festival lights up and {{{name}}} wanders between the stalls.",
        "line": "Maybe just one candied apple.",
    },
]

_PERSONAL_CHOICES = [
    Choice(tag="A", label="Do the right thing (morality +)"),
    Choice(tag="B", label="Let it go and unwind (stress -)"),
    Choice(tag="C", label="Take the paid shortcut (money +, stress +)"),
]

_BLESSING_CHOICES = [
    Choice(tag="A", label="Accept the blessing"),
    Choice(tag="B", label="Simply enjoy the calm (stress -)"),
    Choice(tag="C", label="Sell the lucky charm (money +)"),
]

_BIRTHDAY_CHOICES = [
    Choice(tag="A", label="Accept the celebration (relationships +)"),
    Choice(tag="B", label="Let it pass quietly (steady)"),
    Choice(tag="C", label="Push everyone away (tension +)"),
]

_TOURNAMENT_CHOICES = [
    Choice(tag="A", label="Go all out for the prize pool"),
    Choice(tag="B", label="Play it safe"),
    Choice(tag="C", label="Just watch from the stands"),
]

_RELATION_PACKS: dict[str, dict[str, Any]] = {
    "bonding": {
        "title": "A small gap, the same direction",
        "narration": "Year {{year}}, month {{month}}. In an ordinary moment, {{{a}}} understands {{{b}}} a little better.",
        "lines": [("a", "I didn't know you thought that way."), ("b", "...I never said it, so.")],
        "choices": [
            Choice(tag="A", label="Speak honestly (trust +)"),
            Choice(tag="B", label="Laugh it off (safe)"),
            Choice(tag="C", label="Draw a line (tension +)"),
        ],
    },
    "argument": {
        "title": "Sharp words",
        "narration": "Year {{year}}, month {{month}}. Fatigue and stress raise voices. "
                     "A small remark between {{{a}}} and {{{b}}} grows into a fight.",
        "lines": [("a", "You always... act like that."), ("b", "And you? You're the same.")],
        "choices": [
            Choice(tag="A", label="Apologise first (repair +)"),
            Choice(tag="B", label="Keep some distance (cool down)"),
            Choice(tag="C", label="Hit back (breakdown +)"),
        ],
    },
    "coop": {
        "title": "Faster together",
        "narration": "Year {{year}}, month {{month}}. {{{a}}} and {{{b}}} agree to work side by side. "
                     "If it goes well it becomes a habit; if not, a scar.",
        "lines": [("b", "We'll be more efficient together."), ("a", "...Fine. Let's sync up, just this once.")],
        "choices": [
            Choice(tag="A", label="Plan it out together (success +)"),
            Choice(tag="B", label="Go with the flow (mixed)"),
            Choice(tag="C", label="Compete inside the team (rivalry +)"),
        ],
    },
}

RELATION_FLAVORS = tuple(_RELATION_PACKS)


def _stamp(month_index: int) -> dict[str, int]:
    year, month = month_to_year_month(month_index)
    return {"year": year, "month": month}


def tone_for(personality: str) -> tuple[str, str]:
    return _TONES.get(personality, _DEFAULT_TONE)


def action_card(month_index: int, char: Character, outcome: ScheduleOutcome) -> Card:
    stamp = _stamp(month_index)
    pack = _ACTION_PACKS[outcome.activity]
    tone1, tone2 = tone_for(char.personality)
    ctx = {**stamp, "name": char.name, "tone1": tone1, "tone2": tone2}
    narration = render(pack["narration"], ctx)
    if outcome.money_delta:
        narration += render(" Money {{signed money}}.", {"money": outcome.money_delta})
    if outcome.leveled_up:
        narration += render(
            " {{{name}}}'s {{skill}} skill reached level {{level}}.",
            {"name": char.name, "skill": outcome.activity.value, "level": outcome.level},
        )
    label = SCHEDULES[outcome.activity].label
    return Card(
        id=new_id("act"),
        type="action",
        title=f"{pack['title']} ({char.name} — {label})",
        narration=narration,
        dialogues=[DialogueLine(speaker=char.name, line=pack["line"])],
        meta=CardMeta(kind="action", char_ids=[char.id], payload=outcome.as_payload()),
        **stamp,
    )


def birthday_card(month_index: int, char: Character, celebrants: list[str]) -> Card:
    stamp = _stamp(month_index)
    who = ", ".join(celebrants) if celebrants else "Someone"
    return Card(
        id=new_id("bday"),
        type="birthday",
        title=f"Birthday month ({char.name})",
        narration=render(
            "Year {{year}}, month {{month}}. A small mark on the calendar catches the eye. "
            "It's {{{name}}}'s birthday.",
            {**stamp, "name": char.name},
        ),
        dialogues=[
            DialogueLine(speaker=who, line="Happy birthday. Today, you come first."),
            DialogueLine(speaker=char.name, line="...Thanks. That really helps."),
        ],
        choices=list(_BIRTHDAY_CHOICES),
        meta=CardMeta(kind="birthday", char_ids=[char.id]),
        **stamp,
    )


def blessing_card(month_index: int, char: Character) -> Card:
    stamp = _stamp(month_index)
    blessing = ZODIAC_BLESSINGS.get(char.zodiac, f"Star of {char.zodiac}")
    return Card(
        id=new_id("bless"),
        type="event",
        title=f"{blessing} ({char.name})",
        narration=render(
            "Year {{year}}, month {{month}}. The {{sign}} stars line up over {{{name}}}. "
            "A faint warmth offers the {{blessing}}.",
            {**stamp, "name": char.name, "sign": char.zodiac, "blessing": blessing},
        ),
        dialogues=[DialogueLine(speaker=char.name, line="Is this... luck?")],
        choices=list(_BLESSING_CHOICES),
        meta=CardMeta(
            kind="blessing",
            char_ids=[char.id],
            payload={"blessing": blessing, "zodiac": char.zodiac},
        ),
        **stamp,
    )


def personal_card(month_index: int, char: Character, event: dict[str, str]) -> Card:
    stamp = _stamp(month_index)
    return Card(
        id=new_id("pers"),
        type="event",
        title=f"{event['title']} ({char.name})",
        narration=render(event["narration"], {**stamp, "name": char.name}),
        dialogues=[DialogueLine(speaker=char.name, line=event["line"])],
        choices=list(_PERSONAL_CHOICES),
        meta=CardMeta(kind="personal", char_ids=[char.id], payload={"event": event["id"]}),
        **stamp,
    )


def relation_card(
    month_index: int, a: Character, b: Character, flavor: str, rel: Relationship
) -> Card:
    stamp = _stamp(month_index)
    pack = _RELATION_PACKS[flavor]
    speakers = {"a": a.name, "b": b.name}
    narration = render(pack["narration"], {**stamp, "a": a.name, "b": b.name})
    return Card(
        id=new_id("rel"),
        type="relationship",
        title=f"{pack['title']} ({a.name} & {b.name})",
        narration=f"{narration}\n[Stage: {rel.stage}]",
        dialogues=[DialogueLine(speaker=speakers[who], line=line) for who, line in pack["lines"]],
        choices=list(pack["choices"]),
        meta=CardMeta(
            kind="relationship",
            char_ids=[a.id, b.id],
            from_id=a.id,
            to_id=b.id,
            payload={"flavor": flavor},
        ),
        **stamp,
    )


def stage_change_card(
    month_index: int, a: Character, b: Character, previous: str, new: str
) -> Card:
    stamp = _stamp(month_index)
    return Card(
        id=new_id("stage"),
        type="relationship",
        title=f"Relationship shift ({a.name} → {b.name})",
        narration=render(
            "Year {{year}}, month {{month}}. Something changed. "
            "How {{{a}}} sees {{{b}}} moved from {{previous}} to {{new}}.",
            {**stamp, "a": a.name, "b": b.name, "previous": previous, "new": new},
        ),
        meta=CardMeta(
            kind="stage_change",
            char_ids=[a.id, b.id],
            from_id=a.id,
            to_id=b.id,
            payload={"previous": previous, "new": new},
        ),
        **stamp,
    )


def tournament_roster(characters: list[Character]) -> list[str]:
    """Character names padded with filler entrants up to TOURNAMENT_SIZE."""
    roster = [c.name for c in characters][:TOURNAMENT_SIZE]
    for filler in TOURNAMENT_FILLERS:
        if len(roster) >= TOURNAMENT_SIZE:
            break
        if filler not in roster:
            roster.append(filler)
    return roster


def tournament_card(month_index: int, characters: list[Character], roster: list[str]) -> Card:
    stamp = _stamp(month_index)
    return Card(
        id=new_id("tour"),
        type="tournament",
        title=f"Year-end tournament (year {stamp['year']})",
        narration=render(
            "Year {{year}}, month {{month}}. The annual tournament opens. "
            "Entrants: {{{join roster \", \"}}}.",
            {**stamp, "roster": roster},
        ),
        dialogues=[DialogueLine(speaker="Announcer", line="Six entrants, one trophy. Begin!")],
        choices=list(_TOURNAMENT_CHOICES),
        meta=CardMeta(
            kind="tournament",
            char_ids=[c.id for c in characters],
            payload={"roster": roster},
        ),
        **stamp,
    )


def tournament_result_card(
    month_index: int,
    champion: Character,
    *,
    won: bool,
    score: int,
    win_chance: float,
    reward: int,
) -> Card:
    stamp = _stamp(month_index)
    if won:
        title = f"Tournament victory ({champion.name})"
        text = "Year {{year}}, month {{month}}. {{{name}}} lifts the trophy. Prize: {{reward}} gold."
        line = "We did it!"
    else:
        title = f"Tournament defeat ({champion.name})"
        text = "Year {{year}}, month {{month}}. {{{name}}} falls short this year. There is always next December."
        line = "Next year. Definitely next year."
    return Card(
        id=new_id("tres"),
        type="tournament",
        title=title,
        narration=render(text, {**stamp, "name": champion.name, "reward": reward}),
        dialogues=[DialogueLine(speaker=champion.name, line=line)],
        meta=CardMeta(
            kind="tournament_result",
            char_ids=[champion.id],
            payload={
                "won": won,
                "score": score,
                "win_chance": round(win_chance, 4),
                "reward": reward if won else 0,
            },
        ),
        **stamp,
    )
