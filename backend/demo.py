"""Create a demo game for development/testing."""

from backend.deps import get_storage
from raising_sim import game

DEMO_SLUG = "demo"

DEMO_CHARACTERS = [
    {"name": "Mina", "birth_month": 3, "birth_day": 14, "personality": "ENFP"},
    {"name": "Joon", "birth_month": 12, "birth_day": 2, "personality": "ISTJ"},
]


def create_demo_data() -> str:
    """Replace the demo game with a fresh three-character setup. Returns its slug."""
    storage = get_storage()
    storage.delete_game(DEMO_SLUG)

    state = game.new_game_state()
    hero = state.characters[0]
    game.update_character(state, hero.id, {"name": "Hana", "birth_month": 7, "birth_day": 30})

    mina = game.add_character(state, **DEMO_CHARACTERS[0])
    joon = game.add_character(state, **DEMO_CHARACTERS[1])

    # Hana and Mina are sisters; Joon quietly pines for Hana; Mina and Joon compete
    game.set_relation_preset(state, hero.id, mina.id, "family")
    game.set_relation_preset(state, mina.id, hero.id, "family")
    game.set_relation_preset(state, joon.id, hero.id, "one_sided_crush")
    game.set_relation_preset(state, mina.id, joon.id, "rival")
    game.set_relation_preset(state, joon.id, mina.id, "rival")

    storage.save_game(DEMO_SLUG, state)
    return DEMO_SLUG
