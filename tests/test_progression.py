import json

from cardpuzzle.core.rng import RNG
from cardpuzzle.persistence import SAVE_KEY, SaveStore
from cardpuzzle.progression import Feature, GateState, ProgressionStateMachine, compute_stars

TEN_DAYS = 10 * 24 * 60 * 60 * 1000


def test_compute_stars():
    assert compute_stars(10, 50, 0) == 3
    assert compute_stars(10, 51, 0) == 2
    assert compute_stars(10, 100, 2) == 2
    assert compute_stars(10, 101, 0) == 1
    assert compute_stars(10, 10, 3) == 1
    assert compute_stars(10, 999, 9, cheated=True) == 3


def test_level_table(game):
    assert game.levels.total_levels() == 30
    level = game.levels.get_level(1)
    assert (level.piece_count, level.columns, level.rows, level.image_seed) == (12, 3, 4, 2)
    assert game.levels.get_level(30) is None
    assert game.levels.get_level(-1) is None


def test_early_levels_unlock_nothing(game):
    for index in range(4):
        result = game.complete_level(index, time_sec=20)
        assert result.unlocked == []
        assert result.dropped_card_id is None
    assert game.next_onboarding() is None


def test_collection_unlock_and_onboarding(game):
    result = game.complete_level(4, cheated=True)
    assert result.stars == 3
    assert result.unlocked == [Feature.COLLECTION]
    assert result.dropped_card_id is None
    assert game.gate_state(Feature.COLLECTION) is GateState.UNLOCKING

    assert game.next_onboarding() is Feature.COLLECTION
    assert game.doc.cards.new_inbox == ["fresh_0", "fresh_1"]
    game.complete_collection_tutorial()
    assert game.gate_state(Feature.COLLECTION) is GateState.UNLOCKED
    assert game.next_onboarding() is None


def test_drops_follow_availability(game):
    game.complete_level(4)
    game.next_onboarding()
    game.complete_collection_tutorial()
    result = game.complete_level(5)
    assert result.dropped_card_id == "fresh_2"


def test_battle_pass_unlock(game, clock):
    result = game.complete_level(5)
    assert result.unlocked == [Feature.BATTLE_PASS]
    doc = game.doc
    assert doc.battle_pass_unlocked is True
    assert doc.battle_pass_event.end_at == clock.now_ms() + TEN_DAYS
    assert game.gate_state(Feature.BATTLE_PASS) is GateState.UNLOCKING
    assert game.next_onboarding() is Feature.BATTLE_PASS
    assert game.gate_state(Feature.BATTLE_PASS) is GateState.UNLOCKED

    assert game.complete_level(5).unlocked == []


def test_wheel_unlock(game):
    result = game.complete_level(7)
    assert result.unlocked == [Feature.WHEEL]
    assert game.doc.wheel_unlocked is True
    assert game.next_onboarding() is Feature.WHEEL
    assert game.doc.wheel_tutorial_seen is True
    assert game.gate_state(Feature.WHEEL) is GateState.UNLOCKED


def test_onboarding_priority(game):
    # Several flows pending at once are shown collection first.
    game.complete_level(7)
    game.complete_level(5)
    game.complete_level(4)
    assert game.pending_onboarding() == [Feature.COLLECTION, Feature.BATTLE_PASS, Feature.WHEEL]
    assert [game.next_onboarding() for _ in range(4)] == [
        Feature.COLLECTION, Feature.BATTLE_PASS, Feature.WHEEL, None,
    ]


def test_battle_pass_relocks_after_reset(game):
    game.complete_level(5)
    game.doc.music_on = False
    game.reset_progress()
    assert game.doc.battle_pass_unlocked is False
    assert game.doc.music_on is False
    assert game.pending_onboarding() == []
    assert game.complete_level(5).unlocked == [Feature.BATTLE_PASS]


def test_feature_access(game):
    assert game.feature_access(Feature.COLLECTION).advisory == "Unlocks after level 5"
    assert game.feature_access(Feature.BATTLE_PASS).advisory == "Unlocks at level 6"
    assert game.feature_access(Feature.WHEEL).advisory == "Unlocks at level 8"


def test_advance_clamps_at_last_level(game):
    assert game.advance_to_next_level() == 1
    game.doc.current_level = 29
    assert game.advance_to_next_level() == 29


def test_token_session_lifecycle(game, clock):
    assert game.start_level(6) is None
    game.complete_level(5)
    session = game.start_level(6)
    assert session is not None
    assert game.doc.current_level == 6
    clock.advance(3000)
    assert len(session.tick()) == 1
    game.complete_level()
    assert session.cancelled
    assert game.tokens is None


def test_reconcile_relocks_below_threshold(game):
    doc = game.doc
    doc.current_level = 2
    doc.collection_unlocked = True
    doc.collection_tutorial_completed = True
    doc.cards.collected["fresh_0"] = True
    assert game.reconcile_collection_state() is True
    assert doc.collection_unlocked is False
    assert doc.collection_tutorial_completed is False
    assert doc.cards.collected == {}
    assert game.reconcile_collection_state() is False


def test_reconcile_grants_starter_set_past_threshold(game):
    doc = game.doc
    doc.current_level = 9
    doc.cards.new_inbox.append("safari_3")
    assert game.reconcile_collection_state() is True
    assert doc.collection_unlocked is True
    assert doc.collection_tutorial_completed is True
    assert doc.cards.new_inbox == ["fresh_0", "fresh_1"]
    assert doc.album_event is not None


def test_debug_open_all_albums(game):
    game.debug_open_all_albums()
    doc = game.doc
    assert doc.collection_tutorial_completed and doc.battle_pass_unlocked
    assert all(t.collected_count == 8 for t in doc.albums.values())
    assert doc.cards.new_inbox == []
    assert game.collection.get_collected_total() == 16


def test_progress_survives_restart(storage, config, clock, catalog):
    store = SaveStore(storage, config=config, clock=clock, album_cards=catalog.album_cards())
    game = ProgressionStateMachine(store, catalog=catalog, rng=RNG(seed=1))
    game.complete_level(4)
    game.next_onboarding()
    game.complete_collection_tutorial()
    game.collection.collect_card("fresh_0")

    saved = json.loads(storage.get(SAVE_KEY))
    assert saved["collectionTutorialCompleted"] is True
    assert saved["cards"]["collected"] == {"fresh_0": True}

    again = ProgressionStateMachine(
        SaveStore(storage, config=config, clock=clock, album_cards=catalog.album_cards()), catalog=catalog
    )
    assert again.collection.is_available()
    assert again.doc.albums["fresh"].collected_count == 1
    assert again.doc.cards.new_inbox == ["fresh_1"]


def test_replaying_battle_pass_level_reopens_window(game, clock):
    game.complete_level(5)
    game.next_onboarding()
    first_end = game.doc.battle_pass_event.end_at

    clock.advance(11 * 24 * 60 * 60 * 1000)
    assert not game.battle_pass.is_event_active()
    result = game.complete_level(5)
    assert result.unlocked == []
    assert game.pending_onboarding() == []
    assert game.doc.battle_pass_event.end_at == clock.now_ms() + TEN_DAYS > first_end
    assert game.battle_pass.is_event_active()


def test_wheel_level_sets_flag_again(game):
    game.doc.wheel_unlocked = False
    game.doc.wheel_tutorial_seen = True
    game.complete_level(7)
    assert game.doc.wheel_unlocked is True
