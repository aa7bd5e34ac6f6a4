from cardpuzzle.core.rng import RNG
from cardpuzzle.wheel import RewardWheel, WheelState

SIX_HOURS = 6 * 60 * 60 * 1000


def test_locked_wheel_refuses(game):
    assert game.wheel.state is WheelState.LOCKED
    assert game.wheel.start_spin() is None
    assert game.wheel.access().advisory == "Unlocks at level 8"


def test_free_spin_sets_cooldown(game, clock):
    game.doc.wheel_unlocked = True
    assert game.wheel.state is WheelState.READY

    ticket = game.wheel.start_spin()
    assert game.wheel.state is WheelState.SPINNING
    assert ticket.pool == game.collection.get_wheel_segment_pool()
    assert ticket.card_id == ticket.pool[ticket.index]
    assert ticket.resolves_at == clock.now_ms() + 3200

    clock.advance(3200)
    assert game.wheel.resolve(ticket) == ticket.card_id
    assert game.doc.cards.new_inbox == [ticket.card_id]
    assert game.doc.wheel_next_free_at == clock.now_ms() + SIX_HOURS
    assert game.wheel.state is WheelState.RESOLVED

    game.wheel.dismiss()
    assert game.wheel.state is WheelState.IDLE
    assert game.wheel.start_spin() is None
    assert game.wheel.cooldown_text() == "06:00:00"

    clock.advance(SIX_HOURS)
    assert game.wheel.state is WheelState.READY


def test_outcome_fixed_at_start(game, clock):
    game.doc.wheel_unlocked = True
    ticket = game.wheel.start_spin()
    # Pool changes while the wheel turns; the ticket keeps its card.
    game.doc.cards.collected[ticket.pool[0]] = True
    clock.advance(3200)
    assert game.wheel.resolve(ticket) == ticket.card_id


def test_second_spin_refused_while_in_flight(game, clock):
    game.doc.wheel_unlocked = True
    ticket = game.wheel.start_spin(free=False)
    assert game.wheel.start_spin(free=False) is None
    clock.advance(ticket.resolves_at - clock.now_ms())
    game.wheel.resolve(ticket)
    assert game.wheel.resolve(ticket) is None


def test_privileged_spin_ignores_cooldown(game, clock):
    game.doc.wheel_unlocked = True
    game.doc.wheel_next_free_at = clock.now_ms() + 1000
    card_id = game.wheel.spin(free=False)
    assert card_id is not None
    assert game.doc.wheel_next_free_at == clock.now_ms() + 1000
    assert game.doc.cards.new_inbox == [card_id]


def test_seeded_spins_are_reproducible(game):
    game.doc.wheel_unlocked = True
    a = RewardWheel(game.collection, rng=RNG(seed=42))
    b = RewardWheel(game.collection, rng=RNG(seed=42))
    assert a.start_spin(free=False).index == b.start_spin(free=False).index


def test_rotation_lands_on_segment(game):
    game.doc.wheel_unlocked = True
    ticket = game.wheel.start_spin()
    assert ticket.rotation_deg == 1440 - ticket.index * 60


def test_resolved_event(game):
    game.doc.wheel_unlocked = True
    seen = []
    game.bus.on("wheel:resolved", lambda event, payload: seen.append(payload["card_id"]))
    card_id = game.wheel.spin()
    assert seen == [card_id]


def test_tutorial_flag(game, store):
    game.wheel.mark_tutorial_seen()
    assert store.document.wheel_tutorial_seen is True


def test_resolve_waits_for_animation(game, clock):
    game.doc.wheel_unlocked = True
    ticket = game.wheel.start_spin()
    clock.advance(3199)
    assert game.wheel.resolve(ticket) is None
    assert game.wheel.state is WheelState.SPINNING
    assert game.doc.cards.new_inbox == []
    assert game.doc.wheel_next_free_at == 0

    clock.advance(1)
    assert game.wheel.resolve(ticket) == ticket.card_id
    assert game.doc.cards.new_inbox == [ticket.card_id]
