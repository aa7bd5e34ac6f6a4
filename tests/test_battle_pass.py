from cardpuzzle.battle_pass import TokenSession
from cardpuzzle.meta.event_window import BATTLE_PASS_EVENT

TEN_DAYS = 10 * 24 * 60 * 60 * 1000


def unlock_pass(game):
    game.doc.battle_pass_unlocked = True
    game.windows.open(game.doc, BATTLE_PASS_EVENT)


def test_locked_pass_rejects_tokens(game):
    assert game.battle_pass.acknowledge_token() is None
    assert game.doc.bp_stars_total == 0


def test_tenth_star_awards_card_while_event_active(game):
    unlock_pass(game)
    game.doc.bp_stars_total = 9
    result = game.battle_pass.acknowledge_token()
    assert game.doc.bp_stars_total == 10
    assert result.tier_reached
    assert result.award.card_id == "fresh_0"
    assert game.doc.cards.new_inbox == ["fresh_0"]


def test_tenth_star_pays_coins_after_event(game, clock):
    unlock_pass(game)
    game.doc.bp_stars_total = 9
    clock.advance(TEN_DAYS)
    coins = game.doc.coins
    result = game.battle_pass.acknowledge_token()
    assert game.doc.bp_stars_total == 10
    assert result.award is None
    assert game.doc.coins == coins + 10
    assert game.doc.cards.new_inbox == []


def test_stars_keep_counting_after_event(game, clock):
    unlock_pass(game)
    clock.advance(TEN_DAYS + 1)
    for _ in range(3):
        game.battle_pass.acknowledge_token()
    assert game.doc.bp_stars_total == 3


def test_non_tier_star(game):
    unlock_pass(game)
    result = game.battle_pass.acknowledge_token()
    assert result.stars_total == 1
    assert not result.tier_reached


def test_tiers_derived_from_stars(game):
    game.doc.bp_stars_total = 23
    tiers = game.battle_pass.tiers()
    assert [t.threshold for t in tiers] == [10, 20, 30, 40, 50]
    assert [t.status for t in tiers] == ["claimed", "claimed", "pending", "pending", "pending"]
    assert game.battle_pass.progress_toward_next() == (3, 10)


def test_access_advisories(game, clock):
    assert game.battle_pass.access().advisory == "Unlocks at level 6"
    unlock_pass(game)
    assert game.battle_pass.is_accessible()
    clock.advance(TEN_DAYS)
    assert game.battle_pass.access().advisory == "Event ended"


def test_tokens_spawn_on_interval_and_expire(game, clock):
    unlock_pass(game)
    session = TokenSession(game.battle_pass)
    assert session.tick() == []

    clock.advance(3000)
    first = session.tick()
    assert len(first) == 1

    clock.advance(3000)
    assert len(session.tick()) == 1
    assert len(session.live_tokens()) == 2

    clock.advance(2000)
    session.tick()
    assert first[0] not in session.live_tokens()


def test_acknowledge_live_token(game, clock):
    unlock_pass(game)
    session = TokenSession(game.battle_pass)
    clock.advance(3000)
    token = session.tick()[0]
    result = session.acknowledge(token.id)
    assert result.stars_total == 1
    assert session.acknowledge(token.id) is None
    assert game.doc.bp_stars_total == 1


def test_expired_token_grants_nothing(game, clock):
    unlock_pass(game)
    session = TokenSession(game.battle_pass)
    clock.advance(3000)
    token = session.tick()[0]
    clock.advance(5000)
    assert session.acknowledge(token.id) is None
    assert game.doc.bp_stars_total == 0


def test_cancel_discards_tokens(game, clock):
    unlock_pass(game)
    session = TokenSession(game.battle_pass)
    clock.advance(6000)
    tokens = session.tick()
    assert session.cancel() == 2
    assert session.acknowledge(tokens[0].id) is None
    clock.advance(9000)
    assert session.tick() == []
    assert game.doc.bp_stars_total == 0


def test_no_tokens_after_event_end(game, clock):
    unlock_pass(game)
    session = TokenSession(game.battle_pass)
    clock.advance(TEN_DAYS + 3000)
    assert session.tick() == []


def test_tier_event_emitted(game):
    unlock_pass(game)
    game.doc.bp_stars_total = 19
    seen = []
    game.bus.on("battle_pass:tier", lambda event, payload: seen.append(payload))
    game.battle_pass.acknowledge_token()
    assert seen == [{"stars_total": 20, "card_id": "fresh_0", "coins": 0}]
