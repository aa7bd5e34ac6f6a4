import argparse
import logging
import sys
from pathlib import Path

from .app import create_game
from .errors import CardPuzzleError, UnknownCardError
from .logging_config import configure_logging
from .meta.event_window import ALBUM_EVENT, BATTLE_PASS_EVENT, format_remaining
from .progression import Feature

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="cardpuzzle",
        description="Card Puzzle - progression, albums, battle pass and reward wheel",
    )
    parser.add_argument("--save-dir", type=Path, default=None, help="Directory holding the save file.")
    parser.add_argument("--config", dest="config_path", type=Path, default=None,
                        help="Path to a progression YAML file overriding the defaults.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for wheel spins.")
    parser.add_argument("--debug", action="store_true", help="Enable verbose debug logging.")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("status", help="Show progress, features and album counts.")

    play = sub.add_parser("play", help="Complete the current level and move on.")
    play.add_argument("--cheat", action="store_true", help="Skip the level (rated 3 stars).")
    play.add_argument("--time", dest="time_sec", type=float, default=0.0, help="Seconds taken.")
    play.add_argument("--mistakes", type=int, default=0, help="Wrong drops made.")

    collect = sub.add_parser("collect", help="Collect cards waiting in the inbox.")
    collect.add_argument("card_ids", nargs="*", help="Card ids to collect (default: the whole inbox).")

    spin = sub.add_parser("spin", help="Spin the reward wheel.")
    spin.add_argument("--no-cooldown", action="store_true", help="Privileged spin that ignores the cooldown.")

    sub.add_parser("reset", help="Reset progress, keeping audio settings.")
    sub.add_parser("open-albums", help="Debug: unlock and fill every album.")
    return parser.parse_args(argv)


def _print_status(game) -> None:
    doc = game.doc
    print(f"Level: {doc.current_level + 1}/{game.levels.total_levels()}")
    print(f"Coins: {doc.coins}  Trophies: {doc.rewards.trophies}")
    for feature in Feature:
        access = game.feature_access(feature)
        label = "open" if access.available else access.advisory
        print(f"{feature.value:<12} {game.gate_state(feature).value:<10} {label}")
    if doc.collection_unlocked:
        print(f"Album event: {format_remaining(game.windows.remaining_ms(doc, ALBUM_EVENT))}")
        for album in game.catalog.albums():
            progress = game.collection.get_album_progress(album.id, include_inbox=True)
            print(f"  {album.name:<10} {progress.collected}/{progress.total}")
        print(f"  Inbox: {', '.join(doc.cards.new_inbox) or '-'}")
    if doc.battle_pass_unlocked:
        toward, step = game.battle_pass.progress_toward_next()
        print(f"Battle pass: {doc.bp_stars_total} stars ({toward}/{step} toward next card), "
              f"{format_remaining(game.windows.remaining_ms(doc, BATTLE_PASS_EVENT))}")
    if doc.wheel_unlocked:
        print(f"Wheel: {game.wheel.state.value}, next free spin in {game.wheel.cooldown_text()}")


def _play(game, args) -> None:
    result = game.complete_level(cheated=args.cheat, time_sec=args.time_sec, mistakes=args.mistakes)
    print(f"Level {result.level_index + 1} complete: {'*' * result.stars}")
    if result.dropped_card_id:
        print(f"Card found: {game.catalog.card(result.dropped_card_id).name}")
    feature = game.next_onboarding()
    while feature is not None:
        print(f"Unlocked: {feature.value}")
        if feature is Feature.COLLECTION:
            game.complete_collection_tutorial()
        feature = game.next_onboarding()
    game.advance_to_next_level()


def _collect(game, card_ids) -> None:
    targets = list(card_ids) or list(dict.fromkeys(game.doc.cards.new_inbox))
    for card_id in targets:
        name = game.catalog.card(card_id).name
        if not game.doc.cards.is_pending(card_id):
            print(f"{name} is not in the inbox")
            continue
        result = game.collection.collect_card(card_id)
        print(f"Collected {name}")
        if result and result.album_complete:
            print(f"Album complete! Reward: {result.reward.name if result.reward else result.album_id}")
        if result and result.all_cards_complete:
            print("Every card collected: gold cup!")


def _spin(game, no_cooldown: bool) -> int:
    card_id = game.wheel.spin(free=not no_cooldown)
    if card_id is None:
        access = game.feature_access(Feature.WHEEL)
        print(access.advisory or f"Next free spin in {game.wheel.cooldown_text()}")
        return 1
    print(f"Wheel landed on {game.catalog.card(card_id).name}")
    return 0


def main(argv=None) -> int:
    args = parse_args(argv)
    configure_logging(default_level=logging.DEBUG if args.debug else logging.WARNING)
    try:
        game = create_game(save_dir=args.save_dir, config_path=args.config_path, seed=args.seed)
        command = args.command or "status"
        if command == "play":
            _play(game, args)
        elif command == "collect":
            _collect(game, args.card_ids)
        elif command == "spin":
            return _spin(game, args.no_cooldown)
        elif command == "reset":
            game.reset_progress()
            print("Progress reset")
            return 0
        elif command == "open-albums":
            game.debug_open_all_albums()
        _print_status(game)
    except UnknownCardError as exc:
        print(f"Unknown card: {exc}", file=sys.stderr)
        return 2
    except CardPuzzleError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
