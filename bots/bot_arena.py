"""Simulated competition runner."""

from __future__ import annotations

import argparse
import random
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Union

from competition.game import CompetitionEngine, SkipAccepted
from competition.scoring import Category
from competition.settings import CompetitionSettings, GameMode, TieBreakPolicy
from competition.songs import Song, SongFound

from .base import GuesserBot, PerfectGuesser
from .random_bot import RandomGuesser

BOT_REGISTRY: Dict[str, type[GuesserBot]] = {
    "random": RandomGuesser,
    "perfect": PerfectGuesser,
}


class SimulatedClock:
    """Monotonic clock that moves forward a fixed step per turn."""

    def __init__(self, seconds_per_turn: float = 60.0) -> None:
        self.now = 0.0
        self.seconds_per_turn = seconds_per_turn

    def __call__(self) -> float:
        return self.now

    def tick(self) -> None:
        self.now += self.seconds_per_turn


def build_song_list(count: int, *, with_years: bool = True) -> list[Song]:
    return [
        Song(
            external_id=f"https://hitstergame.com/en/{index:05d}",
            title=f"Song {index}",
            artist=f"Artist {index}",
            year=str(1960 + index % 60) if with_years else None,
        )
        for index in range(1, count + 1)
    ]


def play_turn(engine: CompetitionEngine, bot: GuesserBot, rng: random.Random) -> None:
    song = rng.choice(engine.pool.available())
    result = engine.submit_scan(song.external_id)
    if not isinstance(result, SongFound):
        raise RuntimeError(f"Available song {song.external_id!r} did not resolve.")
    if bot.wants_skip(engine, result.song) and isinstance(engine.skip(), SkipAccepted):
        return
    if bot.wants_reveal(engine, result.song):
        engine.reveal()
    guesses = bot.guess(engine, result.song)
    for category in Category:
        engine.set_guess(category, guesses.get(category))
    engine.complete_turn()


def run_competition(
    settings: Union[CompetitionSettings, Mapping[str, Any]],
    bots: Sequence[GuesserBot],
    *,
    songs: Optional[Sequence[Song]] = None,
    seed: Optional[int] = None,
    seconds_per_turn: float = 60.0,
    max_turns: int = 10_000,
) -> dict:
    rng = random.Random(seed)
    clock = SimulatedClock(seconds_per_turn)
    engine = CompetitionEngine(settings, songs or build_song_list(100), clock=clock)
    if len(bots) != len(engine.roster):
        raise ValueError("Provide exactly one bot per player.")
    for bot in bots:
        bot.on_game_start(engine)

    turns = 0
    while not engine.is_over:
        if turns >= max_turns:
            raise RuntimeError("Competition did not finish within the turn limit.")
        clock.tick()
        play_turn(engine, bots[engine.current_player.id], rng)
        turns += 1
        if not engine.is_over:
            engine.poll()

    assert engine.result is not None
    stats = engine.stats()
    return {
        "winners": [player.name for player in engine.winners],
        "reason": engine.result.reason.value,
        "scores": {player.name: player.score for player in engine.roster},
        "turns": turns,
        "rounds": stats.total_rounds,
        "songs_played": stats.total_songs_played,
        "sudden_death": stats.was_sudden_death,
    }


def main(argv: Iterable[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Simulate a HitReveal competition.")
    parser.add_argument("--bots", nargs="+", default=["random", "random"], choices=BOT_REGISTRY.keys())
    parser.add_argument("--mode", default=GameMode.POINTS.value, choices=[mode.value for mode in GameMode])
    parser.add_argument("--tie-break", default=TieBreakPolicy.SUDDEN_DEATH.value, choices=[p.value for p in TieBreakPolicy])
    parser.add_argument("--target-score", type=int, default=15)
    parser.add_argument("--rounds", type=int, default=10)
    parser.add_argument("--minutes", type=int, default=30)
    parser.add_argument("--songs", type=int, default=100, help="Size of the generated song list.")
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args(argv)

    bots = [BOT_REGISTRY[name]() for name in args.bots]
    settings = CompetitionSettings(
        number_of_players=len(bots),
        game_mode=GameMode(args.mode),
        target_score=args.target_score,
        maximum_rounds=args.rounds,
        game_duration_minutes=args.minutes,
        tie_break_policy=TieBreakPolicy(args.tie_break),
        player_names=tuple(f"{bot.name} {index + 1}" for index, bot in enumerate(bots)),
    )
    results = run_competition(settings, bots, songs=build_song_list(args.songs), seed=args.seed)

    print(f"Winner(s): {', '.join(results['winners'])} ({results['reason']})")
    print(f"Scores: {results['scores']}")
    print(f"Rounds: {results['rounds']}, songs played: {results['songs_played']}, sudden death: {results['sudden_death']}")


if __name__ == "__main__":
    main()
