"""Streamlit front end for a HitReveal competition."""

from __future__ import annotations

import json

import streamlit as st

from competition.service import CompetitionService
from competition.settings import GameMode, InvalidSettings, TieBreakPolicy
from competition.songs import SongPoolError, song_label


def get_service() -> CompetitionService | None:
    return st.session_state.get("competition_service")


def rerun() -> None:
    st.rerun()


def render_setup() -> None:
    st.subheader("Game settings")
    players = st.number_input("Number of players", min_value=1, max_value=10, value=2)
    names = [
        st.text_input(f"Player {index + 1}", value=f"Player {index + 1}", key=f"name-{index}")
        for index in range(int(players))
    ]
    mode = st.selectbox("Game mode", [mode.value for mode in GameMode])
    cols = st.columns(3)
    target = cols[0].selectbox("Target score", [10, 15, 20, 25, 30, 40, 50], index=1)
    duration = cols[1].selectbox("Duration (minutes)", [15, 20, 30, 45, 60], index=2)
    rounds = cols[2].selectbox("Maximum rounds", [5, 10, 15, 20, 25, 30], index=1)
    tie_break = st.selectbox("Draw type", [policy.value for policy in TieBreakPolicy], index=2)

    points = st.columns(4)
    artist = points[0].selectbox("Artist", range(6), index=1)
    title = points[1].selectbox("Title", range(6), index=2)
    year = points[2].selectbox("Year", range(6), index=1)
    bonus = points[3].selectbox("Bonus", range(6), index=2)
    skips = st.columns(2)
    skips_per_player = skips[0].selectbox("Skips per player", range(6), index=3)
    skip_cost = skips[1].selectbox("Skip cost", range(6), index=0)

    uploaded = st.file_uploader("Song list (JSON array of songs)", type=["json"])

    if st.button("Start competition"):
        if uploaded is None:
            st.warning("Upload a song list first.")
            return
        settings = {
            "number_of_players": int(players),
            "game_mode": mode,
            "target_score": target,
            "game_duration_minutes": duration,
            "maximum_rounds": rounds,
            "artist_points": artist,
            "title_points": title,
            "year_points": year,
            "bonus_points": bonus,
            "skips_per_player": skips_per_player,
            "skip_cost": skip_cost,
            "tie_break_policy": tie_break,
            "player_names": names,
        }
        try:
            songs = json.loads(uploaded.getvalue())
            st.session_state["competition_service"] = CompetitionService.start(settings, songs)
            rerun()
        except (InvalidSettings, SongPoolError, ValueError) as exc:
            st.error(str(exc))


def render_dashboard(service: CompetitionService, view) -> None:
    cols = st.columns(3)
    cols[0].metric("Round", view.round, f"{view.stats.total_songs_played} songs played")
    cols[1].metric("Minutes played", view.stats.elapsed_minutes)
    cols[2].metric("Songs left", f"{view.songs_remaining} / {view.songs_total}")
    if view.no_more_turns:
        st.warning(
            "There are not enough songs left for all players to have another turn. "
            "The winner will be decided on the last completed full round."
        )
    if view.stats.was_sudden_death:
        st.info("Sudden death!")

    st.subheader("Leaderboard")
    for rank, player in enumerate(view.leaderboard, start=1):
        marker = " ←" if player.id == view.current_player.id else ""
        st.write(
            f"#{rank} {player.name}: {player.score} "
            f"(A {player.artist_points} / T {player.title_points} / Y {player.year_points} / B {player.bonus_points}){marker}"
        )


def render_turn(service: CompetitionService, view) -> None:
    player = view.current_player
    st.subheader(f"{player.name}, your turn")
    st.caption(f"{player.skips_used} skips used, {player.skips_left} left. Up to {view.max_turn_points} points this turn.")

    turn = view.turn
    if turn is None or turn.external_id is None:
        scanned = st.text_input("Scanned code")
        cols = st.columns(2)
        if cols[0].button("Submit scan") and scanned:
            service.scan(scanned)
            rerun()
        if cols[1].button("Skip", disabled=not view.can_skip):
            service.skip()
            rerun()
        if view.last_scan is not None and not view.last_scan.matched:
            st.error(f"No match for {view.last_scan.raw!r}.")
        return

    if turn.answer is None:
        if st.button("Reveal"):
            service.reveal()
            rerun()
    else:
        st.write(f"{turn.answer['artist']} - {turn.answer['title']} ({turn.answer['year'] or 'no year'})")

    guess_cols = st.columns(3)
    for column, category in zip(guess_cols, ("artist", "title", "year")):
        label = f"{category.title()} {'✓' if turn.guessed[category] else '✗'}"
        if column.button(label):
            service.toggle_guess(category)
            rerun()

    cols = st.columns(3)
    if cols[0].button("Turn complete"):
        service.complete_turn()
        rerun()
    if cols[1].button("Skip", disabled=not view.can_skip):
        service.skip()
        rerun()
    if cols[2].button("Scan another"):
        service.release_song()
        rerun()


def render_winners(view) -> None:
    names = ", ".join(player.name for player in view.winners)
    st.balloons()
    st.header(f"{'Winners' if len(view.winners) > 1 else 'Winner'}: {names}")
    if view.finish_reason == "pool-exhausted":
        st.caption("The song list ran out. Scores are those of the last completed full round.")
    for rank, entry in enumerate(view.final_standings or [], start=1):
        st.write(f"#{rank} {entry['name']}: {entry['score']}")
    st.write(f"Total rounds: {view.stats.total_rounds}")
    st.write(f"Songs played: {view.stats.total_songs_played}")
    st.write(f"Game duration: {view.stats.elapsed_minutes} minutes")
    if view.stats.was_sudden_death:
        st.write("Decided in sudden death.")


def main() -> None:
    st.set_page_config(page_title="HitReveal Competition", layout="wide")
    st.title("HitReveal Competition")

    service = get_service()
    if service is None:
        render_setup()
        return

    view = service.poll()
    if st.sidebar.button("Quit game"):
        service.quit()
        del st.session_state["competition_service"]
        rerun()
    if st.sidebar.button("View song list"):
        view = service.song_list_view()
        for song in service.engine.pool.available():
            st.sidebar.write(song_label(song))

    if view.game_over:
        render_winners(view)
        if st.button("Play again"):
            del st.session_state["competition_service"]
            rerun()
        return

    render_dashboard(service, view)
    render_turn(service, view)


if __name__ == "__main__":
    main()
