import pytest

from musicrpc.errors import PresenceUpdateError
from musicrpc.models import Button
from musicrpc.reconciler import Assets, PresenceReconciler, build_activity, songlink

from .conftest import make_track, paused, playing

APP_ID = "861702238472241162"


@pytest.fixture()
def reconciler(sink, clock) -> PresenceReconciler:
    return PresenceReconciler(sink, APP_ID, clock=clock)


def test_first_play_connects_then_publishes(reconciler, sink) -> None:
    assert reconciler.reconcile(playing(make_track(1), 10)) is True
    assert sink.connects == [APP_ID]
    assert len(sink.published) == 1
    assert reconciler.state.connected
    assert reconciler.state.last_track_id == 1
    assert reconciler.state.last_position == 10


def test_not_playing_while_disconnected_is_noop(reconciler, sink) -> None:
    assert reconciler.reconcile(paused()) is False
    assert sink.connects == []
    assert sink.disconnects == 0


def test_ongoing_playback_does_not_republish(reconciler, sink) -> None:
    track = make_track(1)
    reconciler.reconcile(playing(track, 10))
    reconciler.reconcile(playing(track, 10))
    reconciler.reconcile(playing(track, 15))
    assert len(sink.published) == 1
    assert sink.connects == [APP_ID]


def test_seek_back_republishes(reconciler, sink) -> None:
    track = make_track(1)
    reconciler.reconcile(playing(track, 100))
    assert reconciler.reconcile(playing(track, 5)) is True
    assert len(sink.published) == 2
    assert reconciler.state.last_position == 5


def test_track_change_republishes(reconciler, sink) -> None:
    reconciler.reconcile(playing(make_track(1), 100))
    reconciler.reconcile(playing(make_track(2, title="Love of My Life"), 150))
    assert len(sink.published) == 2
    assert reconciler.state.last_track_id == 2
    assert sink.connects == [APP_ID]


def test_stop_disconnects_once_and_resets(reconciler, sink) -> None:
    reconciler.reconcile(playing(make_track(7), 30))
    reconciler.reconcile(paused(30))
    reconciler.reconcile(paused(30))
    reconciler.stop()
    assert sink.disconnects == 1
    assert not reconciler.state.connected
    assert reconciler.state.last_track_id == 0
    assert reconciler.state.last_position == 0


def test_replay_after_stop_reconnects(reconciler, sink) -> None:
    track = make_track(7)
    reconciler.reconcile(playing(track, 30))
    reconciler.stop()
    reconciler.reconcile(playing(track, 40))
    assert sink.connects == [APP_ID, APP_ID]
    assert len(sink.published) == 2


def test_publish_failure_keeps_connection(reconciler, sink) -> None:
    track = make_track(1)
    reconciler.reconcile(playing(track, 10))
    sink.fail_publish = True
    with pytest.raises(PresenceUpdateError):
        reconciler.reconcile(playing(make_track(2), 0))
    assert reconciler.state.connected
    assert reconciler.state.last_track_id == 1

    sink.fail_publish = False
    reconciler.reconcile(playing(make_track(2), 5))
    assert reconciler.state.last_track_id == 2
    assert len(sink.published) == 2


def test_timestamp_window(reconciler, sink, clock) -> None:
    reconciler.reconcile(playing(make_track(1, duration=180), 30))
    activity = sink.published[0]
    assert activity.start == int(clock.now - 30)
    assert activity.end == int(clock.now + 150)


def test_activity_with_full_metadata() -> None:
    track = make_track(
        1,
        artwork_url="https://art/512x512.jpg",
        artist_artwork_url="https://artist/512x512.jpg",
        share_url="https://music.apple.com/song",
        share_id="1440806041",
    )
    activity = build_activity(track, 0, 2000)
    assert activity.details == "Bohemian Rhapsody · Queen"
    assert activity.state == "A Night at the Opera"
    assert activity.large_image == "https://art/512x512.jpg"
    assert activity.large_text == "Bohemian Rhapsody"
    assert activity.small_image == "https://artist/512x512.jpg"
    assert activity.small_text == "Queen"
    assert activity.buttons == (
        Button("Listen on Apple Music", "https://music.apple.com/song"),
        Button("View on SongLink", "https://song.link/i/1440806041"),
    )


def test_activity_fallbacks() -> None:
    activity = build_activity(make_track(1), 0, 2000)
    assert activity.large_image == "applemusic"
    assert activity.small_image == "play"
    assert activity.buttons == ()

    custom = build_activity(make_track(1), 0, 2000, Assets("logo", "note"))
    assert (custom.large_image, custom.small_image) == ("logo", "note")


def test_songlink_only_with_share_id() -> None:
    assert songlink(make_track(1)) == ""
    assert songlink(make_track(1, share_id="99")) == "https://song.link/i/99"
    only_url = build_activity(make_track(1, share_url="https://music.apple.com/s"), 0, 0)
    assert [b.label for b in only_url.buttons] == ["Listen on Apple Music"]
