from sketchtunes.services.playback_signal import NowPlaying, SharedPlaybackSignal


def test_signal_starts_empty():
    signal = SharedPlaybackSignal()
    assert signal.snapshot == NowPlaying(None, False)


def test_publish_notifies_in_subscription_order():
    signal = SharedPlaybackSignal()
    seen = []
    signal.subscribe(lambda state: seen.append(("a", state)))
    signal.subscribe(lambda state: seen.append(("b", state)))

    signal.publish("track1", True)

    assert seen == [("a", NowPlaying("track1", True)), ("b", NowPlaying("track1", True))]
    assert signal.active_track_id == "track1"
    assert signal.is_playing is True


def test_clear_resets_signal():
    signal = SharedPlaybackSignal()
    signal.publish("track1", True)
    signal.clear()
    assert signal.snapshot == NowPlaying()


def test_no_track_never_counts_as_playing():
    signal = SharedPlaybackSignal()
    signal.publish(None, True)
    assert signal.is_playing is False


def test_unsubscribe_is_idempotent():
    signal = SharedPlaybackSignal()
    seen = []
    unsubscribe = signal.subscribe(seen.append)

    unsubscribe()
    unsubscribe()
    signal.publish("track1", True)

    assert seen == []
    assert signal.listener_count == 0


def test_failing_listener_does_not_block_others():
    signal = SharedPlaybackSignal()
    seen = []

    def broken(state):
        raise RuntimeError("boom")

    signal.subscribe(broken)
    signal.subscribe(seen.append)
    signal.publish("track1", False)

    assert seen == [NowPlaying("track1", False)]
