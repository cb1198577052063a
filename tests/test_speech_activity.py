from primoboost.core.speech_activity import SpeechActivityDetector


def make_detector(clock) -> SpeechActivityDetector:
    detector = SpeechActivityDetector(clock=clock)
    detector.start()
    return detector


def speak(detector, clock, frames: int) -> None:
    for _ in range(frames):
        detector.process_level(-20.0)
        clock.advance(0.1)


def test_threshold_is_exclusive(clock):
    detector = make_detector(clock)
    assert detector.process_level(-49.9) is True
    assert detector.process_level(-50.0) is False
    assert detector.process_level(-70.0) is False


def test_speech_frames_accumulate_duration(clock):
    detector = make_detector(clock)
    speak(detector, clock, 25)
    assert detector.has_started_speaking
    assert detector.speech_duration == 2.5


def test_speech_resets_silence_window(clock):
    detector = make_detector(clock)
    clock.advance(6)
    assert detector.silence_countdown == 4
    detector.process_level(-10.0)
    assert detector.silence_countdown == 10


def test_auto_submit_after_enough_speech_and_silence(clock):
    detector = make_detector(clock)
    speak(detector, clock, 30)
    # silence window restarted by the last speech frame 0.1s ago
    clock.advance(9.8)
    assert not detector.should_auto_submit()
    clock.advance(0.2)
    assert detector.should_auto_submit()

    detector.mark_auto_submitted()
    assert not detector.should_auto_submit()


def test_no_auto_submit_without_minimum_speech(clock):
    detector = make_detector(clock)
    speak(detector, clock, 29)
    clock.advance(30)
    assert detector.silence_countdown == 0
    assert not detector.should_auto_submit()


def test_no_auto_submit_before_speaking(clock):
    detector = make_detector(clock)
    clock.advance(60)
    assert not detector.should_auto_submit()


def test_start_resets_state(clock):
    detector = make_detector(clock)
    speak(detector, clock, 40)
    detector.mark_auto_submitted()

    detector.start()
    assert detector.speech_duration == 0
    assert not detector.has_started_speaking
    assert not detector.auto_submit_triggered


def test_stopped_detector_ignores_levels(clock):
    detector = make_detector(clock)
    detector.stop()
    assert detector.process_level(-5.0) is False
    assert detector.speech_duration == 0
    assert detector.silence_duration == 0


def test_resume_does_not_count_paused_time(clock):
    detector = make_detector(clock)
    speak(detector, clock, 30)
    detector.stop()
    clock.advance(120)
    detector.resume()
    assert detector.silence_countdown == 10
    assert not detector.should_auto_submit()
