"""
Tests for the listening pipeline and the start/stop controller.

All capture goes through synthetic sources, so no audio hardware is needed.
"""

import threading

import numpy as np
import pytest

from guitar_tuner.capture.synthetic import ArrayFrameSource, ToneSource, sine_frame
from guitar_tuner.config import TunerConfig
from guitar_tuner.errors import ConfigError, DeviceInitFailed, ReadFailure
from guitar_tuner.tuner import ObservableValue, TunerController, TunerDisplay, TunerState
from guitar_tuner.tuner.controller import INIT_FAILED_TEXT, PERMISSION_TEXT, READ_FAILED_TEXT
from guitar_tuner.tuner.display import IDLE_TEXT
from guitar_tuner.tuner.pipeline import iter_frames, run_pipeline

from conftest import FRAME_SIZE, SAMPLE_RATE, wait_for


class CountingFactory:
    """Source factory that remembers every source it created."""

    def __init__(self, make):
        self.make = make
        self.created = []

    def __call__(self):
        source = self.make()
        self.created.append(source)
        return source


class SlowOpenSource(ToneSource):
    """ToneSource whose open() blocks until the test releases it."""

    def __init__(self, frequency, release):
        super().__init__(frequency)
        self.opening = threading.Event()
        self.release = release

    def open(self):
        self.opening.set()
        self.release.wait()
        super().open()


class TestPipeline:

    def test_iter_frames_yields_copies(self):
        frames = [np.full(8, i, dtype=np.int16) for i in range(3)]
        source = ArrayFrameSource(frames)
        source.open()

        collected = []
        with pytest.raises(ReadFailure) as excinfo:
            for frame in iter_frames(source, 8):
                collected.append(frame)

        assert excinfo.value.count == 0
        assert [int(f[0]) for f in collected] == [0, 1, 2]

    def test_short_read_zero_padded(self):
        source = ArrayFrameSource([np.full(8, 7, dtype=np.int16), np.full(3, 5, dtype=np.int16)])
        source.open()
        frames = iter_frames(source, 8)

        np.testing.assert_array_equal(next(frames), np.full(8, 7))
        np.testing.assert_array_equal(next(frames), [5, 5, 5, 0, 0, 0, 0, 0])

    def test_stop_event_checked_before_read(self):
        source = ToneSource(110.0, SAMPLE_RATE)
        source.open()
        stop = threading.Event()
        stop.set()

        assert list(iter_frames(source, FRAME_SIZE, stop)) == []
        assert source.frames_read == 0

    def test_run_pipeline_results(self):
        frames = [sine_frame(110.0, SAMPLE_RATE, FRAME_SIZE), np.zeros(FRAME_SIZE, dtype=np.int16)]
        source = ArrayFrameSource(frames, SAMPLE_RATE)
        source.open()
        results = []

        with pytest.raises(ReadFailure):
            run_pipeline(source, results.append, TunerConfig())

        assert [r.matched_label for r in results] == ["A2", None]
        assert results[1].frequency_hz == 0.0

    def test_run_pipeline_max_frames(self):
        source = ToneSource(146.83, SAMPLE_RATE)
        source.open()
        results = []

        processed = run_pipeline(source, results.append, TunerConfig(), max_frames=3)

        assert processed == 3
        assert all(r.matched_label == "D3" for r in results)


class TestController:

    def make_controller(self, make_source, **config):
        factory = CountingFactory(make_source)
        display = TunerDisplay()
        controller = TunerController(factory, display=display, config=TunerConfig(**config))
        return controller, factory, display

    def test_initial_state(self):
        controller, _, display = self.make_controller(lambda: ToneSource(110.0))
        assert controller.state is TunerState.IDLE
        assert display.status.value == IDLE_TEXT
        assert display.frequency.value == 0.0

    def test_listen_and_stop(self):
        controller, factory, display = self.make_controller(lambda: ToneSource(110.0))

        assert controller.start(True)
        assert controller.state is TunerState.LISTENING
        assert wait_for(lambda: display.status.value == "Note: A2")
        assert abs(display.frequency.value - 110.0) < SAMPLE_RATE / FRAME_SIZE

        controller.stop()
        assert controller.state is TunerState.IDLE
        source = factory.created[0]
        assert source.close_count == 1
        assert not source.is_open

    def test_permission_denied(self):
        controller, factory, display = self.make_controller(lambda: ToneSource(110.0))

        assert not controller.start(False)
        assert controller.state is TunerState.IDLE
        assert display.status.value == PERMISSION_TEXT
        assert factory.created == []

    def test_permission_callable(self):
        controller, factory, display = self.make_controller(lambda: ToneSource(110.0))

        assert not controller.start(lambda: False)
        assert factory.created == []

        assert controller.start(lambda: True)
        controller.stop()
        assert len(factory.created) == 1

    def test_second_start_is_noop(self):
        controller, factory, _ = self.make_controller(lambda: ToneSource(110.0))

        assert controller.start()
        assert not controller.start()
        assert len(factory.created) == 1
        controller.stop()

    def test_stop_is_idempotent(self):
        controller, factory, _ = self.make_controller(lambda: ToneSource(110.0))

        controller.stop()
        assert controller.state is TunerState.IDLE

        controller.start()
        controller.stop()
        controller.stop()
        assert controller.state is TunerState.IDLE
        assert factory.created[0].close_count == 1

    def test_restart_after_stop(self):
        controller, factory, display = self.make_controller(lambda: ToneSource(196.0))

        controller.start()
        controller.stop()
        assert controller.start()
        assert wait_for(lambda: display.status.value == "Note: G3")
        controller.stop()

        assert len(factory.created) == 2
        assert all(s.close_count == 1 for s in factory.created)

    def test_read_failure_ends_session(self):
        frames = [sine_frame(82.41, SAMPLE_RATE, FRAME_SIZE)] * 2
        controller, factory, display = self.make_controller(lambda: ArrayFrameSource(frames, SAMPLE_RATE))

        assert controller.start()
        assert controller.wait(timeout=5.0)

        assert controller.state is TunerState.IDLE
        assert display.status.value == READ_FAILED_TEXT
        assert factory.created[0].close_count == 1

        # A new session can start after the failure
        assert controller.start()
        controller.wait(timeout=5.0)
        assert len(factory.created) == 2

    def test_device_init_failure(self):
        def broken():
            raise DeviceInitFailed("no device")

        controller, _, display = self.make_controller(broken)

        assert not controller.start()
        assert controller.state is TunerState.IDLE
        assert display.status.value == INIT_FAILED_TEXT

    def test_unexpected_start_error(self):
        def broken():
            raise RuntimeError("boom")

        controller, _, display = self.make_controller(broken)

        assert not controller.start()
        assert display.status.value == "Error: boom"

    def test_stop_from_listener_thread(self):
        controller, factory, display = self.make_controller(lambda: ToneSource(110.0))
        display.status.observe(lambda _: controller.stop())

        controller.start()
        assert wait_for(lambda: factory.created[0].close_count == 1)
        assert controller.state is TunerState.IDLE

    def start_in_background(self, controller):
        outcome = {}
        thread = threading.Thread(target=lambda: outcome.setdefault('started', controller.start()))
        thread.start()
        return thread, outcome

    def test_lock_free_while_source_opens(self):
        release = threading.Event()
        controller, factory, _ = self.make_controller(lambda: SlowOpenSource(110.0, release))
        starter, outcome = self.start_in_background(controller)
        try:
            assert wait_for(lambda: factory.created and factory.created[0].opening.is_set())

            reader = threading.Thread(target=lambda: controller.state)
            reader.start()
            reader.join(timeout=1.0)
            assert not reader.is_alive()
            assert controller.state is TunerState.IDLE
            assert not controller.start()
        finally:
            release.set()
            starter.join(timeout=5.0)

        assert outcome['started'] is True
        assert controller.state is TunerState.LISTENING
        controller.stop()
        assert len(factory.created) == 1
        assert factory.created[0].close_count == 1

    def test_stop_while_source_opens(self):
        release = threading.Event()
        controller, factory, _ = self.make_controller(lambda: SlowOpenSource(110.0, release))
        starter, outcome = self.start_in_background(controller)
        try:
            assert wait_for(lambda: factory.created and factory.created[0].opening.is_set())

            stopper = threading.Thread(target=controller.stop)
            stopper.start()
            stopper.join(timeout=1.0)
            assert not stopper.is_alive()
        finally:
            release.set()
            starter.join(timeout=5.0)

        assert outcome['started'] is False
        assert controller.state is TunerState.IDLE
        assert factory.created[0].close_count == 1
        assert controller.start()
        controller.stop()

    def test_frames_are_independent(self):
        """A silent frame after a tone reports no note."""
        frames = [sine_frame(110.0, SAMPLE_RATE, FRAME_SIZE), np.zeros(FRAME_SIZE, dtype=np.int16)]
        controller, _, display = self.make_controller(lambda: ArrayFrameSource(frames, SAMPLE_RATE))
        seen = []
        display.status.observe(seen.append)

        controller.start()
        controller.wait(timeout=5.0)

        assert seen == ["Note: A2", "No guitar note detected", READ_FAILED_TEXT]
        assert display.frequency.value == 0.0

    def test_requires_frame_size(self):
        with pytest.raises(ConfigError):
            TunerController(lambda: ToneSource(110.0), config=TunerConfig(frame_size=None))


class TestObservableValue:

    def test_post_and_observe(self):
        value = ObservableValue(0)
        seen = []
        remove = value.observe(seen.append)

        value.post(1)
        value.post(2)
        remove()
        value.post(3)

        assert value.value == 3
        assert seen == [1, 2]

    def test_failing_observer_does_not_block_others(self):
        value = ObservableValue("a")
        seen = []

        def broken(_):
            raise RuntimeError("observer failure")

        value.observe(broken)
        value.observe(seen.append)
        value.post("b")

        assert seen == ["b"]
        assert value.value == "b"
