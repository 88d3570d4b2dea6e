"""
End-to-end tests for PulsePipeline driven by synthetic frame sources.

A noise-free 1.2 Hz sinusoid at 30 fps peaks every 25 samples
(833.3 ms), i.e. exactly 72 BPM.
"""

import pytest

from camera.source import ChannelMeans, FrameSourceError, Region
from camera.synthetic import PushFrameSource, SyntheticFrameSource
from config import MIN_SAMPLES_FOR_BPM, WINDOW_CAPACITY
from rppg.pipeline import PulsePipeline, accumulate_peak_times, analyze_window
from rppg.scheduler import ManualScheduler
from rppg.window import FrameSample
from tests.conftest import BrokenSource, FlakySource


class TestPulseReadings:
    def test_synthetic_pulse_reports_72_bpm(self, synthetic_pipeline, recorder):
        synthetic_pipeline.start(recorder.on_pulse, recorder.on_error)
        synthetic_pipeline.scheduler.run(300)

        assert recorder.readings
        assert recorder.readings[-1].bpm == pytest.approx(72, abs=5)
        assert recorder.errors == []

    def test_no_reading_before_minimum_samples(self, synthetic_pipeline, recorder):
        synthetic_pipeline.start(recorder.on_pulse)
        synthetic_pipeline.scheduler.run(MIN_SAMPLES_FOR_BPM - 1)

        assert recorder.readings == []
        assert synthetic_pipeline.latest_reading is None

        synthetic_pipeline.scheduler.run(1)
        assert len(recorder.readings) == 1

    def test_at_most_one_reading_per_tick(self, synthetic_pipeline, recorder):
        synthetic_pipeline.start(recorder.on_pulse)
        ticks = synthetic_pipeline.scheduler.run(300)

        assert ticks == 300
        assert len(recorder.readings) == 300 - MIN_SAMPLES_FOR_BPM + 1
        stamps = [r.timestamp for r in recorder.readings]
        assert all(a < b for a, b in zip(stamps, stamps[1:]))

    def test_buffer_is_bounded(self, synthetic_pipeline, recorder):
        synthetic_pipeline.start(recorder.on_pulse)
        synthetic_pipeline.scheduler.run(450)
        assert synthetic_pipeline.buffer_length == WINDOW_CAPACITY

    def test_readings_stay_in_range(self, recorder):
        source = SyntheticFrameSource(pulse_hz=1.0, noise_std=1.0, seed=3)
        pipeline = PulsePipeline(source, ManualScheduler())
        pipeline.start(recorder.on_pulse)
        pipeline.scheduler.run(400)

        for reading in recorder.readings:
            assert 30 <= reading.bpm <= 200
            assert 0.0 <= reading.confidence <= 1.0

    def test_unstamped_frames_use_clock(self, recorder):
        source = PushFrameSource()
        clock = iter(range(0, 10_000, 10))
        pipeline = PulsePipeline(source, ManualScheduler(), clock=lambda: float(next(clock)))
        pipeline.start(recorder.on_pulse)

        source.feed([ChannelMeans(red=1.0, green=2.0, blue=3.0)] * 3)
        pipeline.scheduler.run(3)
        assert pipeline.waveform().timestamps == (0.0, 10.0, 20.0)


class TestErrorsAndLifecycle:
    def test_frame_errors_reported_and_loop_continues(self, recorder):
        source = FlakySource(fail_every=10, pulse_hz=1.2)
        pipeline = PulsePipeline(source, ManualScheduler())
        pipeline.start(recorder.on_pulse, recorder.on_error)

        assert pipeline.scheduler.run(200) == 200
        assert len(recorder.errors) == 20
        assert all(e.startswith("Pulse detection error: ") for e in recorder.errors)
        assert pipeline.buffer_length == 180
        assert recorder.readings

    def test_handler_exception_does_not_end_session(self, synthetic_pipeline, recorder):
        def bad_handler(reading):
            raise RuntimeError("display gone")

        synthetic_pipeline.start(bad_handler, recorder.on_error)
        assert synthetic_pipeline.scheduler.run(100) == 100
        assert len(recorder.errors) == 100 - MIN_SAMPLES_FOR_BPM + 1

    def test_start_failure_is_raised(self, recorder):
        pipeline = PulsePipeline(BrokenSource(), ManualScheduler())
        with pytest.raises(FrameSourceError):
            pipeline.start(recorder.on_pulse, recorder.on_error)

        assert not pipeline.is_running
        assert not pipeline.scheduler.has_pending
        assert recorder.errors == []

    def test_stop_halts_ticks(self, synthetic_pipeline, recorder):
        synthetic_pipeline.start(recorder.on_pulse)
        synthetic_pipeline.scheduler.run(120)
        synthetic_pipeline.stop()

        assert not synthetic_pipeline.is_running
        assert not synthetic_pipeline.scheduler.run_pending()
        assert synthetic_pipeline.tick_count == 120

    def test_stop_from_pulse_handler(self, synthetic_pipeline):
        seen = []

        def on_pulse(reading):
            seen.append(reading)
            synthetic_pipeline.stop()

        synthetic_pipeline.start(on_pulse)
        synthetic_pipeline.scheduler.run(500)

        assert len(seen) == 1
        assert synthetic_pipeline.tick_count == MIN_SAMPLES_FOR_BPM

    def test_restart_clears_state(self, synthetic_pipeline, recorder):
        synthetic_pipeline.start(recorder.on_pulse)
        synthetic_pipeline.scheduler.run(150)
        synthetic_pipeline.stop()

        synthetic_pipeline.start(recorder.on_pulse)
        assert synthetic_pipeline.buffer_length == 0
        assert synthetic_pipeline.latest_reading is None
        assert synthetic_pipeline.peak_timestamps() == ()

    def test_reset_restores_configured_region(self):
        pipeline = PulsePipeline(SyntheticFrameSource(), ManualScheduler())
        pipeline.start(lambda r: None)
        assert pipeline.region == Region(192, 48, 256, 72)

        pipeline.reset()
        assert pipeline.region is None
        assert not pipeline.is_running


class TestAssessment:
    def test_nothing_before_first_reading(self, synthetic_pipeline, recorder):
        synthetic_pipeline.start(recorder.on_pulse)
        synthetic_pipeline.scheduler.run(10)

        assert synthetic_pipeline.assess() is None
        assert synthetic_pipeline.risk() is None
        assert synthetic_pipeline.blood_pressure() is None
        assert not synthetic_pipeline.hrv().valid

    def test_regular_pulse_gives_valid_hrv(self, synthetic_pipeline, recorder):
        synthetic_pipeline.start(recorder.on_pulse)
        synthetic_pipeline.scheduler.run(300)

        rr = synthetic_pipeline.rr_intervals()
        assert len(rr) == 11
        assert all(r == pytest.approx(833.33, abs=0.01) for r in rr)

        hrv = synthetic_pipeline.hrv()
        assert hrv.valid
        assert hrv.rmssd < 1.0
        assert hrv.stress_level == "very-high"

    def test_full_assessment(self, synthetic_pipeline, recorder):
        synthetic_pipeline.start(recorder.on_pulse)
        synthetic_pipeline.scheduler.run(300)

        result = synthetic_pipeline.assess(age=60)
        assert result.reading == synthetic_pipeline.latest_reading
        assert result.blood_pressure.confidence == 0.3
        assert 90 <= result.blood_pressure.systolic <= 180
        assert 0 <= result.risk.risk_score <= 100
        assert "Age-related risk factor" in result.risk.factors
        assert result.age == 60

    def test_blood_pressure_falls_back_to_reading(self, synthetic_pipeline, recorder):
        synthetic_pipeline.start(recorder.on_pulse)
        synthetic_pipeline.scheduler.run(MIN_SAMPLES_FOR_BPM)

        assert not synthetic_pipeline.hrv().valid
        assert synthetic_pipeline.blood_pressure() is not None


class TestWaveforms:
    def test_waveform_snapshot(self, synthetic_pipeline, recorder):
        synthetic_pipeline.start(recorder.on_pulse)
        synthetic_pipeline.scheduler.run(60)

        waveform = synthetic_pipeline.waveform()
        assert len(waveform.samples) == len(waveform.timestamps) == 60
        assert waveform.sample_rate == 30

        synthetic_pipeline.scheduler.run(10)
        assert len(waveform.samples) == 60

    def test_filtered_waveform(self, synthetic_pipeline, recorder):
        synthetic_pipeline.start(recorder.on_pulse)
        synthetic_pipeline.scheduler.run(10)
        with pytest.raises(ValueError):
            synthetic_pipeline.filtered_waveform()

        synthetic_pipeline.scheduler.run(290)
        filtered = synthetic_pipeline.filtered_waveform()
        assert len(filtered.samples) == 300
        assert filtered.timestamps == synthetic_pipeline.waveform().timestamps


class TestPureHelpers:
    def test_analyze_window(self):
        source = SyntheticFrameSource(pulse_hz=1.2)
        region = Region(0, 0, 1, 1)
        samples = []
        for _ in range(120):
            m = source.next_frame(region)
            samples.append(FrameSample(m.timestamp, m.red, m.green, m.blue))

        analysis = analyze_window(samples)
        assert analysis.peak_indices == (6, 31, 56, 81, 106)
        assert analysis.bpm == 72
        assert analysis.peak_times[0] == pytest.approx(200.0)

    def test_accumulate_skips_overlap(self):
        history = accumulate_peak_times((), [0.0, 100.0, 900.0])
        assert history == (0.0, 900.0)

        history = accumulate_peak_times(history, [900.0, 1700.0])
        assert history == (0.0, 900.0, 1700.0)

    def test_accumulate_keeps_latest(self):
        history = accumulate_peak_times((), [i * 1000.0 for i in range(10)], limit=4)
        assert history == (6000.0, 7000.0, 8000.0, 9000.0)
