import numpy as np
import pytest

from sivana.spectrogram import create_spectrogram, hann_window


def test_hann_window_empty():
    assert len(hann_window(0)) == 0


def test_hann_window_single_point():
    assert hann_window(1).tolist() == [1.0]


def test_hann_window_endpoints_and_symmetry():
    window = hann_window(9)
    assert len(window) == 9
    assert window[0] == pytest.approx(0.0, abs=1e-12)
    assert window[-1] == pytest.approx(0.0, abs=1e-12)
    assert window[4] == pytest.approx(1.0)
    np.testing.assert_allclose(window, window[::-1], atol=1e-12)


def test_hann_window_bounded():
    window = hann_window(64)
    assert len(window) == 64
    assert float(window.min()) >= 0.0
    assert float(window.max()) <= 1.0
    assert window[0] == pytest.approx(0.0, abs=1e-12)


def test_too_few_samples_gives_no_frames():
    spec = create_spectrogram(np.zeros(100), 22050, 2048, 1024)
    assert len(spec) == 0


def test_exact_window_gives_one_frame():
    spec = create_spectrogram(np.ones(8), 22050, 8, 4)
    assert spec.shape == (1, 5)


def test_frame_count_follows_hop():
    samples = np.zeros(64)
    one_hop = create_spectrogram(samples, 22050, 16, 16)
    half_hop = create_spectrogram(samples, 22050, 16, 8)
    assert len(half_hop) == 2 * len(one_hop) - 1


def test_silence_has_zero_magnitudes():
    spec = create_spectrogram(np.zeros(256), 22050, 32, 16)
    assert np.all(spec == 0.0)


def test_magnitudes_non_negative():
    rng = np.random.default_rng(7)
    spec = create_spectrogram(rng.standard_normal(1024), 22050, 64, 32)
    assert spec.shape == (31, 33)
    assert float(spec.min()) >= 0.0


def test_dc_bin_is_window_sum_for_constant_signal():
    window_size = 32
    spec = create_spectrogram(np.ones(window_size), 22050, window_size, 8)
    assert spec[0][0] == pytest.approx(hann_window(window_size).sum(), rel=1e-5)


def test_sinusoid_energy_peaks_at_its_bin():
    window_size = 64
    bin_index = 10
    n = np.arange(window_size * 4)
    samples = np.sin(2 * np.pi * bin_index * n / window_size)
    spec = create_spectrogram(samples, 22050, window_size, window_size // 2)
    assert all(int(np.argmax(frame)) == bin_index for frame in spec)


def test_accepts_plain_list():
    spec = create_spectrogram([0.0] * 16, 22050, 16, 4)
    assert spec.shape[0] == 1


@pytest.mark.parametrize("window_size,hop_size", [(0, 4), (8, 0), (8, -1)])
def test_invalid_sizes_raise(window_size, hop_size):
    with pytest.raises(ValueError):
        create_spectrogram(np.zeros(32), 22050, window_size, hop_size)


def test_multidimensional_samples_raise():
    with pytest.raises(ValueError):
        create_spectrogram(np.zeros((4, 8)), 22050, 4, 2)