import numpy as np
import pytest

from sivana.peaks import Peak, find_peaks


def test_empty_spectrogram():
    assert find_peaks([], 2, 5, 2.0) == []


def test_empty_first_frame():
    assert find_peaks([[]], 2, 5, 2.0) == []


def test_single_maximum():
    spec = np.zeros((5, 6))
    spec[2][3] = 10.0
    assert find_peaks(spec, 2, 2, 1.0) == [Peak(2, 3)]


def test_below_threshold_is_ignored():
    spec = np.zeros((5, 6))
    spec[2][3] = 1.5
    assert find_peaks(spec, 2, 2, 2.0) == []


def test_value_equal_to_threshold_counts():
    spec = np.zeros((3, 3))
    spec[1][1] = 2.0
    assert find_peaks(spec, 1, 1, 2.0) == [Peak(1, 1)]


def test_tie_keeps_earliest_in_frequency():
    assert find_peaks([[0.0, 5.0, 5.0, 0.0]], 0, 1, 1.0) == [Peak(0, 1)]


def test_tie_keeps_earliest_in_time():
    spec = [[0.0, 0.0], [4.0, 0.0], [4.0, 0.0]]
    assert find_peaks(spec, 1, 0, 1.0) == [Peak(1, 0)]


def test_larger_neighbour_suppresses():
    spec = [[3.0, 9.0, 3.0]]
    assert find_peaks(spec, 0, 1, 1.0) == [Peak(0, 1)]


def test_distant_peaks_both_found_in_order():
    spec = np.zeros((20, 30))
    spec[15][2] = 7.0
    spec[3][25] = 8.0
    assert find_peaks(spec, 2, 5, 2.0) == [Peak(3, 25), Peak(15, 2)]


def test_zero_radius_marks_every_cell_over_threshold():
    spec = np.array([[3.0, 1.0], [4.0, 5.0]])
    assert find_peaks(spec, 0, 0, 2.0) == [Peak(0, 0), Peak(1, 0), Peak(1, 1)]


def test_peaks_are_local_maxima_invariant():
    rng = np.random.default_rng(11)
    spec = rng.random((12, 15)) * 10
    rt, rf = 1, 2
    peaks = find_peaks(spec, rt, rf, 2.0)
    assert peaks
    for peak in peaks:
        t, f = peak.time_idx, peak.freq_bin_idx
        block = spec[max(0, t - rt) : t + rt + 1, max(0, f - rf) : f + rf + 1]
        assert spec[t][f] == block.max()
        assert spec[t][f] >= 2.0
    assert peaks == sorted(peaks, key=lambda p: (p.time_idx, p.freq_bin_idx))


def test_negative_radius_raises():
    with pytest.raises(ValueError):
        find_peaks([[1.0]], -1, 0, 0.0)


def test_peak_is_frozen():
    peak = Peak(1, 2)
    with pytest.raises(AttributeError):
        peak.time_idx = 5
    assert peak.time_idx == 1
    assert peak.freq_bin_idx == 2