"""Tests for the steady-state signal equations and the Ernst angle"""

import numpy as np
import pytest

from gre import (
    TISSUES, FAMILIES, SequenceType, TissueParams,
    evaluate_signal, signal_for, ernst_angle, steady_state_mz, make_sequence_params, get_family
)


GM_LIKE = TissueParams(t1=950, t2=100, t2star=70, pd=0.86)


def test_spoiled_regression_value():
    e1 = np.exp(-150 / 950)
    alpha = np.deg2rad(60)
    expected = 0.86 * (1 - e1) / (1 - np.cos(alpha) * e1) * np.sin(alpha) * np.exp(-5 / 70)

    assert evaluate_signal(150, 5, 60, GM_LIKE, 'spoiled') == pytest.approx(expected, rel=1e-12)
    # Deterministic across calls
    assert evaluate_signal(150, 5, 60, GM_LIKE, 'spoiled') == evaluate_signal(150, 5, 60, GM_LIKE, 'spoiled')


@pytest.mark.parametrize('kind', list(SequenceType))
@pytest.mark.parametrize('key', list(TISSUES))
def test_signal_non_negative_over_allowed_ranges(kind, key):
    tissue = TISSUES[key]
    for tr in (5, 10, 50, 150, 1000, 3000):
        for te in (1, 5, 50, 200):
            for flip in (1, 10, 30, 60, 90):
                for ti in (0, 100, 500, 4000):
                    s = evaluate_signal(tr, te, flip, tissue, kind, ti)
                    assert np.isfinite(s)
                    assert s >= 0


@pytest.mark.parametrize('key', list(TISSUES))
@pytest.mark.parametrize('tr', [10, 150, 1000])
def test_spoiled_maximum_at_ernst_angle(key, tr):
    tissue = TISSUES[key]
    grid = np.arange(0, 90.5, 0.5)
    signals = [evaluate_signal(tr, 5, a, tissue, SequenceType.SPOILED) for a in grid]

    assert abs(grid[int(np.argmax(signals))] - ernst_angle(tr, tissue.t1)) <= 0.5


@pytest.mark.parametrize('tr, t1', [(0, 950), (-10, 950), (150, 0), (150, -1), (0, 0)])
def test_ernst_angle_zero_for_non_positive_inputs(tr, t1):
    assert ernst_angle(tr, t1) == 0.0


def test_ernst_angle_value():
    assert ernst_angle(150, 950) == pytest.approx(np.degrees(np.arccos(np.exp(-150 / 950))))
    # Long TR tips towards 90 degrees
    assert ernst_angle(1e6, 950) == pytest.approx(90.0, abs=1e-6)


def test_inversion_null_point():
    tissue = TissueParams(t1=250, t2=85, t2star=60, pd=0.95)
    s = evaluate_signal(10000, 5, 90, tissue, 'inversion-recovery', 250 * np.log(2))
    assert s == pytest.approx(0.0, abs=1e-12)


def test_inversion_uses_magnitude():
    tissue = TISSUES['CSF']
    # TI well before the null point: Mz(TI) is negative, the signal is not
    s = evaluate_signal(3000, 5, 90, tissue, SequenceType.INVERSION, 100)
    mz_ti = 1 - 2 * np.exp(-100 / tissue.t1) + np.exp(-3000 / tissue.t1)
    assert mz_ti < 0
    assert s == pytest.approx(tissue.pd * abs(mz_ti) * np.exp(-5 / tissue.t2star))


@pytest.mark.parametrize('kind', list(SequenceType))
def test_zero_flip_angle_gives_no_signal(kind):
    assert evaluate_signal(150, 5, 0, TISSUES['GM'], kind, 500) == pytest.approx(0.0, abs=1e-15)


@pytest.mark.parametrize('kind', list(SequenceType))
def test_non_positive_tr_gives_zero(kind):
    assert evaluate_signal(0, 5, 60, TISSUES['GM'], kind) == 0.0
    assert evaluate_signal(-150, 5, 60, TISSUES['GM'], kind) == 0.0


@pytest.mark.parametrize('kind', list(SequenceType))
def test_non_physical_tissue_gives_zero(kind):
    assert evaluate_signal(150, 5, 60, TissueParams(t1=0, t2=100, t2star=70, pd=1), kind) == 0.0
    assert evaluate_signal(150, 5, 60, TissueParams(t1=950, t2=-1, t2star=70, pd=1), kind) == 0.0


@pytest.mark.parametrize('kind', [SequenceType.SPOILED, SequenceType.BSSFP, SequenceType.FISP])
def test_singular_denominator_gives_zero(kind):
    assert evaluate_signal(1e-12, 0, 0, TISSUES['GM'], kind) == 0.0


def test_bssfp_decays_with_t2_others_with_t2star():
    tissue = TISSUES['GM']
    ratio = evaluate_signal(10, 50, 30, tissue, 'bssfp') / evaluate_signal(10, 0, 30, tissue, 'bssfp')
    assert ratio == pytest.approx(np.exp(-50 / tissue.t2))

    ratio = evaluate_signal(10, 50, 30, tissue, 'fisp') / evaluate_signal(10, 0, 30, tissue, 'fisp')
    assert ratio == pytest.approx(np.exp(-50 / tissue.t2star))


def test_aliases_dispatch_to_same_family():
    tissue = TISSUES['WM']
    assert evaluate_signal(150, 5, 60, tissue, 'flash') == evaluate_signal(150, 5, 60, tissue, 'spoiled')
    assert evaluate_signal(10, 5, 30, tissue, 'truefisp') == evaluate_signal(10, 5, 30, tissue, 'bssfp')


def test_unknown_sequence_type_raises():
    with pytest.raises(ValueError):
        evaluate_signal(150, 5, 60, TISSUES['GM'], 'echo-planar')


def test_every_sequence_type_has_a_family():
    assert set(FAMILIES) == set(SequenceType)
    for kind, family in FAMILIES.items():
        assert family.kind is kind
        assert get_family(kind.value) is family
        assert family.label and family.equation


def test_signal_for_matches_evaluate_signal():
    params = make_sequence_params('inversion', tr=3000, te=5, flip_angle=90, ti=700)
    tissue = TISSUES['WM']
    assert signal_for(params, tissue) == evaluate_signal(3000, 5, 90, tissue, 'inversion', 700)


def test_steady_state_mz():
    e1 = np.exp(-150 / 950)
    expected = (1 - e1) / (1 - np.cos(np.deg2rad(60)) * e1)
    assert steady_state_mz(150, 950, 60) == pytest.approx(expected)
    assert steady_state_mz(150, 950, 0) == pytest.approx(1.0)
    assert steady_state_mz(0, 950, 60) == 1.0
    # Singular limit falls back to full relaxation
    assert steady_state_mz(1e-12, 950, 0) == 1.0
