"""Tests for the k-space trajectory, spin phase grid and sequence diagram"""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from gre import (
    SequenceType, SimulationSettings, make_sequence_params,
    kspace_coordinate, kspace_trajectory, ky_target, is_acquiring,
    encoding_phase_grid, coherent_spins, sequence_diagram
)
from gre.sequence import LANES, SequenceDiagram


@pytest.mark.parametrize('kind', list(SequenceType))
@pytest.mark.parametrize('line', [0, 7, 16, 31])
def test_origin_at_start_of_tr(kind, line):
    coord = kspace_coordinate(0, line, kind)
    assert (coord.kx, coord.ky) == (0.0, 0.0)


@pytest.mark.parametrize('line', [0, 16, 31])
def test_spoiler_returns_to_origin(line):
    coord = kspace_coordinate(95, line, SequenceType.SPOILED)
    assert (coord.kx, coord.ky) == (0.0, 0.0)
    coord = kspace_coordinate(100, line, 'spgr')
    assert (coord.kx, coord.ky) == (0.0, 0.0)


@pytest.mark.parametrize('kind', [SequenceType.BSSFP, SequenceType.FISP, SequenceType.INVERSION])
def test_unspoiled_families_hold_end_of_readout(kind):
    coord = kspace_coordinate(95, 0, kind)
    assert coord.kx == pytest.approx(1.0)
    assert coord.ky == pytest.approx(1.0)


def test_piecewise_trajectory():
    line = 8
    ky = ky_target(line)

    def at(t):
        c = kspace_coordinate(t, line, 'bssfp')
        return c.kx, c.ky

    assert at(10) == (0.0, 0.0)
    assert_allclose(at(20), (0.0, 0.0), atol=1e-12)
    assert_allclose(at(27.5), (-0.5, 0.5 * ky))
    assert_allclose(at(35), (-1.0, ky))
    assert_allclose(at(40), (-1.0, ky))
    assert_allclose(at(45), (-1.0, ky))
    assert_allclose(at(60), (0.0, ky), atol=1e-12)
    assert_allclose(at(75), (1.0, ky))
    assert_allclose(at(85), (1.0, ky))


def test_ky_target():
    assert ky_target(0) == pytest.approx(1.0)
    assert ky_target(31) == pytest.approx(-1.0)
    assert ky_target(16) == pytest.approx(1 - 32 / 31)
    assert ky_target(0, gy_amp=2.0) == pytest.approx(2.0)
    # Out-of-range lines clamp to the edges of k-space
    assert ky_target(40) == pytest.approx(-1.0)
    assert ky_target(-5) == pytest.approx(1.0)


def test_ky_target_custom_line_count():
    settings = SimulationSettings(total_lines=5)
    assert ky_target(2, settings=settings) == pytest.approx(0.0)
    assert ky_target(4, settings=settings) == pytest.approx(-1.0)


def test_is_acquiring():
    assert is_acquiring(45)
    assert is_acquiring(60)
    assert is_acquiring(75)
    assert not is_acquiring(44)
    assert not is_acquiring(76)
    assert not is_acquiring(0)


def test_trajectory_samples_every_tick():
    path = kspace_trajectory(0, 'spoiled')
    assert path.shape == (101, 2)
    assert_allclose(path[0], (0, 0))
    assert_allclose(path[75], (1, 1))
    assert_allclose(path[90:], 0)


def test_phase_grid_at_origin_is_coherent():
    angles = encoding_phase_grid(0, 0)
    assert angles.shape == (5, 5)
    assert_allclose(angles, 0)
    assert coherent_spins(angles).all()


def test_phase_grid_frequency_encoding():
    angles = encoding_phase_grid(1, 0)
    # Columns differ by pi, rows are identical
    assert_allclose(angles[0], [-2 * np.pi, -np.pi, 0, np.pi, 2 * np.pi], atol=1e-12)
    assert_allclose(angles, np.tile(angles[0], (5, 1)))
    assert coherent_spins(angles)[0].tolist() == [True, False, True, False, True]


def test_phase_grid_phase_encoding():
    angles = encoding_phase_grid(0, 0.5)
    assert_allclose(angles[:, 0], [np.pi, np.pi / 2, 0, -np.pi / 2, -np.pi], atol=1e-12)


def test_spoiled_diagram():
    params = make_sequence_params('spoiled', flip_angle=45, gz_amp=1.5, gx_amp=1.2)
    diagram = sequence_diagram(params, 0)

    rf = diagram.events_on('RF')
    assert len(rf) == 1
    assert rf[0].amplitude == pytest.approx(0.5)
    assert (rf[0].start, rf[0].end) == (5, 15)

    spoiler = [e for e in diagram.events_on('Gz') if e.label == 'spoiler']
    assert len(spoiler) == 1
    assert spoiler[0].open_ended
    assert spoiler[0].is_active(99)
    assert all(e.label != 'rewinder' for e in diagram.events_on('Gy'))

    adc = diagram.events_on('ADC')[0]
    assert (adc.start, adc.end) == (45, 75)


def test_bssfp_diagram_rewinds_phase_encoding():
    params = make_sequence_params('bssfp', tr=10, flip_angle=30)
    diagram = sequence_diagram(params, 4)
    ky = ky_target(4)

    gy = diagram.events_on('Gy')
    assert [e.label for e in gy] == ['phase encode', 'rewinder']
    assert gy[0].amplitude == pytest.approx(ky)
    assert gy[1].amplitude == pytest.approx(-ky)
    assert not [e for e in diagram.events_on('Gz') if e.label == 'spoiler']


def test_fisp_diagram_has_neither_spoiler_nor_rewinder():
    diagram = sequence_diagram(make_sequence_params('fisp'), 10)
    labels = [e.label for e in diagram.events]
    assert 'spoiler' not in labels
    assert 'rewinder' not in labels


def test_lane_waveforms():
    params = make_sequence_params('fisp', gx_amp=1.2)
    waveforms = sequence_diagram(params, 16).get_lane_waveforms(n_points=101)

    assert set(waveforms) == set(LANES)
    t, gx = waveforms['Gx']
    assert len(t) == 101
    assert gx[60] == pytest.approx(1.2)
    assert gx[25] == pytest.approx(-0.8)
    assert gx[0] == 0.0


def test_active_events():
    diagram = sequence_diagram(make_sequence_params('spoiled'), 16)
    assert {e.lane for e in diagram.active_events(60)} == {'Gx', 'ADC'}
    assert {e.lane for e in diagram.active_events(10)} == {'RF', 'Gz'}


def test_unknown_lane_raises():
    diagram = SequenceDiagram('spoiled')
    with pytest.raises(ValueError):
        diagram.add_event('Gw', 0, 10, 1.0)
