"""Smoke tests for the matplotlib visualization (Agg backend)"""

import matplotlib
matplotlib.use('Agg')

import matplotlib.pyplot as plt
import matplotlib.animation as animation
import pytest

from gre import TISSUES, ChartKind, make_sequence_params
from gre.animator import SimulatorAnimator, plot_curves, animate_simulation


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close('all')


@pytest.fixture
def animator():
    params = make_sequence_params('spoiled', tr=150, te=5, flip_angle=60)
    return SimulatorAnimator(params, tissue='wm', chart_kind='contrast', figsize=(8, 5))


def test_animator_setup(animator):
    assert animator.tissue is TISSUES['WM']
    assert animator.chart_kind is ChartKind.CONTRAST
    assert animator.clock.phase_encode_line == 16
    assert animator.signal > 0


def test_set_params_rearms_clock(animator):
    animator.set_params(animator.params.replace(tr=3000, sequence_type='bssfp'))
    assert animator.clock.tick_ms == pytest.approx(30.0)
    assert animator.family.label.startswith('Balanced')


def test_static_plot(animator, tmp_path):
    output = tmp_path / 'overview.png'
    fig = animator.create_static_plot(str(output))
    assert isinstance(fig, plt.Figure)
    assert output.exists()


@pytest.mark.parametrize('kind', ['bssfp', 'fisp', 'inversion'])
def test_static_plot_every_family(kind):
    params = make_sequence_params(kind, tr=500, ti=300)
    fig = SimulatorAnimator(params, figsize=(8, 5)).create_static_plot(time_in_tr=95)
    assert len(fig.axes) == 9


def test_create_animation(animator):
    ani = animator.create_animation(duration=0.5, fps=10)
    assert isinstance(ani, animation.FuncAnimation)


def test_save_gif(animator, tmp_path):
    path = animator.save_animation(str(tmp_path / 'gre.gif'), duration=0.4, fps=5, dpi=40)
    assert path.endswith('.gif')
    assert (tmp_path / 'gre.gif').exists()
    assert animator.clock.time_in_tr > 0


def test_save_falls_back_to_gif_without_ffmpeg(animator, tmp_path, monkeypatch):
    monkeypatch.setattr(animation.writers, 'is_available', lambda name: False)
    with pytest.warns(UserWarning, match='FFmpeg'):
        path = animator.save_animation(str(tmp_path / 'gre.mp4'), duration=0.2, fps=5, dpi=40)
    assert path == str(tmp_path / 'gre.gif')
    assert (tmp_path / 'gre.gif').exists()


def test_animate_simulation(tmp_path):
    params = make_sequence_params('fisp')
    path = animate_simulation(params, str(tmp_path / 'fisp.gif'), tissue='CSF', duration=0.2, fps=5, dpi=40)
    assert path.endswith('fisp.gif')


@pytest.mark.parametrize('kind', list(ChartKind))
def test_plot_curves(kind, tmp_path):
    params = make_sequence_params('inversion', tr=3000, flip_angle=90, ti=700)
    output = tmp_path / f'{kind.value}.png'
    fig = plot_curves(kind, params, str(output))
    assert output.exists()
    assert fig.axes[0].get_xlabel()
