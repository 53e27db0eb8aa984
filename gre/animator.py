"""
GRE Simulator Animation Module

Creates animated visualizations of the gradient echo simulator using
matplotlib. Supports both real-time animation and video export.

One figure holds four views of the same instant:
- Pulse sequence diagram (RF, Gz, Gy, Gx, ADC lanes) with a time marker
- K-space with the acquired lines and the current position
- Magnetization vector (isometric projection)
- Comparison chart for the selected chart kind, plus the spin phase grid
"""

import logging
import warnings
from typing import Dict, Tuple, Union

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.animation as animation

from .primitives import SequenceParams, TissueParams, SimulationSettings, DEFAULT_SETTINGS, DEFAULT_TIMING
from .sequence import LANES
from .sequences import get_family
from .signal import signal_for
from .magnetization import evolve_magnetization
from .kspace import (
    kspace_coordinate, kspace_trajectory, ky_target, is_acquiring,
    encoding_phase_grid, coherent_spins, sequence_diagram
)
from .clock import AnimationClock
from .curves import ChartKind, generate_curve_series, ernst_marker, operating_point
from .tissues import TISSUES, TISSUE_COLORS, REFERENCE_TISSUE, get_tissue

logger = logging.getLogger(__name__)

LANE_COLORS = {'RF': '#eab308', 'Gz': '#10b981', 'Gy': '#3b82f6', 'Gx': '#ef4444', 'ADC': 'orange'}
VECTOR_COLORS = {'Mz': '#10b981', 'Mx': '#ef4444', 'My': '#3b82f6', 'NMV': '#eab308'}


def _project(x: float, y: float, z: float) -> Tuple[float, float]:
    """Isometric projection of a 3D point onto the vector panel"""
    return (x - y) * np.cos(np.pi / 6), z + (x + y) * np.sin(np.pi / 6) * 0.5


class SimulatorAnimator:
    """
    Animated visualization of the gradient echo simulator

    Example:
        from gre import make_sequence_params
        from gre.animator import SimulatorAnimator

        params = make_sequence_params('bssfp', tr=10, te=5, flip_angle=30)
        animator = SimulatorAnimator(params, tissue='CSF')
        animator.save_animation('bssfp.gif', duration=5)
    """

    def __init__(self, params: SequenceParams,
                 tissue: Union[TissueParams, str] = REFERENCE_TISSUE,
                 chart_kind: Union[ChartKind, str] = ChartKind.FLIP_ANGLE,
                 tissues: Dict[str, TissueParams] = None,
                 settings: SimulationSettings = None,
                 figsize: Tuple[int, int] = (16, 10)):
        """
        Initialize the animator

        Args:
            params: Sequence parameter snapshot
            tissue: Tissue shown in the vector view (object or catalog key)
            chart_kind: Chart shown in the chart panel
            tissues: Tissue catalog for the chart
            settings: Simulation settings
            figsize: Figure size (width, height)
        """
        self.tissues = TISSUES if tissues is None else tissues
        self.tissue = get_tissue(tissue, self.tissues) if isinstance(tissue, str) else tissue
        self.chart_kind = ChartKind.parse(chart_kind)
        self.settings = settings or DEFAULT_SETTINGS
        self.timing = DEFAULT_TIMING
        self.figsize = figsize

        self.clock = AnimationClock(params.tr, self.settings)
        self.ani = None
        self.set_params(params)

    def set_params(self, params: SequenceParams):
        """Take a new parameter snapshot and regenerate all derived data"""
        self.params = params
        self.family = get_family(params.sequence_type)
        self.clock.set_tr(params.tr)
        self.curves = generate_curve_series(self.chart_kind, params, self.tissues)
        self.signal = signal_for(params, self.tissue, self.settings)

    # -------------------------------------------------------------------------
    # Figure construction
    # -------------------------------------------------------------------------

    def _build_figure(self, figsize, title: str):
        fig = plt.figure(figsize=figsize or self.figsize)
        gs = fig.add_gridspec(5, 3, width_ratios=[2, 1, 1])
        fig.suptitle(title, fontsize=14, fontweight='bold')

        lane_axes = []
        for i in range(len(LANES)):
            ax = fig.add_subplot(gs[i, 0], sharex=lane_axes[0] if lane_axes else None)
            lane_axes.append(ax)

        axes = {
            'lanes': lane_axes,
            'kspace': fig.add_subplot(gs[0:3, 1]),
            'vector': fig.add_subplot(gs[0:3, 2]),
            'chart': fig.add_subplot(gs[3:5, 1]),
            'spins': fig.add_subplot(gs[3:5, 2]),
        }

        artists = {}
        artists.update(self._setup_lanes(axes['lanes']))
        artists.update(self._setup_kspace(axes['kspace']))
        artists.update(self._setup_vector(axes['vector']))
        self._setup_chart(axes['chart'])
        artists.update(self._setup_spins(axes['spins']))
        return fig, axes, artists

    def _setup_lanes(self, lane_axes) -> Dict:
        diagram = sequence_diagram(self.params, self.clock.phase_encode_line, self.settings, self.timing)
        waveforms = diagram.get_lane_waveforms()
        lane_lines, markers = {}, []
        limit = max(1.5, self.params.gz_amp * 1.6, self.params.gy_amp * 1.2, self.params.gx_amp * 1.2)

        for ax, lane in zip(lane_axes, LANES):
            t, amp = waveforms[lane]
            color = LANE_COLORS[lane]
            line, = ax.plot(t, amp, color=color, linewidth=1.5)
            if lane != 'Gy':
                ax.fill_between(t, 0, amp, alpha=0.2, color=color)
            lane_lines[lane] = line

            if lane == 'ADC':
                ax.set_ylim(0, 1.5)
            else:
                ax.set_ylim(-limit, limit)
                ax.axhline(y=0, color='k', linewidth=0.5)
            ax.set_xlim(0, 100)
            ax.set_ylabel(lane, fontsize=9)
            ax.set_yticks([])
            ax.grid(True, alpha=0.3)
            markers.append(ax.axvline(x=0, color='red', linewidth=1, linestyle='--', alpha=0.7))

        for event in diagram.events_on('Gz'):
            if event.label == 'spoiler':
                lane_axes[LANES.index('Gz')].annotate('SPOILER', xy=(event.start, event.amplitude),
                                                      fontsize=8, color=LANE_COLORS['Gz'])
        lane_axes[0].set_title(self.family.label, fontsize=11)
        lane_axes[-1].set_xlabel('Time (% of TR)', fontsize=10)
        return {'lane_lines': lane_lines, 'markers': markers}

    def _setup_kspace(self, ax) -> Dict:
        k_max = max(1.0, self.params.gy_amp) * 1.1
        ax.set_xlim(-k_max, k_max)
        ax.set_ylim(-k_max, k_max)
        ax.set_aspect('equal')
        ax.axhline(y=0, color='black', linewidth=1)
        ax.axvline(x=0, color='black', linewidth=1)
        ax.set_xlabel('kx (Freq)', fontsize=10)
        ax.set_ylabel('ky (Phase)', fontsize=10)
        ax.set_title('K-Space', fontsize=11)

        line_marks = []
        for i in range(self.settings.total_lines):
            ky = ky_target(i, self.params.gy_amp, self.settings)
            mark, = ax.plot([-1, 1], [ky, ky], color='gray', linewidth=0.5, alpha=0.2)
            line_marks.append(mark)

        trail, = ax.plot([], [], 'b-', linewidth=1.5, alpha=0.7)
        point, = ax.plot([], [], 'ro', markersize=10, markeredgecolor='darkred')
        text = ax.text(0.02, 0.98, '', transform=ax.transAxes, fontsize=9,
                       verticalalignment='top', fontfamily='monospace',
                       bbox=dict(boxstyle='round', facecolor='wheat', alpha=0.8))
        return {'line_marks': line_marks, 'trail': trail, 'point': point, 'k_text': text}

    def _setup_vector(self, ax) -> Dict:
        ax.set_xlim(-1.3, 1.3)
        ax.set_ylim(-1.3, 1.3)
        ax.set_aspect('equal')
        ax.axis('off')
        ax.set_title(f'Magnetization ({self.tissue.name or "tissue"})', fontsize=11)

        # Axes of the rotating frame
        for end, label in (((1.1, 0, 0), 'x'), ((0, 1.1, 0), 'y'), ((0, 0, 1.1), 'z')):
            px, py = _project(*end)
            ax.plot([0, px], [0, py], color='gray', linewidth=0.8, alpha=0.5)
            ax.text(px, py, label, color='gray', fontsize=9)

        vectors = {}
        for name, color in VECTOR_COLORS.items():
            vectors[name], = ax.plot([], [], color=color, linewidth=4 if name == 'NMV' else 2.5,
                                     marker='o' if name == 'NMV' else None, markersize=4, label=name)
        ax.legend(loc='lower right', fontsize=8)
        text = ax.text(0.02, 0.98, '', transform=ax.transAxes, fontsize=9,
                       verticalalignment='top', fontfamily='monospace')
        return {'vectors': vectors, 'm_text': text}

    def _setup_chart(self, ax):
        for key, values in self.curves.series.items():
            ax.plot(self.curves.x, values, color=TISSUE_COLORS.get(key, '#a78bfa'),
                    linewidth=3 if key == REFERENCE_TISSUE else 1.5, label=key)
        if self.chart_kind is ChartKind.FLIP_ANGLE:
            ernst = ernst_marker(self.params, self.tissues)
            ax.axvline(x=ernst, color='#10b981', linestyle='--', linewidth=1)
            ax.annotate('Ernst', xy=(ernst, ax.get_ylim()[1] * 0.9), fontsize=9, color='#10b981')
        x, y = operating_point(self.chart_kind, self.params, self.tissues)
        ax.plot([x], [y], 'o', color='#facc15', markeredgecolor='k', markersize=7)
        ax.set_xlabel(self.curves.x_label, fontsize=9)
        ax.set_ylabel(self.curves.y_label, fontsize=9)
        ax.set_ylim(bottom=0)
        ax.grid(True, alpha=0.3)
        ax.legend(fontsize=8)

    def _setup_spins(self, ax) -> Dict:
        size = 5
        ax.set_xlim(-0.5, size - 0.5)
        ax.set_ylim(-0.5, size - 0.5)
        ax.set_aspect('equal')
        ax.set_xticks([])
        ax.set_yticks([])
        ax.set_title('Spatial Encoding', fontsize=11)
        spins = []
        for row in range(size):
            for col in range(size):
                ax.add_patch(plt.Circle((col, size - 1 - row), 0.42, fill=False, color='gray', alpha=0.5))
                spin, = ax.plot([], [], color='#059669', linewidth=2)
                spins.append(spin)
        return {'spins': spins, 'spin_size': size}

    # -------------------------------------------------------------------------
    # Frame update
    # -------------------------------------------------------------------------

    def _update(self, artists: Dict, time_in_tr: int, line: int) -> list:
        p = self.params
        updated = []

        if line != artists.get('_line'):
            diagram = sequence_diagram(p, line, self.settings, self.timing)
            t, gy = diagram.get_lane_waveforms()['Gy']
            artists['lane_lines']['Gy'].set_data(t, gy)
            for i, mark in enumerate(artists['line_marks']):
                mark.set_alpha(0.6 if i < line else 0.2)
            artists['_line'] = line
        updated.append(artists['lane_lines']['Gy'])
        updated.extend(artists['line_marks'])

        for marker in artists['markers']:
            marker.set_xdata([time_in_tr])
        updated.extend(artists['markers'])

        # K-space
        path = kspace_trajectory(line, p.sequence_type, p.gy_amp, self.settings, self.timing)[:int(time_in_tr) + 1]
        coord = kspace_coordinate(time_in_tr, line, p.sequence_type, p.gy_amp, self.settings, self.timing)
        artists['trail'].set_data(path[:, 0], path[:, 1])
        artists['point'].set_data([coord.kx], [coord.ky])
        time_ms = time_in_tr / self.settings.tr_ticks * p.tr
        adc = 'ADC' if is_acquiring(time_in_tr, self.timing) else '   '
        artists['k_text'].set_text(f't = {time_ms:7.1f} ms  line {line:2d}  {adc}')
        updated.extend([artists['trail'], artists['point'], artists['k_text']])

        # Magnetization vector
        state = evolve_magnetization(p, self.tissue, time_in_tr, self.settings)
        mx, my, mz = state.vector
        ends = {'Mz': (0, 0, mz), 'Mx': (mx, 0, 0), 'My': (0, my, 0), 'NMV': (mx, my, mz)}
        for name, end in ends.items():
            px, py = _project(*end)
            artists['vectors'][name].set_data([0, px], [0, py])
        artists['m_text'].set_text(f'Mz:  {state.mz * 100:6.1f}%\nMxy: {state.mxy * 100:6.1f}%\nS:   {self.signal:.3f}')
        updated.extend(artists['vectors'].values())
        updated.append(artists['m_text'])

        # Spin phases
        size = artists['spin_size']
        angles = encoding_phase_grid(coord.kx, coord.ky, size)
        coherent = coherent_spins(angles) & is_acquiring(time_in_tr, self.timing)
        for idx, spin in enumerate(artists['spins']):
            row, col = divmod(idx, size)
            angle = angles[row, col]
            cx, cy = col, size - 1 - row
            spin.set_data([cx, cx + 0.4 * np.cos(angle)], [cy, cy + 0.4 * np.sin(angle)])
            spin.set_color('#6ee7b7' if coherent[row, col] else '#059669')
        updated.extend(artists['spins'])

        return updated

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def create_static_plot(self, filename: str = None, time_in_tr: int = None,
                           figsize: tuple = None) -> plt.Figure:
        """
        Create a static plot of one instant

        Args:
            filename: If provided, save to this file
            time_in_tr: Tick to show, defaults to the middle of the readout
            figsize: Optional figure size override

        Returns:
            matplotlib Figure object
        """
        if time_in_tr is None:
            time_in_tr = int((self.timing.read_start + self.timing.read_end) / 2)
        fig, _, artists = self._build_figure(figsize, f'{self.family.label}: TR {self.params.tr:g} ms, '
                                                      f'TE {self.params.te:g} ms, α {self.params.flip_angle:g}°')
        self._update(artists, time_in_tr, self.clock.phase_encode_line)
        fig.tight_layout()

        if filename:
            fig.savefig(filename, dpi=150, bbox_inches='tight')
            logger.info("Saved: %s", filename)

        return fig

    def create_animation(self, duration: float = 10.0,
                         fps: int = 30,
                         repeat: bool = True) -> animation.FuncAnimation:
        """
        Create an animated visualization

        Each frame advances the animation clock by 1000/fps ms of wall time,
        so the TR and line counters run at their real-time rates.

        Args:
            duration: Animation duration in seconds (real time)
            fps: Frames per second
            repeat: Whether to loop the animation

        Returns:
            matplotlib FuncAnimation object
        """
        fig, _, artists = self._build_figure(None, f'{self.family.label} - Animation')
        frame_ms = 1000 / fps
        n_frames = max(1, int(duration * fps))

        def init():
            return self._update(artists, self.clock.time_in_tr, self.clock.phase_encode_line)

        def animate(frame):
            if frame:
                self.clock.step(frame_ms)
            return self._update(artists, self.clock.time_in_tr, self.clock.phase_encode_line)

        self.ani = animation.FuncAnimation(
            fig, animate, init_func=init,
            frames=n_frames, interval=frame_ms,
            blit=True, repeat=repeat
        )

        fig.tight_layout()
        return self.ani

    def save_animation(self, filename: str,
                       duration: float = 10.0,
                       fps: int = 30,
                       dpi: int = 100) -> str:
        """
        Save animation to file

        Args:
            filename: Output filename (e.g., 'animation.mp4', 'animation.gif')
            duration: Animation duration
            fps: Frames per second
            dpi: Resolution

        Returns:
            Path actually written (GIF when FFmpeg is unavailable)
        """
        ani = self.create_animation(duration, fps, repeat=False)

        if filename.endswith('.gif'):
            writer = animation.PillowWriter(fps=fps)
        elif animation.writers.is_available('ffmpeg'):
            writer = animation.FFMpegWriter(fps=fps, bitrate=1800)
        else:
            warnings.warn("FFmpeg not available, using Pillow for GIF output")
            filename = filename.rsplit('.', 1)[0] + '.gif'
            writer = animation.PillowWriter(fps=fps)

        ani.save(filename, writer=writer, dpi=dpi)
        logger.info("Animation saved to %s", filename)
        return filename


def plot_curves(chart_kind: Union[ChartKind, str], params: SequenceParams,
                output: str = None, tissues: Dict[str, TissueParams] = None,
                figsize: Tuple[int, int] = (8, 5)) -> plt.Figure:
    """
    Plot one comparison chart on its own

    Args:
        chart_kind: Chart kind or its name
        params: Sequence parameter snapshot
        output: Output filename (figure is only returned if None)
        tissues: Tissue catalog
        figsize: Figure size

    Returns:
        matplotlib Figure
    """
    kind = ChartKind.parse(chart_kind)
    tissues = TISSUES if tissues is None else tissues
    curves = generate_curve_series(kind, params, tissues)

    fig, ax = plt.subplots(figsize=figsize)
    for key, values in curves.series.items():
        ax.plot(curves.x, values, color=TISSUE_COLORS.get(key, '#a78bfa'),
                linewidth=3 if key == REFERENCE_TISSUE else 1.5, label=key)
    if kind is ChartKind.FLIP_ANGLE:
        ax.axvline(x=ernst_marker(params, tissues), color='#10b981', linestyle='--', linewidth=1, label='Ernst')
    x, y = operating_point(kind, params, tissues)
    ax.plot([x], [y], 'o', color='#facc15', markeredgecolor='k', markersize=7)

    ax.set_title(f'{get_family(params.sequence_type).label}: {kind.value}', fontsize=12, fontweight='bold')
    ax.set_xlabel(curves.x_label)
    ax.set_ylabel(curves.y_label)
    ax.set_ylim(bottom=0)
    ax.grid(True, alpha=0.3)
    ax.legend()
    fig.tight_layout()

    if output:
        fig.savefig(output, dpi=150, bbox_inches='tight')
        logger.info("Saved: %s", output)
    return fig


def animate_simulation(params: SequenceParams, output: str = 'gre.gif', **kwargs) -> str:
    """
    Convenience function to save an animation of a parameter snapshot

    Args:
        params: Sequence parameter snapshot
        output: Output filename
        **kwargs: tissue / chart_kind go to the animator, the rest to save_animation
    """
    animator = SimulatorAnimator(params,
                                 tissue=kwargs.pop('tissue', REFERENCE_TISSUE),
                                 chart_kind=kwargs.pop('chart_kind', ChartKind.FLIP_ANGLE))
    return animator.save_animation(output, **kwargs)
