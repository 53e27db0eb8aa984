#!/usr/bin/env python3
"""
GRE Simulator Demo

Evaluate gradient echo steady-state signals and visualize the sequence,
k-space encoding and magnetization of one parameter snapshot.

Usage:
    python run.py <sequence_type> [options]

Sequences:
    spoiled    - Spoiled GRE (FLASH/SPGR)
    bssfp      - Balanced SSFP (TrueFISP)
    fisp       - Steady-state hybrid GRE
    inversion  - Inversion recovery GRE

Examples:
    python run.py spoiled
    python run.py bssfp --tr 10 --te 5 --flip 30 --tissue CSF
    python run.py inversion --ti 173 --chart ti --no-show
    python run.py inversion --lesson expert --no-save
"""

import argparse
import logging
import os
import sys

import matplotlib.pyplot as plt

# Add gre package to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from gre import (
    TISSUES, FAMILIES, SequenceType, ChartKind,
    make_sequence_params, get_tissue, evaluate_signal, ernst_angle, signal_for
)
from gre.lessons import Difficulty, LessonPlayer
from gre.animator import SimulatorAnimator, plot_curves
from gre.logging_config import setup_logging


SEQUENCE_DEFAULTS = {
    SequenceType.SPOILED: {'tr': 150, 'te': 5, 'flip': 60},
    SequenceType.BSSFP: {'tr': 10, 'te': 5, 'flip': 30},
    SequenceType.FISP: {'tr': 20, 'te': 5, 'flip': 40},
    SequenceType.INVERSION: {'tr': 3000, 'te': 5, 'flip': 90, 'ti': 700},
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='GRE Simulator Demo - Signal equations, k-space and magnetization',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='\n'.join([f"  {k.value:10} - {v.label}" for k, v in FAMILIES.items()])
    )

    parser.add_argument('sequence', choices=[k.value for k in SequenceType],
                        help='Sequence type')
    parser.add_argument('--tr', type=float, default=None,
                        help='Repetition time in ms')
    parser.add_argument('--te', type=float, default=None,
                        help='Echo time in ms')
    parser.add_argument('--ti', type=float, default=None,
                        help='Inversion time in ms (default: 150)')
    parser.add_argument('--flip', type=float, default=None,
                        help='Flip angle in degrees')
    parser.add_argument('--tissue', default='GM',
                        help=f"Tissue for the vector view ({', '.join(TISSUES)}; default: GM)")
    parser.add_argument('--gx', type=float, default=1.2,
                        help='Frequency encode gradient scale (default: 1.2)')
    parser.add_argument('--gy', type=float, default=1.0,
                        help='Phase encode gradient scale (default: 1.0)')
    parser.add_argument('--gz', type=float, default=1.0,
                        help='Slice select gradient scale (default: 1.0)')
    parser.add_argument('--chart', choices=[k.value for k in ChartKind], default='flipAngle',
                        help='Comparison chart (default: flipAngle)')
    parser.add_argument('--lesson', choices=[d.value for d in Difficulty], default=None,
                        help='Walk through the guided lesson at this level first')
    parser.add_argument('--output-dir', '-o', default='output',
                        help='Output directory (default: output)')
    parser.add_argument('--no-show', action='store_true',
                        help='Skip interactive display')
    parser.add_argument('--no-save', action='store_true',
                        help='Skip saving files')
    parser.add_argument('--fps', type=int, default=30,
                        help='Animation FPS (default: 30)')
    parser.add_argument('--duration', type=float, default=5.0,
                        help='Animation duration in seconds (default: 5)')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Debug logging')
    return parser


def main():
    parser = build_parser()
    args = parser.parse_args()

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    kind = SequenceType.parse(args.sequence)
    family = FAMILIES[kind]
    defaults = SEQUENCE_DEFAULTS[kind]

    # Header
    print(f"\n{'='*60}")
    print(f"  GRE Simulator: {kind.value.upper()}")
    print(f"  {family.label}")
    print(f"  {family.description}")
    print(f"{'='*60}\n")

    # Build parameters
    try:
        params = make_sequence_params(
            kind,
            tr=args.tr if args.tr is not None else defaults['tr'],
            te=args.te if args.te is not None else defaults['te'],
            flip_angle=args.flip if args.flip is not None else defaults['flip'],
            ti=args.ti if args.ti is not None else defaults.get('ti', 150),
            gz_amp=args.gz,
            gy_amp=args.gy,
            gx_amp=args.gx
        )
        tissue = get_tissue(args.tissue)
    except (ValueError, KeyError) as e:
        parser.error(str(e).strip("'\""))

    chart = args.chart

    # Guided lesson
    if args.lesson:
        player = LessonPlayer(kind, args.lesson, params)
        print(f"  Lesson: {player.lesson.title} ({args.lesson})\n")
        for i, (step, params) in enumerate(player, 1):
            changes = ', '.join(f"{k}={v:g}" for k, v in step.params.items())
            print(f"  [{i}] {step.text}")
            if changes:
                print(f"      -> {changes}: GM {signal_for(params, TISSUES['GM']):.4f}, "
                      f"WM {signal_for(params, TISSUES['WM']):.4f}")
        if player.chart is not None:
            chart = player.chart.value
        print()

    print(f"  {family.equation}")
    print(f"  TR: {params.tr:g} ms, TE: {params.te:g} ms, Flip: {params.flip_angle:g}°", end='')
    print(f", TI: {params.ti:g} ms" if kind is SequenceType.INVERSION else '')

    # Signals
    print("\n  Steady-state signal:")
    for key, t in TISSUES.items():
        s = evaluate_signal(params.tr, params.te, params.flip_angle, t, kind, params.ti)
        marker = '*' if t is tissue else ' '
        print(f"   {marker} {key:4} {s:.4f}   (Ernst angle {ernst_angle(params.tr, t.t1):5.1f}°)")

    animator = SimulatorAnimator(params, tissue=tissue, chart_kind=chart)

    # Output paths
    base = f"{kind.value}_tr{params.tr:g}_fa{params.flip_angle:g}"
    figure_file = os.path.join(args.output_dir, f"{base}_overview.png")
    chart_file = os.path.join(args.output_dir, f"{base}_{chart}.png")
    animation_file = os.path.join(args.output_dir, f"{base}.gif")

    # Save files
    if not args.no_save:
        os.makedirs(args.output_dir, exist_ok=True)

        print(f"\nSaving overview: {figure_file}")
        animator.create_static_plot(figure_file)
        plt.close()

        print(f"Saving chart: {chart_file}")
        plot_curves(chart, params, chart_file)
        plt.close()

        print(f"Saving animation: {animation_file}")
        animation_file = animator.save_animation(animation_file, duration=args.duration, fps=args.fps)
        plt.close()

    # Show interactive
    if not args.no_show:
        print("\nOpening interactive animation window...")
        print("(Close the window to exit)")
        # Keep a reference to the animation to prevent garbage collection
        ani = animator.create_animation(duration=args.duration, fps=args.fps)
        plt.show()

    # Summary
    print(f"\n{'='*60}")
    print("  Complete!")
    if not args.no_save:
        print(f"\n  Output files:")
        print(f"    {figure_file}")
        print(f"    {chart_file}")
        print(f"    {animation_file}")
    print(f"{'='*60}\n")


if __name__ == '__main__':
    main()
