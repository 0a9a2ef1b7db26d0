import sys
import time
from argparse import ArgumentParser
from pathlib import Path

from julia_frames import ConfigurationError, RenderConfig, default_worker_count, render_run
from julia_frames.config import DEFAULT_ORIGINS, FRACTALS, STRATEGIES
from julia_frames.reporting import log, set_verbose


def _complex(text: str) -> complex:
    parts = text.split(",")
    if len(parts) == 2:
        return complex(float(parts[0]), float(parts[1]))
    return complex(text.replace(" ", ""))


def build_parser():
    parser = ArgumentParser(description="Render escape-time frames for increasing iteration caps.")

    parser.add_argument('--fractal', choices=FRACTALS, default='julia',
                        help='recurrence family: "julia" iterates every pixel with a fixed C, "mandelbrot" uses the pixel as C')

    parser.add_argument('--c', type=_complex,
                        dest='c', help='Julia parameter as "RE,IM" or a Python complex literal; write --c=-0.8,0.156 for negative values',
                        metavar='C', default=complex(-0.8, 0.156))

    parser.add_argument('--max-iterations', type=int,
                        dest='max_iterations', help='iteration cap of the last frame',
                        metavar='MAX_ITERATIONS', default=2000)

    parser.add_argument('--width', type=int,
                        dest='width', help='image width in pixels',
                        metavar='WIDTH', default=1920)

    parser.add_argument('--height', type=int,
                        dest='height', help='image height in pixels',
                        metavar='HEIGHT', default=1080)

    parser.add_argument('--scale', type=float,
                        dest='scale', help='width of the sampled window in the complex plane',
                        metavar='SCALE', default=RenderConfig.scale)

    parser.add_argument('--origin-x', type=float, default=None,
                        help='fraction of the image width that maps to re = 0 (default 0.5, or 0.6 for mandelbrot)')

    parser.add_argument('--origin-y', type=float, default=None,
                        help='fraction of the image height that maps to im = 0 (default 0.5)')

    parser.add_argument('--threshold', type=float, default=2.0,
                        help='escape radius checked after every iteration')

    parser.add_argument('--all-frames', dest='final_frame_only', action='store_false',
                        help='render every cap from 0 to MAX_ITERATIONS instead of only the final frame')

    parser.add_argument('--output-dir', type=str, default='julia',
                        help='directory in which frames are written as <cap>.<format>')

    parser.add_argument('--format', type=str,
                        dest='format', help='image file extension, any format supported by Pillow. Default: "bmp".',
                        metavar='FORMAT', default='bmp')

    parser.add_argument('--timings', type=str, default='timings.csv',
                        help='path of the per-frame timing log')

    parser.add_argument('--no-timings', dest='timings', action='store_const', const=None,
                        help='do not write the timing log')

    parser.add_argument('--workers', type=int, default=None,
                        help=f'worker threads (default: logical cores - 1, here {default_worker_count()})')

    parser.add_argument('--strategy', choices=STRATEGIES, default='cached',
                        help='"cached" shares escape iterations between frames, "direct" evaluates every frame '
                             'from scratch, "derived" evaluates the final frame once and cuts the others from it')

    parser.add_argument('-q', '--quiet', action='store_true', help='do not print progress')
    parser.add_argument('-v', '--verbose', action='store_true', help='enable verbose logging')

    return parser


def config_from_args(opt) -> RenderConfig:
    default_x, default_y = DEFAULT_ORIGINS[opt.fractal]
    return RenderConfig(
        width=opt.width,
        height=opt.height,
        scale=opt.scale,
        origin_x=default_x if opt.origin_x is None else opt.origin_x,
        origin_y=default_y if opt.origin_y is None else opt.origin_y,
        fractal=opt.fractal,
        c=opt.c,
        threshold=opt.threshold,
        max_iterations=opt.max_iterations,
        output_dir=Path(opt.output_dir).expanduser(),
        extension=(opt.format or "bmp").lower().lstrip("."),
        final_frame_only=opt.final_frame_only,
        timings_path=Path(opt.timings).expanduser() if opt.timings else None,
        workers=opt.workers,
        strategy=opt.strategy,
    )


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)
    set_verbose(opt.verbose)

    try:
        config = config_from_args(opt).validate()
    except ConfigurationError as exc:
        parser.error(str(exc))

    log(f"Rendering {config.fractal} {config.width}x{config.height} into {config.output_dir}")
    now = time.perf_counter()
    report = render_run(config, quiet=opt.quiet)
    if not opt.quiet:
        print(f"Total Elapsed: {time.perf_counter() - now:.2f}s")

    return 0 if report.ok else 1


if __name__ == '__main__':
    sys.exit(main())
