import logging
import re
import sys
from argparse import ArgumentParser, Namespace, RawDescriptionHelpFormatter

from mandelbrot import Framing, Kernel, PartitionedRenderer, RenderConfig
from mandelbrot.logging_utils import configure_logging

logger = logging.getLogger("mandelbrot.cli")

EXAMPLES = """\
Some examples are:
  mandel -x -0.5 -y -0.5 -s 0.2
  mandel -x -.38 -y -.665 -s .05 -m 100
  mandel -x 0.286932 -y 0.014287 -s .0005 -m 1000
"""

_FLOAT_PREFIX = re.compile(
    r"\s*[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan)",
    re.IGNORECASE,
)
_INT_PREFIX = re.compile(r"\s*[+-]?\d+")


def atof(text: str) -> float:
    """Convert the longest numeric prefix of ``text``; anything else is 0."""

    match = _FLOAT_PREFIX.match(text)
    return float(match.group()) if match else 0.0


def atoi(text: str) -> int:
    match = _INT_PREFIX.match(text)
    return int(match.group()) if match else 0


def add_render_arguments(parser: ArgumentParser) -> None:
    """Options shared by every tool that renders a frame."""

    defaults = RenderConfig()

    parser.add_argument('-m', '--max-iterations', type=atoi,
                        dest='max_iterations', help='the maximum number of iterations per point (default=%(default)s)',
                        metavar='MAX', default=defaults.max_iterations)

    parser.add_argument('-x', '--x-center', type=atof,
                        dest='x_center', help='x coordinate of image center point (default=%(default)s)',
                        metavar='COORD', default=defaults.x_center)

    parser.add_argument('-y', '--y-center', type=atof,
                        dest='y_center', help='y coordinate of image center point (default=%(default)s)',
                        metavar='COORD', default=defaults.y_center)

    parser.add_argument('-s', '--scale', type=atof,
                        dest='scale', help='scale of the image in Mandelbrot coordinates (default=%(default)s)',
                        metavar='SCALE', default=defaults.scale)

    parser.add_argument('-W', '--width', type=atoi,
                        dest='width', help='width of the image in pixels (default=%(default)s)',
                        metavar='PIXELS', default=defaults.image_width)

    parser.add_argument('-H', '--height', type=atoi,
                        dest='height', help='height of the image in pixels (default=%(default)s)',
                        metavar='PIXELS', default=defaults.image_height)

    parser.add_argument('-n', '--threads', type=atoi,
                        dest='threads', help='number of threads to use (default=%(default)s)',
                        metavar='THREADS', default=defaults.thread_count)

    parser.add_argument('--framing', choices=[f.value for f in Framing], default=defaults.framing.value,
                        help='vertical framing: "legacy" shifts the window by scale/threads, '
                             '"symmetric" centers it (default=%(default)s)')

    parser.add_argument('--kernel', choices=[k.value for k in Kernel], default=Kernel.SCALAR.value,
                        help='per-pixel "scalar" evaluation or numpy "vectorized" bands (default=%(default)s)')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='enable debug logging, including thread creation and joining')

    parser.add_argument('--log-file', dest='log_file', type=str, default=None,
                        help='also write the log to this file')


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog='mandel',
        description='Render a grayscale image of the Mandelbrot set using several threads.',
        epilog=EXAMPLES,
        formatter_class=RawDescriptionHelpFormatter,
    )
    add_render_arguments(parser)
    parser.add_argument('-o', '--output', dest='output', type=str, default='mandel.bmp',
                        metavar='FILE', help='output file; the format follows the extension (default=%(default)s)')
    return parser


def build_config(opt: Namespace, parser: ArgumentParser) -> RenderConfig:
    try:
        return RenderConfig(
            x_center=opt.x_center,
            y_center=opt.y_center,
            scale=opt.scale,
            image_width=opt.width,
            image_height=opt.height,
            max_iterations=opt.max_iterations,
            thread_count=opt.threads,
            framing=opt.framing,
        )
    except ValueError as exc:
        parser.error(str(exc))


def setup_logging(opt: Namespace) -> None:
    configure_logging(logging.DEBUG if opt.verbose else logging.INFO, opt.log_file)


def main(argv=None) -> int:
    parser = build_parser()
    opt = parser.parse_args(argv)
    config = build_config(opt, parser)
    setup_logging(opt)

    logger.info(
        "mandel: x=%f y=%f scale=%f max=%d outfile=%s threads=%d",
        config.x_center, config.y_center, config.scale, config.max_iterations, opt.output, config.thread_count,
    )

    report = PartitionedRenderer(config, kernel=opt.kernel).run()
    logger.info("rendered %dx%d in %.3fs", config.image_width, config.image_height, report.elapsed)

    try:
        report.canvas.save(opt.output)
    except OSError as exc:
        logger.error("mandel: couldn't write to %s: %s", opt.output, exc)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
