import logging
import sys
from argparse import ArgumentParser
from pathlib import Path

from mandel import add_render_arguments, atof, atoi, build_config, setup_logging
from mandelbrot import MovieConfig, render_movie
from mandelbrot.movie import EASINGS

logger = logging.getLogger("mandelbrot.cli")


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog='mandelmovie',
        description='Render a zoom sequence of Mandelbrot frames into numbered image files.',
    )
    add_render_arguments(parser)

    parser.add_argument('--frames', type=atoi, dest='frames', default=50,
                        metavar='FRAMES', help='number of frames to generate (default=%(default)s)')

    parser.add_argument('--zoom-factor', type=atof, dest='zoom_factor', default=0.9,
                        metavar='ZOOM_FACTOR',
                        help='factor applied to the scale on each frame; < 1 zooms in (default=%(default)s)')

    parser.add_argument('--final-scale', type=atof, dest='final_scale', default=None,
                        metavar='SCALE', help='scale of the last frame; overrides --zoom-factor')

    parser.add_argument('--easing', choices=EASINGS, default='ease',
                        help='temporal curve used with --final-scale (default=%(default)s)')

    parser.add_argument('--frame-dir', dest='frame_dir', type=str, default='frames',
                        help='directory in which to store the frame sequence (default=%(default)s)')

    parser.add_argument('--format', dest='format', type=str, default='bmp',
                        help='file format of the frames, any extension supported by Pillow (default=%(default)s)')

    parser.add_argument('--gif', dest='gif', type=str, default=None,
                        help='also assemble the frames into this GIF file')
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    opt = parser.parse_args(argv)
    config = build_config(opt, parser)
    try:
        movie = MovieConfig(
            frames=opt.frames,
            zoom_factor=opt.zoom_factor,
            final_scale=opt.final_scale,
            easing=opt.easing,
            frame_dir=Path(opt.frame_dir),
            image_format=opt.format,
            gif_path=Path(opt.gif) if opt.gif else None,
        )
    except ValueError as exc:
        parser.error(str(exc))
    setup_logging(opt)

    logger.info(
        "mandelmovie: x=%f y=%f scale=%f frames=%d threads=%d",
        config.x_center, config.y_center, config.scale, movie.frames, config.thread_count,
    )

    try:
        paths = render_movie(config, movie, kernel=opt.kernel)
    except OSError as exc:
        logger.error("mandelmovie: couldn't write frames to %s: %s", movie.frame_dir, exc)
        return 1

    logger.info("wrote %d frames to %s", len(paths), movie.frame_dir)
    return 0


if __name__ == '__main__':
    sys.exit(main())
