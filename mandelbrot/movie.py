"""Zoom sequences: a series of frames at shrinking scales around one center."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import imageio
import numpy as np

from .canvas import Canvas
from .renderer import Kernel, PartitionedRenderer, RenderConfig

logger = logging.getLogger(__name__)

EASINGS = ("linear", "ease")


@dataclass(frozen=True)
class MovieConfig:
    """Parameters of a zoom sequence; the first frame uses the base scale."""

    frames: int = 50
    zoom_factor: float = 0.9
    final_scale: float | None = None
    easing: str = "ease"
    frame_dir: Path = Path("frames")
    image_format: str = "bmp"
    prefix: str = "mandel"
    gif_path: Path | None = None
    gif_frame_duration: float = 0.1

    def __post_init__(self) -> None:
        if self.frames < 0:
            raise ValueError(f"frames must not be negative, got {self.frames}")
        if not self.zoom_factor > 0:
            raise ValueError(f"zoom_factor must be positive, got {self.zoom_factor}")
        if self.final_scale is not None and not self.final_scale > 0:
            raise ValueError(f"final_scale must be positive, got {self.final_scale}")
        if self.easing.lower() not in EASINGS:
            raise ValueError(f"easing must be one of {', '.join(EASINGS)}, got {self.easing!r}")
        object.__setattr__(self, "frame_dir", Path(self.frame_dir))
        object.__setattr__(self, "image_format", self.image_format.lower().lstrip(".") or "bmp")
        if self.gif_path is not None:
            object.__setattr__(self, "gif_path", Path(self.gif_path))


def compute_zoom_factors(frames: int, zoom_factor: float, *, final_zoom: float | None, easing: str) -> np.ndarray:
    """Compute per-frame zoom multipliers, the first of which applies to frame 0.

    With ``final_zoom`` the multipliers are spread in log space along the
    easing curve so that their product is exactly ``final_zoom``; otherwise
    every frame after the first shrinks by ``zoom_factor``.
    """

    if frames <= 0:
        return np.array([], dtype=np.float64)

    if final_zoom is not None and final_zoom > 0:
        log_target = np.log(final_zoom)

        def ease_in_out(t: float) -> float:
            return 3 * t ** 2 - 2 * t ** 3

        ease = (lambda u: u) if easing.lower() == "linear" else ease_in_out
        if frames == 1:
            alphas = np.array([1.0], dtype=np.float64)
        else:
            alphas = np.array([ease(i / (frames - 1)) for i in range(frames)], dtype=np.float64)
        alphas = np.clip(alphas, 0.0, 1.0)
        increments = np.diff(np.concatenate(([0.0], alphas)))
        return np.exp(increments * log_target)

    factors = np.full(frames, np.float64(zoom_factor), dtype=np.float64)
    factors[0] = 1.0
    return factors


def frame_scales(scale: float, movie: MovieConfig) -> np.ndarray:
    final_zoom = movie.final_scale / scale if movie.final_scale is not None else None
    factors = compute_zoom_factors(movie.frames, movie.zoom_factor, final_zoom=final_zoom, easing=movie.easing)
    return np.float64(scale) * np.cumprod(factors)


def plan_frames(config: RenderConfig, movie: MovieConfig) -> list[RenderConfig]:
    """One render configuration per frame, sharing everything but the scale."""

    return [replace(config, scale=float(s)) for s in frame_scales(config.scale, movie)]


def write_frame_sequence(
    canvas: Canvas,
    frame_dir: Path,
    index: int,
    digits: int,
    image_format: str,
    prefix: str,
) -> Path:
    """Persist a frame in a numbered sequence inside ``frame_dir``."""

    frame_path = frame_dir / f"{prefix}{index:0{digits}d}.{image_format}"
    frame_dir.mkdir(parents=True, exist_ok=True)
    return canvas.save(frame_path, image_format)


def write_gif(writer: Any, canvas: Canvas) -> None:
    """Append ``canvas`` to an active GIF writer."""

    writer.append_data(canvas.to_rgb_array())


def render_movie(config: RenderConfig, movie: MovieConfig, *, kernel: Kernel = Kernel.SCALAR) -> list[Path]:
    """Render every frame of ``movie`` and return the written frame paths.

    Raises ``OSError`` if a frame or the GIF cannot be written.
    """

    frame_configs = plan_frames(config, movie)
    digits = max(3, len(str(max(movie.frames - 1, 0))))
    paths: list[Path] = []

    gif_writer = None
    if movie.gif_path is not None:
        movie.gif_path.parent.mkdir(parents=True, exist_ok=True)
        gif_writer = imageio.get_writer(str(movie.gif_path), mode="I", duration=movie.gif_frame_duration, loop=0)

    try:
        for i, frame_config in enumerate(frame_configs):
            logger.info("frame %d out of %d (scale=%g)", i, len(frame_configs), frame_config.scale)
            report = PartitionedRenderer(frame_config, kernel=kernel).run()
            if report.failures:
                logger.warning("frame %d rendered with %d failed thread(s)", i, len(report.failures))
            paths.append(
                write_frame_sequence(
                    report.canvas,
                    movie.frame_dir,
                    i,
                    digits,
                    movie.image_format,
                    movie.prefix,
                )
            )
            if gif_writer is not None:
                write_gif(gif_writer, report.canvas)
    finally:
        if gif_writer is not None:
            gif_writer.close()

    return paths
