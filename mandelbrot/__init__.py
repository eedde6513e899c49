"""Public API for Mandelbrot rendering utilities."""

from .canvas import SENTINEL_COLOR, Canvas, get_alpha, get_blue, get_green, get_red, make_rgba
from .escape import colors_on_grid, escape_time, escape_times_on_grid, iteration_to_color, iterations_at_point
from .movie import MovieConfig, compute_zoom_factors, frame_scales, plan_frames, render_movie
from .renderer import (
    Framing,
    Kernel,
    PartitionedRenderer,
    PixelBand,
    RenderConfig,
    RenderReport,
    RendererState,
    Viewport,
    WorkerOutcome,
    compute_viewport,
    partition_bands,
    render,
    render_band,
    skipped_rows,
)

__all__ = [
    "Canvas",
    "Framing",
    "Kernel",
    "MovieConfig",
    "PartitionedRenderer",
    "PixelBand",
    "RenderConfig",
    "RenderReport",
    "RendererState",
    "SENTINEL_COLOR",
    "Viewport",
    "WorkerOutcome",
    "colors_on_grid",
    "compute_viewport",
    "compute_zoom_factors",
    "escape_time",
    "escape_times_on_grid",
    "frame_scales",
    "get_alpha",
    "get_blue",
    "get_green",
    "get_red",
    "iteration_to_color",
    "iterations_at_point",
    "make_rgba",
    "partition_bands",
    "plan_frames",
    "render",
    "render_band",
    "render_movie",
    "skipped_rows",
]
