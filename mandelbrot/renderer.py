"""Band-partitioned, multi-threaded rendering of Mandelbrot frames."""

from __future__ import annotations

import enum
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

import numpy as np

from .canvas import SENTINEL_COLOR, Canvas
from .escape import colors_on_grid, iterations_at_point

logger = logging.getLogger(__name__)


class Framing(str, enum.Enum):
    """How the vertical extent of the plane is laid out over the bands.

    ``LEGACY`` keeps the historical layout: the vertical half-range is
    ``scale / thread_count`` and the center is shifted down by that amount
    before the bands are stacked, so the framing depends on the thread count.
    ``SYMMETRIC`` spans ``[y_center - scale, y_center + scale]`` over the full
    image height regardless of the thread count.
    """

    LEGACY = "legacy"
    SYMMETRIC = "symmetric"


class Kernel(str, enum.Enum):
    SCALAR = "scalar"
    VECTORIZED = "vectorized"


class RendererState(enum.Enum):
    IDLE = "idle"
    DISPATCHING = "dispatching"
    JOINING = "joining"
    DONE = "done"


@dataclass(frozen=True)
class RenderConfig:
    """Parameters that describe a single render of the Mandelbrot set."""

    x_center: float = 0.0
    y_center: float = 0.0
    scale: float = 4.0
    image_width: int = 500
    image_height: int = 500
    max_iterations: int = 1000
    thread_count: int = 1
    framing: Framing = Framing.LEGACY

    def __post_init__(self) -> None:
        # Accept plain strings for the framing, e.g. straight from argparse.
        object.__setattr__(self, "framing", Framing(self.framing))
        if not self.scale > 0:
            raise ValueError(f"scale must be positive, got {self.scale}")
        if self.image_width <= 0 or self.image_height <= 0:
            raise ValueError(f"image size must be positive, got {self.image_width}x{self.image_height}")
        if self.max_iterations < 0:
            raise ValueError(f"max_iterations must not be negative, got {self.max_iterations}")
        if self.thread_count < 1:
            raise ValueError(f"thread_count must be at least 1, got {self.thread_count}")


@dataclass(frozen=True)
class Viewport:
    """Region of the complex plane and the pixel-to-plane mapping.

    Rows map through ``ymin + row * (ymax - ymin) / row_divisor`` where
    ``row`` is the canvas row, so every worker uses the same expression.
    """

    xmin: float
    xmax: float
    ymin: float
    ymax: float
    width: int
    row_divisor: int

    def column_to_x(self, column: int) -> float:
        return self.xmin + column * (self.xmax - self.xmin) / self.width

    def row_to_y(self, row: int) -> float:
        return self.ymin + row * (self.ymax - self.ymin) / self.row_divisor

    def columns_to_x(self) -> np.ndarray:
        return self.xmin + np.arange(self.width, dtype=np.float64) * (self.xmax - self.xmin) / self.width

    def rows_to_y(self, row_start: int, row_count: int) -> np.ndarray:
        rows = np.arange(row_start, row_start + row_count, dtype=np.float64)
        return self.ymin + rows * (self.ymax - self.ymin) / self.row_divisor


@dataclass(frozen=True)
class PixelBand:
    """Contiguous rows owned, for writing, by a single worker."""

    index: int
    row_start: int
    row_count: int
    ymin: float
    ymax: float

    @property
    def row_stop(self) -> int:
        return self.row_start + self.row_count


@dataclass
class WorkerOutcome:
    band: PixelBand
    started: bool = False
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.started and self.error is None


@dataclass
class RenderReport:
    """Everything a render produced, including partial-failure details."""

    canvas: Canvas
    viewport: Viewport
    bands: list[PixelBand]
    outcomes: list[WorkerOutcome]
    skipped_rows: range
    elapsed: float = 0.0

    @property
    def failures(self) -> list[WorkerOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]

    @property
    def complete(self) -> bool:
        return not self.failures and len(self.skipped_rows) == 0


def compute_viewport(config: RenderConfig) -> Viewport:
    xmin = config.x_center - config.scale
    xmax = config.x_center + config.scale

    if config.framing is Framing.LEGACY:
        yscale = config.scale / config.thread_count
        ycenter = config.y_center - yscale
        ymin = ycenter - yscale
        ymax = ycenter + yscale
        row_divisor = config.image_height // config.thread_count
    else:
        ymin = config.y_center - config.scale
        ymax = config.y_center + config.scale
        row_divisor = config.image_height

    return Viewport(
        xmin=xmin,
        xmax=xmax,
        ymin=ymin,
        ymax=ymax,
        width=config.image_width,
        row_divisor=row_divisor,
    )


def partition_bands(config: RenderConfig, viewport: Viewport) -> list[PixelBand]:
    """Split the image rows into ``thread_count`` equal bands, numbered from 1.

    Rows past ``thread_count * (image_height // thread_count)`` belong to no
    band; see :func:`skipped_rows`.
    """

    row_count = config.image_height // config.thread_count
    bands = []
    for t in range(1, config.thread_count + 1):
        row_start = row_count * (t - 1)
        if row_count:
            ymin = viewport.row_to_y(row_start)
            ymax = viewport.row_to_y(row_start + row_count)
        else:
            ymin = ymax = viewport.ymin
        bands.append(PixelBand(index=t, row_start=row_start, row_count=row_count, ymin=ymin, ymax=ymax))
    return bands


def skipped_rows(config: RenderConfig) -> range:
    covered = (config.image_height // config.thread_count) * config.thread_count
    return range(covered, config.image_height)


def render_band(canvas: Canvas, band: PixelBand, viewport: Viewport, max_iterations: int, kernel: Kernel = Kernel.SCALAR) -> None:
    """Evaluate and write every pixel of ``band``."""

    if band.row_count == 0:
        return

    if Kernel(kernel) is Kernel.VECTORIZED:
        xs = viewport.columns_to_x()
        ys = viewport.rows_to_y(band.row_start, band.row_count)
        canvas.rows(band.row_start, band.row_count)[:] = colors_on_grid(xs, ys, max_iterations)
        return

    for j in range(band.row_start, band.row_stop):
        y = viewport.row_to_y(j)
        for i in range(canvas.width):
            x = viewport.column_to_x(i)
            canvas.set_pixel(i, j, iterations_at_point(x, y, max_iterations))


ThreadFactory = Callable[..., threading.Thread]


@dataclass
class PartitionedRenderer:
    """Render a frame with one thread per horizontal band.

    Bands are disjoint, so workers write straight into the shared canvas
    without locking. A worker that cannot be started or that fails does not
    stop the others; its rows keep the sentinel color and the failure is
    logged once every worker has been joined.
    """

    config: RenderConfig
    kernel: Kernel = Kernel.SCALAR
    sentinel: Optional[int] = SENTINEL_COLOR
    thread_factory: ThreadFactory = threading.Thread
    state: RendererState = field(default=RendererState.IDLE, init=False)

    def __post_init__(self) -> None:
        self.kernel = Kernel(self.kernel)

    def _work(self, canvas: Canvas, viewport: Viewport, outcome: WorkerOutcome) -> None:
        try:
            render_band(canvas, outcome.band, viewport, self.config.max_iterations, self.kernel)
        except Exception as exc:
            outcome.error = exc

    def run(self) -> RenderReport:
        config = self.config
        start = time.perf_counter()

        canvas = Canvas(config.image_width, config.image_height)
        if self.sentinel is not None:
            canvas.reset(self.sentinel)

        viewport = compute_viewport(config)
        bands = partition_bands(config, viewport)
        missing = skipped_rows(config)
        if missing:
            logger.warning(
                "image height %d is not divisible by %d threads; rows %d-%d will not be rendered",
                config.image_height, config.thread_count, missing.start, missing.stop - 1,
            )

        outcomes = [WorkerOutcome(band=band) for band in bands]
        handles: list[Optional[threading.Thread]] = []

        self.state = RendererState.DISPATCHING
        for outcome in outcomes:
            band = outcome.band
            logger.debug("Creating thread %d (rows %d-%d)", band.index, band.row_start, band.row_stop - 1)
            try:
                thread = self.thread_factory(
                    target=self._work,
                    args=(canvas, viewport, outcome),
                    name=f"mandel-band-{band.index}",
                )
                thread.start()
            except (RuntimeError, OSError) as exc:
                outcome.error = exc
                handles.append(None)
                continue
            outcome.started = True
            handles.append(thread)

        self.state = RendererState.JOINING
        for outcome, thread in zip(outcomes, handles):
            if thread is None:
                continue
            logger.debug("Joining thread %d", outcome.band.index)
            try:
                thread.join()
            except RuntimeError as exc:
                outcome.error = exc

        for outcome in outcomes:
            if outcome.ok:
                continue
            if not outcome.started:
                logger.warning("couldn't create thread %d: %s", outcome.band.index, outcome.error)
            else:
                logger.warning("thread %d failed: %s", outcome.band.index, outcome.error)

        self.state = RendererState.DONE
        elapsed = time.perf_counter() - start
        logger.debug("Rendered %dx%d in %.3fs", config.image_width, config.image_height, elapsed)

        return RenderReport(
            canvas=canvas,
            viewport=viewport,
            bands=bands,
            outcomes=outcomes,
            skipped_rows=missing,
            elapsed=elapsed,
        )

    def render(self) -> Canvas:
        return self.run().canvas


def render(config: RenderConfig, *, kernel: Kernel = Kernel.SCALAR, sentinel: Optional[int] = SENTINEL_COLOR) -> Canvas:
    """Render ``config`` and return the finished canvas."""

    return PartitionedRenderer(config, kernel=kernel, sentinel=sentinel).render()
