"""Escape-time evaluation of the Mandelbrot iteration."""

from __future__ import annotations

import numpy as np

from .canvas import make_rgba

# Squared magnitude past which an orbit is guaranteed to diverge.
HORIZON_SQUARED = 4.0


def escape_time(x: float, y: float, max_iterations: int) -> int:
    """Return the number of iterations of ``z = z**2 + c`` before ``|z| > 2``.

    The orbit starts at ``z = 0`` with ``c = x + iy``. Points that never
    escape report ``max_iterations``.
    """

    zx = 0.0
    zy = 0.0
    iterations = 0
    while zx * zx + zy * zy <= HORIZON_SQUARED and iterations < max_iterations:
        zx, zy = zx * zx - zy * zy + x, 2.0 * zx * zy + y
        iterations += 1
    return iterations


def iteration_to_color(iterations: int, max_iterations: int) -> int:
    """Scale an iteration count to an opaque gray with alpha fixed at 0."""

    if max_iterations <= 0:
        gray = 0
    else:
        gray = 255 * iterations // max_iterations
    return make_rgba(gray, gray, gray, 0)


def iterations_at_point(x: float, y: float, max_iterations: int) -> int:
    return iteration_to_color(escape_time(x, y, max_iterations), max_iterations)


def escape_times_on_grid(xs: np.ndarray, ys: np.ndarray, max_iterations: int) -> np.ndarray:
    """Vectorized :func:`escape_time` over the grid ``ys`` x ``xs``.

    Returns an ``int64`` array of shape ``(len(ys), len(xs))``. Each element
    follows the same sequence of double-precision operations as the scalar
    evaluator, so the counts match it exactly.
    """

    X, Y = np.meshgrid(np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64))
    zx = np.zeros_like(X)
    zy = np.zeros_like(Y)
    ns = np.zeros(X.shape, dtype=np.int64)
    active = np.ones(X.shape, dtype=bool)

    with np.errstate(over="ignore", invalid="ignore"):
        for _ in range(max(int(max_iterations), 0)):
            active &= zx * zx + zy * zy <= HORIZON_SQUARED
            if not active.any():
                break
            zx_new = zx * zx - zy * zy + X
            zy_new = 2.0 * zx * zy + Y
            zx = np.where(active, zx_new, zx)
            zy = np.where(active, zy_new, zy)
            ns += active
    return ns


def colors_on_grid(xs: np.ndarray, ys: np.ndarray, max_iterations: int) -> np.ndarray:
    """Packed colors for the grid ``ys`` x ``xs`` as a ``uint32`` array."""

    ns = escape_times_on_grid(xs, ys, max_iterations)
    if max_iterations <= 0:
        gray = np.zeros(ns.shape, dtype=np.uint32)
    else:
        gray = (255 * ns // int(max_iterations)).astype(np.uint32)
    return (gray << 24) | (gray << 16) | (gray << 8)
