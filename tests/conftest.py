"""
-------
conftest.py
-------
Shared pytest fixtures for renderer tests.
"""

import logging
import threading

import pytest

from mandelbrot import RenderConfig


@pytest.fixture
def small_config() -> RenderConfig:
    """4x4 view of the whole set, cheap enough for per-pixel cross-checks."""
    return RenderConfig(
        x_center=0.0,
        y_center=0.0,
        scale=2.0,
        image_width=4,
        image_height=4,
        max_iterations=50,
        thread_count=1,
    )


@pytest.fixture
def failing_thread_factory():
    """Build a thread factory that refuses to start the given band numbers."""
    def make(*failing_bands):
        def factory(*, target, args, name):
            band_index = int(name.rsplit("-", 1)[1])
            if band_index in failing_bands:
                raise RuntimeError("can't start new thread")
            return threading.Thread(target=target, args=args, name=name)
        return factory
    return make


@pytest.fixture(autouse=True)
def reset_package_logger():
    """The CLIs attach handlers to the package logger; drop them between tests."""
    yield
    logger = logging.getLogger("mandelbrot")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
