"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from attractorscope.core.fields import AttractorType, ParameterSet
from attractorscope.core.integrator import ParticleSet
from attractorscope.experiment.attractor import AttractorConfig
from attractorscope.experiment.config import FramingConfig

LORENZ_CLASSIC = ParameterSet(a=10.0, b=28.0, c=2.66)


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded generator for reproducible clouds."""
    return np.random.default_rng(42)


@pytest.fixture
def lorenz_params() -> ParameterSet:
    return LORENZ_CLASSIC


@pytest.fixture
def small_cloud(rng) -> ParticleSet:
    """1000 particles in the default [-5, 5] box."""
    return ParticleSet.random_box(1000, rng)


@pytest.fixture
def small_config() -> AttractorConfig:
    """A renderer config small enough to run many frames quickly."""
    return AttractorConfig(
        width=64,
        height=48,
        fps=30,
        num_particles=2000,
        fragments=2,
        frames_per_fragment=10,
        start_type=AttractorType.LORENZ,
        # wide enough to keep a [-5, 5] cloud in a 64x48 frame
        framing=FramingConfig(min_zoom=1.0, initial_cam_scale=4.0),
    )
