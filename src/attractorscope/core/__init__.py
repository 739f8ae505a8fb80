"""Attractor simulation: vector fields, scheduling, integration, statistics."""

from attractorscope.core.fields import (
    AttractorType,
    ParameterSet,
    evaluate,
    random_parameters,
)
from attractorscope.core.integrator import Integrator, ParticleSet
from attractorscope.core.parallel import MAX, SUM, Reduction, set_workers
from attractorscope.core.scheduler import TransitionScheduler, TransitionState
from attractorscope.core.stats import FrameStats, compute_frame_stats
