"""Attractorscope: cinematic strange attractor particle renderer."""

from attractorscope.core.fields import AttractorType, ParameterSet
from attractorscope.experiment.attractor import AttractorConfig, AttractorRenderer

__version__ = "0.1.0"
__all__ = [
    "AttractorType",
    "ParameterSet",
    "AttractorConfig",
    "AttractorRenderer",
]
