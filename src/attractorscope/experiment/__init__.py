"""
Attractorscope rendering: camera, rasterizer, color grading and the frame loop.
"""

from attractorscope.experiment.attractor import AttractorConfig, AttractorRenderer
from attractorscope.experiment.base import BaseConfig, BaseVisualizer
from attractorscope.experiment.camera import CameraState, CinematicCamera
from attractorscope.experiment.config import FramingConfig, load_framing_config
from attractorscope.experiment.rasterizer import AccumulationBuffer, rasterize
