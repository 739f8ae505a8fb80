"""
Parameter and attractor-type transition scheduling.

Two clocks advance once per frame:
  - parameters low-pass toward the active target set every frame
  - the attractor type advances every `fragments_per_type` fragments, after
    which the previous and current vector fields cross-fade over
    `transition_frames` frames
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from attractorscope.core.fields import AttractorType, ParameterSet, random_parameters

PARAM_LERP = 0.02
FRAGMENTS_PER_TYPE = 6
TRANSITION_FRAMES = 120


@dataclass
class TransitionState:
    """Cross-fade bookkeeping between the previous and current attractor."""

    current_type: AttractorType
    previous_type: AttractorType
    steps: int = TRANSITION_FRAMES
    transition_frames: int = TRANSITION_FRAMES

    @property
    def blend(self) -> float:
        """Weight of the current field in [0, 1]; exactly 1.0 once settled."""
        return min(self.steps / self.transition_frames, 1.0)

    @property
    def settled(self) -> bool:
        return self.steps >= self.transition_frames

    def begin(self, new_type: AttractorType) -> None:
        self.previous_type = self.current_type
        self.current_type = new_type
        self.steps = 0

    def advance(self) -> None:
        if not self.settled:
            self.steps += 1


class TransitionScheduler:
    """Owns the parameter sets and the attractor-type cross-fade."""

    def __init__(
        self,
        start_type: AttractorType,
        frames_per_fragment: int,
        rng: Optional[np.random.Generator] = None,
        initial_params: Optional[ParameterSet] = None,
        fragments_per_type: int = FRAGMENTS_PER_TYPE,
        transition_frames: int = TRANSITION_FRAMES,
        param_lerp: float = PARAM_LERP,
    ):
        if frames_per_fragment < 1:
            raise ValueError(f"frames_per_fragment must be >= 1, got {frames_per_fragment}")
        self.rng = rng if rng is not None else np.random.default_rng()
        self.frames_per_fragment = frames_per_fragment
        self.fragments_per_type = fragments_per_type
        self.param_lerp = param_lerp

        start_type = AttractorType(start_type)
        self.target = initial_params or random_parameters(start_type, self.rng)
        self.current = self.target
        self.transition = TransitionState(
            current_type=start_type,
            previous_type=start_type,
            steps=transition_frames,
            transition_frames=transition_frames,
        )
        self.fragment_counter = 0
        self.type_changes = 0

    @property
    def current_type(self) -> AttractorType:
        return self.transition.current_type

    @property
    def previous_type(self) -> AttractorType:
        return self.transition.previous_type

    @property
    def blend(self) -> float:
        return self.transition.blend

    def fragment_progress(self, frame: int) -> float:
        """Position of `frame` inside its fragment, in [0, 1)."""
        return (frame % self.frames_per_fragment) / self.frames_per_fragment

    def update(self, frame: int) -> bool:
        """Advance both clocks for `frame`. Returns True if the type changed."""
        changed = False
        if frame % self.frames_per_fragment == 0:
            self.fragment_counter += 1
            if self.fragment_counter >= self.fragments_per_type:
                self.fragment_counter = 0
                self.transition.begin(self.current_type.next())
                # Fresh targets only on type changes; never per fragment
                self.target = random_parameters(self.current_type, self.rng)
                self.type_changes += 1
                changed = True

        self.current = self.current.lerp(self.target, self.param_lerp)
        self.transition.advance()
        return changed
