"""
Particle state and explicit Euler integration with divergence recovery.
"""

from dataclasses import astuple, dataclass
from typing import Optional

import numba
import numpy as np

from attractorscope.core.fields import AttractorType, ParameterSet, derivative

DT = 0.012
MAX_COORD = 80.0
INITIAL_EXTENT = 5.0


@dataclass
class ParticleSet:
    """Positions and velocities as (N, 3) float32 arrays, mutated in place."""

    positions: np.ndarray
    velocities: np.ndarray

    def __post_init__(self):
        if self.positions.shape != self.velocities.shape or self.positions.ndim != 2:
            raise ValueError(
                f"positions {self.positions.shape} and velocities "
                f"{self.velocities.shape} must both be (N, 3)"
            )

    def __len__(self) -> int:
        return self.positions.shape[0]

    @classmethod
    def random_box(
        cls,
        count: int,
        rng: np.random.Generator,
        extent: float = INITIAL_EXTENT,
    ) -> "ParticleSet":
        """Uniform positions in [-extent, extent]^3 with zero velocity."""
        if count < 1:
            raise ValueError(f"particle count must be >= 1, got {count}")
        positions = rng.uniform(-extent, extent, size=(count, 3)).astype(np.float32)
        velocities = np.zeros((count, 3), dtype=np.float32)
        return cls(positions, velocities)

    def speeds(self, start: int = 0, stop: Optional[int] = None) -> np.ndarray:
        v = self.velocities[start:stop]
        return np.sqrt(np.einsum("ij,ij->i", v, v))


def respawn_positions(indices: np.ndarray) -> np.ndarray:
    """Deterministic respawn coordinate for each particle index.

    The same value is used on all three axes and lies in [-2, 2).
    """
    h = ((np.asarray(indices, dtype=np.int64) * 1327) % 1000) / 1000.0
    return ((h - 0.5) * 4.0).astype(np.float32)


# No fastmath: the NaN tests below must not be optimized away.
@numba.njit(parallel=True, cache=True)
def _euler_kernel(pos, vel, current, previous, p, blend, dt, max_coord):
    """In-place blended Euler step. Each particle is independent (prange over
    rows); returns the number of particles respawned."""
    N = pos.shape[0]
    respawned = 0
    for i in numba.prange(N):
        x = np.float64(pos[i, 0])
        y = np.float64(pos[i, 1])
        z = np.float64(pos[i, 2])
        cx, cy, cz = derivative(current, x, y, z, p[0], p[1], p[2], p[3], p[4], p[5])
        qx, qy, qz = derivative(previous, x, y, z, p[0], p[1], p[2], p[3], p[4], p[5])
        dx = qx + (cx - qx) * blend
        dy = qy + (cy - qy) * blend
        dz = qz + (cz - qz) * blend
        nx = x + dx * dt
        ny = y + dy * dt
        nz = z + dz * dt
        if (
            nx != nx or ny != ny or nz != nz
            or abs(nx) > max_coord or abs(ny) > max_coord or abs(nz) > max_coord
        ):
            r = (((np.int64(i) * 1327) % 1000) / 1000.0 - 0.5) * 4.0
            nx = r
            ny = r
            nz = r
            dx = 0.0
            dy = 0.0
            dz = 0.0
            respawned += 1
        pos[i, 0] = nx
        pos[i, 1] = ny
        pos[i, 2] = nz
        vel[i, 0] = dx
        vel[i, 1] = dy
        vel[i, 2] = dz
    return respawned


class Integrator:
    """Advances every particle one fixed Euler step under a blended field."""

    def __init__(self, particles: ParticleSet, dt: float = DT, max_coord: float = MAX_COORD):
        self.particles = particles
        self.dt = dt
        self.max_coord = max_coord

    def step(
        self,
        current_type: AttractorType,
        previous_type: AttractorType,
        params: ParameterSet,
        blend: float,
    ) -> int:
        """Integrate all particles once. Returns the number respawned."""
        coeffs = np.array(astuple(params), dtype=np.float64)
        return int(
            _euler_kernel(
                self.particles.positions,
                self.particles.velocities,
                int(current_type),
                int(previous_type),
                coeffs,
                float(blend),
                float(self.dt),
                float(self.max_coord),
            )
        )
