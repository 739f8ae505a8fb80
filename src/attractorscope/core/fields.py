"""
Strange attractor vector fields.

Each attractor type is a closed-form derivative dF/dt = f(x, y, z; a..f).
The field functions are numba-compiled: x, y, z may be scalars or
equal-length arrays, and the returned derivative components match their shape.
"""

import enum
from dataclasses import astuple, dataclass
from typing import Callable, Dict, Tuple

import numba
import numpy as np


class AttractorType(enum.IntEnum):
    """Closed set of attractor families, cycled in declaration order."""

    AIZAWA = 0
    THOMAS = 1
    LORENZ = 2
    HALVORSEN = 3
    CHEN = 4

    @property
    def label(self) -> str:
        return self.name.capitalize()

    def next(self) -> "AttractorType":
        return AttractorType((self.value + 1) % len(AttractorType))


@dataclass(frozen=True)
class ParameterSet:
    """Six coefficients whose meaning depends on the attractor family.

    Lorenz reads a=sigma, b=rho, c=beta; Chen reads a, b, c; Thomas only b;
    Halvorsen only a; Aizawa uses all six.
    """

    a: float = 0.0
    b: float = 0.0
    c: float = 0.0
    d: float = 0.0
    e: float = 0.0
    f: float = 0.0

    def lerp(self, target: "ParameterSet", factor: float) -> "ParameterSet":
        """First-order low-pass step toward `target`."""
        return ParameterSet(
            *(cur + (tgt - cur) * factor for cur, tgt in zip(astuple(self), astuple(target)))
        )

    def distance(self, other: "ParameterSet") -> float:
        """Largest per-field absolute difference."""
        return max(abs(x - y) for x, y in zip(astuple(self), astuple(other)))


Derivative = Tuple[np.ndarray, np.ndarray, np.ndarray]
FieldFn = Callable[..., Derivative]

# Field kernels take the six coefficients as plain scalars so the same compiled
# function serves per-particle loops (scalars) and whole-array calls.


@numba.njit(cache=True)
def aizawa(x, y, z, a, b, c, d, e, f):
    zb = z - b
    dx = zb * x - d * y
    dy = d * x + zb * y
    dz = c + a * z - (z * z * z) / 3.0 - (x * x + y * y) * (1.0 + e * z) + f * z * x * x * x
    return dx, dy, dz


@numba.njit(cache=True)
def thomas(x, y, z, a, b, c, d, e, f):
    return np.sin(y) - b * x, np.sin(z) - b * y, np.sin(x) - b * z


@numba.njit(cache=True)
def lorenz(x, y, z, a, b, c, d, e, f):
    return a * (y - x), x * (b - z) - y, x * y - c * z


@numba.njit(cache=True)
def halvorsen(x, y, z, a, b, c, d, e, f):
    dx = -a * x - 4.0 * y - 4.0 * z - y * y
    dy = -a * y - 4.0 * z - 4.0 * x - z * z
    dz = -a * z - 4.0 * x - 4.0 * y - x * x
    return dx, dy, dz


@numba.njit(cache=True)
def chen(x, y, z, a, b, c, d, e, f):
    dx = a * (y - x)
    dy = (c - a) * x - x * z + c * y
    dz = x * y - b * z
    return dx, dy, dz


VECTOR_FIELDS: Dict[AttractorType, FieldFn] = {
    AttractorType.AIZAWA: aizawa,
    AttractorType.THOMAS: thomas,
    AttractorType.LORENZ: lorenz,
    AttractorType.HALVORSEN: halvorsen,
    AttractorType.CHEN: chen,
}

_AIZAWA = int(AttractorType.AIZAWA)
_THOMAS = int(AttractorType.THOMAS)
_LORENZ = int(AttractorType.LORENZ)
_HALVORSEN = int(AttractorType.HALVORSEN)


@numba.njit(cache=True)
def derivative(kind, x, y, z, a, b, c, d, e, f):
    """Scalar field dispatch on the integer type code, for compiled loops."""
    if kind == _AIZAWA:
        return aizawa(x, y, z, a, b, c, d, e, f)
    if kind == _THOMAS:
        return thomas(x, y, z, a, b, c, d, e, f)
    if kind == _LORENZ:
        return lorenz(x, y, z, a, b, c, d, e, f)
    if kind == _HALVORSEN:
        return halvorsen(x, y, z, a, b, c, d, e, f)
    return chen(x, y, z, a, b, c, d, e, f)


def evaluate(kind: AttractorType, x, y, z, params: ParameterSet) -> Derivative:
    """Evaluate the vector field of `kind` at (x, y, z)."""
    return VECTOR_FIELDS[kind](x, y, z, *astuple(params))


# Canonical coefficients before jitter.
CANONICAL_PARAMETERS: Dict[AttractorType, ParameterSet] = {
    AttractorType.AIZAWA: ParameterSet(a=0.95, b=0.7, c=0.6, d=3.5, e=0.25, f=0.1),
    AttractorType.THOMAS: ParameterSet(b=0.19),
    AttractorType.LORENZ: ParameterSet(a=10.0, b=28.0, c=2.66),
    AttractorType.HALVORSEN: ParameterSet(a=1.4),
    AttractorType.CHEN: ParameterSet(a=40.0, b=3.0, c=28.0),
}

# (field name, half-width of the uniform jitter) applied at each type change.
_JITTER: Dict[AttractorType, Tuple[str, float]] = {
    AttractorType.AIZAWA: ("d", 0.5),
    AttractorType.THOMAS: ("b", 0.02),
    AttractorType.LORENZ: ("b", 5.0),
    AttractorType.HALVORSEN: ("a", 0.2),
}


def random_parameters(kind: AttractorType, rng: np.random.Generator) -> ParameterSet:
    """Draw a target parameter set: canonical constants plus bounded jitter.

    Chen has no jitter and always returns its canonical set.
    """
    base = CANONICAL_PARAMETERS[kind]
    if kind not in _JITTER:
        return base
    name, half_width = _JITTER[kind]
    values = dict(zip("abcdef", astuple(base)))
    values[name] += float(rng.uniform(-half_width, half_width))
    return ParameterSet(**values)


def format_parameters(kind: AttractorType, params: ParameterSet) -> str:
    """Human-readable `name=value` list with only the fields `kind` uses."""
    if kind == AttractorType.AIZAWA:
        return " ".join(f"{k}={v:.3f}" for k, v in zip("abcdef", astuple(params)))
    if kind == AttractorType.THOMAS:
        return f"b={params.b:.4f}"
    if kind == AttractorType.LORENZ:
        return f"sigma={params.a:.2f} rho={params.b:.2f} beta={params.c:.3f}"
    if kind == AttractorType.HALVORSEN:
        return f"a={params.a:.3f}"
    return f"a={params.a:.2f} b={params.b:.2f} c={params.c:.2f}"
