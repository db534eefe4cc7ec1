import logging
import math
from dataclasses import dataclass, replace

import numpy as np

logger = logging.getLogger(__name__)

MAX_RPM = 6000.0
OPEN_FIELD_IF = 0.001  # below this the field winding is treated as open [A]


@dataclass(frozen=True)
class MotorConstants:
    Ra_int: float = 0.5   # internal armature resistance [Ω]
    Rf_int: float = 200.0  # internal field resistance [Ω]
    Ia_load: float = 2.0  # load current, held constant [A]
    # N = K * Eb / If, calibrated at V=220, no external resistance:
    #   If = 1.1 A, Eb = 219 V, N = 1500 RPM  ->  K = 1500 * 1.1 / 219
    K: float = 7.534

    def __post_init__(self):
        for field in ("Ra_int", "Rf_int", "Ia_load", "K"):
            value = getattr(self, field)
            if not (math.isfinite(value) and value > 0):
                raise ValueError(f"{field} must be a finite positive number (got {value!r})")


@dataclass(frozen=True)
class SimulationInputs:
    voltage: float = 220.0  # supply voltage [V]
    ra_ext: float = 0.0     # external armature resistance [Ω]
    rf_ext: float = 0.0     # external field resistance [Ω]


@dataclass(frozen=True)
class SimulationOutputs:
    i_f: float    # field current [A]
    eb: float     # back-EMF [V]
    speed: float  # [RPM], unrounded

    @property
    def rpm(self) -> int:
        return round_half_up(self.speed)


@dataclass(frozen=True)
class ObservationRecord:
    n: int
    inputs: SimulationInputs
    outputs: SimulationOutputs


class InvalidInputError(ValueError):
    def __init__(self, field: str, value):
        super().__init__(f"{field} must be a finite, non-negative number (got {value!r})")
        self.field = field
        self.value = value


DEFAULT_CONSTANTS = MotorConstants()
DEFAULT_INPUTS = SimulationInputs()


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _validate(inputs: SimulationInputs):
    for field in ("voltage", "ra_ext", "rf_ext"):
        value = getattr(inputs, field)
        try:
            ok = math.isfinite(value) and value >= 0
        except TypeError:
            ok = False
        if not ok:
            logger.warning("rejecting %s=%r", field, value)
            raise InvalidInputError(field, value)


def compute(inputs: SimulationInputs,
            constants: MotorConstants = DEFAULT_CONSTANTS) -> SimulationOutputs:
    """
    Steady-state shunt motor:
      If = V / (Rf_int + Rf_ext)
      Eb = V - Ia * (Ra_int + Ra_ext),  floored at 0
      N  = K * Eb / If                  (flux ∝ If)
    An open field (If <= 0.001 A) runs away; that is shown as MAX_RPM
    while the supply is on and 0 when it is off.
    """
    _validate(inputs)
    c = constants
    V = float(inputs.voltage)

    i_f = V / (c.Rf_int + inputs.rf_ext)

    eb = V - c.Ia_load * (c.Ra_int + inputs.ra_ext)
    if eb < 0:
        eb = 0.0

    if i_f <= OPEN_FIELD_IF:
        n = MAX_RPM if V > 0 else 0.0
    else:
        n = c.K * (eb / i_f)

    n = min(max(n, 0.0), MAX_RPM)
    return SimulationOutputs(i_f=i_f, eb=eb, speed=n)


def characteristic(param: str, values, inputs: SimulationInputs = DEFAULT_INPUTS,
                   constants: MotorConstants = DEFAULT_CONSTANTS) -> np.ndarray:
    """
    Speed [RPM] over a sweep of one input ("voltage", "ra_ext" or "rf_ext"),
    the other two held at their values in `inputs`.
    """
    if param not in ("voltage", "ra_ext", "rf_ext"):
        raise ValueError(f"unknown sweep parameter {param!r}")
    values = np.atleast_1d(np.asarray(values, dtype=float))
    if not np.all(np.isfinite(values)) or np.any(values < 0):
        raise InvalidInputError(param, values)
    _validate(inputs)

    c = constants
    V = np.full_like(values, inputs.voltage)
    ra = np.full_like(values, inputs.ra_ext)
    rf = np.full_like(values, inputs.rf_ext)
    {"voltage": V, "ra_ext": ra, "rf_ext": rf}[param][:] = values

    i_f = V / (c.Rf_int + rf)
    eb = np.maximum(V - c.Ia_load * (c.Ra_int + ra), 0.0)

    open_field = i_f <= OPEN_FIELD_IF
    safe_if = np.where(open_field, 1.0, i_f)
    n = np.where(open_field, np.where(V > 0, MAX_RPM, 0.0), c.K * eb / safe_if)
    return np.clip(n, 0.0, MAX_RPM)


class SimulationState:
    """
    Latest inputs/outputs plus the reading counter.
    The observation history itself belongs to the caller; reset() only
    restarts the numbering.
    """
    def __init__(self, constants: MotorConstants = DEFAULT_CONSTANTS,
                 defaults: SimulationInputs = DEFAULT_INPUTS):
        self.constants = constants
        self.defaults = defaults
        self.count = 0
        self.inputs = defaults
        self.outputs = compute(defaults, constants)

    def recompute(self, inputs: SimulationInputs) -> SimulationOutputs:
        # compute before assigning so a rejected input leaves the old snapshot
        outputs = compute(inputs, self.constants)
        self.inputs, self.outputs = inputs, outputs
        logger.debug("recompute %s -> %s", inputs, outputs)
        return outputs

    def update(self, **changes) -> SimulationOutputs:
        return self.recompute(replace(self.inputs, **changes))

    def record_observation(self) -> ObservationRecord:
        self.count += 1
        rec = ObservationRecord(self.count, self.inputs, self.outputs)
        logger.info("reading %d: N=%d RPM", rec.n, rec.outputs.rpm)
        return rec

    def reset(self) -> SimulationOutputs:
        self.count = 0
        logger.info("reset to defaults %s", self.defaults)
        return self.recompute(self.defaults)
