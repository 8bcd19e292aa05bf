from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional

JACOBIAN_METHODS = ("central", "forward")


@dataclass(frozen=True)
class LMOptions:
    """Tuning knobs for one Levenberg-Marquardt fit.

    Damping
    -------
    damping_init : starting value of the damping factor (lambda).
    damping_factor : lambda is multiplied by this on a rejected step and
        divided by it on an accepted one.
    damping_min : floor applied after division.
    damping_max : the fit diverges once lambda grows past this.
    max_rejections : the fit diverges after this many consecutive rejections.

    Convergence
    -----------
    max_iterations : iteration budget (accepted and rejected steps both count).
    relative_tolerance : relative objective decrease treated as negligible.
    step_tolerance : step norm, relative to the parameter norm, treated as
        negligible.
    gradient_tolerance : largest cosine between the residual vector and a
        Jacobian column treated as zero.
    stationary_damping : decrease/step tests only count for steps taken with
        lambda at or below this value.

    Jacobian
    --------
    jacobian : "central" (two-sided) or "forward" finite differences.
    jacobian_step : relative perturbation, also used as the absolute floor.
    """

    max_iterations: int = 1000
    damping_init: float = 1e-3
    damping_factor: float = 10.0
    damping_min: float = 1e-12
    damping_max: float = 1e12
    max_rejections: int = 50
    relative_tolerance: float = 1e-6
    step_tolerance: float = 1e-10
    gradient_tolerance: float = 1e-12
    stationary_damping: float = 1.0
    jacobian: str = "central"
    jacobian_step: float = 1e-6

    def __post_init__(self) -> None:
        if int(self.max_iterations) < 1:
            raise ValueError("max_iterations must be >= 1.")
        if int(self.max_rejections) < 1:
            raise ValueError("max_rejections must be >= 1.")
        if not self.damping_factor > 1.0:
            raise ValueError("damping_factor must be > 1.")
        if not 0.0 <= self.damping_min <= self.damping_init <= self.damping_max:
            raise ValueError(
                "Damping must satisfy 0 <= damping_min <= damping_init <= damping_max."
            )
        for name in ("relative_tolerance", "step_tolerance", "gradient_tolerance"):
            if getattr(self, name) < 0.0:
                raise ValueError(f"{name} must be >= 0.")
        if self.jacobian not in JACOBIAN_METHODS:
            raise ValueError(
                f"Unknown jacobian method {self.jacobian!r}. Available: {JACOBIAN_METHODS}"
            )
        if not self.jacobian_step > 0.0:
            raise ValueError("jacobian_step must be > 0.")

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]] = None) -> "LMOptions":
        """Build options from a plain dict, rejecting unknown keys."""
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        known = tuple(f.name for f in fields(cls))
        unknown = sorted(k for k in options if k not in known)
        if unknown:
            raise ValueError(f"Unknown option(s) {unknown}. Available: {known}")
        return cls(**dict(options))

    def replace(self, **changes: Any) -> "LMOptions":
        return replace(self, **changes)
