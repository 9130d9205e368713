"""
Orrery Exceptions

Error taxonomy for the orbital mechanics engine. Element validation errors
surface when a body is constructed; convergence errors surface from the
Kepler solver when its iteration cap is exceeded.
"""


class OrreryError(Exception):
    """Base class for all orbital mechanics engine errors"""


class InvalidElements(OrreryError, ValueError):
    """Raised when orbital elements are malformed (non-positive period,
    eccentricity outside [0, 1), non-finite values)."""

    def __init__(self, message: str, field: str = None, value=None):
        super().__init__(message)
        self.field = field
        self.value = value


class ConvergenceError(OrreryError, ArithmeticError):
    """Raised when the Kepler solver exceeds its iteration cap"""

    def __init__(self, mean_anomaly: float, eccentricity: float, iterations: int):
        super().__init__(
            f"Kepler solver did not converge after {iterations} iterations "
            f"(M={mean_anomaly!r}, e={eccentricity!r})"
        )
        self.mean_anomaly = mean_anomaly
        self.eccentricity = eccentricity
        self.iterations = iterations
