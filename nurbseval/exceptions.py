class NurbsEvaluationError(ValueError):
    """Base class for errors raised while validating NURBS evaluation inputs."""


class InvalidTopologyError(NurbsEvaluationError):
    """The degree, knot vector and control points do not describe a valid NURBS.

    Raised when the relation ``num_knots == num_ctrl_pts + degree + 1`` does not hold,
    when the degree is not a non-negative integer, or when the control point and knot
    arrays do not have the expected number of dimensions.
    """


class NonPositiveWeightError(NurbsEvaluationError):
    """A control point weight is zero or negative, or the weights do not match the control net."""


class InvalidDerivativeOrderError(NurbsEvaluationError):
    """The requested number of derivatives is not a non-negative integer."""


class InvalidDimensionError(NurbsEvaluationError):
    """The number of spatial coordinates is not supported by the requested geometric quantity,
    or a point does not have the same number of coordinates as the control points."""
