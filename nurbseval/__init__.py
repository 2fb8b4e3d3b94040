import os
os.environ.setdefault("JAX_PLATFORM_NAME", "cpu")
import jax
jax.config.update("jax_enable_x64", True)

from loguru import logger
logger.disable("nurbseval")

# Import evaluation modules
from .exceptions import (
    NurbsEvaluationError,
    InvalidTopologyError,
    NonPositiveWeightError,
    InvalidDerivativeOrderError,
    InvalidDimensionError,
)
from .validation import is_valid_relation, check_curve_inputs, check_surface_inputs
from .homogeneous import to_homogeneous, to_cartesian, truncate_homogeneous, binomial_coeff
from .nurbs_basis_functions import (
    find_span,
    compute_basis_values,
    compute_basis_derivatives,
    compute_basis_polynomials,
    compute_basis_polynomials_derivatives,
)
from .nurbs_curve import (
    curve_point,
    curve_derivatives,
    rational_curve_point,
    rational_curve_derivatives,
    compute_bspline_coordinates,
    compute_nurbs_coordinates,
    compute_all_bspline_derivatives,
    compute_all_nurbs_derivatives,
)
from .nurbs_surface import (
    surface_point,
    surface_derivatives,
    rational_surface_point,
    rational_surface_derivatives,
    compute_bspline_surface_coordinates,
    compute_nurbs_surface_coordinates,
    compute_all_bspline_surface_derivatives,
    compute_all_nurbs_surface_derivatives,
)
from .curve_properties import (
    compute_curve_tangent,
    compute_curve_curvature,
    compute_curve_arclength,
    project_point_to_curve,
    compute_surface_normal,
)
from .log_config import enable_logging, disable_logging

# Package info
__version__ = "0.1.0"
PACKAGE_NAME = "nurbseval"
BREAKLINE = 80 * "-"


def print_banner():
    """Prints a banner."""
    banner = "  nurbseval: points and derivatives of NURBS curves and surfaces"
    print(BREAKLINE)
    print(banner)
    print(BREAKLINE)


def print_package_info():
    """Prints package information with predefined values."""

    info = f""" Version:       {__version__}
 JAX backend:   {jax.default_backend()} (x64 enabled: {jax.config.jax_enable_x64})"""
    print_banner()
    print(BREAKLINE)
    print(info)
    print(BREAKLINE)
