"""Example showing how to represent circular arcs using NURBS curves and verify geometric properties."""

# -------------------------------------------------------------------------------------------------------------------- #
# Imports
# -------------------------------------------------------------------------------------------------------------------- #
import numpy as np
import matplotlib.pyplot as plt
import nurbseval as nrb


# -------------------------------------------------------------------------------------------------------------------- #
# Circular arc construction (Algorithm A7.1 from The NURBS Book)
# -------------------------------------------------------------------------------------------------------------------- #
def make_circular_arc(O, X, Y, R, theta_start, theta_end):
    """Return the control points, weights, degree and knots of a circular arc"""

    # Number of quadratic segments, each spanning at most 90 degrees
    theta_span = theta_end - theta_start
    n_arcs = int(np.ceil(abs(theta_span) / (np.pi / 2) - 1e-12))
    d_theta = theta_span / n_arcs
    w1 = np.cos(d_theta / 2)

    # Control points and weights
    P = np.zeros((O.size, 2 * n_arcs + 1))
    W = np.ones(2 * n_arcs + 1)
    P[:, 0] = O + R * np.cos(theta_start) * X + R * np.sin(theta_start) * Y
    for i in range(n_arcs):
        a0 = theta_start + i * d_theta
        a_mid = a0 + d_theta / 2
        a1 = a0 + d_theta
        P[:, 2 * i + 1] = O + R / w1 * (np.cos(a_mid) * X + np.sin(a_mid) * Y)
        P[:, 2 * i + 2] = O + R * (np.cos(a1) * X + np.sin(a1) * Y)
        W[2 * i + 1] = w1

    # Knot vector with double interior knots between segments
    interior = np.repeat(np.arange(1, n_arcs) / n_arcs, 2)
    U = np.concatenate((np.zeros(3), interior, np.ones(3)))
    return P, W, 2, U


def report(label, P, W, p, U, O, R, theta_span):
    u = np.linspace(0, 1, 100)
    C = nrb.rational_curve_point(P, W, p, U, u)
    curv = nrb.compute_curve_curvature(P, W, p, U, u)
    arc_len = nrb.compute_curve_arclength(P, W, p, U)
    arc_exact = R * np.abs(theta_span)

    print(f"\n=== {label} circular arc check ===")
    print(f"Radius RMS error            : {np.sqrt(np.mean((np.linalg.norm(C - O[:, None], axis=0) - R)**2)):.3e}")
    print(f"Expected curvature          : {1 / R:.6f}")
    print(f"Curvature RMS error         : {np.sqrt(np.mean((curv - 1 / R)**2)):.3e}")
    print(f"Arc length (computed)       : {arc_len:.6f}")
    print(f"Arc length (analytical)     : {arc_exact:.6f}")
    print(f"Arc length absolute error   : {np.abs(arc_len - arc_exact):.3e}")
    return C


# -------------------------------------------------------------------------------------------------------------------- #
# 2D circular arc example
# -------------------------------------------------------------------------------------------------------------------- #
nrb.print_package_info()

O = np.array([0.00, 1.00])             # Circle center
X = np.array([1.00, 0.00])             # X-direction in circle plane
Y = np.array([0.00, 1.00])             # Y-direction in circle plane
R = 0.5                                # Radius
theta_start = 1/6 * np.pi
theta_end = 3/2 * np.pi - 1/6 * np.pi

P, W, p, U = make_circular_arc(O, X, Y, R, theta_start, theta_end)
C = report("2D", P, W, p, U, O, R, theta_end - theta_start)

fig = plt.figure(figsize=(6, 5))
ax = fig.add_subplot(111)
ax.plot(C[0], C[1], color="black", linewidth=1.5)
ax.plot(P[0], P[1], linestyle="-.", color="red", marker="o", markerfacecolor="w")
ax.set_xlabel("$x$ axis", fontsize=12, color="k", labelpad=12)
ax.set_ylabel("$y$ axis", fontsize=12, color="k", labelpad=12)
ax.set_aspect(1.0)
plt.tight_layout(pad=1.0)


# -------------------------------------------------------------------------------------------------------------------- #
# 3D circular arc example
# -------------------------------------------------------------------------------------------------------------------- #
O = np.array([0.00, 0.00, 0.50])       # Circle center
X = np.array([1.00, 0.00, 0.00])       # X-direction (in plane)
Y = np.array([0.00, 0.60, 0.80])       # Y-direction (in plane)
R = 0.5
theta_start = 1/6 * np.pi
theta_end = np.pi

P, W, p, U = make_circular_arc(O, X, Y, R, theta_start, theta_end)
C = report("3D", P, W, p, U, O, R, theta_end - theta_start)

fig = plt.figure(figsize=(6, 5))
ax = fig.add_subplot(111, projection="3d")
ax.plot(C[0], C[1], C[2], color="black", linewidth=1.5)
ax.plot(P[0], P[1], P[2], linestyle="-.", color="red", marker="o", markerfacecolor="w")
ax.set_xlabel("$x$ axis", fontsize=12, color="k", labelpad=12)
ax.set_ylabel("$y$ axis", fontsize=12, color="k", labelpad=12)
ax.set_zlabel("$z$ axis", fontsize=12, color="k", labelpad=12)
plt.tight_layout(pad=1.0)


# -------------------------------------------------------------------------------------------------------------------- #
# Show figures
# -------------------------------------------------------------------------------------------------------------------- #
plt.show()
