"""
Verify the endpoint tangency property of a rational Bezier curve using analytic derivatives.
"""

# -------------------------------------------------------------------------------------------------------------------- #
# Imports
# -------------------------------------------------------------------------------------------------------------------- #
import jax.numpy as jnp
import matplotlib.pyplot as plt
import nurbseval as nrb


# -------------------------------------------------------------------------------------------------------------------- #
# Define the rational Bezier curve
# -------------------------------------------------------------------------------------------------------------------- #
# Control points (ndim, n+1)
P = jnp.array([
    [0.20, 0.40, 0.80, 0.60, 0.40],
    [0.50, 0.70, 0.60, 0.20, 0.25],
])

# Weights (n+1,)
W = jnp.array([1.0, 1.3, 0.8, 1.2, 1.0])

# Degree and knot vector without interior knots
p = 4
U = jnp.concatenate((jnp.zeros(p + 1), jnp.ones(p + 1)))


# -------------------------------------------------------------------------------------------------------------------- #
# Compute analytic derivatives at the endpoints
# -------------------------------------------------------------------------------------------------------------------- #
ders = nrb.rational_curve_derivatives(P, W, p, U, jnp.array([0.0, 1.0]), 1)
dC_start, dC_end = ders[1, :, 0], ders[1, :, 1]

# C'(0) = p * w1 / w0 * (P1 - P0) and C'(1) = p * w_{n-1} / w_n * (P_n - P_{n-1})
dC_expected_start = p * W[1] / W[0] * (P[:, 1] - P[:, 0])
dC_expected_end = p * W[-2] / W[-1] * (P[:, -1] - P[:, -2])


# -------------------------------------------------------------------------------------------------------------------- #
# Compare and print results
# -------------------------------------------------------------------------------------------------------------------- #
abs_err_start = jnp.linalg.norm(dC_start - dC_expected_start)
abs_err_end = jnp.linalg.norm(dC_end - dC_expected_end)

print("\n--- Endpoint tangency verification ---")
print(f"Degree p = {p}")
print(f"Start derivative analytic:  {dC_start}")
print(f"Start derivative expected:  {dC_expected_start}")
print(f"Start absolute error:       {abs_err_start:.3e}")
print(f"End derivative analytic:    {dC_end}")
print(f"End derivative expected:    {dC_expected_end}")
print(f"End absolute error:         {abs_err_end:.3e}")

assert abs_err_start < 1e-12, "Start derivative does not match endpoint tangency condition!"
assert abs_err_end < 1e-12, "End derivative does not match endpoint tangency condition!"

print("\nEndpoint tangency property verified successfully.")


# -------------------------------------------------------------------------------------------------------------------- #
# Plot the curve and tangents
# -------------------------------------------------------------------------------------------------------------------- #
C = nrb.rational_curve_point(P, W, p, U, jnp.linspace(0, 1, 200))
fig, ax = plt.subplots(figsize=(6, 5))
ax.plot(P[0], P[1], linestyle="-.", color="red", marker="o", markerfacecolor="w", label="Control polygon")
ax.plot(*C, "k-", label="Rational Bezier curve")

scale = 0.2
ax.arrow(*P[:, 0], *(scale * dC_start), color="r", width=0.002, label="Tangent at start")
ax.arrow(*P[:, -1], *(scale * dC_end), color="b", width=0.002, label="Tangent at end")

ax.legend()
ax.set_aspect("equal")
ax.set_title("Endpoint tangency verification")
plt.tight_layout()
plt.show()
