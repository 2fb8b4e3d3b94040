# -------------------------------------------------------------------------------------------------------------------- #
# Importing packages
# -------------------------------------------------------------------------------------------------------------------- #
import jax.numpy as jnp
import matplotlib.pyplot as plt
import nurbseval as nrb


# -------------------------------------------------------------------------------------------------------------------- #
# 2D NURBS curve example
# -------------------------------------------------------------------------------------------------------------------- #
# Define the array of control points (shape: 2 × 5)
P = jnp.array([
    [0.20, 0.40, 0.80, 0.60, 0.40],
    [0.50, 0.70, 0.60, 0.20, 0.20]
])
W = jnp.array([1.0, 1.5, 0.7, 1.0, 1.0])
p = 3
U = jnp.array([0.0, 0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0, 1.0])

# Define multiple points to project (each column is one point)
Q_all = jnp.array([
    [0.50, 0.70, 0.30, 0.50, 0.1],
    [0.50, 0.50, 0.40, 0.30, 0.1]
])

# Compute projected parameters for all points
u_all = jnp.array([nrb.project_point_to_curve(P, W, p, U, Q_all[:, i]) for i in range(Q_all.shape[1])])

# Evaluate the projected coordinates on the curve
C_all = nrb.rational_curve_point(P, W, p, U, u_all)

# Residual of the orthogonality condition (C(u*) - Q) · C'(u*) at each projection
dC_all = nrb.rational_curve_derivatives(P, W, p, U, u_all, 1)[1]
for i, u_star in enumerate(u_all):
    residual = jnp.dot(C_all[:, i] - Q_all[:, i], dC_all[:, i])
    print(f"Point {i}: u* = {float(u_star):.6f}, orthogonality residual = {float(residual):+.3e}")

# Plot the curve, the control polygon and the projection segments
C = nrb.rational_curve_point(P, W, p, U, jnp.linspace(0.0, 1.0, 501))
fig, ax = plt.subplots(figsize=(6, 5))
ax.plot(C[0], C[1], color="black", linewidth=1.5, label="NURBS curve")
ax.plot(P[0], P[1], linestyle="-.", color="red", marker="o", markerfacecolor="w", label="Control polygon")
ax.plot(jnp.stack((Q_all[0], C_all[0])), jnp.stack((Q_all[1], C_all[1])),
        linestyle="--", color="b", marker="o", markerfacecolor="w")
ax.legend(loc="upper right")
ax.set_aspect(1.0)
plt.tight_layout(pad=1.0)
plt.show()
