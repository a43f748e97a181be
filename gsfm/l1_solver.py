"""Least absolute deviations solver, minimizing ||A x - b||_1 with ADMM."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
import scipy.sparse as sp
from scipy.sparse.linalg import splu


@dataclass
class L1SolverOptions:
    max_num_iterations: int = 1000
    # Augmented Lagrangian parameter.
    rho: float = 1.0
    # Over-relaxation parameter, typically between 1.0 and 1.8.
    alpha: float = 1.0
    absolute_tolerance: float = 1e-4
    relative_tolerance: float = 1e-2


def _shrinkage(vec: np.ndarray, kappa: float) -> np.ndarray:
    return np.maximum(0.0, vec - kappa) - np.maximum(0.0, -vec - kappa)


class L1Solver:
    """Solve ``min_x ||A x - b||_1`` for a fixed matrix ``A``."""

    def __init__(self, options: L1SolverOptions, matrix) -> None:
        self.options = options
        self._a = sp.csc_matrix(matrix, dtype=float)
        spd = (self._a.T @ self._a).tocsc()
        try:
            self._factor = splu(spd)
        except RuntimeError as exc:
            raise np.linalg.LinAlgError(
                "could not factorize the normal equations of the L1 problem"
            ) from exc

    def solve(self, rhs, initial=None) -> np.ndarray:
        """Return the minimizer; ``initial`` is returned if no iteration runs."""
        a = self._a
        rows, cols = a.shape
        b = np.asarray(rhs, dtype=float).reshape(-1)
        if b.shape[0] != rows:
            raise ValueError(f"rhs has {b.shape[0]} entries, expected {rows}")
        if initial is None:
            x = np.zeros(cols)
        else:
            x = np.array(initial, dtype=float).reshape(-1)
            if x.shape[0] != cols:
                raise ValueError(f"initial has {x.shape[0]} entries, expected {cols}")

        opts = self.options
        z = np.zeros(rows)
        u = np.zeros(rows)
        rhs_norm = np.linalg.norm(b)
        primal_abs_eps = math.sqrt(rows) * opts.absolute_tolerance
        dual_abs_eps = math.sqrt(cols) * opts.absolute_tolerance

        for _ in range(opts.max_num_iterations):
            x = self._factor.solve(a.T @ (b + z - u))
            if not np.all(np.isfinite(x)):
                raise np.linalg.LinAlgError("L1 minimization produced non-finite values")

            a_times_x = a @ x
            ax_hat = opts.alpha * a_times_x + (1.0 - opts.alpha) * (z + b)

            z_old = z
            z = _shrinkage(ax_hat - b + u, 1.0 / opts.rho)
            u = u + ax_hat - z - b

            r_norm = np.linalg.norm(a_times_x - z - b)
            s_norm = np.linalg.norm(-opts.rho * (a.T @ (z - z_old)))
            max_norm = max(np.linalg.norm(a_times_x), np.linalg.norm(z), rhs_norm)
            primal_eps = primal_abs_eps + opts.relative_tolerance * max_norm
            dual_eps = dual_abs_eps + opts.relative_tolerance * np.linalg.norm(
                opts.rho * (a.T @ u)
            )
            if r_norm < primal_eps and s_norm < dual_eps:
                break
        return x