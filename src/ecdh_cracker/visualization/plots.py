"""Matplotlib-based 2D plots of small curves and crack runs."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import matplotlib
matplotlib.use("Agg")  # Non-interactive backend by default

import matplotlib.pyplot as plt
import numpy as np

from ecdh_cracker.core.curve import Affine, EllipticCurve, Point

if TYPE_CHECKING:
    from ecdh_cracker.utils.types import BenchmarkRecord


class PlotSuite:
    """Scatter plots of curve points and the cracker's walk."""

    def __init__(self, save_dir: str = "~/Desktop") -> None:
        self.save_dir = os.path.expanduser(save_dir)

    def _save_or_show(
        self, fig: plt.Figure, name: str, show: bool, save: bool
    ) -> plt.Figure:
        if save:
            os.makedirs(self.save_dir, exist_ok=True)
            path = os.path.join(self.save_dir, f"ecdh_{name}.png")
            fig.savefig(path, dpi=150, bbox_inches="tight")
        if show:
            plt.show()
        else:
            plt.close(fig)
        return fig

    @staticmethod
    def _coords(points: list[Point]) -> tuple[np.ndarray, np.ndarray]:
        finite = [p for p in points if isinstance(p, Affine)]
        xs = np.array([p.x.value for p in finite], dtype=np.int64)
        ys = np.array([p.y.value for p in finite], dtype=np.int64)
        return xs, ys

    def curve_points(
        self,
        curve: EllipticCurve,
        base: Affine | None = None,
        highlight: tuple[Point, ...] = (),
        show: bool = False,
        save: bool = True,
    ) -> plt.Figure:
        """Scatter every affine point of a small curve.

        The base point is drawn in red, highlighted points (public keys,
        shared key) in orange.
        """
        xs, ys = self._coords(curve.points())

        fig, ax = plt.subplots(figsize=(8, 8))
        ax.scatter(xs, ys, s=8, color="steelblue", label=f"{len(xs) + 1} points (incl. inf)")
        if base is not None:
            ax.scatter([base.x.value], [base.y.value], s=60, color="red", label=f"Base {base}")
        if highlight:
            hx, hy = self._coords(list(highlight))
            ax.scatter(hx, hy, s=60, color="orange", marker="x", label="Highlighted")
        q = curve.field.modulus
        ax.set_xlim(-1, q)
        ax.set_ylim(-1, q)
        ax.set_xlabel("x")
        ax.set_ylabel("y")
        ax.set_title(str(curve))
        ax.legend(loc="upper right")
        ax.grid(True, alpha=0.3)

        return self._save_or_show(fig, "curve_points", show, save)

    def crack_walk(
        self,
        curve: EllipticCurve,
        base: Affine,
        steps: int,
        show: bool = False,
        save: bool = True,
    ) -> plt.Figure:
        """Plot base, 2*base, ..., steps*base in the order the cracker visits them."""
        walk: list[Point] = []
        tmp: Point = base
        for _ in range(steps):
            walk.append(tmp)
            tmp = curve.add(tmp, base)
        xs, ys = self._coords(walk)

        fig, ax = plt.subplots(figsize=(8, 8))
        if len(xs) > 0:
            ax.plot(xs, ys, color="gray", alpha=0.3, linewidth=0.8)
            sc = ax.scatter(xs, ys, c=np.arange(len(xs)), cmap="viridis", s=12)
            fig.colorbar(sc, ax=ax, label="Step")
        else:
            ax.text(0.5, 0.5, "No data", ha="center", va="center")
        ax.set_xlabel("x")
        ax.set_ylabel("y")
        ax.set_title(f"Brute-force walk, {steps} steps from {base}")
        ax.grid(True, alpha=0.3)

        return self._save_or_show(fig, "crack_walk", show, save)

    def iteration_histogram(
        self,
        records: list[BenchmarkRecord],
        show: bool = False,
        save: bool = True,
    ) -> plt.Figure:
        """Distribution of iterations needed per crack."""
        fig, ax = plt.subplots(figsize=(10, 5))
        if not records:
            ax.text(0.5, 0.5, "No data", ha="center", va="center")
            return self._save_or_show(fig, "iterations", show, save)

        iterations = np.array([r.iterations for r in records])
        ax.hist(iterations, bins=min(20, len(records)), color="steelblue", edgecolor="white")
        ax.axvline(x=float(np.mean(iterations)), color="red", linestyle="--",
                   label=f"Mean: {np.mean(iterations):.1f}")
        ax.set_xlabel("Iterations")
        ax.set_ylabel("Runs")
        ax.set_title(f"Brute-force iterations over {len(records)} runs (q = {records[0].modulus})")
        ax.legend()
        ax.grid(True, alpha=0.3)

        return self._save_or_show(fig, "iterations", show, save)
