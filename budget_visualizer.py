# budget_visualizer.py
# Visualization module for budget usage, cost distribution and cumulative spend

from typing import List

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np

from .budget_tracker import BudgetState
from .models import Suggestion


class BudgetVisualizer:
    """
    Generates:
    |— Budget Panel
    |     |— Usage Bar (spent vs capital)
    |     |— Cost Distribution Pie (per accepted suggestion)
    |     |— Cumulative Spend (in acceptance order, capital as a line)

    Output: Matplotlib figures (can be rendered inside Streamlit or saved)
    """

    def __init__(self, budget: BudgetState, accepted: List[Suggestion]):
        self.budget = budget
        self.accepted = list(accepted)
        self.costs = np.array([float(s.total_cost) for s in self.accepted], dtype=float)

    # ---------------------------------------------------------
    # Usage Bar
    # ---------------------------------------------------------
    def plot_usage_bar(self):
        capital = float(self.budget.capital)
        spent = float(self.budget.total_cost)

        fig, ax = plt.subplots(figsize=(8, 1.6))
        ax.barh([0], [capital], color="#e5e7eb", label="Capital")
        ax.barh(
            [0],
            [spent],
            color="#dc2626" if self.budget.is_over_budget else "#16a34a",
            label="Accepted",
        )
        ax.set_yticks([])
        ax.set_xlim(0, max(capital, spent) * 1.05 or 1)
        ax.set_title(f"{float(self.budget.percent_raw):.1f}% of budget used")
        ax.legend(loc="lower right")
        return fig

    # ---------------------------------------------------------
    # Cost Distribution Pie
    # ---------------------------------------------------------
    def plot_cost_pie(self):
        fig, ax = plt.subplots(figsize=(6, 6))

        if not self.accepted or self.costs.sum() <= 0:
            ax.text(0.5, 0.5, "No accepted experiences yet", ha="center", va="center")
            ax.axis("off")
            return fig

        labels = [s.title for s in self.accepted]
        ax.pie(self.costs, labels=labels, autopct="%1.1f%%")
        ax.set_title("Bucket List Cost Distribution")
        return fig

    # ---------------------------------------------------------
    # Cumulative Spend vs Capital
    # ---------------------------------------------------------
    def plot_cumulative(self):
        cumulative = np.cumsum(self.costs)
        x = np.arange(1, len(cumulative) + 1)

        fig, ax = plt.subplots(figsize=(10, 5))
        ax.plot(x, cumulative, marker="o", label="Cumulative cost")
        ax.axhline(float(self.budget.capital), color="#dc2626", linestyle="--", label="Capital")

        ax.set_xticks(x)
        ax.set_xlabel("Accepted suggestion #")
        ax.set_title("Cumulative Spend vs Capital")
        ax.legend()
        return fig


# End of file
