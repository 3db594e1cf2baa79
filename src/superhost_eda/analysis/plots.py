# ========================
# src/superhost_eda/analysis/plots.py
# ========================

"""
Descriptive plots for the analysis dataset, rendered off-screen to PNG.
"""

import logging
from pathlib import Path
from typing import Dict

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402
import seaborn as sns  # noqa: E402

from ..pipeline.schema import PRICE, RATING, RESPONSE_TIME, SUPERHOST  # noqa: E402

logger = logging.getLogger(__name__)


def plot_price_distribution(df: pd.DataFrame, ax, price_ceiling: int):
    """Histogram of nightly prices below the ceiling."""
    sns.histplot(df[PRICE].astype('float64'), bins=50, ax=ax)
    ax.set_title(f'Nightly Price (below {price_ceiling})')
    ax.set_xlabel('Price')
    ax.set_ylabel('Listings')


def plot_missing_values(missing: pd.DataFrame, ax):
    sns.barplot(x='missing_share', y='column', data=missing, ax=ax, color='steelblue')
    ax.set_title('Share of Missing Values per Column')
    ax.set_xlabel('Missing share')
    ax.set_ylabel('')
    ax.set_xlim(0, 1.0)


def plot_rating_by_superhost(df: pd.DataFrame, ax):
    sns.boxplot(x=df[SUPERHOST].astype(str), y=df[RATING].astype('float64'), ax=ax)
    ax.set_title('Overall Review Score by Superhost Status')
    ax.set_xlabel('Superhost')
    ax.set_ylabel('Review score')


def plot_superhost_by_response_time(table: pd.DataFrame, ax):
    sns.barplot(x=table[RESPONSE_TIME].astype(str), y=table['superhost_share'].fillna(0.0), ax=ax, color='seagreen')
    ax.set_title('Superhost Share by Response Time')
    ax.set_xlabel('Host response time')
    ax.set_ylabel('Superhost share')
    ax.tick_params(axis='x', rotation=20)


def save_figures(analysis: pd.DataFrame,
                 tables: Dict[str, pd.DataFrame],
                 figures_dir: str,
                 price_ceiling: int) -> Dict[str, str]:
    """
    Render every figure to `figures_dir`.

    Args:
        analysis (pd.DataFrame): Cleaned analysis dataset
        tables (dict): Summary tables from ListingsSummarizer
        figures_dir (str): Output directory for PNG files
        price_ceiling (int): Ceiling used for trimming, shown in titles

    Returns:
        dict: Figure name -> file path
    """
    if analysis.empty:
        logger.warning("Analysis dataset is empty; skipping figures")
        return {}

    out_dir = Path(figures_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    figures = {
        'price_distribution': lambda ax: plot_price_distribution(analysis, ax, price_ceiling),
        'missing_values': lambda ax: plot_missing_values(tables['missing_values'], ax),
        'rating_by_superhost': lambda ax: plot_rating_by_superhost(analysis, ax),
        'superhost_by_response_time': lambda ax: plot_superhost_by_response_time(
            tables['superhost_by_response_time'], ax),
    }

    saved = {}
    for name, draw in figures.items():
        fig, ax = plt.subplots(figsize=(10, 6))
        try:
            draw(ax)
            ax.grid(axis='y', linestyle='--', alpha=0.7)
            fig.tight_layout()
            file_path = out_dir / f"{name}.png"
            fig.savefig(file_path, dpi=100)
        finally:
            plt.close(fig)
        saved[name] = str(file_path)
        logger.info(f"Saved figure {file_path}")

    return saved
