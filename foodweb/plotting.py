"""
Descriptive statistics and visualization functions.

This module contains functions for:
- Writing summary statistics of the cleaned observations
- Plotting predator mass against prey mass by feeding interaction
- Plotting the distribution of predator-prey mass ratios
- Comparing candidate models by AIC
"""

import numpy as np
import matplotlib.pyplot as plt
import seaborn as sns
from pathlib import Path

from foodweb import config


def save_summary_statistics(df, output_path):
    """
    Compute and save summary statistics for the cleaned observations.

    Parameters
    ----------
    df : DataFrame
        Cleaned observation table with mass ratio columns
    output_path : str or Path
        Output file path for statistics text file

    Returns
    -------
    None
        Writes statistics to text file
    """
    output_path = Path(output_path)

    with open(output_path, 'w') as f:
        f.write("Summary Statistics for Predator-Prey Body Sizes\n")
        f.write("="*80 + "\n\n")

        f.write(f"Observations: {len(df):,}\n")
        f.write(f"Predator species: {df['Predator.common.name'].nunique():,}\n")
        f.write(f"Geographic locations: {df['Geographic.location'].nunique():,}\n\n")

        for column in ['Predator.mass', 'Prey.mass', 'Log10.mass.ratio']:
            values = df[column][np.isfinite(df[column])]
            f.write(f"{column}:\n")
            f.write(f"  Mean: {values.mean():.4f}\n")
            f.write(f"  Median: {values.median():.4f}\n")
            f.write(f"  Std: {values.std():.4f}\n")
            f.write(f"  Min: {values.min():.4f}\n")
            f.write(f"  Max: {values.max():.4f}\n\n")

        for column in [config.INTERACTION_COLUMN, config.LIFESTAGE_COLUMN, config.HABITAT_COLUMN]:
            f.write(f"Observations by {column}:\n")
            for value, count in df[column].value_counts(dropna=False).items():
                f.write(f"  {value}: {count}\n")
            f.write("\n")

    print(f"Summary statistics saved to {output_path}")


def create_mass_scatter_plot(data, output_path):
    """
    Scatter log10 predator mass against log10 prey mass by feeding interaction.

    Parameters
    ----------
    data : DataFrame
        Analysis dataset with log_prey_mass, log_predator_mass and feeding
    output_path : str or Path
        Output file path for figure

    Returns
    -------
    None
        Saves figure to file
    """
    fig, ax = plt.subplots(figsize=(8, 6))
    sns.scatterplot(data=data, x='log_prey_mass', y='log_predator_mass', hue='feeding',
                    alpha=0.4, s=12, edgecolor='none', ax=ax)

    # Per-group least squares lines
    for feeding, group in data.groupby('feeding'):
        if group['log_prey_mass'].nunique() < 2:
            continue
        slope, intercept = np.polyfit(group['log_prey_mass'], group['log_predator_mass'], 1)
        xs = np.linspace(group['log_prey_mass'].min(), group['log_prey_mass'].max(), 50)
        ax.plot(xs, intercept + slope * xs, linewidth=1.5)

    ax.set_xlabel('log10 Prey Mass (g)')
    ax.set_ylabel('log10 Predator Mass (g)')
    ax.set_title('Predator vs Prey Body Mass')
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig(output_path, dpi=config.FIGURE_DPI, bbox_inches='tight')
    plt.close()

    print(f"Mass scatter plot saved to {output_path}")


def create_distribution_plots(df, output_path):
    """
    Create distribution plots of the log10 mass ratio.

    Left panel: histogram. Right panel: box plot by predator life stage.
    """
    fig, axes = plt.subplots(1, 2, figsize=(12, 5))

    ratio = df[np.isfinite(df['Log10.mass.ratio'])]

    axes[0].hist(ratio['Log10.mass.ratio'], bins=50, edgecolor='black', alpha=0.7)
    axes[0].set_xlabel('log10 Predator/Prey Mass Ratio')
    axes[0].set_ylabel('Frequency')
    axes[0].set_title('Mass Ratio Distribution')
    axes[0].grid(True, alpha=0.3)

    sns.boxplot(data=ratio, x=config.LIFESTAGE_COLUMN, y='Log10.mass.ratio', ax=axes[1],
                color='lightblue')
    axes[1].set_xlabel('Predator Life Stage')
    axes[1].set_ylabel('log10 Predator/Prey Mass Ratio')
    axes[1].set_title('Mass Ratio by Life Stage')
    axes[1].grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig(output_path, dpi=config.FIGURE_DPI, bbox_inches='tight')
    plt.close()

    print(f"Distribution plots saved to {output_path}")


def create_aic_plot(comparison, selected, output_path):
    """
    Bar chart of delta AIC per candidate model, selected model highlighted.

    Parameters
    ----------
    comparison : DataFrame
        Table from modeling.evaluate_candidates()
    selected : str
        Name of the selected model
    output_path : str or Path
        Output file path for figure
    """
    colors = ['tab:orange' if name == selected else 'tab:blue' for name in comparison.index]

    fig, ax = plt.subplots(figsize=(8, 5))
    ax.barh(comparison.index, comparison['delta_aic'], color=colors)
    ax.axvline(config.AIC_TIE_DELTA, color='red', linestyle='--', alpha=0.5,
               label=f'ΔAIC = {config.AIC_TIE_DELTA:g}')
    ax.invert_yaxis()
    ax.set_xlabel('ΔAIC')
    ax.set_title('Candidate Model Comparison')
    ax.grid(True, axis='x', alpha=0.3)
    ax.legend()

    plt.tight_layout()
    plt.savefig(output_path, dpi=config.FIGURE_DPI, bbox_inches='tight')
    plt.close()

    print(f"AIC comparison plot saved to {output_path}")
