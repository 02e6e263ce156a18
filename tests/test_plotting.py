"""Plotting smoke tests: figures and summaries are written to disk."""

import numpy as np
import pandas as pd
import pytest

from foodweb.cleaning import clean_observations
from foodweb.plotting import (
    create_aic_plot,
    create_distribution_plots,
    create_mass_scatter_plot,
    save_summary_statistics,
)


@pytest.fixture
def clean(raw_table):
    return clean_observations(raw_table)


@pytest.mark.smoke
class TestPlots:

    def test_summary_statistics(self, clean, tmp_path):
        path = tmp_path / "summary.txt"
        save_summary_statistics(clean, path)
        text = path.read_text()
        assert "Observations: 3" in text
        assert "Nearshore: 2" in text

    def test_distribution_plots(self, clean, tmp_path):
        path = tmp_path / "distribution.png"
        create_distribution_plots(clean, path)
        assert path.exists()

    def test_mass_scatter_plot(self, tmp_path):
        rng = np.random.default_rng(0)
        data = pd.DataFrame({
            'log_prey_mass': rng.uniform(-2, 2, 40),
            'feeding': ['Predacious', 'Piscivorous'] * 20,
        })
        data['log_predator_mass'] = 1 + 0.8 * data['log_prey_mass']
        path = tmp_path / "scatter.png"
        create_mass_scatter_plot(data, path)
        assert path.exists()

    def test_aic_plot(self, tmp_path):
        comparison = pd.DataFrame(
            {'aic': [100.0, 101.0, 110.0], 'delta_aic': [0.0, 1.0, 10.0]},
            index=pd.Index(['full', 'no_productivity', 'prey_mass_only'], name='model'),
        )
        path = tmp_path / "aic.png"
        create_aic_plot(comparison, 'no_productivity', path)
        assert path.exists()
