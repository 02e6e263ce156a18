"""
Script 03: Map Sites

Maps observation sites and tests the site mean mass ratio for spatial
autocorrelation.

Workflow:
1. Load the cleaned observations
2. Keep rows with numeric coordinates and project them to Mollweide
3. Average the log10 mass ratio per site
4. Compute Moran's I and an empirical semivariogram
5. Save projected data, map, variogram and statistics

BEFORE RUNNING:
Ensure data/processed/observations_clean.csv exists (script 01).

OUTPUT:
- data/processed/observations_projected.csv
- results/spatial_autocorrelation.txt
- results/figures/site_map.png
- results/figures/variogram.png
"""

import pandas as pd
from foodweb import config
from foodweb.spatial import (
    to_geodataframe,
    add_projected_coordinates,
    site_means,
    morans_i,
    empirical_variogram,
    plot_site_map,
    plot_variogram,
    save_autocorrelation_results,
)

print("="*80)
print("SCRIPT 03: Map Sites")
print("="*80)

# Verify input file exists
if not config.CLEAN_OBSERVATIONS.exists():
    raise FileNotFoundError(
        f"Cleaned dataset not found: {config.CLEAN_OBSERVATIONS}\n"
        f"Please run script 01_clean_observations.py first"
    )

figures_dir = config.RESULTS_FIGURES
figures_dir.mkdir(parents=True, exist_ok=True)
value_col = config.SPATIAL_VALUE

# Step 1: Load and project
print("\n" + "="*80)
print("STEP 1: Projecting Coordinates")
print("="*80)

df = pd.read_csv(config.CLEAN_OBSERVATIONS)
print(f"Loaded {len(df):,} observations")

points = to_geodataframe(df)
print(f"Reprojecting to {config.PROCESSING_CRS}...")
points = add_projected_coordinates(points)

points.drop(columns='geometry').to_csv(config.PROJECTED_OBSERVATIONS, index=False)
print(f"Saved projected observations to: {config.PROJECTED_OBSERVATIONS}")

# Step 2: Sites
print("\n" + "="*80)
print("STEP 2: Aggregating to Sites")
print("="*80)

sites = site_means(points, value_col)
print(f"Sites: {len(sites):,}")

# Distances in km
coords_km = sites[['x_proj', 'y_proj']].to_numpy() / 1000

# Step 3: Autocorrelation
print("\n" + "="*80)
print("STEP 3: Spatial Autocorrelation")
print("="*80)

moran = morans_i(sites[value_col], coords_km)
print(f"Moran's I: {moran['observed']:.4f} (expected {moran['expected']:.4f}), "
      f"p={moran['p_value']:.2e}")

variogram = empirical_variogram(sites[value_col], coords_km,
                                n_lags=config.VARIOGRAM_LAGS,
                                max_distance=config.VARIOGRAM_MAX_DISTANCE_KM)
print(f"Variogram bins with pairs: {len(variogram)}")

save_autocorrelation_results(moran, variogram, len(sites), value_col,
                             config.RESULTS_DIR / 'spatial_autocorrelation.txt')

# Step 4: Figures
print("\n" + "="*80)
print("STEP 4: Creating Visualizations")
print("="*80)

plot_site_map(sites, value_col, figures_dir / 'site_map.png')
plot_variogram(variogram, figures_dir / 'variogram.png', sill=sites[value_col].var())

print("\n" + "="*80)
print("MAPPING COMPLETE")
print("="*80)
print(f"Projected dataset: {config.PROJECTED_OBSERVATIONS}")
print(f"Statistics: {config.RESULTS_DIR / 'spatial_autocorrelation.txt'}")
print(f"Figures: {figures_dir}")
print("="*80)
