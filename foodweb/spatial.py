"""
Site mapping and spatial autocorrelation functions.

This module contains functions for:
- Building point geometries from cleaned latitude/longitude columns
- Projecting to an equal-area CRS and exporting projected coordinates
- Aggregating observations to sites
- Computing global Moran's I and an empirical semivariogram
- Plotting the site map and variogram
"""

import numpy as np
import pandas as pd
import geopandas as gpd
import matplotlib.pyplot as plt
from pathlib import Path
from scipy import stats
from scipy.spatial.distance import pdist, squareform

from foodweb import config


def to_geodataframe(df, lat_col='Latitude', lon_col='Longitude', crs=config.STORAGE_CRS):
    """
    Create point geometries from coordinate columns.

    Parameters
    ----------
    df : DataFrame
        Cleaned table; coordinate columns may still hold unconverted text
    lat_col, lon_col : str, optional
        Coordinate columns
    crs : str, optional
        CRS of the coordinates. Default config.STORAGE_CRS.

    Returns
    -------
    GeoDataFrame
        Rows with numeric coordinates only

    Notes
    -----
    Rows whose coordinates are not numbers (strings missing from the
    coordinate lookup, or missing values) are dropped and counted.
    """
    lat = pd.to_numeric(df[lat_col], errors='coerce')
    lon = pd.to_numeric(df[lon_col], errors='coerce')
    valid = lat.notna() & lon.notna()
    n_dropped = int((~valid).sum())
    if n_dropped:
        print(f"Dropped {n_dropped:,} rows without numeric coordinates")

    result = df[valid].copy()
    result[lat_col] = lat[valid]
    result[lon_col] = lon[valid]
    return gpd.GeoDataFrame(
        result,
        geometry=gpd.points_from_xy(result[lon_col], result[lat_col]),
        crs=crs,
    )


def add_projected_coordinates(gdf, crs=config.PROCESSING_CRS):
    """Project to an equal-area CRS and append x_proj / y_proj columns (meters)."""
    projected = gdf.to_crs(crs)
    projected['x_proj'] = projected.geometry.x
    projected['y_proj'] = projected.geometry.y
    return projected


def site_means(gdf, value_col=config.SPATIAL_VALUE):
    """
    Average a value per site.

    A site is a distinct pair of projected coordinates.

    Returns
    -------
    DataFrame
        Columns x_proj, y_proj, Geographic.location (first), value_col (mean), n_obs
    """
    finite = gdf[np.isfinite(gdf[value_col])]
    sites = (
        finite
        .groupby(['x_proj', 'y_proj'])
        .agg(**{
            'Geographic.location': ('Geographic.location', 'first'),
            value_col: (value_col, 'mean'),
            'n_obs': (value_col, 'size'),
        })
        .reset_index()
    )
    return sites


def inverse_distance_weights(coords):
    """
    Row-standardized inverse-distance weights.

    The diagonal and pairs at zero distance get weight 0.
    """
    d = squareform(pdist(np.asarray(coords, dtype=float)))
    with np.errstate(divide='ignore'):
        w = np.where(d > 0, 1.0 / d, 0.0)
    row_sums = w.sum(axis=1, keepdims=True)
    return np.divide(w, row_sums, out=np.zeros_like(w), where=row_sums > 0)


def morans_i(values, coords):
    """
    Compute global Moran's I with inverse-distance weights.

    Parameters
    ----------
    values : array-like of shape (N,)
        Value at each site
    coords : array-like of shape (N, 2)
        Projected coordinates of each site

    Returns
    -------
    dict
        observed, expected, sd and two-sided p_value under the normality
        assumption

    Raises
    ------
    ValueError
        If there are fewer than 3 sites or values are constant
    """
    z = np.asarray(values, dtype=float)
    n = len(z)
    if n < 3:
        raise ValueError(f"Moran's I needs at least 3 sites, got {n}")
    z = z - z.mean()
    if np.allclose(z, 0):
        raise ValueError("Moran's I is undefined for constant values")

    w = inverse_distance_weights(coords)
    s0 = w.sum()
    observed = (n / s0) * (z @ w @ z) / (z @ z)
    expected = -1.0 / (n - 1)

    s1 = 0.5 * ((w + w.T) ** 2).sum()
    s2 = ((w.sum(axis=1) + w.sum(axis=0)) ** 2).sum()
    variance = (n**2 * s1 - n * s2 + 3 * s0**2) / ((n**2 - 1) * s0**2) - expected**2
    sd = np.sqrt(variance)
    p_value = 2 * stats.norm.sf(abs(observed - expected) / sd)

    return {
        'observed': float(observed),
        'expected': float(expected),
        'sd': float(sd),
        'p_value': float(p_value),
    }


def empirical_variogram(values, coords, n_lags=config.VARIOGRAM_LAGS, max_distance=None):
    """
    Compute a binned empirical semivariogram.

    Parameters
    ----------
    values : array-like of shape (N,)
        Value at each site
    coords : array-like of shape (N, 2)
        Coordinates of each site (same units as max_distance)
    n_lags : int, optional
        Number of equal-width distance bins. Default config.VARIOGRAM_LAGS.
    max_distance : float, optional
        Largest distance considered. Default: half the largest pair distance.

    Returns
    -------
    DataFrame
        lag (bin center), semivariance and n_pairs for bins containing pairs

    Notes
    -----
    gamma(h) = sum((z_i - z_j)^2) / (2 * N(h)) over pairs in the bin.
    """
    z = np.asarray(values, dtype=float)
    distances = pdist(np.asarray(coords, dtype=float))
    sq_diff = pdist(z[:, None], metric='sqeuclidean')

    if max_distance is None:
        max_distance = distances.max() / 2
    if max_distance <= 0:
        raise ValueError("Variogram needs sites at distinct locations")

    edges = np.linspace(0, max_distance, n_lags + 1)
    in_range = (distances > 0) & (distances <= max_distance)
    bins = np.clip(np.digitize(distances[in_range], edges, right=True) - 1, 0, n_lags - 1)

    n_pairs = np.bincount(bins, minlength=n_lags)
    sums = np.bincount(bins, weights=sq_diff[in_range], minlength=n_lags)
    centers = (edges[:-1] + edges[1:]) / 2

    variogram = pd.DataFrame({
        'lag': centers,
        'semivariance': np.divide(sums, 2 * n_pairs, out=np.full(n_lags, np.nan),
                                  where=n_pairs > 0),
        'n_pairs': n_pairs,
    })
    return variogram[variogram['n_pairs'] > 0].reset_index(drop=True)


def plot_site_map(sites, value_col, output_path, crs=config.PROCESSING_CRS):
    """
    Map sites in the projected CRS, colored by the site mean value.

    Point size scales with the number of observations at the site.
    """
    gdf = gpd.GeoDataFrame(
        sites,
        geometry=gpd.points_from_xy(sites['x_proj'], sites['y_proj']),
        crs=crs,
    )
    sizes = 10 + 90 * gdf['n_obs'] / gdf['n_obs'].max()

    fig, ax = plt.subplots(figsize=(12, 6))
    gdf.plot(column=value_col, cmap='viridis', markersize=sizes, legend=True,
             edgecolor='black', linewidth=0.3, ax=ax,
             legend_kwds={'label': value_col, 'shrink': 0.6})
    ax.set_xlabel('x (m, Mollweide)')
    ax.set_ylabel('y (m, Mollweide)')
    ax.set_title(f'Observation Sites: mean {value_col}')
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig(output_path, dpi=config.FIGURE_DPI, bbox_inches='tight')
    plt.close()

    print(f"Site map saved to {output_path}")


def plot_variogram(variogram, output_path, sill=None):
    """Plot semivariance against lag distance, optionally with the sample variance."""
    fig, ax = plt.subplots(figsize=(8, 5))
    ax.scatter(variogram['lag'], variogram['semivariance'],
               s=10 + 40 * variogram['n_pairs'] / variogram['n_pairs'].max())
    ax.plot(variogram['lag'], variogram['semivariance'], alpha=0.5)
    if sill is not None:
        ax.axhline(sill, color='red', linestyle='--', alpha=0.5, label='Sample variance')
        ax.legend()
    ax.set_xlabel('Lag distance (km)')
    ax.set_ylabel('Semivariance')
    ax.set_title('Empirical Semivariogram')
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig(output_path, dpi=config.FIGURE_DPI, bbox_inches='tight')
    plt.close()

    print(f"Variogram plot saved to {output_path}")


def save_autocorrelation_results(moran, variogram, n_sites, value_col, output_path):
    """
    Write Moran's I and the variogram table to a text file.

    Parameters
    ----------
    moran : dict
        Output of morans_i()
    variogram : DataFrame
        Output of empirical_variogram()
    n_sites : int
        Number of sites used
    value_col : str
        Name of the analysed value
    output_path : str or Path
        Output text file
    """
    output_path = Path(output_path)

    with open(output_path, 'w') as f:
        f.write(f"Spatial Autocorrelation of site mean {value_col}\n")
        f.write("="*80 + "\n\n")
        f.write(f"Sites: {n_sites}\n\n")
        f.write("Moran's I (inverse-distance weights, row-standardized):\n")
        f.write(f"  Observed: {moran['observed']:.4f}\n")
        f.write(f"  Expected: {moran['expected']:.4f}\n")
        f.write(f"  SD: {moran['sd']:.4f}\n")
        f.write(f"  p-value: {moran['p_value']:.4e}\n\n")

        if moran['p_value'] < 0.05:
            f.write("Result: Significant spatial autocorrelation (p < 0.05)\n\n")
        else:
            f.write("Result: No significant spatial autocorrelation (p >= 0.05)\n\n")

        f.write("Empirical semivariogram:\n")
        f.write(variogram.to_string(index=False, float_format=lambda x: f"{x:.4f}"))
        f.write("\n")

    print(f"Autocorrelation results saved to {output_path}")
