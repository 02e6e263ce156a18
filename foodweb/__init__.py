"""
Package for the predator-prey body size analysis of marine food webs.

This package contains domain-specific logic organized into:
- config: Configuration parameters and paths
- lookups: Unit, vocabulary and coordinate lookup tables
- cleaning: Loading and cleaning of the raw observation table
- modeling: Mixed-effects model fitting and selection
- plotting: Summary statistics and figures
- spatial: Site mapping and spatial autocorrelation
"""

__version__ = "1.0.0"
