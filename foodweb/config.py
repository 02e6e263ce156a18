"""
Configuration file for the predator-prey body size workflow.

This module centralizes all configurable parameters including:
- File paths for raw, processed and result files
- Column allow-list and filtering rules for cleaning
- Unit handling policy
- Analysis subset and candidate mixed-effects models
- Coordinate reference systems and variogram settings

Lookup tables (units, vocabularies, coordinates) live in foodweb/lookups.py.
To change the analysis subset or the candidate set, edit the sections below and
re-run scripts 02-03.
"""

from pathlib import Path

# =====================================================================
# Project Paths
# =====================================================================

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent

# Data directories
DATA_DIR = PROJECT_ROOT / "data"
DATA_RAW = DATA_DIR / "raw"
DATA_PROCESSED = DATA_DIR / "processed"

# Results directories
RESULTS_DIR = PROJECT_ROOT / "results"
RESULTS_FIGURES = RESULTS_DIR / "figures"

# Input files
RAW_OBSERVATIONS = DATA_RAW / "Predator_and_prey_body_sizes_in_marine_food_webs_vsn4.txt"
RAW_SUMMARY = DATA_RAW / "Predator_and_prey_body_sizes_summary.csv"
RAW_ENCODING = "utf-8"

# Output files
CLEAN_OBSERVATIONS = DATA_PROCESSED / "observations_clean.csv"
PROJECTED_OBSERVATIONS = DATA_PROCESSED / "observations_projected.csv"

# =====================================================================
# Column Selection
# =====================================================================

# Columns kept from the raw table (after header standardization).
# Any column listed here but absent from the raw file aborts the run.
KEEP_COLUMNS = [
    "Record.number",
    "In.refID",
    "IndividualID",
    "Predator",
    "Predator.common.name",
    "Predator.taxon",
    "Prey",
    "Prey.common.name",
    "Prey.taxon",
    "Type.of.feeding.interaction",
    "Predator.lifestage",
    "Predator.length",
    "Predator.length.unit",
    "Predator.quality.of.length.mass.conversion",
    "Predator.mass",
    "Predator.mass.unit",
    "Prey.length",
    "Prey.length.unit",
    "Prey.quality.of.conversion.to.length",
    "Prey.quality.of.length.mass.conversion",
    "Prey.mass",
    "Prey.mass.unit",
    "Geographic.location",
    "Latitude",
    "Longitude",
    "Depth",
    "Mean.annual.temp",
    "SD.annual.temp",
    "Mean.PP",
    "SD.PP",
    "Reference",
    "Specific.habitat",
]

# Columns converted to numbers after missing-value normalization; quality
# scores are coerced separately by the quality filter
NUMERIC_COLUMNS = [
    "Predator.length",
    "Predator.mass",
    "Prey.length",
    "Prey.mass",
    "Depth",
    "Mean.annual.temp",
    "SD.annual.temp",
    "Mean.PP",
    "SD.PP",
]

# =====================================================================
# Filtering Rules
# =====================================================================

# Predator taxon removed from the analysis (exact, case-sensitive match)
TAXON_COLUMN = "Predator.taxon"
EXCLUDED_TAXON = "cephalopod"

# Conversion quality scores; 5 means "unsatisfactory" and is dropped
QUALITY_COLUMNS = [
    "Predator.quality.of.length.mass.conversion",
    "Prey.quality.of.conversion.to.length",
    "Prey.quality.of.length.mass.conversion",
]
ALLOWED_QUALITY = [0, 1, 2, 3, 4]

# Life stages that cannot be assigned to a single stage
LIFESTAGE_COLUMN = "Predator.lifestage"
EXCLUDED_LIFESTAGES = ["Larva/Juvenile"]

HABITAT_COLUMN = "Specific.habitat"
INTERACTION_COLUMN = "Type.of.feeding.interaction"
COORDINATE_COLUMNS = ["Latitude", "Longitude"]

# What to do with a unit label missing from the unit tables:
#   'error'       - abort the run
#   'passthrough' - keep the value unchanged and report the label
UNKNOWN_UNIT_POLICY = "error"

# =====================================================================
# Modeling
# =====================================================================

# Analysis subset: rows whose prey length-mass conversion quality equals 4.
# Quality 4 keeps the largest sample among the defensible scores.
ANALYSIS_QUALITY_COLUMN = "Prey.quality.of.length.mass.conversion"
ANALYSIS_QUALITY_VALUE = 4

# Model variable names for the cleaned columns
MODEL_VARIABLES = {
    "Predator.common.name": "predator",
    "Geographic.location": "location",
    "Type.of.feeding.interaction": "feeding",
    "Predator.lifestage": "lifestage",
    "Mean.annual.temp": "temperature",
    "Mean.PP": "productivity",
    "Depth": "depth",
}

RESPONSE = "log_predator_mass"

# Crossed random intercepts
RANDOM_EFFECTS = ["predator", "location"]

# Hand-enumerated fixed-effect structures
MODEL_CANDIDATES = {
    "full": {
        "predictors": ["log_prey_mass", "feeding", "lifestage", "temperature", "productivity"],
        "interactions": [("log_prey_mass", "feeding")],
        "note": "All covariates plus prey mass by feeding interaction",
    },
    "no_interaction": {
        "predictors": ["log_prey_mass", "feeding", "lifestage", "temperature", "productivity"],
        "interactions": [],
        "note": "Additive effects only",
    },
    "no_productivity": {
        "predictors": ["log_prey_mass", "feeding", "lifestage", "temperature"],
        "interactions": [("log_prey_mass", "feeding")],
        "note": "Drops mean primary productivity",
    },
    "no_temperature": {
        "predictors": ["log_prey_mass", "feeding", "lifestage", "productivity"],
        "interactions": [("log_prey_mass", "feeding")],
        "note": "Drops mean annual temperature",
    },
    "no_lifestage": {
        "predictors": ["log_prey_mass", "feeding", "temperature", "productivity"],
        "interactions": [("log_prey_mass", "feeding")],
        "note": "Drops predator life stage",
    },
    "no_feeding": {
        "predictors": ["log_prey_mass", "lifestage", "temperature", "productivity"],
        "interactions": [],
        "note": "Drops feeding interaction and its prey mass slope",
    },
    "prey_mass_only": {
        "predictors": ["log_prey_mass"],
        "interactions": [],
        "note": "Prey mass alone",
    },
}

# Mean primary productivity is a marginal, non-significant covariate; when the
# model without it is within AIC_TIE_DELTA of the best, it is selected.
TIE_BREAK_PREFERENCE = "no_productivity"
AIC_TIE_DELTA = 2.0

# =====================================================================
# Coordinate Reference Systems
# =====================================================================

# Processing CRS (equal-area projection for distances)
PROCESSING_CRS = 'ESRI:54009'  # Mollweide

# Storage CRS (geographic coordinates)
STORAGE_CRS = 'EPSG:4326'  # WGS84

# =====================================================================
# Spatial Autocorrelation
# =====================================================================

# Value averaged per site for Moran's I and the variogram
SPATIAL_VALUE = "Log10.mass.ratio"

# Number of distance bins and maximum lag (km); None uses half the max distance
VARIOGRAM_LAGS = 15
VARIOGRAM_MAX_DISTANCE_KM = None

FIGURE_DPI = 300

# =====================================================================
# Validation
# =====================================================================

def validate_config():
    """Validate configuration settings."""
    if UNKNOWN_UNIT_POLICY not in ("error", "passthrough"):
        raise ValueError(
            f"Invalid UNKNOWN_UNIT_POLICY: {UNKNOWN_UNIT_POLICY}. "
            f"Must be one of: ['error', 'passthrough']"
        )

    for column in QUALITY_COLUMNS + [TAXON_COLUMN, LIFESTAGE_COLUMN, HABITAT_COLUMN,
                                     INTERACTION_COLUMN] + COORDINATE_COLUMNS:
        if column not in KEEP_COLUMNS:
            raise ValueError(f"{column} must be listed in KEEP_COLUMNS")

    if ANALYSIS_QUALITY_VALUE not in ALLOWED_QUALITY:
        raise ValueError(
            f"ANALYSIS_QUALITY_VALUE ({ANALYSIS_QUALITY_VALUE}) must be one of {ALLOWED_QUALITY}"
        )

    if TIE_BREAK_PREFERENCE is not None and TIE_BREAK_PREFERENCE not in MODEL_CANDIDATES:
        raise ValueError(f"TIE_BREAK_PREFERENCE '{TIE_BREAK_PREFERENCE}' is not a model candidate")

    known = set(MODEL_VARIABLES.values()) | {"log_prey_mass"}
    for name, candidate in MODEL_CANDIDATES.items():
        terms = list(candidate["predictors"])
        for interaction in candidate["interactions"]:
            terms.extend(interaction)
        unknown = [t for t in terms if t not in known]
        if unknown:
            raise ValueError(f"Model '{name}' uses unknown variables: {unknown}")

    if AIC_TIE_DELTA < 0:
        raise ValueError(f"AIC_TIE_DELTA must be >= 0")

    if VARIOGRAM_LAGS < 1:
        raise ValueError(f"VARIOGRAM_LAGS must be >= 1")

# Run validation on import
validate_config()
