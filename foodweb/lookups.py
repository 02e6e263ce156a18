"""
Rule tables for cleaning the predator-prey observation table.

Every table maps an original value (exact string) to its canonical value.
Values absent from a table are not converted. Keeping the tables here, apart
from the cleaning functions, makes them easy to audit and extend.
"""

# =====================================================================
# Missing Values
# =====================================================================

# Text placeholders used in the raw file instead of empty cells
MISSING_SENTINELS = ["", "n/a", "N/A", "NA", "na", "-", "?"]

# =====================================================================
# Units
# =====================================================================

# Divisor that converts a value in the given unit to the canonical unit.
# Canonical units map to 1.
LENGTH_UNITS = {
    "cm": 1,
    "mm": 10,
    "µm": 10_000,  # micro sign
    "μm": 10_000,  # greek mu
    "um": 10_000,
}

MASS_UNITS = {
    "g": 1,
    "mg": 1_000,
}

# (value column, unit column, unit table)
UNIT_COLUMNS = [
    ("Predator.length", "Predator.length.unit", LENGTH_UNITS),
    ("Predator.mass", "Predator.mass.unit", MASS_UNITS),
    ("Prey.length", "Prey.length.unit", LENGTH_UNITS),
    ("Prey.mass", "Prey.mass.unit", MASS_UNITS),
]

# =====================================================================
# Vocabularies
# =====================================================================

HABITAT_LABELS = {
    "nearshore waters": "Nearshore",
    "Nearshore waters": "Nearshore",
    "nearshore": "Nearshore",
    "inshore": "Nearshore",
    "Inshore": "Nearshore",
    "coastal": "Coastal",
    "Coastal Bay": "Coastal",
    "coastal bay": "Coastal",
    "Coastal, SW & SE Greenland": "Coastal",
    "estuary": "Estuary",
    "Estuarine": "Estuary",
    "estuarine": "Estuary",
    "shelf": "Shelf",
    "Continental shelf": "Shelf",
    "continental shelf": "Shelf",
    "Shelf edge": "Shelf",
    "shelf edge": "Shelf",
    "open ocean": "Open ocean",
    "Open Ocean": "Open ocean",
    "oceanic": "Open ocean",
    "Oceanic": "Open ocean",
    "pelagic": "Open ocean",
    "transition region mixed/stratified": "Frontal",
    "front": "Frontal",
    "Front": "Frontal",
    "Shelf break front": "Frontal",
}

LIFESTAGE_LABELS = {
    "adult": "Adult",
    "Adult": "Adult",
    "juvenile": "Juvenile",
    "Juvenile": "Juvenile",
    "larva": "Larva",
    "Larva": "Larva",
    "larvae": "Larva",
    "postlarva": "Larva",
    "Postlarva": "Larva",
    "Larva / juvenile": "Larva/Juvenile",
    "larva / juvenile": "Larva/Juvenile",
    "postlarva/juvenile": "Larva/Juvenile",
    "Postlarva/juvenile": "Larva/Juvenile",
}

INTERACTION_LABELS = {
    "predacious": "Predacious",
    "Predacious": "Predacious",
    "predatory": "Predacious",
    "piscivorous": "Piscivorous",
    "Piscivorous": "Piscivorous",
    "predacious/piscivorous": "Piscivorous",
    "insectivorous": "Insectivorous",
    "Insectivorous": "Insectivorous",
    "planktivorous": "Planktivorous",
    "Planktivorous": "Planktivorous",
    "zooplanktivorous": "Planktivorous",
}

# =====================================================================
# Coordinates
# =====================================================================

# Degree-minute-direction strings seen in the raw table and their signed
# decimal degrees (negative = South / West), rounded to 2 decimals.
COORDINATE_TABLE = {
    # Apalachicola Bay, Florida
    "29º40'N": 29.67,
    "85º10'W": -85.17,
    # Gulf of Maine
    "43º00'N": 43.0,
    "69º00'W": -69.0,
    # Georges Bank
    "41º30'N": 41.5,
    "67º30'W": -67.5,
    # Celtic Sea
    "51º00'N": 51.0,
    "7º00'W": -7.0,
    # Catalan Sea, western Mediterranean
    "41º00'N": 41.0,
    "2º00'E": 2.0,
    # Benguela current
    "33º00'S": -33.0,
    "17º00'E": 17.0,
    # Antarctic Peninsula
    "64º45'S": -64.75,
    "64º05'W": -64.08,
    # Southwest Greenland
    "64º10'N": 64.17,
    "51º45'W": -51.75,
    # Western Pacific, Kuroshio
    "35º20'N": 35.33,
    "140º30'E": 140.5,
    # Equator
    "0º": 0.0,
}
