"""Shared fixtures: synthetic raw observation tables."""

import matplotlib

matplotlib.use("Agg")

import pandas as pd
import pytest

from foodweb import config


RAW_ROW = {
    "Record.number": "1",
    "In.refID": "ATSH063",
    "IndividualID": "1",
    "Predator": "Sphyrna tiburo",
    "Predator.common.name": "Bonnethead shark",
    "Predator.taxon": "ectotherm vertebrate",
    "Prey": "Callinectes sapidus",
    "Prey.common.name": "Blue crab",
    "Prey.taxon": "invertebrate",
    "Type.of.feeding.interaction": "predacious",
    "Predator.lifestage": "adult",
    "Predator.length": "120",
    "Predator.length.unit": "mm",
    "Predator.quality.of.length.mass.conversion": "1",
    "Predator.mass": "250",
    "Predator.mass.unit": "g",
    "Prey.length": "15",
    "Prey.length.unit": "mm",
    "Prey.quality.of.conversion.to.length": "0",
    "Prey.quality.of.length.mass.conversion": "4",
    "Prey.mass": "500",
    "Prey.mass.unit": "mg",
    "Geographic.location": "Apalachicola Bay, Florida",
    "Latitude": "29º40'N",
    "Longitude": "85º10'W",
    "Depth": "5",
    "Mean.annual.temp": "24.1",
    "SD.annual.temp": "4.2",
    "Mean.PP": "866",
    "SD.PP": "n/a",
    "Reference": "Bethea et al. 2004",
    "Specific.habitat": "nearshore waters",
    "Notes...assumptions": "",
}


def make_raw(rows):
    """Build a raw table from dicts of overrides on RAW_ROW."""
    records = []
    for i, overrides in enumerate(rows, start=1):
        record = dict(RAW_ROW, **{"Record.number": str(i)})
        record.update(overrides)
        records.append(record)
    return pd.DataFrame(records, dtype=str)


@pytest.fixture
def raw_row():
    return dict(RAW_ROW)


@pytest.fixture
def raw_table():
    """Six raw rows, two of which must not survive cleaning."""
    return make_raw([
        {},
        {"Predator.lifestage": "juvenile", "Specific.habitat": "Estuarine",
         "Predator.length": "35", "Predator.length.unit": "cm"},
        {"Predator.taxon": "cephalopod", "Predator.common.name": "Squid"},
        {"Predator.quality.of.length.mass.conversion": "5"},
        {"Type.of.feeding.interaction": "planktivorous", "Prey.length": "800",
         "Prey.length.unit": "µm", "Latitude": "12.5", "Longitude": "-30.25"},
        {"Predator.lifestage": "Larva / juvenile"},
    ])


@pytest.fixture
def clean_columns():
    unit_columns = {"Predator.length.unit", "Predator.mass.unit",
                    "Prey.length.unit", "Prey.mass.unit"}
    return [c for c in config.KEEP_COLUMNS if c not in unit_columns] + [
        "Mass.ratio", "Log10.mass.ratio"]
