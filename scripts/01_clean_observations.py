"""
Script 01: Clean Observations

Cleans the raw predator-prey body size table into one analysis-ready CSV.

Workflow:
1. Load the raw tab-delimited table and the summary CSV
2. Select columns and replace missing-value placeholders
3. Remove cephalopod predators
4. Convert lengths to cm and masses to g, dropping unit columns
5. Standardize habitat, life stage and feeding interaction labels
6. Remove ambiguous life stages and low-quality conversions (score 5)
7. Convert known latitude/longitude strings to decimal degrees
8. Add predator/prey mass ratio and its log10

BEFORE RUNNING:
Place the raw files in data/raw/ (see config.RAW_OBSERVATIONS and
config.RAW_SUMMARY).

OUTPUT:
- data/processed/observations_clean.csv
- results/unmatched_values.txt

Then run: python scripts/02_fit_models.py
"""

from foodweb import config, lookups
from foodweb.cleaning import (
    load_raw_observations,
    load_summary_table,
    clean_observations,
    unmatched_values,
    write_clean_csv,
)

print("="*80)
print("SCRIPT 01: Clean Observations")
print("="*80)

# Verify input files exist
for path in [config.RAW_OBSERVATIONS, config.RAW_SUMMARY]:
    if not path.exists():
        raise FileNotFoundError(
            f"Input file not found: {path}\n"
            f"Place the raw predator-prey body size files in {config.DATA_RAW}"
        )

config.DATA_PROCESSED.mkdir(parents=True, exist_ok=True)
config.RESULTS_DIR.mkdir(parents=True, exist_ok=True)

# Step 1: Load
print("\n" + "="*80)
print("STEP 1: Loading Raw Data")
print("="*80)

raw = load_raw_observations(config.RAW_OBSERVATIONS)
summary = load_summary_table(config.RAW_SUMMARY)

# Step 2: Clean
print("\n" + "="*80)
print("STEP 2: Cleaning")
print("="*80)

clean = clean_observations(raw)

print(f"\nRows kept: {len(clean):,} of {len(raw):,} ({len(clean) / len(raw) * 100:.1f}%)")
print(f"Predator species: {clean['Predator.common.name'].nunique():,}")
print(f"Geographic locations: {clean['Geographic.location'].nunique():,}")

# Step 3: Report values left unconverted
print("\n" + "="*80)
print("STEP 3: Unmatched Values")
print("="*80)

report_path = config.RESULTS_DIR / "unmatched_values.txt"
checks = [
    (config.HABITAT_COLUMN, lookups.HABITAT_LABELS),
    (config.LIFESTAGE_COLUMN, lookups.LIFESTAGE_LABELS),
    (config.INTERACTION_COLUMN, lookups.INTERACTION_LABELS),
]
with open(report_path, 'w') as f:
    f.write("Values not found in lookup tables\n")
    f.write("="*80 + "\n\n")
    for column, table in checks:
        unmatched = unmatched_values(clean[column], table)
        f.write(f"{column}: {int(unmatched.sum())} rows, {len(unmatched)} distinct\n")
        for value, count in unmatched.items():
            f.write(f"  {value}: {count}\n")
        print(f"  {column}: {int(unmatched.sum())} rows unmatched")
    for column in config.COORDINATE_COLUMNS:
        text = clean[column][clean[column].map(lambda v: isinstance(v, str))]
        f.write(f"{column}: {len(text)} rows left as text\n")
        for value, count in text.value_counts().items():
            f.write(f"  {value}: {count}\n")
        print(f"  {column}: {len(text)} rows left as text")
print(f"Saved report to: {report_path}")

# Step 4: Save
print("\n" + "="*80)
print("STEP 4: Saving Results")
print("="*80)

write_clean_csv(clean, config.CLEAN_OBSERVATIONS)

print("\n" + "="*80)
print("CLEANING COMPLETE")
print("="*80)
print(f"Cleaned dataset: {config.CLEAN_OBSERVATIONS}")
print(f"Columns: {', '.join(clean.columns)}")
print("\nNext step: python scripts/02_fit_models.py")
print("="*80)
