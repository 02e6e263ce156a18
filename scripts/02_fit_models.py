"""
Script 02: Fit Models

Fits candidate mixed-effects models of predator body mass and selects one by AIC.

Workflow:
1. Load the cleaned observations and write summary statistics
2. Build the analysis subset (prey length-mass conversion quality == 4)
3. Fit every candidate in config.MODEL_CANDIDATES with crossed random
   intercepts for predator common name and geographic location
4. Compare AIC and select a model (config.TIE_BREAK_PREFERENCE within
   config.AIC_TIE_DELTA of the best is preferred)
5. Export model tables and figures

BEFORE RUNNING:
Ensure data/processed/observations_clean.csv exists (script 01).

OUTPUT:
- results/summary_statistics.txt
- results/model_comparison.csv
- results/selected_model.txt
- results/selected_model_coefficients.csv
- results/figures/*.png

Then run: python scripts/03_map_sites.py
"""

import pandas as pd
from foodweb import config
from foodweb.modeling import (
    prepare_analysis_data,
    evaluate_candidates,
    select_model,
    coefficient_table,
    save_model_summary,
)
from foodweb.plotting import (
    save_summary_statistics,
    create_mass_scatter_plot,
    create_distribution_plots,
    create_aic_plot,
)

print("="*80)
print("SCRIPT 02: Fit Models")
print("="*80)

# Verify input file exists
if not config.CLEAN_OBSERVATIONS.exists():
    raise FileNotFoundError(
        f"Cleaned dataset not found: {config.CLEAN_OBSERVATIONS}\n"
        f"Please run script 01_clean_observations.py first"
    )

output_dir = config.RESULTS_DIR
figures_dir = config.RESULTS_FIGURES
figures_dir.mkdir(parents=True, exist_ok=True)

# Step 1: Load data
print("\n" + "="*80)
print("STEP 1: Loading Cleaned Observations")
print("="*80)

df = pd.read_csv(config.CLEAN_OBSERVATIONS)
print(f"Loaded {len(df):,} observations")

save_summary_statistics(df, output_dir / 'summary_statistics.txt')

# Step 2: Analysis subset
print("\n" + "="*80)
print("STEP 2: Building Analysis Subset")
print("="*80)

data = prepare_analysis_data(df)
print(f"Predator species: {data['predator'].nunique():,}")
print(f"Geographic locations: {data['location'].nunique():,}")

# Step 3: Fit candidates
print("\n" + "="*80)
print("STEP 3: Fitting Candidate Models")
print("="*80)

results, comparison = evaluate_candidates(data)

comparison_path = output_dir / 'model_comparison.csv'
comparison.to_csv(comparison_path)
print(f"\nSaved model comparison to: {comparison_path}")
print(comparison[['n_obs', 'llf', 'aic', 'delta_aic']].to_string(float_format=lambda x: f"{x:.2f}"))

# Step 4: Selection
print("\n" + "="*80)
print("STEP 4: Model Selection")
print("="*80)

selected = select_model(comparison, preferred=config.TIE_BREAK_PREFERENCE,
                        tie_delta=config.AIC_TIE_DELTA)
best = comparison['aic'].idxmin()
print(f"Lowest AIC: {best}")
if selected != best:
    print(f"Selected {selected} instead: within ΔAIC {config.AIC_TIE_DELTA:g} of {best}")
print(f"Selected model: {selected}")
print(f"  Formula: {comparison.loc[selected, 'formula']}")

result = results[selected]
save_model_summary(result, selected, comparison.loc[selected, 'formula'],
                   output_dir / 'selected_model.txt')

coefficients = coefficient_table(result)
coefficients.to_csv(output_dir / 'selected_model_coefficients.csv')
print("\nFixed effects:")
print(coefficients.to_string(float_format=lambda x: f"{x:.4f}"))

# Step 5: Figures
print("\n" + "="*80)
print("STEP 5: Creating Visualizations")
print("="*80)

create_mass_scatter_plot(data, figures_dir / 'predator_vs_prey_mass.png')
create_distribution_plots(df, figures_dir / 'mass_ratio_distribution.png')
create_aic_plot(comparison, selected, figures_dir / 'model_comparison.png')

print("\n" + "="*80)
print("MODELING COMPLETE")
print("="*80)
print(f"Results saved to: {output_dir}")
print("\nGenerated files:")
for txt_file in sorted(output_dir.glob('*.txt')):
    print(f"  - {txt_file.name}")
for csv_file in sorted(output_dir.glob('*.csv')):
    print(f"  - {csv_file.name}")
for png_file in sorted(figures_dir.glob('*.png')):
    print(f"  - figures/{png_file.name}")
print("\nNext step: python scripts/03_map_sites.py")
print("="*80)
