"""
Mixed-effects modeling of predator body mass.

This module contains functions for:
- Building the analysis subset from the cleaned table
- Writing model formulas from predictor and interaction lists
- Fitting candidate models with crossed random intercepts
- Comparing candidates by AIC and selecting one
- Exporting coefficient tables and model summaries
"""

import warnings
from pathlib import Path

import numpy as np
import pandas as pd
import statsmodels.formula.api as smf

from foodweb import config


def required_variables(candidates=None, response=config.RESPONSE, groups=None):
    """List the model variables needed by a set of candidates."""
    candidates = config.MODEL_CANDIDATES if candidates is None else candidates
    groups = config.RANDOM_EFFECTS if groups is None else groups
    variables = [response] + list(groups)
    for candidate in candidates.values():
        terms = list(candidate["predictors"])
        for interaction in candidate["interactions"]:
            terms.extend(interaction)
        variables.extend(t for t in terms if t not in variables)
    return variables


def prepare_analysis_data(df, quality_column=config.ANALYSIS_QUALITY_COLUMN,
                          quality_value=config.ANALYSIS_QUALITY_VALUE, variables=None):
    """
    Build the dataset shared by all candidate models.

    Parameters
    ----------
    df : DataFrame
        Cleaned observation table (masses in grams)
    quality_column : str, optional
        Quality column used to subset. Default config.ANALYSIS_QUALITY_COLUMN.
    quality_value : int, optional
        Quality score kept. Default config.ANALYSIS_QUALITY_VALUE.
    variables : list of str, optional
        Model variables that must be present; rows missing any are dropped.
        Default: everything used by config.MODEL_CANDIDATES.

    Returns
    -------
    DataFrame
        Model variables only: log10 masses, renamed covariates and groups

    Raises
    ------
    ValueError
        If masses are non-positive or no rows remain
    """
    variables = required_variables() if variables is None else variables

    subset = df[df[quality_column] == quality_value]
    print(f"Analysis subset ({quality_column} == {quality_value}): {len(subset):,} rows")

    data = subset.rename(columns=config.MODEL_VARIABLES)
    if (data["Predator.mass"] <= 0).any() or (data["Prey.mass"] <= 0).any():
        raise ValueError("Masses must be positive to take log10")
    data["log_predator_mass"] = np.log10(data["Predator.mass"])
    data["log_prey_mass"] = np.log10(data["Prey.mass"])

    data = data[variables].dropna().reset_index(drop=True)
    print(f"Complete cases: {len(data):,} rows")
    if data.empty:
        raise ValueError("No complete observations left for modeling")
    return data


def build_formula(response, predictors, interactions=()):
    """
    Write a model formula.

    >>> build_formula('y', ['a', 'b'], [('a', 'b')])
    'y ~ a + b + a:b'
    """
    terms = list(predictors) + [":".join(pair) for pair in interactions]
    if not terms:
        terms = ["1"]
    return f"{response} ~ {' + '.join(terms)}"


def fit_candidate(data, formula, groups=None):
    """
    Fit a linear mixed model with crossed random intercepts.

    Parameters
    ----------
    data : DataFrame
        Analysis dataset
    formula : str
        Fixed-effects formula
    groups : list of str, optional
        Grouping variables, each given an independent random intercept.
        Default config.RANDOM_EFFECTS.

    Returns
    -------
    MixedLMResults
        Model fitted by maximum likelihood

    Notes
    -----
    Crossed effects are variance components over a single group covering all
    rows. Maximum likelihood (not REML) keeps AIC comparable between models
    with different fixed effects.
    """
    groups = config.RANDOM_EFFECTS if groups is None else groups
    data = data.assign(_all=1)
    vc_formula = {g: f"0 + C({g})" for g in groups}

    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        model = smf.mixedlm(formula, data=data, groups="_all", vc_formula=vc_formula)
        result = model.fit(reml=False)
    return result


def evaluate_candidates(data, candidates=None, response=config.RESPONSE, groups=None):
    """
    Fit every candidate model and tabulate information criteria.

    Parameters
    ----------
    data : DataFrame
        Analysis dataset shared by all candidates
    candidates : dict, optional
        name -> {'predictors': [...], 'interactions': [(a, b), ...], 'note': str}.
        Default config.MODEL_CANDIDATES.
    response : str, optional
        Response variable. Default config.RESPONSE.
    groups : list of str, optional
        Random-effect grouping variables. Default config.RANDOM_EFFECTS.

    Returns
    -------
    tuple of (dict, DataFrame)
        Fitted results by name, and a comparison table indexed by name with
        formula, n_obs, llf, aic, bic, converged and delta_aic, sorted by
        aic
    """
    candidates = config.MODEL_CANDIDATES if candidates is None else candidates

    results = {}
    rows = []
    for name, candidate in candidates.items():
        formula = build_formula(response, candidate["predictors"], candidate["interactions"])
        print(f"  Fitting {name}: {formula}")
        result = fit_candidate(data, formula, groups)
        results[name] = result
        if not result.converged:
            print(f"  WARNING: {name} did not converge")
        rows.append({
            'model': name,
            'formula': formula,
            'n_obs': int(result.nobs),
            'llf': float(result.llf),
            'aic': float(result.aic),
            'bic': float(result.bic),
            'converged': bool(result.converged),
            'note': candidate.get("note", ""),
        })

    comparison = pd.DataFrame(rows).set_index('model').sort_values('aic')
    comparison['delta_aic'] = comparison['aic'] - comparison['aic'].min()
    return results, comparison


def select_model(comparison, preferred=None, tie_delta=0.0):
    """
    Pick the converged model with the lowest AIC.

    Parameters
    ----------
    comparison : DataFrame
        Table from evaluate_candidates(), indexed by model name
    preferred : str, optional
        Model chosen instead of the best when its AIC is within tie_delta of
        the best
    tie_delta : float, optional
        AIC difference treated as a tie. Default 0.

    Returns
    -------
    str
        Name of the selected model

    Raises
    ------
    ValueError
        If AIC is undefined or no candidate converged
    """
    if comparison['aic'].isna().any():
        raise ValueError("AIC is undefined for some models; fit them by maximum likelihood")

    if 'converged' in comparison.columns:
        comparison = comparison[comparison['converged'].astype(bool)]
        if comparison.empty:
            raise ValueError("No candidate model converged")

    best = comparison['aic'].idxmin()
    if preferred is not None and preferred in comparison.index:
        if comparison.loc[preferred, 'aic'] - comparison.loc[best, 'aic'] <= tie_delta:
            return preferred
    return best


def coefficient_table(result):
    """Fixed-effect estimates with standard errors, z statistics and p-values."""
    params = result.fe_params
    table = pd.DataFrame({
        'estimate': params,
        'std_error': result.bse_fe,
    })
    table['z'] = table['estimate'] / table['std_error']
    table['p_value'] = result.pvalues[params.index]
    return table


def save_model_summary(result, name, formula, output_path):
    """
    Write a text summary of a fitted model.

    Parameters
    ----------
    result : MixedLMResults
        Fitted model
    name : str
        Candidate name
    formula : str
        Fixed-effects formula
    output_path : str or Path
        Output text file

    Returns
    -------
    None
        Writes the summary to file
    """
    output_path = Path(output_path)

    with open(output_path, 'w') as f:
        f.write(f"Selected model: {name}\n")
        f.write("="*80 + "\n\n")
        f.write(f"Formula: {formula}\n")
        f.write(f"Random intercepts: {', '.join(config.RANDOM_EFFECTS)}\n")
        f.write(f"Observations: {int(result.nobs)}\n")
        f.write(f"Log-likelihood: {result.llf:.4f}\n")
        f.write(f"AIC: {result.aic:.4f}\n")
        f.write(f"BIC: {result.bic:.4f}\n\n")
        f.write("Fixed effects:\n")
        f.write(coefficient_table(result).to_string(float_format=lambda x: f"{x:.4f}"))
        f.write("\n\n")
        f.write(str(result.summary()))
        f.write("\n")

    print(f"Model summary saved to {output_path}")
