# ========================
# src/superhost_eda/analysis/model.py
# ========================

"""
Superhost Model

Binary logistic regression of superhost status on host response time and the
overall review score, fitted on the cleaned analysis dataset.
"""

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
import statsmodels.formula.api as smf
from statsmodels.tools.sm_exceptions import PerfectSeparationError

from ..pipeline.errors import ModelFitError
from ..pipeline.schema import RATING, RESPONSE_TIME, SUPERHOST_BINARY, require_columns

logger = logging.getLogger(__name__)


@dataclass
class SuperhostModel:
    formula: str
    n_observations: int
    coefficients: pd.DataFrame
    summary_text: str
    pseudo_r_squared: float
    log_likelihood: float
    result: object


def build_formula(data: pd.DataFrame) -> str:
    """Drop the response time term when only one category is present."""
    terms = []
    if data[RESPONSE_TIME].nunique() >= 2:
        terms.append(f"C({RESPONSE_TIME})")
    else:
        logger.warning("Fewer than two response time categories present; fitting on review score only")
    terms.append(RATING)
    return f"{SUPERHOST_BINARY} ~ " + " + ".join(terms)


def fit_superhost_model(df: pd.DataFrame) -> SuperhostModel:
    """
    Fit the superhost logit.

    Args:
        df (pd.DataFrame): Analysis dataset with the binary superhost column,
            a categorical response time and a non-null review score

    Returns:
        SuperhostModel: Fitted model with a tidy coefficient table

    Raises:
        ModelFitError: The outcome has a single class or the optimizer fails
    """
    require_columns(df, [SUPERHOST_BINARY, RESPONSE_TIME, RATING], stage='model')

    data = df[[SUPERHOST_BINARY, RESPONSE_TIME, RATING]].copy()
    data[RESPONSE_TIME] = data[RESPONSE_TIME].astype('category').cat.remove_unused_categories()

    if data[SUPERHOST_BINARY].nunique() < 2:
        raise ModelFitError("Superhost outcome has a single class", stage='model', row_count=len(data))

    formula = build_formula(data)
    logger.info(f"Fitting logit: {formula} on {len(data):,} listings")

    try:
        result = smf.logit(formula, data=data).fit(disp=False)
    except (np.linalg.LinAlgError, PerfectSeparationError, ValueError) as e:
        logger.error(f"Logit fit failed: {e}")
        raise ModelFitError(f"Cannot fit superhost model: {e}", stage='model', row_count=len(data)) from e

    coefficients = pd.DataFrame({
        'term': result.params.index,
        'coef': result.params.to_numpy(),
        'std_err': result.bse.to_numpy(),
        'z': result.tvalues.to_numpy(),
        'p_value': result.pvalues.to_numpy(),
        'odds_ratio': np.exp(result.params.to_numpy()),
    })

    logger.info(f"Logit converged={result.mle_retvals.get('converged')}, pseudo R2={result.prsquared:.4f}")
    return SuperhostModel(
        formula=formula,
        n_observations=int(result.nobs),
        coefficients=coefficients,
        summary_text=result.summary().as_text(),
        pseudo_r_squared=float(result.prsquared),
        log_likelihood=float(result.llf),
        result=result,
    )
