# ========================
# tests/test_model.py
# ========================

import os
import sys
import unittest

import numpy as np
import pandas as pd

# Add src to Python path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src'))

from superhost_eda.analysis.model import build_formula, fit_superhost_model
from superhost_eda.pipeline.errors import ModelFitError
from superhost_eda.pipeline.schema import RESPONSE_TIME_LEVELS


def _analysis(n=600, seed=0):
    rng = np.random.default_rng(seed)
    response = rng.choice(RESPONSE_TIME_LEVELS, size=n, p=[0.55, 0.2, 0.15, 0.1])
    rating = np.clip(rng.normal(4.7, 0.25, size=n), 1.0, 5.0)
    shift = pd.Series(response).map({
        'within an hour': 0.8,
        'within a few hours': 0.3,
        'within a day': -0.2,
        'a few days or more': -1.0,
    }).to_numpy()
    probability = 1 / (1 + np.exp(-(-0.9 + shift + 2.0 * (rating - 4.6))))
    superhost = rng.random(n) < probability
    return pd.DataFrame({
        'host_response_time': pd.Categorical(response, categories=RESPONSE_TIME_LEVELS, ordered=True),
        'review_scores_rating': rating,
        'host_is_superhost': pd.array(superhost, dtype='boolean'),
        'host_is_superhost_binary': superhost.astype('float64'),
    })


class TestSuperhostModel(unittest.TestCase):

    def test_fit(self):
        data = _analysis()
        model = fit_superhost_model(data)

        self.assertEqual(model.formula,
                         'host_is_superhost_binary ~ C(host_response_time) + review_scores_rating')
        self.assertEqual(model.n_observations, len(data))
        self.assertEqual(list(model.coefficients.columns),
                         ['term', 'coef', 'std_err', 'z', 'p_value', 'odds_ratio'])
        self.assertEqual(len(model.coefficients), 5)
        rating = model.coefficients.set_index('term').loc['review_scores_rating']
        self.assertGreater(rating['coef'], 0)
        self.assertIn('Logit Regression Results', model.summary_text)

    def test_single_response_category_drops_term(self):
        data = _analysis()
        data['host_response_time'] = pd.Categorical(['within an hour'] * len(data),
                                                    categories=RESPONSE_TIME_LEVELS, ordered=True)
        self.assertEqual(build_formula(data), 'host_is_superhost_binary ~ review_scores_rating')

    def test_single_outcome_class(self):
        data = _analysis()
        data['host_is_superhost_binary'] = 1.0
        with self.assertRaises(ModelFitError) as ctx:
            fit_superhost_model(data)
        self.assertEqual(ctx.exception.stage, 'model')


if __name__ == '__main__':
    unittest.main()
