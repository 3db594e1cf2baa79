# ========================
# src/superhost_eda/__init__.py
# ========================

"""
Superhost EDA

Batch cleaning and exploratory analysis of a short-term-rental listings
snapshot, ending in a logistic regression of superhost status.
"""

__version__ = "1.0.0"
