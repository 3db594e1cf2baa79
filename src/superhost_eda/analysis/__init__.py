# ========================
# src/superhost_eda/analysis/__init__.py
# ========================

"""
Analysis Package

Figures and the superhost model built on the cleaned analysis dataset.
Modules are imported directly so matplotlib is only loaded when plotting.
"""
