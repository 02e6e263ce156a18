"""
Test suite

Tests organized by module:
- test_cleaning.py: loading, rule tables, cleaning stages, end-to-end cleaning
- test_modeling.py: analysis subset, candidate evaluation, model selection
- test_spatial.py: projection, Moran's I, semivariogram
- test_plotting.py: figures and summaries (smoke)
"""
