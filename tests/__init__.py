"""Test suite for clustersmith.

Test Structure:
- unit/: Unit tests per package (io, state, assets, engine, validation,
  installer, config, logging, cli)
- conftest.py: Shared fixtures (stub assets, fake filesystem, install config)
"""
