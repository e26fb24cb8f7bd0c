"""Test package for point-stacker.

This package contains:
- Unit tests (test_grid.py, test_positions.py, test_cluster.py, test_features.py)
- Pass and projection tests (test_stacking.py, test_projector.py)
- Process and profile tests (test_process.py, test_config_loader.py)
- HTTP server tests (test_actions.py)
- Test configuration (conftest.py)
"""
