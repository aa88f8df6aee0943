"""Shared utilities for clustersmith."""
