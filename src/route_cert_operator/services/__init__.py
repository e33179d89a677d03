"""Cluster store services."""
