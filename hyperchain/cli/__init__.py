"""Hyperchain command-line interface."""
