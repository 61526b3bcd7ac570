"""Spectrum analysis, regime switching and onset detection."""
