"""Surfaces, the frame loop and output backends."""
