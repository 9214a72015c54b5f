"""Structural analysis, eligibility decisions and the pre/post-processing pipeline."""
