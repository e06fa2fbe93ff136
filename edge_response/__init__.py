"""
Edge Response Analyzer

Locates the dominant circular edge in a single-channel intensity image,
builds a radial intensity profile around it and differentiates the profile
into an edge response function. Also provides global noise level and
region contrast-to-noise ratio (CNR) measurements.
"""

__version__ = "0.1.0"
__author__ = "Edge Response Team"
