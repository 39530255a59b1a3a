"""
Wardrobe Colors Module

Dominant-color extraction for garment photos (border-sampled background
removal plus bucketed frequency ranking) and color-harmony classification
for the colors of a look.
"""

__version__ = "1.0.0"
