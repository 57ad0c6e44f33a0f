"""Nearest-match search between collections of tract bundles.

This package provides the building blocks to resample 3D polylines to fixed
length curves, score curve pairs with pluggable distance metrics, aggregate
those scores into a directional bundle-to-bundle distance, and find the best
matching bundle for every bundle of a first collection.
"""
