"""Catalog app package.

Products sold in the outdoor gear shop and their categories. Stock is only
ever changed through the atomic helpers in :mod:`apps.catalog.services`.
"""
