"""Depth-aware taxonomy filters for media reference fields.

Import handlers from their modules (``filters.argument``, ``filters.filter``);
``database.schema`` depends on ``filters.models`` so this package stays
import-free.
"""
