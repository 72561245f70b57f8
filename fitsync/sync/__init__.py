# -*- coding: utf-8 -*-
"""Sync domain (bulk export/import of a user's documents).

The per-kind routes in `fitsync/documents/*` share this storage layer.
"""
