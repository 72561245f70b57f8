# -*- coding: utf-8 -*-
"""Fitness sync backend: per-user JSON documents keyed by month, with token auth."""

__version__ = "1.0.0"
