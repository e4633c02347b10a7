"""Shared helpers: dependency checks, timing and network access."""

#  Copyright (c) 2025 Tom Villani, Ph.D.
