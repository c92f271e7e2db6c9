"""Compute kernels for leafboost."""

from ._cpu import build_histogram_cpu, scan_histogram_cpu

__all__ = ["build_histogram_cpu", "scan_histogram_cpu"]
