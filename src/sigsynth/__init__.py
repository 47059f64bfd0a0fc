"""Offline signal-graph synthesiser package."""

from __future__ import annotations

from .app import run as run_app
from .node_benchmarks import run_node_benchmarks

__all__ = ["run_app", "run_node_benchmarks"]
