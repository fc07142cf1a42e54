"""Headless node-graph model: nodes, ports, connections, styles, scenes and behaviour-tree node models."""

__version__ = "0.1.0"