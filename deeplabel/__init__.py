"""Bounding-box dataset tools: an in-memory label store, Darknet/COCO/BIRDSAI importers, Darknet/COCO/GCP exporters, and detection post-processing."""

__version__ = "0.1.0"