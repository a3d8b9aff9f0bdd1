"""Relationship extraction module for inferring edges between notes."""

from notegraph.ingestion.relationship_extraction.degree import DegreeCalculator
from notegraph.ingestion.relationship_extraction.graph_builder import RelationshipDetector

__all__ = [
    "DegreeCalculator",
    "RelationshipDetector",
]
