"""Flat key parsing, the submitted value multimap and key grouping."""

from .grouping import KeyIndex, ParsedEntry
from .paths import ROOT, KeyPath, Segment, parse_key
from .values import FlatValueSet


__all__ = ["ROOT", "FlatValueSet", "KeyIndex", "KeyPath", "ParsedEntry", "Segment", "parse_key"]
