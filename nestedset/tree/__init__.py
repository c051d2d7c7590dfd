"""Nested-set tree engine: locator, shifter, reader, mutator and the NestedSetTree facade."""

from nestedset.tree.locator import NodeLocator
from nestedset.tree.mutator import TreeMutator
from nestedset.tree.reader import TreeReader
from nestedset.tree.service import NestedSetTree
from nestedset.tree.shifter import IntervalShifter

__all__ = ["IntervalShifter", "NestedSetTree", "NodeLocator", "TreeMutator", "TreeReader"]
