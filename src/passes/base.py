"""
Base class for passes that rewrite an IRGraph in place.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any

from low_precision.ir.graph import IRGraph


class IRPass(ABC):
    """
    Abstract base class for graph rewrite passes.

    Subclasses implement apply(). Counters and per-node records of the last
    run are kept in self.stats.
    """

    def __init__(self, verbose: bool = False):
        """
        Args:
            verbose: If True, print one line per rewritten node
        """
        self.verbose = verbose
        self.stats: Dict[str, Any] = {}

    @abstractmethod
    def apply(self, ir_graph: IRGraph) -> IRGraph:
        """
        Rewrite the IR graph.

        Args:
            ir_graph: The IR graph to rewrite

        Returns:
            The same IR graph, modified in place
        """
        pass

    def __call__(self, ir_graph: IRGraph) -> IRGraph:
        return self.apply(ir_graph)

    def get_stats(self) -> Dict[str, Any]:
        """Statistics of the last apply() call."""
        return self.stats

    def _reset_stats(self, counters, records=()) -> None:
        """Start a run: zero every counter, empty every record list."""
        self.stats = {name: 0 for name in counters}
        self.stats.update({name: [] for name in records})

    def _log(self, message: str):
        """Print message if verbose mode is enabled."""
        if self.verbose:
            print(f"[{self.__class__.__name__}] {message}")
