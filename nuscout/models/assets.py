"""
Resolved asset model for nuscout.

A :class:`ResolvedAssetSet` is the output of lock file resolution for one
target framework: the assemblies to reference at compile time, the
assemblies to load at run time, and the analyzer assemblies to hand to the
compiler.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class ResolvedAssetSet:
    """Ordered asset paths for one target framework.

    Attributes:
        compile_assets: Reference assemblies, unique by file stem.
        runtime_assets: Implementation assemblies, unique by file stem.
        analyzer_assets: Analyzer assemblies from every library, not deduplicated.
    """

    compile_assets: List[str] = field(default_factory=list)
    runtime_assets: List[str] = field(default_factory=list)
    analyzer_assets: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.compile_assets or self.runtime_assets or self.analyzer_assets)

    def to_json(self) -> Dict[str, List[str]]:
        return {
            "compile": list(self.compile_assets),
            "runtime": list(self.runtime_assets),
            "analyzers": list(self.analyzer_assets),
        }
