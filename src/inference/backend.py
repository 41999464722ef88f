"""
Inference engine interface.

The engine is an external collaborator: it turns a model location into a
loaded session and runs forward passes. Everything else in the worker only
talks to it through these protocols.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Mapping, Protocol, Sequence

import numpy as np


@dataclass(frozen=True)
class ExecutionOptions:
    """
    Session execution configuration.

    Defaults are the fixed worker configuration: single-threaded, sequential
    (no worker proxying), full graph optimization, no CPU memory arena.
    """
    intra_op_num_threads: int = 1
    inter_op_num_threads: int = 1
    sequential: bool = True
    graph_optimization: str = "all"
    enable_cpu_mem_arena: bool = False
    providers: List[str] = field(default_factory=lambda: ["CPUExecutionProvider"])


class SessionHandle(Protocol):
    @property
    def output_names(self) -> Sequence[str]:
        ...

    def run(self, inputs: Mapping[str, np.ndarray]) -> Mapping[str, np.ndarray]:
        ...


class InferenceEngine(Protocol):
    def create(self, model_location: str, options: ExecutionOptions) -> SessionHandle:
        ...
