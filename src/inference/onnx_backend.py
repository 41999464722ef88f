"""
ONNX Runtime inference engine (CPU).

Wraps onnxruntime.InferenceSession behind the SessionHandle protocol so the
session manager never touches onnxruntime directly.
"""

from __future__ import annotations

import logging
import os
from typing import List, Mapping, Sequence

import numpy as np

from .backend import ExecutionOptions, InferenceEngine, SessionHandle

_GRAPH_OPT_LEVELS = {
    "disabled": "ORT_DISABLE_ALL",
    "basic": "ORT_ENABLE_BASIC",
    "extended": "ORT_ENABLE_EXTENDED",
    "all": "ORT_ENABLE_ALL",
}


class OnnxRuntimeSession(SessionHandle):
    def __init__(self, session):
        self._session = session
        self._output_names: List[str] = [o.name for o in session.get_outputs()]

    @property
    def output_names(self) -> Sequence[str]:
        return list(self._output_names)

    @property
    def input_names(self) -> Sequence[str]:
        return [i.name for i in self._session.get_inputs()]

    def run(self, inputs: Mapping[str, np.ndarray]) -> Mapping[str, np.ndarray]:
        outputs = self._session.run(self._output_names, dict(inputs))
        return dict(zip(self._output_names, outputs))


class OnnxRuntimeEngine(InferenceEngine):
    def __init__(self):
        try:
            import onnxruntime as ort  # type: ignore
        except Exception as e:  # pragma: no cover
            raise ImportError(
                "onnxruntime is not installed. Install with `pip install onnxruntime`."
            ) from e
        self._ort = ort

    def build_session_options(self, options: ExecutionOptions):
        ort = self._ort
        so = ort.SessionOptions()
        so.intra_op_num_threads = options.intra_op_num_threads
        so.inter_op_num_threads = options.inter_op_num_threads
        so.execution_mode = (
            ort.ExecutionMode.ORT_SEQUENTIAL if options.sequential else ort.ExecutionMode.ORT_PARALLEL
        )
        level = _GRAPH_OPT_LEVELS.get(options.graph_optimization, "ORT_ENABLE_ALL")
        so.graph_optimization_level = getattr(ort.GraphOptimizationLevel, level)
        so.enable_cpu_mem_arena = options.enable_cpu_mem_arena
        return so

    def create(self, model_location: str, options: ExecutionOptions) -> OnnxRuntimeSession:
        if not os.path.exists(model_location):
            raise FileNotFoundError(f"Model not found: {model_location}")

        session = self._ort.InferenceSession(
            model_location,
            sess_options=self.build_session_options(options),
            providers=list(options.providers),
        )
        handle = OnnxRuntimeSession(session)
        logging.info(
            f"ONNX session created: inputs={handle.input_names} outputs={handle.output_names}"
        )
        return handle
