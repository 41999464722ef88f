"""
Tests for the onnxruntime engine adapter.
"""

import asyncio
from types import SimpleNamespace

import numpy as np
import pytest

ort = pytest.importorskip("onnxruntime")

from inference.backend import ExecutionOptions
from inference.onnx_backend import OnnxRuntimeEngine, OnnxRuntimeSession
from inference.session import ModelSessionManager, SessionState
from models.errors import ModelInitError


class TestSessionOptions:
    def test_default_options_reach_ort(self):
        so = OnnxRuntimeEngine().build_session_options(ExecutionOptions())

        assert so.intra_op_num_threads == 1
        assert so.inter_op_num_threads == 1
        assert so.execution_mode == ort.ExecutionMode.ORT_SEQUENTIAL
        assert so.graph_optimization_level == ort.GraphOptimizationLevel.ORT_ENABLE_ALL
        assert so.enable_cpu_mem_arena is False

    def test_parallel_and_basic_level(self):
        options = ExecutionOptions(
            intra_op_num_threads=2,
            sequential=False,
            graph_optimization="basic",
            enable_cpu_mem_arena=True,
        )
        so = OnnxRuntimeEngine().build_session_options(options)

        assert so.intra_op_num_threads == 2
        assert so.execution_mode == ort.ExecutionMode.ORT_PARALLEL
        assert so.graph_optimization_level == ort.GraphOptimizationLevel.ORT_ENABLE_BASIC
        assert so.enable_cpu_mem_arena is True


class TestCreate:
    def test_missing_model_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            OnnxRuntimeEngine().create(str(tmp_path / "missing.onnx"), ExecutionOptions())

    def test_manager_reports_missing_model_as_init_error(self, tmp_path):
        manager = ModelSessionManager(OnnxRuntimeEngine())

        with pytest.raises(ModelInitError) as exc_info:
            asyncio.run(manager.initialize(str(tmp_path / "missing.onnx")))

        assert isinstance(exc_info.value.__cause__, FileNotFoundError)
        assert manager.state is SessionState.FAILED

    def test_unparseable_model_file(self, tmp_path):
        path = tmp_path / "broken.onnx"
        path.write_bytes(b"not a model")
        manager = ModelSessionManager(OnnxRuntimeEngine())

        with pytest.raises(ModelInitError):
            asyncio.run(manager.initialize(str(path)))
        assert manager.state is SessionState.FAILED


class _StubOrtSession:
    """Mimics the parts of ort.InferenceSession the adapter uses."""

    def __init__(self):
        self.calls = []

    def get_outputs(self):
        return [SimpleNamespace(name="output0"), SimpleNamespace(name="aux")]

    def get_inputs(self):
        return [SimpleNamespace(name="images")]

    def run(self, output_names, feeds):
        self.calls.append((list(output_names), sorted(feeds)))
        return [np.zeros((1, 5, 2100), dtype=np.float32), np.zeros((1,), dtype=np.float32)]


class TestOnnxRuntimeSession:
    def test_run_returns_outputs_by_name(self):
        stub = _StubOrtSession()
        session = OnnxRuntimeSession(stub)

        outputs = session.run({"images": np.zeros((1, 3, 320, 320), dtype=np.float32)})

        assert session.output_names == ["output0", "aux"]
        assert session.input_names == ["images"]
        assert outputs["output0"].shape == (1, 5, 2100)
        assert stub.calls == [(["output0", "aux"], ["images"])]
