"""
Pytest configuration and shared fixtures.
"""

import os
import sys
import threading

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))


class FakeSession:
    """Stands in for an ONNX session; records every run call."""

    def __init__(self, output_names=("output0",), output_shape=(1, 5, 2100), error=None):
        self._output_names = list(output_names)
        self.output_shape = output_shape
        self.error = error
        self.calls = []

    @property
    def output_names(self):
        return list(self._output_names)

    def run(self, inputs):
        self.calls.append({k: (v.shape, v.dtype) for k, v in inputs.items()})
        if self.error is not None:
            raise self.error
        return {name: np.zeros(self.output_shape, dtype=np.float32) for name in self._output_names}


class FakeEngine:
    """
    Stands in for the inference engine.

    fail_times: number of create() calls that raise before one succeeds.
    gate: optional threading.Event that create() waits on (keeps LOADING observable).
    """

    def __init__(self, session=None, fail_times=0, gate=None):
        self.session = session or FakeSession()
        self.fail_times = fail_times
        self.gate = gate
        self.create_calls = []
        self._lock = threading.Lock()

    def create(self, model_location, options):
        with self._lock:
            self.create_calls.append((model_location, options))
            should_fail = len(self.create_calls) <= self.fail_times
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if should_fail:
            raise RuntimeError("model file is corrupt")
        return self.session


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def fake_engine(fake_session):
    return FakeEngine(session=fake_session)


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
model:
  path: "models/best.onnx"
  input_name: "images"
  target_size: 320

worker:
  host: "127.0.0.1"
  port: 8765
  restart_delay_s: 5

client:
  worker_url: "http://127.0.0.1:8765"

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "model": {
            "path": "models/best.onnx",
            "input_name": "images",
            "target_size": 320,
        },
        "worker": {
            "host": "127.0.0.1",
            "port": 8765,
            "restart_delay_s": 5,
        },
        "client": {
            "worker_url": "http://127.0.0.1:8765",
        },
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }
