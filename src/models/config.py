"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class ModelConfig:
    """Model asset configuration."""
    path: str = "models/best.onnx"
    input_name: str = "images"
    target_size: int = 320

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ModelConfig":
        """Adapter: Create from config dictionary."""
        return cls(
            path=d.get("path", "models/best.onnx"),
            input_name=d.get("input_name", "images"),
            target_size=d.get("target_size", 320),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "input_name": self.input_name,
            "target_size": self.target_size,
        }


@dataclass
class WorkerConfig:
    """Worker process configuration."""
    host: str = "127.0.0.1"
    port: int = 8765
    restart_delay_s: float = 5.0
    install_marker: str = "data/installed"
    pid_file: str = "data/letterbox_worker.pid"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "WorkerConfig":
        return cls(
            host=d.get("host", "127.0.0.1"),
            port=d.get("port", 8765),
            restart_delay_s=d.get("restart_delay_s", 5.0),
            install_marker=d.get("install_marker", "data/installed"),
            pid_file=d.get("pid_file", "data/letterbox_worker.pid"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "restart_delay_s": self.restart_delay_s,
            "install_marker": self.install_marker,
            "pid_file": self.pid_file,
        }


@dataclass
class ClientConfig:
    """UI-side channel configuration. No timeout unless one is configured."""
    worker_url: str = "http://127.0.0.1:8765"
    timeout_s: Optional[float] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ClientConfig":
        return cls(
            worker_url=d.get("worker_url", "http://127.0.0.1:8765"),
            timeout_s=d.get("timeout_s"),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"worker_url": self.worker_url}
        if self.timeout_s is not None:
            d["timeout_s"] = self.timeout_s
        return d


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    model: ModelConfig = field(default_factory=ModelConfig)
    worker: WorkerConfig = field(default_factory=WorkerConfig)
    client: ClientConfig = field(default_factory=ClientConfig)
    log_path: str = "logs/letterbox_worker.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            model=ModelConfig.from_dict(d.get("model", {}) or {}),
            worker=WorkerConfig.from_dict(d.get("worker", {}) or {}),
            client=ClientConfig.from_dict(d.get("client", {}) or {}),
            log_path=d.get("log_path", "logs/letterbox_worker.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary (for saving or passing to existing code)."""
        return {
            "model": self.model.to_dict(),
            "worker": self.worker.to_dict(),
            "client": self.client.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
