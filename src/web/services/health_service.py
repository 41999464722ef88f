from __future__ import annotations

import os
import platform
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from inference.session import ModelSessionManager


@dataclass
class HealthService:
    manager: ModelSessionManager
    worker: Any = None
    lifecycle: Any = None

    def get_health_summary(self) -> Dict[str, Any]:
        summary: Dict[str, Any] = dict(self.manager.status())
        summary.update({
            "timestamp": time.time(),
            "pid": os.getpid(),
            "platform": platform.platform(),
            "python": platform.python_version(),
            "restart_pending": bool(getattr(self.lifecycle, "restart_pending", False)),
            "requests_handled": getattr(self.worker, "requests_handled", 0),
            "requests_failed": getattr(self.worker, "requests_failed", 0),
            "onnxruntime": self.onnxruntime_version(),
        })
        return summary

    @staticmethod
    def onnxruntime_version() -> Optional[str]:
        """Best-effort engine version; None if onnxruntime is not importable."""
        try:
            import onnxruntime  # type: ignore
        except ImportError:
            return None
        return getattr(onnxruntime, "__version__", None)
