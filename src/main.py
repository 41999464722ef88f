"""
Command-line entry point for the letterbox inference worker.

Usage:
    python src/main.py serve --config config/config.yaml
    python src/main.py infer path/to/image.jpg [--local]
    python src/main.py stop

Commands:
    serve: Run the worker process (holds the model session, answers requests)
    infer: UI side; letterbox an image and send it to the worker
    stop:  Stop the running worker via its PID file
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Any, Dict, Optional, Tuple

import yaml

from inference.session import ModelSessionManager
from models.config import Config
from models.errors import InvalidImageError, ModelInitError
from ops.logging import setup_logging
from ops.process import ensure_single_instance, stop_existing_instance
from orchestrator.channel import HttpChannel, LocalChannel
from orchestrator.client import InferenceClient
from orchestrator.worker import InferenceWorker


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided `--config` path (treated as overrides)
    """
    try:
        base_path = os.path.join(os.path.dirname(config_path), "default.yaml")
        base_cfg: Dict[str, Any] = {}
        if os.path.exists(base_path):
            with open(base_path, "r") as f:
                base_cfg = yaml.safe_load(f) or {}

        local_overrides_path = os.path.join(os.path.dirname(config_path), "config.yaml")
        local_cfg: Dict[str, Any] = {}
        if os.path.exists(local_overrides_path):
            with open(local_overrides_path, "r") as f:
                local_cfg = yaml.safe_load(f) or {}

        merged = _deep_merge(base_cfg, local_cfg)

        if os.path.exists(config_path) and os.path.abspath(config_path) != os.path.abspath(local_overrides_path):
            with open(config_path, "r") as f:
                explicit_cfg = yaml.safe_load(f) or {}
            merged = _deep_merge(merged, explicit_cfg)

        return merged
    except Exception as e:
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ['model', 'worker', 'log_path', 'log_level']
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    model = config.get('model') or {}
    if not isinstance(model.get('path'), str) or not model.get('path'):
        return False, "model.path must be a non-empty string"
    if 'input_name' in model and (not isinstance(model['input_name'], str) or not model['input_name']):
        return False, "model.input_name must be a non-empty string"
    if 'target_size' in model:
        ts = model['target_size']
        if not isinstance(ts, int) or isinstance(ts, bool) or ts <= 0:
            return False, "model.target_size must be a positive integer"

    worker = config.get('worker') or {}
    if 'port' in worker:
        port = worker['port']
        if not isinstance(port, int) or not (0 < port < 65536):
            return False, "worker.port must be an integer between 1 and 65535"
    if 'restart_delay_s' in worker:
        delay = worker['restart_delay_s']
        if not isinstance(delay, (int, float)) or delay < 0:
            return False, "worker.restart_delay_s must be a non-negative number"

    client = config.get('client') or {}
    if 'worker_url' in client and not isinstance(client['worker_url'], str):
        return False, "client.worker_url must be a string"
    timeout = client.get('timeout_s')
    if timeout is not None and (not isinstance(timeout, (int, float)) or timeout <= 0):
        return False, "client.timeout_s must be a positive number or null"

    valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
    if config['log_level'] not in valid_log_levels:
        return False, f"log_level must be one of: {', '.join(valid_log_levels)}"

    return True, None


def _load_typed_config(config_path: str) -> Config:
    raw = load_config(config_path)
    is_valid, error_msg = validate_config(raw)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        sys.exit(1)
    cfg = Config.from_dict(raw)
    setup_logging(cfg.log_path, cfg.log_level)
    return cfg


def serve(cfg: Config, kill_existing: bool = False) -> int:
    import uvicorn
    from web.app import create_app

    if not ensure_single_instance(cfg.worker.pid_file, kill_existing=kill_existing):
        return 1

    logging.info(f"Starting worker on {cfg.worker.host}:{cfg.worker.port} (model={cfg.model.path})")
    app = create_app(cfg)
    # log_config=None keeps our logging setup instead of uvicorn's
    uvicorn.run(app, host=cfg.worker.host, port=cfg.worker.port, log_config=None)
    return 0


async def infer(cfg: Config, image_path: str, local: bool = False) -> int:
    if local:
        manager = ModelSessionManager()
        try:
            await manager.initialize(cfg.model.path)
        except ModelInitError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 1
        channel = LocalChannel(InferenceWorker(manager, input_name=cfg.model.input_name))
    else:
        channel = HttpChannel(cfg.client.worker_url, timeout_s=cfg.client.timeout_s)

    client = InferenceClient(channel, target_size=cfg.model.target_size)
    try:
        result, response = await client.detect(image_path)
    except InvalidImageError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    finally:
        await client.close()

    print(json.dumps({
        "letterbox": result.geometry.to_dict(),
        "response": response.to_dict(),
    }, indent=2))
    return 0 if response.ok else 1


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Letterbox inference worker')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    sub = parser.add_subparsers(dest='command', required=True)

    serve_p = sub.add_parser('serve', help='Run the worker process')
    serve_p.add_argument('--kill-existing', action='store_true',
                         help='Stop a running worker before starting')

    infer_p = sub.add_parser('infer', help='Send an image to the worker')
    infer_p.add_argument('image', type=str, help='Path to the image file')
    infer_p.add_argument('--local', action='store_true',
                         help='Load the model in this process instead of calling the worker')

    sub.add_parser('stop', help='Stop the running worker')

    args = parser.parse_args(argv)
    cfg = _load_typed_config(args.config)

    if args.command == 'serve':
        return serve(cfg, kill_existing=args.kill_existing)
    if args.command == 'infer':
        return asyncio.run(infer(cfg, args.image, local=args.local))
    return 0 if stop_existing_instance(cfg.worker.pid_file) else 1


if __name__ == "__main__":
    sys.exit(main())
