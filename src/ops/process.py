"""
Worker process management.

This module provides:
- PID file management so only one worker (one model session) runs per host
- Stopping a running worker from the CLI
- Full process restart, the escalation used when the model fails to load
"""

from __future__ import annotations

import atexit
import logging
import os
import signal
import sys
import time
from pathlib import Path
from typing import Optional

DEFAULT_PID_FILE = "data/letterbox_worker.pid"


def get_pid_file_path(pid_file: Optional[str] = None) -> Path:
    return Path(pid_file or DEFAULT_PID_FILE)


def read_pid_file(pid_file: Optional[str] = None) -> Optional[int]:
    """
    Read the PID from the PID file.

    Returns:
        The PID if file exists and is valid, None otherwise.
    """
    path = get_pid_file_path(pid_file)
    if not path.exists():
        return None

    try:
        return int(path.read_text().strip())
    except (ValueError, OSError):
        return None


def is_process_running(pid: int) -> bool:
    if pid <= 0:
        return False
    try:
        # Signal 0 checks existence without delivering anything
        os.kill(pid, 0)
        return True
    except PermissionError:
        return True
    except OSError:
        return False


def write_pid_file(pid_file: Optional[str] = None) -> None:
    """Write the current PID and remove the file again at exit."""
    path = get_pid_file_path(pid_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(str(os.getpid()))
    logging.debug(f"Wrote PID {os.getpid()} to {path}")
    atexit.register(remove_pid_file, pid_file)


def remove_pid_file(pid_file: Optional[str] = None) -> None:
    path = get_pid_file_path(pid_file)
    try:
        if path.exists() and read_pid_file(pid_file) in (None, os.getpid()):
            path.unlink()
            logging.debug(f"Removed PID file: {path}")
    except OSError as e:
        logging.warning(f"Failed to remove PID file: {e}")


def ensure_single_instance(pid_file: Optional[str] = None, kill_existing: bool = False) -> bool:
    """
    Make sure this is the only worker process.

    A PID file naming our own PID is accepted: restart_process() re-execs in
    place, keeping the PID and skipping atexit cleanup.

    Returns:
        True if we can proceed, False if another live worker owns the PID file.
    """
    existing_pid = read_pid_file(pid_file)

    if existing_pid is not None and existing_pid != os.getpid():
        if is_process_running(existing_pid):
            if not kill_existing:
                logging.error(
                    f"Another worker is already running (PID {existing_pid}). "
                    f"Use --kill-existing to replace it, or stop it first."
                )
                return False
            logging.info(f"Stopping existing worker (PID {existing_pid})...")
            if not _terminate(existing_pid):
                logging.error(f"Failed to stop existing worker (PID {existing_pid})")
                return False
        else:
            logging.info(f"Removing stale PID file (PID {existing_pid} not running)")

    write_pid_file(pid_file)
    return True


def _terminate(pid: int, wait_s: float = 5.0) -> bool:
    try:
        os.kill(pid, signal.SIGTERM)
    except OSError as e:
        logging.warning(f"Failed to signal process {pid}: {e}")
        return not is_process_running(pid)

    deadline = time.time() + wait_s
    while time.time() < deadline:
        if not is_process_running(pid):
            return True
        time.sleep(0.2)

    try:
        os.kill(pid, signal.SIGKILL)
    except OSError:
        pass
    time.sleep(0.2)
    return not is_process_running(pid)


def stop_existing_instance(pid_file: Optional[str] = None) -> bool:
    """
    Stop the running worker named by the PID file.

    Returns:
        True if no worker was running or it was stopped.
    """
    existing_pid = read_pid_file(pid_file)

    if existing_pid is None:
        print("No PID file found - no worker to stop.")
        return True

    if not is_process_running(existing_pid):
        print(f"PID file exists but process {existing_pid} is not running. Cleaning up.")
        get_pid_file_path(pid_file).unlink(missing_ok=True)
        return True

    print(f"Stopping worker (PID {existing_pid})...")
    if _terminate(existing_pid):
        get_pid_file_path(pid_file).unlink(missing_ok=True)
        print(f"Worker stopped (PID {existing_pid})")
        return True

    print(f"Failed to stop worker (PID {existing_pid})")
    return False


def restart_process() -> None:
    """Replace the current process with a fresh copy of itself (same argv)."""
    logging.warning(f"Restarting worker process: {sys.executable} {' '.join(sys.argv)}")
    for handler in logging.getLogger().handlers:
        handler.flush()
    os.execv(sys.executable, [sys.executable] + sys.argv)
