# storage.py
from __future__ import annotations

import datetime as _dt
import json
import os
import re
from typing import Any, Optional

# -------------------------------
# Public constants used by main.py
# -------------------------------

APP_NAME = "Link Board"

NETWORK = os.environ.get("LINKBOARD_NETWORK", "devnet").strip() or "devnet"

# Address of the program that owns the link records
PROGRAM_ID = "411epjTUoVTbocyurmcHzUCcfem35iJ3F3yWQ3ytJZ7w"

# How "done" a transaction must be before it is acknowledged
COMMITMENT = "processed"

TWITTER_HANDLE = "_buildspace"
TWITTER_LINK = f"https://twitter.com/{TWITTER_HANDLE}"

SCHEMA_VERSION = 1

_WALLET_FILENAME = "wallet.json"
_SAFE_NAME_RE = re.compile(r"[^A-Za-z0-9_.-]+")


# -------------------------------
# Environment
# -------------------------------

def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def simulated_latency() -> float:
    """Seconds each local ledger / wallet call waits before answering."""
    return max(0.0, _env_float("LINKBOARD_LATENCY_MS", 400.0) / 1000.0)


def simulated_failure_rate() -> float:
    return min(1.0, max(0.0, _env_float("LINKBOARD_FAIL_RATE", 0.0)))


def wallet_enabled() -> bool:
    return os.environ.get("LINKBOARD_WALLET", "on").strip().lower() not in ("off", "0", "false", "no")


def log_level() -> str:
    return os.environ.get("LINKBOARD_LOG_LEVEL", "INFO").strip().upper() or "INFO"


# -------------------------------
# Time / paths
# -------------------------------

def now_local_str() -> str:
    return _dt.datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def get_documents_path() -> str:
    home = os.environ.get("USERPROFILE") or os.path.expanduser("~")
    return os.path.join(home, "Documents")


def get_data_path() -> str:
    override = os.environ.get("LINKBOARD_HOME", "").strip()
    path = override or os.path.join(get_documents_path(), "LinkBoard")
    os.makedirs(path, exist_ok=True)
    return path


def wallet_path() -> str:
    return os.path.join(get_data_path(), _WALLET_FILENAME)


def ledger_path(network: str = NETWORK, program_id: str = PROGRAM_ID) -> str:
    name = _SAFE_NAME_RE.sub("-", f"ledger_{network}_{program_id[:8]}")
    return os.path.join(get_data_path(), f"{name}.json")


# -------------------------------
# JSON files
# -------------------------------

def load_json(path: str) -> Optional[dict[str, Any]]:
    """
    Returns None when the file does not exist.
    Unreadable or malformed files raise (OSError / ValueError); the caller
    decides whether that is fatal.
    """
    if not os.path.isfile(path):
        return None
    with open(path, "r", encoding="utf-8") as f:
        val = json.load(f)
    if not isinstance(val, dict):
        raise ValueError(f"{os.path.basename(path)}: expected a JSON object")
    return val


def save_json(path: str, data: dict[str, Any]) -> None:
    # write-then-rename so a crash never leaves half a file behind
    tmp = path + ".tmp"
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    os.replace(tmp, path)
