# forkforge/config.py
import os
from pathlib import Path
from dotenv import load_dotenv


class Config:
    """
    Central Configuration.
    Uses pathlib to find paths relative to THIS file, not the current working directory.
    """

    # forkforge/config.py -> project root
    BASE_DIR = Path(__file__).resolve().parent.parent

    ENV_PATH = BASE_DIR / "local_config" / ".env"

    # values already set in the environment win over .env
    if ENV_PATH.exists():
        load_dotenv(ENV_PATH)

    # Path for outputs (Logs)
    OUTPUT_DIR = Path(os.getenv("FORKFORGE_OUTPUT_DIR", str(BASE_DIR / "output")))

    ACTIVE_NETWORK_NAME = os.getenv("NETWORK", "main").lower()

    if ACTIVE_NETWORK_NAME not in ("main", "test", "signet", "regtest"):
        raise ValueError(f"Invalid NETWORK '{ACTIVE_NETWORK_NAME}' specified. Use 'main', 'test', 'signet' or 'regtest'.")

    # --- Node definitions (JSON list, see node_config.py) ---
    # relative paths are taken from the project root
    NODES_FILE = str(BASE_DIR / os.getenv("NODES_FILE", "local_config/nodes.json"))

    LOG_FILE = str(OUTPUT_DIR / f"forkforge_{ACTIVE_NETWORK_NAME}.log")

    # --- Sync Behavior ---
    # Tips whose fork root is at or below this height are ignored.
    MIN_FORK_HEIGHT = int(os.getenv("MIN_FORK_HEIGHT", 0))
    # Blocks below the lowest fork root that are re-scanned on an empty tree.
    SCAN_SAFETY_MARGIN = 5
    # Max headers per REST request (limit of Bitcoin Core's /rest/headers).
    REST_HEADERS_STEP = 2000
    REST_TIMEOUT = float(os.getenv("REST_TIMEOUT", 8))
    # Deadline for single RPC calls in seconds. 0 disables it.
    RPC_TIMEOUT = float(os.getenv("RPC_TIMEOUT", 30))

    # --- Control Behavior ---
    POLLING_INTERVAL = int(os.getenv("POLLING_INTERVAL", 30))
    VERBOSE = os.getenv("VERBOSE", "False").lower() in ('true', '1', 't')

    @classmethod
    def rpc_timeout(cls):
        """RPC_TIMEOUT as understood by httpx (None = wait forever)."""
        return cls.RPC_TIMEOUT if cls.RPC_TIMEOUT > 0 else None

    @classmethod
    def ensure_output_dir(cls):
        os.makedirs(cls.OUTPUT_DIR, exist_ok=True)
