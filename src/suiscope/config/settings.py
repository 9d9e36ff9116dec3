import os
from dotenv import load_dotenv
load_dotenv()
# ---- Sui JSON-RPC ----
SUI_RPC_URL = os.environ.get("SUI_RPC_URL", "https://fullnode.mainnet.sui.io:443")
SUI_RPC_TIMEOUT_SEC = float(os.environ.get("SUI_RPC_TIMEOUT_SEC", "15"))

# ---- Response cache ----
CACHE_TTL_MS = int(os.environ.get("SUISCOPE_CACHE_TTL_MS", "30000"))

# ---- Coins ----
SUI_COIN_TYPE = "0x2::sui::SUI"
MIST_PER_SUI = 10**9

# ---- Search fan-out ----
ADDRESS_TX_LIMIT = 5
ADDRESS_OBJECT_LIMIT = 10
LATEST_TX_LIMIT = 10
OWNED_OBJECTS_LIMIT = 50
ADDRESS_HISTORY_LIMIT = 20

# ----- Logging -----
LOG_LEVEL = os.environ.get("SUISCOPE_LOG_LEVEL", "WARNING").upper()
