"""Configuration constants for alephium-voting library."""

# Minimal ALPH amount (in atto-ALPH) a UTXO must hold.
# Paid by the administrator to every voter on allocation and back by every voter on vote.
UTXO_FEE = 1000000000000000

# Gas budget for contract deployment and script execution
GAS_LIMIT = 80000

# Tokens handed to each voter on allocation
TOKENS_PER_VOTER = 1

# Network ids reported by /infos/chain-params
NETWORK_IDS = {
    0: "mainnet",
    1: "testnet",
}

# Defaults taken from the tutorial's local setup
DEFAULT_NODE_HOST = "http://localhost:12973"
DEFAULT_EXPLORER_URL = "https://testnet.alephium.org"
DEFAULT_WALLET_NAME = "wallet-1"
DEFAULT_WALLET_PASSWORD = "my-secret-password"

# Seconds between two network status probes
DEFAULT_POLL_INTERVAL = 5.0

# Seconds before an HTTP request to the node is abandoned
DEFAULT_REQUEST_TIMEOUT = 30.0
