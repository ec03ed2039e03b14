"""Configuration constants for contract-deployments library."""

# Networks treated as transient local chains when the config does not say otherwise
DEFAULT_DEVELOPMENT_CHAINS = ["hardhat", "localhost"]

DEFAULT_BLOCK_CONFIRMATIONS = 1

# Seconds to wait for a deployment to reach its confirmation depth
DEFAULT_CONFIRMATION_TIMEOUT = 300
DEFAULT_POLL_INTERVAL = 2.0

# Verification retry ceiling
DEFAULT_MAX_VERIFY_ATTEMPTS = 5
DEFAULT_INITIAL_RETRY_DELAY = 5.0
DEFAULT_RETRY_MULTIPLIER = 2.0
DEFAULT_MAX_RETRY_DELAY = 60.0
DEFAULT_MAX_TOTAL_VERIFY_WAIT = 300.0

# Project layout, relative to the project directory
CONFIG_FILENAME = "deploy-config.json"
ARTIFACTS_DIRNAME = "artifacts"
DEPLOYMENTS_DIRNAME = "deployments"
UNITS_DIRNAME = "deploy"

# Environment variables
ETHERSCAN_API_KEY_ENV = "ETHERSCAN_API_KEY"
DEPLOYER_PRIVATE_KEY_ENV = "DEPLOYER_PRIVATE_KEY"

# Name of the fallback network profile in the config file
DEFAULT_NETWORK_PROFILE = "default"

# Explorer defaults for well-known networks, keyed by config network name
NETWORK_CONFIG = {
    "mainnet": {
        "chain_id": 1,
        "explorer_url": "https://etherscan.io",
        "explorer_api_url": "https://api.etherscan.io/api",
    },
    "sepolia": {
        "chain_id": 11155111,
        "explorer_url": "https://sepolia.etherscan.io",
        "explorer_api_url": "https://api-sepolia.etherscan.io/api",
    },
    "gnosis": {
        "chain_id": 100,
        "explorer_url": "https://gnosisscan.io",
        "explorer_api_url": "https://api.gnosisscan.io/api",
    },
}
