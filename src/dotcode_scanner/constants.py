"""
Project-wide constants for the DotCode scanner
"""

# ==============================================================================
# Vision Service
# ==============================================================================

DEFAULT_MODEL = "gemini-2.0-flash"

# ==============================================================================
# Credentials
# ==============================================================================

# Key under which a user-entered API key is persisted on the device
CREDENTIAL_STORE_KEY = "user_gemini_api_key"

# Build/deploy tooling renders unset variables as these literals
PLACEHOLDER_CREDENTIALS = frozenset({"", "undefined", "null", "None"})

# Environment variables holding the process-level key, in lookup order
API_KEY_ENV_VARS = ("API_KEY", "VITE_API_KEY")

# ==============================================================================
# Configuration Files
# ==============================================================================

CONFIG_TOOL_SECTION = "dotcode_scanner"
CONFIG_HOME_ENV_VAR = "DOTCODE_SCANNER_CONFIG_HOME"
PYPROJECT_PATH_ENV_VAR = "DOTCODE_SCANNER_PYPROJECT_PATH"

# ==============================================================================
# Reconciler Messages
# ==============================================================================

CREDENTIAL_REQUIRED_MESSAGE = "API Key configuration is missing or invalid."
NETWORK_ERROR_MESSAGE = "Network error detected. Please check your internet connection."
ANALYSIS_FAILED_MESSAGE = "Analysis failed. See technical details for more info."
NO_RESULTS_MESSAGE = "No recognizable DotCodes found. Please ensure image is clear."
NO_RESULTS_DETAILS = (
    "The AI scanned the image but did not return any recognized items. "
    "This usually means the image is blurry, the codes are too small, "
    "or the model could not confidently read the text."
)
OFFLINE_MESSAGE = "Cannot analyze images without an internet connection."
