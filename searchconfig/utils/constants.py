"""Centralized constants for searchconfig.

Single source of truth for paths, the COM identity and the registration tool.
"""

from pathlib import Path

# ============================================================================
# OUTPUT DIRECTORIES
# ============================================================================

# Local state directory for logs and audit records
STATE_DIR = Path("./.searchconfig")

ERROR_LOG_NAME = "error.log"
AUDIT_DIR = STATE_DIR / "audit"
CONFIG_FILE_NAME = "config.json"

# ============================================================================
# COM IDENTITY
# ============================================================================

# CSearchManager coclass exposed by SearchAPI.dll
SEARCH_MANAGER_CLSID = "{7D096C5F-AC08-4F1F-BEB7-5C22C517CE39}"

CLSID_KEY_TEMPLATE = r"CLSID\{clsid}"
INPROC_SERVER_KEY_TEMPLATE = r"CLSID\{clsid}\InprocServer32"

DEFAULT_SYSTEM_ROOT = r"C:\Windows"
SEARCH_API_DLL = "SearchAPI.dll"

# ============================================================================
# REGISTRATION TOOL
# ============================================================================

REGISTRATION_TOOL = "regsvr32.exe"

DEFAULT_TIMEOUT_SECONDS = 30
MIN_TIMEOUT_SECONDS = 1
MAX_TIMEOUT_SECONDS = 60

# ============================================================================
# ENVIRONMENT VARIABLES
# ============================================================================

ENV_PREFIX = "SEARCHCONFIG"
