"""
Constants and configuration defaults for kgrep.

This module contains the configuration constants used throughout kgrep,
including the typed resource kinds, text handling rules, engine tuning
defaults, environment variable names and server defaults.

Constants are organized by category:
- Typed kinds: resource kinds served by the typed CoreV1 client
- Text handling: line terminator and YAML rendering options
- Engine: worker and timeout defaults for the concurrent grep engine
- Environment: names of the environment variables kgrep reads
- Logging: default log levels
- Server defaults: default host and port for `kgrep serve`
"""

# Typed kinds (kind label -> kind name as shown in YAML)
TYPED_KINDS = {
    "pods": "Pod",
    "configmaps": "ConfigMap",
    "secrets": "Secret",
    "serviceaccounts": "ServiceAccount",
}
CORE_API_VERSION = "v1"

# Text handling
LINE_TERMINATOR = "\n"
YAML_INDENT = 2
YAML_LINE_WIDTH = float("inf")  # never fold long scalars

# Namespace used when neither the caller nor the kubeconfig names one
DEFAULT_NAMESPACE = "default"

# Engine defaults (None = one worker per resource, no timeout)
DEFAULT_MAX_WORKERS = None
DEFAULT_GREP_TIMEOUT_SECONDS = None

# Environment variables
ENV_LOG_LEVEL = "KGREP_LOG_LEVEL"
ENV_MAX_WORKERS = "KGREP_MAX_WORKERS"
ENV_GREP_TIMEOUT = "KGREP_GREP_TIMEOUT"
ENV_HOST = "KGREP_HOST"
ENV_PORT = "KGREP_PORT"
ENV_UVICORN_LEVEL = "KGREP_UVICORN_LEVEL"

# Logging
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_SERVER_LOG_LEVEL = "INFO"
DEFAULT_UVICORN_LOG_LEVEL = "info"
LOG_FORMAT = "[%(asctime)s] %(levelname)s %(message)s"

# Server defaults
DEFAULT_HOST = "localhost"
DEFAULT_PORT = 8080
