"""copilot_providers.config.defaults
=================================

Central place for the default value of every configuration key. These
defaults can be overridden by the external config file, environment
variables or in-code overrides (see ``copilot_providers.config``).

This module intentionally avoids importing from other packages to prevent
circular dependencies. Only plain constants live here.
"""

from __future__ import annotations

# ---- api.* ----
API_DEFAULT_BASE_URL = "https://api.openai.com/v1"
API_DEFAULT_MODEL = "gpt-3.5-turbo-instruct"
API_DEFAULT_MAX_TOKENS = 256
API_DEFAULT_TEMPERATURE = 0.2

# ---- autocomplete.* ----
# Trailing-edge debounce for automatic inline completion triggers.
AUTOCOMPLETE_DEFAULT_DEBOUNCE_MS = 300
AUTOCOMPLETE_DEFAULT_SUPPORTED_LANGUAGES = [
    "javascript",
    "typescript",
    "javascriptreact",
    "typescriptreact",
    "python",
]

# ---- cache.* ----
CACHE_DEFAULT_TTL_SECONDS = 300

# ---- chat.* ----
CHAT_DEFAULT_MAX_HISTORY_MESSAGES = 5
CHAT_DEFAULT_ASSISTANT_NAME = "Copilot"

# ---- logging.* ----
LOGGING_DEFAULT_LEVEL = "info"

# ---- SQLite store (infrastructure) ----
# Standard busy timeout to mitigate lock contention (milliseconds).
SQLITE_BUSY_TIMEOUT_MS = 5000
# WAL journaling with NORMAL sync for interactive use.
SQLITE_JOURNAL_MODE = "WAL"
SQLITE_SYNCHRONOUS = "NORMAL"
SQLITE_DEFAULT_DB_FILENAME = "copilot_state.db"

# Flat dotted-key view consumed by SettingsConfiguration.
DEFAULTS = {
    "api.baseUrl": API_DEFAULT_BASE_URL,
    "api.model": API_DEFAULT_MODEL,
    "api.maxTokens": API_DEFAULT_MAX_TOKENS,
    "api.temperature": API_DEFAULT_TEMPERATURE,
    "autocomplete.debounceMs": AUTOCOMPLETE_DEFAULT_DEBOUNCE_MS,
    "autocomplete.supportedLanguages": AUTOCOMPLETE_DEFAULT_SUPPORTED_LANGUAGES,
    "cache.ttlSeconds": CACHE_DEFAULT_TTL_SECONDS,
    "chat.maxHistoryMessages": CHAT_DEFAULT_MAX_HISTORY_MESSAGES,
    "chat.assistantName": CHAT_DEFAULT_ASSISTANT_NAME,
    "logging.level": LOGGING_DEFAULT_LEVEL,
}
