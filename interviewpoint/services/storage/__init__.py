from .service import KNOWN_KEYS, RESULTS_KEY, RUNS_KEY, SETTINGS_KEY, TEMPLATES_KEY, StorageService

__all__ = [
    "StorageService",
    "TEMPLATES_KEY",
    "RESULTS_KEY",
    "SETTINGS_KEY",
    "RUNS_KEY",
    "KNOWN_KEYS",
]
