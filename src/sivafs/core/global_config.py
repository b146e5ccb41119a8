"""
global_config.py
Central configuration for the SivaFS library: debug level, default modes and read sizes.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""

import os


def _env_debug_level() -> int:
    value = os.environ.get("SIVAFS_DEBUG_LEVEL")
    if not value:
        return 0
    try:
        return int(value)
    except ValueError:
        return 0


class GlobalConfig:
    _defaults = {
        "debug_level": _env_debug_level(),  # Seeded from SIVAFS_DEBUG_LEVEL
        "default_file_mode": 0o666,  # Mode recorded for entries made through create()
        "dir_mode": 0o755,           # Permission bits reported for synthetic directories
        "read_chunk_size": 64 * 1024,
    }
    _settings = _defaults.copy()

    @classmethod
    def set(cls, key, value):
        if key not in cls._defaults:
            raise KeyError(f"Unknown SivaFS config key '{key}'")
        cls._settings[key] = value

    @classmethod
    def get(cls, key):
        if key not in cls._defaults:
            raise KeyError(f"Unknown SivaFS config key '{key}'")
        return cls._settings.get(key, cls._defaults[key])

    @classmethod
    def keys(cls):
        return list(cls._defaults.keys())

    @classmethod
    def reset(cls, key=None):
        if key is None:
            cls._settings = cls._defaults.copy()
        elif key in cls._defaults:
            cls._settings[key] = cls._defaults[key]
        else:
            raise KeyError(f"Unknown SivaFS config key '{key}'")

    @classmethod
    def set_debug_level(cls, value: int):
        cls.set("debug_level", int(value))

    @classmethod
    def get_debug_level(cls) -> int:
        return cls.get("debug_level")

    @classmethod
    def get_read_chunk_size(cls) -> int:
        return cls.get("read_chunk_size")

    @classmethod
    def get_default_file_mode(cls) -> int:
        return cls.get("default_file_mode")

    @classmethod
    def get_dir_mode(cls) -> int:
        return cls.get("dir_mode")
