"""
Configuration operations for SivaFS.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""

from sivafs.core.global_config import GlobalConfig


class ConfigAPI:
    """
    SivaFS Public API: Configuration Operations

    Provides attribute and dict-style access to the global SivaFS configuration.

    Examples:
        fs.config.debug_level = 2
        fs.config['default_file_mode'] = 0o644
        x = fs.config.read_chunk_size
        fs.config.reset('debug_level')
    """

    def set(self, key, value):
        """Set a global config value by key."""
        GlobalConfig.set(key, value)

    def get(self, key):
        """Get a global config value by key."""
        return GlobalConfig.get(key)

    def reset(self, key=None):
        """Reset all global config, or just a single key if provided."""
        GlobalConfig.reset(key)

    def __getattr__(self, key):
        if key.startswith('_'):
            raise AttributeError(key)
        try:
            return GlobalConfig.get(key)
        except KeyError:
            raise AttributeError(f"No SivaFS config for key '{key}'") from None

    def __setattr__(self, key, value):
        try:
            GlobalConfig.set(key, value)
        except KeyError:
            raise AttributeError(f"No SivaFS config for key '{key}'") from None

    def __getitem__(self, key):
        return GlobalConfig.get(key)

    def __setitem__(self, key, value):
        GlobalConfig.set(key, value)

    def __iter__(self):
        yield from GlobalConfig.keys()

    def __len__(self):
        return len(GlobalConfig.keys())
