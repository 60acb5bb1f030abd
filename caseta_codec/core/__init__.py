"""
Caseta core subpackage - configuration shared by the entry point and tests.
"""

from .config import BridgeSettings, CasetaConfig, load_config

__all__ = ["BridgeSettings", "CasetaConfig", "load_config"]
