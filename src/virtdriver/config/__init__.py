"""Configuration Module"""

from .settings import ProviderSettings, AddressSource
from .parser import parse_config

__all__ = ['ProviderSettings', 'AddressSource', 'parse_config']
