"""
Lockbox: local encrypted credential vault.

Credentials are kept in a single file encrypted with AES-256-GCM under a key
derived from the master password with Argon2id.
"""

__version__ = "0.1.0"
__author__ = "Tyler Zervas"
__email__ = "tz-dev@vectorweight.com"
