"""
The chain selection formats
"""
from typing import Final

__all__ = ["CHAIN", "PORTS"]


class CHAIN:
    """
    Reserved chain names. Any other name selects a custom chain.
    """
    MAIN: Final[str] = "main"
    TESTNET: Final[str] = "test"
    SIGNET: Final[str] = "signet"
    REGTEST: Final[str] = "regtest"

    # Data directory suffixes
    MAIN_DATA_DIR: Final[str] = ""
    TESTNET_DATA_DIR: Final[str] = "testnet3"
    SIGNET_DATA_DIR: Final[str] = "signet"
    REGTEST_DATA_DIR: Final[str] = "regtest"


class PORTS:
    """
    Default ports for each chain
    """
    MAIN: Final[int] = 8332
    TESTNET: Final[int] = 18332
    REGTEST: Final[int] = 18443
    SIGNET: Final[int] = 38332
    CUSTOM: Final[int] = 18553
    MAX_PORT: Final[int] = 0xffff
