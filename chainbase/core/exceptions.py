"""
The custom exceptions used throughout chainbase
"""
__all__ = ["ChainParamsError", "ChainParamsNotSelectedError", "ArgsManagerError"]


class ChainParamsError(Exception):
    """
    Parent class for chain parameter errors
    """
    pass


class ChainParamsNotSelectedError(ChainParamsError):
    """
    For when the chain parameters are read before any chain has been selected. This is a programming error in the
    host application and should never be caught and ignored.
    """
    pass


class ArgsManagerError(Exception):
    """
    For use in the ArgsManager, when parsing unknown or malformed options, or an invalid combination of chains
    """
    pass
