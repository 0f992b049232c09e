"""
Contains the core elements that are used within chainbase

Core:
    -Provides the reserved chain names and their default ports
    -Provides custom exceptions for chain selection and argument handling
    -Provides the shared logger factory
"""
# core/__init__.py
from chainbase.core.exceptions import *
from chainbase.core.formats import *
from chainbase.core.logging import *
