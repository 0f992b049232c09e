"""
chainbase - selection of the chain a node runs on, and the base parameters of that chain
"""
from chainbase.args import *
from chainbase.chainparamsbase import *
from chainbase.core import *
