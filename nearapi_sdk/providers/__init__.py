"""
Query/submit services.
"""
from .provider import Provider
from .json_rpc import JsonRpcProvider
from .fast_near import FastNearClient

__all__ = ["Provider", "JsonRpcProvider", "FastNearClient"]
