"""Artifact loading and compilation utilities for the bundled contracts."""
from .loader import get_abi, get_bytecode, load_artifact
from .compiler import compile_contract, ensure_artifact

__all__ = ["get_abi", "get_bytecode", "load_artifact", "compile_contract", "ensure_artifact"]
