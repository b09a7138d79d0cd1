"""
Artifact loader for compiled smart contracts.

This module provides functions to load ABI, bytecode, and other metadata
from Hardhat-style contract artifacts. Artifacts are looked up in the
package data directory, then in a local ``artifacts/contracts`` build, then
in the per-user cache that installed copies compile into.
"""

import json
from pathlib import Path
from typing import Dict, Any, List, Optional

# Get the package root directory
PACKAGE_DIR = Path(__file__).parent.parent
# Artifacts are written here by scripts/compile_contracts.py
PACKAGE_ARTIFACTS_DIR = PACKAGE_DIR / "data" / "artifacts"
# Development mode: Hardhat-style build output at the project root
DEVELOPMENT_ARTIFACTS_DIR = PACKAGE_DIR.parent / "artifacts" / "contracts"
# Installed packages that cannot write package data compile here
USER_ARTIFACTS_DIR = Path.home() / ".cache" / "nft_market" / "artifacts"

# Contract name mappings
CONTRACT_PATHS = {
    "NFTMarket": "NFTMarket.sol/NFTMarket.json",
}


def artifact_search_path() -> List[Path]:
    """Directories searched for artifacts, in order."""
    return [PACKAGE_ARTIFACTS_DIR, DEVELOPMENT_ARTIFACTS_DIR, USER_ARTIFACTS_DIR]


def artifact_path(contract_name: str, base_dir: Optional[Path] = None) -> Path:
    """
    Resolve the artifact file for a contract.

    Args:
        contract_name: Name of the contract (e.g., 'NFTMarket')
        base_dir: Directory to resolve against (defaults to the package
            data directory)

    Raises:
        ValueError: If the contract name is not recognized
    """
    if contract_name not in CONTRACT_PATHS:
        available = ", ".join(CONTRACT_PATHS.keys())
        raise ValueError(
            f"Unknown contract: {contract_name}. "
            f"Available contracts: {available}"
        )

    return (base_dir or PACKAGE_ARTIFACTS_DIR) / CONTRACT_PATHS[contract_name]


def find_artifact(contract_name: str) -> Optional[Path]:
    """First existing artifact file for a contract on the search path, if any."""
    for base_dir in artifact_search_path():
        path = artifact_path(contract_name, base_dir)
        if path.exists():
            return path
    return None


def load_artifact(contract_name: str) -> Dict[str, Any]:
    """
    Load the complete artifact JSON for a contract.

    Args:
        contract_name: Name of the contract (e.g., 'NFTMarket')

    Returns:
        Complete artifact dictionary including ABI, bytecode, and metadata

    Raises:
        FileNotFoundError: If the artifact file doesn't exist
        ValueError: If the contract name is not recognized
    """
    path = find_artifact(contract_name)

    if path is None:
        searched = ", ".join(str(d) for d in artifact_search_path())
        raise FileNotFoundError(
            f"Artifact file not found for {contract_name} (searched {searched})\n"
            f"Make sure the contracts have been compiled with "
            f"'python scripts/compile_contracts.py'"
        )

    with open(path, 'r') as f:
        return json.load(f)


def get_abi(contract_name: str) -> list:
    """
    Get the ABI for a specific contract.

    Args:
        contract_name: Name of the contract

    Returns:
        Contract ABI as a list
    """
    artifact = load_artifact(contract_name)
    return artifact.get('abi', [])


def get_bytecode(contract_name: str) -> str:
    """
    Get the deployment bytecode for a specific contract.

    Args:
        contract_name: Name of the contract

    Returns:
        Bytecode as a hex string (with '0x' prefix)
    """
    artifact = load_artifact(contract_name)
    return artifact.get('bytecode', '0x')


def get_deployed_bytecode(contract_name: str) -> str:
    """Get the runtime bytecode for a specific contract."""
    artifact = load_artifact(contract_name)
    return artifact.get('deployedBytecode', '0x')


def get_contract_metadata(contract_name: str) -> Dict[str, Any]:
    """
    Get metadata about the contract compilation.

    Args:
        contract_name: Name of the contract

    Returns:
        Dictionary containing compiler version, optimization settings, etc.
    """
    artifact = load_artifact(contract_name)

    return {
        'contractName': artifact.get('contractName'),
        'sourceName': artifact.get('sourceName'),
        'compiler': artifact.get('compiler'),
        'networks': artifact.get('networks', {}),
        'schemaVersion': artifact.get('schemaVersion'),
    }


def get_function_selector(contract_name: str, function_name: str) -> Optional[str]:
    """
    Get the function selector (4-byte signature) for a specific function.

    Args:
        contract_name: Name of the contract
        function_name: Name of the function

    Returns:
        Function selector as a hex string, or None if not found
    """
    from web3 import Web3

    for item in get_abi(contract_name):
        if item.get('type') == 'function' and item.get('name') == function_name:
            inputs = ','.join([inp['type'] for inp in item.get('inputs', [])])
            signature = f"{function_name}({inputs})"
            return Web3.to_hex(Web3.keccak(text=signature)[:4])

    return None


def list_available_contracts() -> list:
    """
    List all available contracts in the package.

    Returns:
        List of contract names
    """
    return list(CONTRACT_PATHS.keys())


def validate_artifacts() -> Dict[str, bool]:
    """
    Validate that all expected artifacts are present.

    Returns:
        Dictionary mapping contract names to availability status
    """
    status = {}
    for contract_name in CONTRACT_PATHS:
        try:
            load_artifact(contract_name)
            status[contract_name] = True
        except (FileNotFoundError, ValueError):
            status[contract_name] = False

    return status
