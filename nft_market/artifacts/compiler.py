"""
Solidity compilation for the bundled contract sources.

Compiles with py-solc-x using the standard-JSON interface and emits
Hardhat-style artifact dictionaries, so the result can be consumed by the
loader and by the block explorer verification request unchanged.
"""

import json
import os
from pathlib import Path
from typing import Dict, Any, Optional

import solcx
from loguru import logger

from .loader import (
    PACKAGE_DIR,
    PACKAGE_ARTIFACTS_DIR,
    USER_ARTIFACTS_DIR,
    artifact_path,
    load_artifact,
)

SOURCES_DIR = PACKAGE_DIR / "data" / "contracts"

SOLC_VERSION = "0.8.20"
EVM_VERSION = "paris"
OPTIMIZER_RUNS = 200


def ensure_solc(solc_version: str = SOLC_VERSION) -> str:
    """
    Make sure the requested solc release is installed.

    Returns:
        The full compiler version including the commit hash
        (e.g. "0.8.20+commit.a1b79de6")
    """
    installed = [str(v) for v in solcx.get_installed_solc_versions()]
    if solc_version not in installed:
        logger.info(f"Installing Solidity compiler v{solc_version}...")
        solcx.install_solc(solc_version)

    solcx.set_solc_version(solc_version, silent=True)
    return str(solcx.get_solc_version(with_commit_hash=True))


def build_standard_input(contract_name: str) -> Dict[str, Any]:
    """
    Build the solc standard-JSON input for a bundled contract.

    Raises:
        FileNotFoundError: If the contract has no bundled source
    """
    source_name = f"{contract_name}.sol"
    source_path = SOURCES_DIR / source_name

    if not source_path.exists():
        raise FileNotFoundError(f"Contract source not found: {source_path}")

    return {
        "language": "Solidity",
        "sources": {source_name: {"content": source_path.read_text()}},
        "settings": {
            "optimizer": {"enabled": True, "runs": OPTIMIZER_RUNS},
            "evmVersion": EVM_VERSION,
            "outputSelection": {
                "*": {
                    "*": ["abi", "evm.bytecode.object", "evm.deployedBytecode.object"]
                }
            },
        },
    }


def compile_contract(
    contract_name: str = "NFTMarket",
    solc_version: str = SOLC_VERSION,
    output_dir: Optional[Path] = None,
) -> Dict[str, Any]:
    """
    Compile a bundled contract into a Hardhat-style artifact.

    Args:
        contract_name: Name of the contract (e.g., 'NFTMarket')
        solc_version: solc release to compile with
        output_dir: When given, the artifact is also written to
            ``<output_dir>/<Name>.sol/<Name>.json``

    Returns:
        Artifact dictionary with ABI, bytecode, deployed bytecode, compiler
        version and the standard-JSON input used
    """
    # Validates the name before any compiler work
    target = artifact_path(contract_name, output_dir)

    standard_input = build_standard_input(contract_name)
    full_version = ensure_solc(solc_version)

    logger.info(f"Compiling {contract_name} with solc {full_version}")
    output = solcx.compile_standard(standard_input, solc_version=solc_version)

    source_name = f"{contract_name}.sol"
    compiled = output["contracts"][source_name][contract_name]

    artifact = {
        "_format": "hh-sol-artifact-1",
        "contractName": contract_name,
        "sourceName": source_name,
        "abi": compiled["abi"],
        "bytecode": "0x" + compiled["evm"]["bytecode"]["object"],
        "deployedBytecode": "0x" + compiled["evm"]["deployedBytecode"]["object"],
        "compiler": {
            "version": full_version,
            "evmVersion": EVM_VERSION,
            "optimizer": {"enabled": True, "runs": OPTIMIZER_RUNS},
        },
        "standardJsonInput": standard_input,
    }

    if output_dir is not None:
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, 'w') as f:
            json.dump(artifact, f, indent=2)
        logger.success(f"Artifact written to {target}")

    return artifact


def artifact_output_dir() -> Path:
    """Package data when the install is writable, the per-user cache otherwise."""
    if os.access(PACKAGE_DIR / "data", os.W_OK):
        return PACKAGE_ARTIFACTS_DIR
    return USER_ARTIFACTS_DIR


def ensure_artifact(contract_name: str = "NFTMarket") -> Dict[str, Any]:
    """Load the artifact for a contract, compiling it from source if missing."""
    try:
        return load_artifact(contract_name)
    except FileNotFoundError:
        logger.warning(f"No artifact for {contract_name}, compiling from source")
        return compile_contract(contract_name, output_dir=artifact_output_dir())
