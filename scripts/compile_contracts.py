#!/usr/bin/env python3
"""
Compile the bundled contract sources into package artifacts
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from nft_market.artifacts.compiler import compile_contract
from nft_market.artifacts.loader import PACKAGE_ARTIFACTS_DIR, list_available_contracts


def compile_all():
    """Compile every exposed contract into the package data directory"""
    contracts = list_available_contracts()

    for name in contracts:
        try:
            artifact = compile_contract(name, output_dir=PACKAGE_ARTIFACTS_DIR)
        except Exception as e:
            print(f"❌ {name}: {e}")
            return False
        print(f"✅ {name}: {len(artifact['abi'])} ABI items, {len(artifact['bytecode'])} bytecode chars")

    print(f"\nArtifacts written to {PACKAGE_ARTIFACTS_DIR}")
    return True


if __name__ == "__main__":
    success = compile_all()
    sys.exit(0 if success else 1)
