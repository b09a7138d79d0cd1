#!/usr/bin/env python3
"""Validate that all artifacts are accessible via loader"""

import sys
from pathlib import Path

# Add parent directory to path so we can import the package
sys.path.insert(0, str(Path(__file__).parent.parent))

from nft_market.artifacts.loader import (
    load_artifact,
    list_available_contracts,
)

REQUIRED_FUNCTIONS = {
    "NFTMarket": [
        "createNFT",
        "listNFT",
        "buyNFT",
        "cancelListing",
        "withdrawFunds",
        "tokenURI",
        "ownerOf",
    ],
}


def validate():
    """Validate that all exposed contracts are loadable and expose their API"""
    print("Validating package...")

    contracts = list_available_contracts()
    print(f"\nFound {len(contracts)} exposed contracts:")

    all_valid = True
    for name in contracts:
        try:
            artifact = load_artifact(name)
        except (FileNotFoundError, ValueError) as e:
            print(f"  ❌ {name}: {e}")
            all_valid = False
            continue

        abi = artifact.get("abi", [])
        bytecode = artifact.get("bytecode", "")
        functions = {item.get("name") for item in abi if item.get("type") == "function"}
        missing = [fn for fn in REQUIRED_FUNCTIONS.get(name, []) if fn not in functions]

        if not abi:
            print(f"  ⚠️  {name}: No ABI found")
            all_valid = False
        elif not bytecode or bytecode == "0x":
            print(f"  ⚠️  {name}: No bytecode found")
            all_valid = False
        elif missing:
            print(f"  ⚠️  {name}: Missing functions {', '.join(missing)}")
            all_valid = False
        else:
            print(
                f"  ✅ {name}: {len(abi)} ABI items, {len(bytecode)} bytecode chars"
            )

    print()
    if all_valid:
        print("✅ All contracts valid!")
        return 0
    else:
        print("❌ Some contracts failed validation")
        return 1


if __name__ == "__main__":
    sys.exit(validate())
