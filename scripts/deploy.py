#!/usr/bin/env python3
"""
Deploy the NFTMarket contract

Usage:
    python scripts/deploy.py --network <network-name>
"""

import sys
from pathlib import Path

# Add parent directory to path so we can import the package
sys.path.insert(0, str(Path(__file__).parent.parent))

from nft_market.deploy import main


if __name__ == "__main__":
    sys.exit(main())
