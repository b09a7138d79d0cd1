"""Etherscan source verification client"""

import asyncio
import json
from typing import Dict, Any, Optional, Sequence

import aiohttp
from eth_abi import encode
from loguru import logger
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from .exceptions import ConfigurationError, VerificationError

ETHERSCAN_API_URL = "https://api.etherscan.io/v2/api"
PENDING_RESULT = "Pending in queue"


def encode_constructor_args(abi: list, args: Sequence[Any]) -> str:
    """ABI-encode constructor arguments as a hex string without the 0x prefix."""
    if not args:
        return ""

    constructor = next((item for item in abi if item.get('type') == 'constructor'), None)
    if constructor is None:
        raise ValueError("Contract has no constructor but arguments were given")

    types = [inp['type'] for inp in constructor.get('inputs', [])]
    if len(types) != len(args):
        raise ValueError(f"Constructor expects {len(types)} arguments, got {len(args)}")

    return encode(types, list(args)).hex()


class EtherscanVerifier:
    """Submits contract sources to Etherscan and polls until the check finishes"""

    def __init__(
        self,
        api_key: str,
        chain_id: int,
        base_url: str = ETHERSCAN_API_URL,
        timeout: int = 30,
        poll_interval: float = 5.0,
        max_polls: int = 24,
    ):
        if not api_key:
            raise ConfigurationError("ETHERSCAN_API_KEY must be set to verify contracts")
        self.api_key = api_key
        self.chain_id = chain_id
        self.base_url = base_url
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.max_polls = max_polls

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((aiohttp.ClientError, asyncio.TimeoutError)),
        reraise=True,
    )
    async def _request(
        self,
        method: str,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Make an API request with retry logic"""
        query = {"chainid": str(self.chain_id), "apikey": self.api_key}
        if params:
            query.update(params)

        async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
            try:
                async with session.request(method, self.base_url, params=query, data=data) as response:
                    response.raise_for_status()
                    return await response.json(content_type=None)
            except aiohttp.ClientError as e:
                logger.error(f"Etherscan request failed: {e}")
                raise

    async def submit(
        self,
        address: str,
        artifact: Dict[str, Any],
        constructor_args: Sequence[Any] = (),
    ) -> str:
        """
        Submit a verification request.

        Returns:
            GUID used to poll the verification status

        Raises:
            VerificationError: If Etherscan rejects the submission
                (including "already verified")
        """
        data = {
            "module": "contract",
            "action": "verifysourcecode",
            "codeformat": "solidity-standard-json-input",
            "sourceCode": json.dumps(artifact["standardJsonInput"]),
            "contractaddress": address,
            "contractname": f"{artifact['sourceName']}:{artifact['contractName']}",
            "compilerversion": f"v{artifact['compiler']['version']}",
            "constructorArguements": encode_constructor_args(artifact["abi"], constructor_args),
        }

        response = await self._request("POST", data=data)
        if str(response.get("status")) != "1":
            raise VerificationError(str(response.get("result") or response.get("message")))

        guid = response["result"]
        logger.info(f"Verification submitted for {address} (guid {guid})")
        return guid

    async def check_status(self, guid: str) -> Dict[str, Any]:
        """Fetch the raw status response for a submitted verification."""
        return await self._request(
            "GET",
            params={"module": "contract", "action": "checkverifystatus", "guid": guid},
        )

    async def verify_source(
        self,
        address: str,
        artifact: Dict[str, Any],
        constructor_args: Sequence[Any] = (),
    ) -> str:
        """
        Verify a deployed contract's source and wait for the outcome.

        Args:
            address: Deployed contract address
            artifact: Artifact produced by compile_contract (needs the
                standard-JSON input and the full compiler version)
            constructor_args: Arguments the contract was deployed with

        Returns:
            Final status message (e.g. "Pass - Verified")

        Raises:
            VerificationError: If verification fails, the source is already
                verified, or the check does not finish in time
        """
        guid = await self.submit(address, artifact, constructor_args)

        for _ in range(self.max_polls):
            await asyncio.sleep(self.poll_interval)
            response = await self.check_status(guid)
            result = str(response.get("result", ""))

            if result == PENDING_RESULT:
                continue
            if str(response.get("status")) == "1":
                logger.success(f"Verification result for {address}: {result}")
                return result
            raise VerificationError(result)

        raise VerificationError(f"Timed out waiting for verification of {address}")
