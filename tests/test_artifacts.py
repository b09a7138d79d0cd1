"""
Unit Tests for artifact loading and compilation
"""

import json

import pytest
from unittest.mock import Mock, patch

from nft_market.artifacts import compiler, loader
from nft_market.contracts.nft_market import NFTMarketContract


@pytest.fixture
def artifacts_root(tmp_path, monkeypatch):
    """Point the loader at an empty temporary artifacts directory"""
    root = tmp_path / "artifacts"
    root.mkdir()
    monkeypatch.setattr(loader, "PACKAGE_ARTIFACTS_DIR", root)
    monkeypatch.setattr(loader, "DEVELOPMENT_ARTIFACTS_DIR", tmp_path / "dev")
    monkeypatch.setattr(loader, "USER_ARTIFACTS_DIR", tmp_path / "cache")
    return root


@pytest.fixture
def stored_artifact(artifacts_root):
    """Write a minimal NFTMarket artifact and return it"""
    artifact = {
        "contractName": "NFTMarket",
        "sourceName": "NFTMarket.sol",
        "abi": [
            {
                "type": "function",
                "name": "listNFT",
                "inputs": [
                    {"name": "tokenID", "type": "uint256"},
                    {"name": "price", "type": "uint256"},
                ],
                "outputs": [],
            }
        ],
        "bytecode": "0x6080",
        "deployedBytecode": "0x6081",
        "compiler": {"version": "0.8.20+commit.a1b79de6"},
    }
    path = artifacts_root / "NFTMarket.sol" / "NFTMarket.json"
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps(artifact))
    return artifact


class TestLoader:
    """Test artifact loader"""

    def test_unknown_contract(self):
        with pytest.raises(ValueError, match="Unknown contract"):
            loader.load_artifact("ERC20")

    def test_missing_artifact(self, artifacts_root):
        with pytest.raises(FileNotFoundError, match="compile_contracts.py"):
            loader.load_artifact("NFTMarket")

    def test_falls_back_to_development_dir(self, artifacts_root, tmp_path):
        path = tmp_path / "dev" / "NFTMarket.sol" / "NFTMarket.json"
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"abi": [], "bytecode": "0x60"}))

        assert loader.find_artifact("NFTMarket") == path
        assert loader.get_bytecode("NFTMarket") == "0x60"

    def test_falls_back_to_user_cache(self, artifacts_root, tmp_path):
        path = tmp_path / "cache" / "NFTMarket.sol" / "NFTMarket.json"
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"abi": [], "bytecode": "0x61"}))

        assert loader.find_artifact("NFTMarket") == path
        assert loader.get_bytecode("NFTMarket") == "0x61"

    def test_package_data_wins(self, stored_artifact, artifacts_root, tmp_path):
        cached = tmp_path / "cache" / "NFTMarket.sol" / "NFTMarket.json"
        cached.parent.mkdir(parents=True)
        cached.write_text(json.dumps({"abi": [], "bytecode": "0x61"}))

        assert loader.find_artifact("NFTMarket") == artifacts_root / "NFTMarket.sol" / "NFTMarket.json"

    def test_load_artifact_fields(self, stored_artifact):
        assert loader.get_abi("NFTMarket") == stored_artifact["abi"]
        assert loader.get_bytecode("NFTMarket") == "0x6080"
        assert loader.get_deployed_bytecode("NFTMarket") == "0x6081"

    def test_metadata(self, stored_artifact):
        metadata = loader.get_contract_metadata("NFTMarket")
        assert metadata["contractName"] == "NFTMarket"
        assert metadata["sourceName"] == "NFTMarket.sol"
        assert metadata["compiler"]["version"] == "0.8.20+commit.a1b79de6"
        assert metadata["networks"] == {}

    def test_function_selector(self, stored_artifact):
        selector = loader.get_function_selector("NFTMarket", "listNFT")
        assert selector.startswith("0x")
        assert len(selector) == 10
        assert loader.get_function_selector("NFTMarket", "missing") is None

    def test_list_and_validate(self, artifacts_root):
        assert loader.list_available_contracts() == ["NFTMarket"]
        assert loader.validate_artifacts() == {"NFTMarket": False}

    def test_validate_with_artifact(self, stored_artifact):
        assert loader.validate_artifacts() == {"NFTMarket": True}


class TestStandardInput:
    """Test solc standard-JSON input"""

    def test_includes_bundled_source(self):
        standard_input = compiler.build_standard_input("NFTMarket")

        source = standard_input["sources"]["NFTMarket.sol"]["content"]
        assert "contract NFTMarket" in source
        assert standard_input["settings"]["evmVersion"] == compiler.EVM_VERSION
        assert standard_input["settings"]["optimizer"] == {"enabled": True, "runs": 200}

    def test_missing_source(self):
        with pytest.raises(FileNotFoundError):
            compiler.build_standard_input("Missing")

    def test_compile_rejects_unknown_contract(self):
        with pytest.raises(ValueError, match="Unknown contract"):
            compiler.compile_contract("Missing")


class TestEnsureArtifact:
    """Test load-or-compile"""

    def test_returns_existing_artifact(self, stored_artifact):
        with patch.object(compiler, "compile_contract") as compile_contract:
            assert compiler.ensure_artifact("NFTMarket") == stored_artifact
        compile_contract.assert_not_called()

    def test_compiles_when_missing(self, artifacts_root):
        with patch.object(compiler, "load_artifact", side_effect=FileNotFoundError("missing")), \
                patch.object(compiler, "artifact_output_dir", return_value=artifacts_root), \
                patch.object(compiler, "compile_contract", return_value={"abi": []}) as compile_contract:
            assert compiler.ensure_artifact("NFTMarket") == {"abi": []}

        compile_contract.assert_called_once_with("NFTMarket", output_dir=artifacts_root)

    def test_writes_package_data_when_writable(self):
        with patch.object(compiler.os, "access", return_value=True):
            assert compiler.artifact_output_dir() == compiler.PACKAGE_ARTIFACTS_DIR

    def test_read_only_install_uses_user_cache(self):
        with patch.object(compiler.os, "access", return_value=False):
            assert compiler.artifact_output_dir() == compiler.USER_ARTIFACTS_DIR

    def test_cached_artifact_serves_contract_binding(self, artifacts_root, tmp_path):
        abi = [{"type": "function", "name": "owner", "inputs": [], "outputs": [{"name": "", "type": "address"}]}]
        path = tmp_path / "cache" / "NFTMarket.sol" / "NFTMarket.json"
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"abi": abi, "bytecode": "0x60"}))

        w3 = Mock()
        market = NFTMarketContract(w3, "0x5FbDB2315678afecb367f032d93F642f64180aa3")

        assert market.abi == abi
        assert w3.eth.contract.call_args.kwargs["abi"] == abi


class TestCompile:
    """Test compilation with solc"""

    def test_artifact_shape(self, artifact):
        functions = {item["name"] for item in artifact["abi"] if item["type"] == "function"}
        for name in ("createNFT", "listNFT", "buyNFT", "cancelListing", "withdrawFunds", "tokenURI", "ownerOf"):
            assert name in functions

        events = {item["name"] for item in artifact["abi"] if item["type"] == "event"}
        assert "NFTTransfer" in events

        assert artifact["bytecode"].startswith("0x")
        assert len(artifact["bytecode"]) > 2
        assert artifact["compiler"]["version"].startswith(compiler.SOLC_VERSION)
        assert "sources" in artifact["standardJsonInput"]

    def test_writes_artifact(self, solc, tmp_path):
        written = compiler.compile_contract("NFTMarket", output_dir=tmp_path)

        path = tmp_path / "NFTMarket.sol" / "NFTMarket.json"
        assert path.exists()
        assert json.loads(path.read_text())["abi"] == written["abi"]
