"""
Common test fixtures shared by all modules.

Provides known allow-lists with pinned roots, nodes and proofs, plus
factory functions for trees, dumps and signing domains.

Pinned values match @openzeppelin/merkle-tree StandardMerkleTree
output for the same inputs.
"""

from typing import Any, Optional, Sequence

from core.crypto.signatures import SigningDomain
from core.merkle.merkle_proofs import ProofService
from core.merkle.standard_tree import StandardMerkleTree


# =============================================================================
# Allow-list A (five hardhat-style accounts)
# =============================================================================

ADDR_A = "0x6CA6d1e2D5347Bfab1d91e883F1915560e09129D"
ADDR_B = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
ADDR_C = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
ADDR_D = "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"
ADDR_E = "0x90F79bf6EB2c4f870365E785982E1f101E93b906"
ADDR_X = "0x15d34AAf54267DB7D7c367839AAf71A00a2C6A65"

ALLOWLIST_A = [ADDR_A, ADDR_B, ADDR_C, ADDR_D, ADDR_E]

ROOT_A = "0xd7c266b39bce7003ef91fd9187b926a19abc1aee7ff0499974436876b52f71e6"
ROOT_A_WITH_X = "0x3d5eda836ace2c342cb5e7a87cd04642b2f800932e76f51972778898f3714648"

TREE_A = [
    "0xd7c266b39bce7003ef91fd9187b926a19abc1aee7ff0499974436876b52f71e6",
    "0xcd91dc1bdd710dfaa6fd929ae499287cea699c88f20e271bf185aa48436cb7d5",
    "0xe3e347f8d89dba0c928b134cfe6492b90cbb217bee7e19c72413681678e22422",
    "0x166a633689f07198f116bd599dbcfafd186431540ba501bc90f55692742b0374",
    "0xf6949786c44ce4b9916e434fcdb9ff65f5c1c50d4fd00c0c34ce124acb64a922",
    "0xd791b4384f11048b2330e9ec924a5c80226526b5e9d7f65537637981af4d404f",
    "0x9b0bc27a9e8f6a8a4b2e92b71ac31b44ef9bd5a54f150ed7b7c2668c6b9be039",
    "0x32235e7434a20509b8e17860e4d7b9b0a551e3696a7eac2153aad4e6c348bc46",
    "0x208697df1b2d4c083944c10909fe1ed6e99c1eaccff33ba129464b28f8245f01",
]

TREE_INDICES_A = [4, 5, 8, 6, 7]

LEAF_HASH_A = "0xf6949786c44ce4b9916e434fcdb9ff65f5c1c50d4fd00c0c34ce124acb64a922"
PROOF_A = [
    "0x166a633689f07198f116bd599dbcfafd186431540ba501bc90f55692742b0374",
    "0xe3e347f8d89dba0c928b134cfe6492b90cbb217bee7e19c72413681678e22422",
]

LEAF_HASH_C = "0x208697df1b2d4c083944c10909fe1ed6e99c1eaccff33ba129464b28f8245f01"
PROOF_C = [
    "0x32235e7434a20509b8e17860e4d7b9b0a551e3696a7eac2153aad4e6c348bc46",
    "0xf6949786c44ce4b9916e434fcdb9ff65f5c1c50d4fd00c0c34ce124acb64a922",
    "0xe3e347f8d89dba0c928b134cfe6492b90cbb217bee7e19c72413681678e22422",
]


# =============================================================================
# Allow-list B (Remix default accounts)
# =============================================================================

ALLOWLIST_B = [
    "0x6CA6d1e2D5347Bfab1d91e883F1915560e09129D",
    "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266",
    "0x5B38Da6a701c568545dCfcB03FcB875f56beddC4",
    "0xAb8483F64d9C6d1EcF9b849Ae677dD3315835cb2",
    "0x4B20993Bc481177ec7E8f571ceCaE8A9e22C02db",
]

ROOT_B = "0xd236e5c3bffa45c2373ae9ad1c5e66728a24f0eac87aa457f08153425ad2ac01"

PROOF_B_REMIX = [
    "0x59856afbe8900ffcd32b8de545b9b5c0128ecda7289ff898b2ea8dc62b3f9a07",
    "0xf6949786c44ce4b9916e434fcdb9ff65f5c1c50d4fd00c0c34ce124acb64a922",
    "0x079d80974de7a6a2b5658681d9914e122e80917d90056c1f9d6b3ad021733efc",
]


# =============================================================================
# Two-field leaves (address, uint256)
# =============================================================================

AIRDROP_VALUES = [
    ["0x1111111111111111111111111111111111111111", 5000000000000000000],
    ["0x2222222222222222222222222222222222222222", 2500000000000000000],
]
AIRDROP_ENCODING = ["address", "uint256"]
AIRDROP_ROOT = "0xd4dee0beab2d53f2cc83e567171bd2820e49898130a22622b10ead383e90bd77"


# =============================================================================
# Signing
# =============================================================================

# Hardhat/Anvil account #0
SIGNER_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
SIGNER_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

CHAIN_ID = 31337
VERIFYING_CONTRACT = "0x5FbDB2315678afecb367f032d93F642f64180aa3"


# =============================================================================
# Factories
# =============================================================================

def make_tree(
    addresses: Optional[Sequence[str]] = None,
) -> StandardMerkleTree:
    """Build a single-field address tree (allow-list A by default)."""
    addresses = ALLOWLIST_A if addresses is None else addresses
    return StandardMerkleTree.of([[a] for a in addresses], ["address"])


def make_dump(addresses: Optional[Sequence[str]] = None) -> dict[str, Any]:
    """JSON-ready dump of an address tree."""
    return make_tree(addresses).dump().to_json_dict()


def make_proof_service(addresses: Optional[Sequence[str]] = None) -> ProofService:
    return ProofService(make_tree(addresses))


def make_signing_domain(
    chain_id: int = CHAIN_ID,
    verifying_contract: str = VERIFYING_CONTRACT,
) -> SigningDomain:
    return SigningDomain(
        name="MedicineSupplyChain",
        version="1.0",
        chain_id=chain_id,
        verifying_contract=verifying_contract,
    )
