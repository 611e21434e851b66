"""
Module 04 - Transfer Signature Unit Tests
Tests for core/crypto/signatures.py

Tests:
- Sign then recover returns the signing key's address
- Any change to the message or domain changes the recovered signer
- Malformed keys, signatures, addresses and domains raise SignatureException
"""
import pytest

from core.crypto.signatures import (
    TRANSFER_TYPES,
    SigningDomain,
    address_of,
    generate_transfer_signature,
    prepare_transfer,
    recover_typed_data_signer,
    sign_typed_data,
    transfer_message,
    verify_transfer_signature,
)
from core.schemas.errors import SignatureException

from fixtures.common import ADDR_C, ADDR_D, SIGNER_ADDRESS, SIGNER_KEY, make_signing_domain


TOKEN_ID = 42
TIMESTAMP = 1_700_000_000


@pytest.fixture
def signed(signing_domain):
    return generate_transfer_signature(
        SIGNER_KEY, SIGNER_ADDRESS, ADDR_C, TOKEN_ID, TIMESTAMP, signing_domain
    )


class TestSignAndRecover:
    """Round trips through EIP-712 signing."""

    def test_address_of(self):
        assert address_of(SIGNER_KEY) == SIGNER_ADDRESS

    def test_recovers_signer(self, signed, signing_domain):
        recovered = verify_transfer_signature(
            SIGNER_ADDRESS, ADDR_C, TOKEN_ID, TIMESTAMP, signed.signature, signing_domain
        )
        assert recovered == SIGNER_ADDRESS

    def test_signature_shape(self, signed):
        assert len(signed.signature) == 2 + 65 * 2
        assert signed.v in (27, 28)
        assert len(signed.r) == 66
        assert len(signed.s) == 66
        assert len(signed.message_hash) == 66
        assert signed.signature[2:66] == signed.r[2:]

    def test_deterministic(self, signed, signing_domain):
        again = generate_transfer_signature(
            SIGNER_KEY, SIGNER_ADDRESS, ADDR_C, TOKEN_ID, TIMESTAMP, signing_domain
        )
        assert again == signed

    def test_changed_token_id(self, signed, signing_domain):
        recovered = verify_transfer_signature(
            SIGNER_ADDRESS, ADDR_C, TOKEN_ID + 1, TIMESTAMP, signed.signature, signing_domain
        )
        assert recovered != SIGNER_ADDRESS

    def test_changed_recipient(self, signed, signing_domain):
        recovered = verify_transfer_signature(
            SIGNER_ADDRESS, ADDR_D, TOKEN_ID, TIMESTAMP, signed.signature, signing_domain
        )
        assert recovered != SIGNER_ADDRESS

    def test_changed_chain(self, signed):
        other = make_signing_domain(chain_id=1)
        recovered = verify_transfer_signature(
            SIGNER_ADDRESS, ADDR_C, TOKEN_ID, TIMESTAMP, signed.signature, other
        )
        assert recovered != SIGNER_ADDRESS

    def test_generic_typed_data(self, signing_domain):
        types = {"Mail": [{"name": "contents", "type": "string"}]}
        message = {"contents": "Hello"}
        sig = sign_typed_data(signing_domain, types, message, SIGNER_KEY)
        assert recover_typed_data_signer(signing_domain, types, message, sig.signature) == SIGNER_ADDRESS


class TestPrepareTransfer:
    """Tests for prepare_transfer."""

    def test_from_is_key_holder(self, signing_domain):
        transfer = prepare_transfer(SIGNER_KEY, ADDR_C.lower(), 7, signing_domain, timestamp=TIMESTAMP)
        assert transfer.from_address == SIGNER_ADDRESS
        assert transfer.to_address == ADDR_C
        assert transfer.timestamp == TIMESTAMP

    def test_default_timestamp(self, signing_domain):
        transfer = prepare_transfer(SIGNER_KEY, ADDR_C, 7, signing_domain)
        assert transfer.timestamp > TIMESTAMP

    def test_to_dict(self, signing_domain):
        data = prepare_transfer(SIGNER_KEY, ADDR_C, 7, signing_domain, timestamp=TIMESTAMP).to_dict()
        assert data["from"] == SIGNER_ADDRESS
        assert data["tokenId"] == 7
        assert data["signature"].startswith("0x")

    def test_prepared_transfer_verifies(self, signing_domain):
        t = prepare_transfer(SIGNER_KEY, ADDR_C, 7, signing_domain, timestamp=TIMESTAMP)
        recovered = verify_transfer_signature(
            t.from_address, t.to_address, t.token_id, t.timestamp, t.signature.signature, signing_domain
        )
        assert recovered == t.from_address


class TestErrors:
    """Invalid input raises SignatureException."""

    def test_transfer_types(self):
        assert [f["name"] for f in TRANSFER_TYPES["Transfer"]] == ["from", "to", "tokenId", "timestamp"]

    def test_bad_address(self):
        with pytest.raises(SignatureException, match="to is not an address"):
            transfer_message(SIGNER_ADDRESS, "0x1234", 1, TIMESTAMP)

    def test_negative_token_id(self):
        with pytest.raises(SignatureException, match="unsigned"):
            transfer_message(SIGNER_ADDRESS, ADDR_C, "-x", TIMESTAMP)
        with pytest.raises(SignatureException, match="range"):
            transfer_message(SIGNER_ADDRESS, ADDR_C, -1, TIMESTAMP)

    def test_bad_key(self, signing_domain):
        with pytest.raises(SignatureException, match="private key"):
            generate_transfer_signature("0x1234", SIGNER_ADDRESS, ADDR_C, 1, TIMESTAMP, signing_domain)

    def test_malformed_signature(self, signing_domain):
        with pytest.raises(SignatureException, match="Cannot recover"):
            verify_transfer_signature(SIGNER_ADDRESS, ADDR_C, 1, TIMESTAMP, "0x1234", signing_domain)

    def test_domain_requires_positive_chain(self):
        with pytest.raises(SignatureException):
            SigningDomain(name="x", version="1", chain_id=0, verifying_contract=ADDR_C)

    def test_domain_requires_contract_address(self):
        with pytest.raises(SignatureException):
            SigningDomain(name="x", version="1", chain_id=1, verifying_contract="contract")
