"""Tests for signer-list detection and multisig assembly."""

from __future__ import annotations

import pytest
from xrpl.models.response import Response, ResponseStatus

from escrow_orchestrator.domain.exceptions import (
    EmptySignatureSetError,
    EscrowValidationError,
    InvalidAddressError,
    LedgerRequestError,
)
from escrow_orchestrator.domain.models import SignaturePacket
from escrow_orchestrator.domain.transactions import UnsignedTransaction
from escrow_orchestrator.services.multisig import MultisigAssembler, MultisigDetector


@pytest.fixture
def unsigned(accounts) -> UnsignedTransaction:
    return UnsignedTransaction.from_ledger_json(
        {
            "TransactionType": "EscrowFinish",
            "Account": accounts.source,
            "Owner": accounts.destination,
            "OfferSequence": 9,
            "Fee": "36",
            "Sequence": 7,
            "LastLedgerSequence": 1020,
            "Flags": 0,
            "SigningPubKey": "",
        }
    )


class TestMultisigDetector:
    @pytest.mark.asyncio
    async def test_account_without_signer_list(self, gateway, accounts) -> None:
        quorum = await MultisigDetector(gateway).signer_quorum(accounts.source)

        assert quorum.is_empty
        request = gateway.requests[0]
        assert request.account == accounts.source
        assert request.signer_lists is True
        assert request.ledger_index == "validated"

    @pytest.mark.asyncio
    async def test_account_with_signer_list(self, gateway, accounts) -> None:
        gateway.set_signer_list([(accounts.signer_a, 1), (accounts.signer_b, 1)], quorum=2)

        quorum = await MultisigDetector(gateway).signer_quorum(accounts.source)

        assert quorum.quorum == 2
        assert [e.account for e in quorum.entries] == [accounts.signer_a, accounts.signer_b]

    @pytest.mark.asyncio
    async def test_signer_list_inside_account_data(self, gateway, accounts) -> None:
        gateway.responses["account_info"] = Response(
            status=ResponseStatus.SUCCESS,
            result={
                "account_data": {
                    "Account": accounts.source,
                    "signer_lists": [
                        {
                            "SignerQuorum": 1,
                            "SignerEntries": [
                                {"SignerEntry": {"Account": accounts.signer_a, "SignerWeight": 1}}
                            ],
                        }
                    ],
                }
            },
        )

        quorum = await MultisigDetector(gateway).signer_quorum(accounts.source)

        assert quorum.quorum == 1
        assert len(quorum.entries) == 1

    @pytest.mark.asyncio
    async def test_unknown_account_raises(self, gateway, accounts) -> None:
        gateway.respond_error("account_info", "actNotFound", "Account not found.")

        with pytest.raises(LedgerRequestError) as exc_info:
            await MultisigDetector(gateway).signer_quorum(accounts.source)

        assert exc_info.value.ledger_error == "actNotFound"
        assert exc_info.value.message == "Account not found."


class TestMultisigAssembler:
    def test_empty_signature_set_rejected(self, unsigned) -> None:
        with pytest.raises(EmptySignatureSetError) as exc_info:
            MultisigAssembler().assemble(unsigned, [])
        assert exc_info.value.code == "EMPTY_SIGNATURE_SET"

    def test_one_entry_per_signature(self, unsigned, accounts) -> None:
        signatures = [
            SignaturePacket(signer=accounts.signer_a, signature="AA", public_key="02AA"),
            SignaturePacket(signer=accounts.signer_b, signature="BB", public_key="02BB"),
            SignaturePacket(signer=accounts.one, signature="CC", public_key="02CC"),
        ]

        tx_json = MultisigAssembler().assemble(unsigned, signatures).to_ledger_json()

        assert len(tx_json["Signers"]) == 3
        assert tx_json["SigningPubKey"] == ""

    def test_signers_sorted_by_account_id(self, unsigned, accounts) -> None:
        # Submitted in descending account-ID order.
        signatures = [
            SignaturePacket(signer=accounts.signer_b, signature="B"),
            SignaturePacket(signer=accounts.source, signature="S"),
            SignaturePacket(signer=accounts.signer_a, signature="A"),
            SignaturePacket(signer=accounts.destination, signature="D"),
            SignaturePacket(signer=accounts.zero, signature="Z"),
        ]

        multisigned = MultisigAssembler().assemble(unsigned, signatures)

        assert multisigned.signer_accounts == (
            accounts.zero,
            accounts.destination,
            accounts.signer_a,
            accounts.source,
            accounts.signer_b,
        )

    def test_duplicate_signer_rejected(self, unsigned, accounts) -> None:
        signatures = [
            SignaturePacket(signer=accounts.signer_a, signature="AA"),
            SignaturePacket(signer=accounts.signer_a, signature="AB"),
        ]
        with pytest.raises(EscrowValidationError, match="Duplicate"):
            MultisigAssembler().assemble(unsigned, signatures)

    def test_malformed_signer_rejected(self, unsigned) -> None:
        with pytest.raises(InvalidAddressError):
            MultisigAssembler().assemble(unsigned, [SignaturePacket(signer="rBad", signature="AA")])

    def test_descriptor_is_unchanged(self, unsigned, accounts) -> None:
        before = unsigned.to_ledger_json()
        MultisigAssembler().assemble(
            unsigned, [SignaturePacket(signer=accounts.signer_a, signature="AA")]
        )
        assert unsigned.to_ledger_json() == before
