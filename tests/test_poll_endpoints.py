"""
API tests for polls, voting, results, history and transaction lookup.

The ledger is the in-memory fake from conftest, so on-chain confirmation is
controlled per test with ``blockchain.add_transaction``.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi import status

from chainvote.services import identity
from conftest import bearer, make_poll

SIGNATURE = "4XkSWmb7sLTo3hBYP3h2N4WWXH2Gkp3xYVSYcKqJ7uK5yJ1mY4fSh4ZqBvD3P1mC5nQwHgR8sT2uV6xW9yZ1aB3c"


def iso(offset: timedelta) -> str:
    return (datetime.now(timezone.utc) + offset).isoformat()


def poll_payload(**overrides):
    payload = {
        "title": "Best programming language",
        "description": "Pick one",
        "start_time": iso(timedelta(hours=-1)),
        "end_time": iso(timedelta(hours=1)),
        "options": ["Python", "Rust", "Go"],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def other_admin_headers(other_admin):
    return bearer(identity.issue_credential(other_admin))


@pytest.fixture
def voter_with_token(client, admin_headers, voter, active_poll):
    response = client.post(f"/api/v1/tokens/mint/{active_poll.id}", headers=admin_headers)
    assert response.status_code == status.HTTP_200_OK
    return voter


def vote_body(poll, wallet, option_index=0, signature=SIGNATURE):
    return {
        "poll_id": poll.id,
        "option_index": option_index,
        "transaction_signature": signature,
        "wallet_address": wallet,
    }


class TestCreatePoll:

    def test_admin_creates_active_poll(self, client, admin, admin_headers):
        response = client.post("/api/v1/polls/", json=poll_payload(), headers=admin_headers)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["status"] == "active"
        assert data["creator_id"] == admin.id
        assert data["poll_id"].startswith("poll_")
        assert [o["option_text"] for o in data["options"]] == ["Python", "Rust", "Go"]
        assert [o["option_index"] for o in data["options"]] == [0, 1, 2]

    def test_future_poll_is_pending(self, client, admin_headers):
        payload = poll_payload(start_time=iso(timedelta(days=1)), end_time=iso(timedelta(days=2)))
        response = client.post("/api/v1/polls/", json=payload, headers=admin_headers)

        assert response.json()["status"] == "pending"

    def test_option_objects_keep_description(self, client, admin_headers):
        payload = poll_payload(options=[
            {"text": "Alice", "description": "Incumbent", "image_url": "https://img.example/alice.png"},
            {"text": "Bob"},
        ])
        response = client.post("/api/v1/polls/", json=payload, headers=admin_headers)

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["options"][0]["description"] == "Incumbent"

    def test_voter_cannot_create(self, client, voter_headers):
        response = client.post("/api/v1/polls/", json=poll_payload(), headers=voter_headers)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["error_code"] == "INSUFFICIENT_PERMISSIONS"

    def test_requires_authentication(self, client):
        response = client.post("/api/v1/polls/", json=poll_payload())
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_single_option_rejected(self, client, admin_headers):
        response = client.post("/api/v1/polls/", json=poll_payload(options=["Only"]), headers=admin_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "A poll needs at least 2 options"

    def test_end_before_start_rejected(self, client, admin_headers):
        payload = poll_payload(start_time=iso(timedelta(hours=2)), end_time=iso(timedelta(hours=1)))
        response = client.post("/api/v1/polls/", json=payload, headers=admin_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["field"] == "end_time"

    def test_title_too_short(self, client, admin_headers):
        response = client.post("/api/v1/polls/", json=poll_payload(title="ab"), headers=admin_headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestListAndRead:

    def test_list_is_public_and_paginated(self, client, active_poll, pending_poll, closed_poll):
        response = client.get("/api/v1/polls/?page=1&size=2")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total"] == 3
        assert len(data["items"]) == 2
        assert data["pages"] == 2
        assert data["has_next"] is True

    def test_status_filter(self, client, active_poll, pending_poll, closed_poll):
        response = client.get("/api/v1/polls/?status=pending")

        items = response.json()["items"]
        assert [item["id"] for item in items] == [pending_poll.id]

    def test_invalid_status_filter(self, client):
        response = client.get("/api/v1/polls/?status=archived")
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_search_on_title(self, client, db_session, admin_ctx, active_poll):
        make_poll(db_session, admin_ctx, title="Lunch menu vote")

        response = client.get("/api/v1/polls/?search=lunch")

        assert response.json()["total"] == 1
        assert response.json()["items"][0]["title"] == "Lunch menu vote"

    def test_get_poll(self, client, active_poll):
        response = client.get(f"/api/v1/polls/{active_poll.id}")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["poll"]["id"] == active_poll.id
        assert data["poll"]["status"] == "active"
        assert data["vote_count"] == 0

    def test_get_missing_poll(self, client):
        response = client.get("/api/v1/polls/999")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error_code"] == "POLL_NOT_FOUND"
        assert response.json()["message"] == "Poll not found"


class TestVoting:

    def test_voter_votes_and_token_is_collected(self, client, blockchain, voter_headers, voter_with_token, active_poll):
        blockchain.add_transaction(SIGNATURE, voter_with_token.wallet_address)

        response = client.post("/api/v1/polls/vote", json=vote_body(active_poll, voter_with_token.wallet_address, 1), headers=voter_headers)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["message"] == "Vote recorded successfully"
        assert data["token_collected"] is True
        assert data["vote"]["option_index"] == 1
        assert data["vote"]["principal_role"] == "voter"

        token_status = client.get(f"/api/v1/tokens/status/{active_poll.id}", headers=voter_headers).json()
        assert token_status["status"] == "collected"
        assert token_status["can_vote"] is False

    def test_voter_without_token(self, client, blockchain, voter, voter_headers, active_poll):
        blockchain.add_transaction(SIGNATURE, voter.wallet_address)

        response = client.post("/api/v1/polls/vote", json=vote_body(active_poll, voter.wallet_address), headers=voter_headers)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["error_code"] == "NO_TOKEN"

    def test_admin_votes_without_token(self, client, blockchain, admin, admin_headers, active_poll):
        blockchain.add_transaction(SIGNATURE, admin.wallet_address)

        response = client.post("/api/v1/polls/vote", json=vote_body(active_poll, admin.wallet_address), headers=admin_headers)

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["token_collected"] is False

    def test_second_vote_conflicts(self, client, blockchain, admin, admin_headers, active_poll):
        blockchain.add_transaction(SIGNATURE, admin.wallet_address)
        blockchain.add_transaction("second-signature", admin.wallet_address)
        client.post("/api/v1/polls/vote", json=vote_body(active_poll, admin.wallet_address), headers=admin_headers)

        response = client.post(
            "/api/v1/polls/vote",
            json=vote_body(active_poll, admin.wallet_address, 1, "second-signature"),
            headers=admin_headers
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error_code"] == "ALREADY_VOTED"

    def test_vote_on_pending_poll(self, client, blockchain, admin, admin_headers, pending_poll):
        blockchain.add_transaction(SIGNATURE, admin.wallet_address)

        response = client.post("/api/v1/polls/vote", json=vote_body(pending_poll, admin.wallet_address), headers=admin_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == "POLL_NOT_STARTED"

    def test_vote_on_closed_poll(self, client, blockchain, admin, admin_headers, closed_poll):
        blockchain.add_transaction(SIGNATURE, admin.wallet_address)

        response = client.post("/api/v1/polls/vote", json=vote_body(closed_poll, admin.wallet_address), headers=admin_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == "POLL_ENDED"

    def test_unconfirmed_transaction(self, client, admin, admin_headers, active_poll):
        response = client.post("/api/v1/polls/vote", json=vote_body(active_poll, admin.wallet_address), headers=admin_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == "INVALID_TRANSACTION"
        assert response.json()["verification_status"] == "rejected"

    def test_negative_option_index(self, client, admin, admin_headers, active_poll):
        response = client.post("/api/v1/polls/vote", json=vote_body(active_poll, admin.wallet_address, -1), headers=admin_headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_vote_status(self, client, blockchain, admin, admin_headers, active_poll):
        before = client.get(f"/api/v1/polls/{active_poll.id}/vote-status", headers=admin_headers)
        assert before.json() == {"has_voted": False, "vote": None}

        blockchain.add_transaction(SIGNATURE, admin.wallet_address)
        cast = client.post("/api/v1/polls/vote", json=vote_body(active_poll, admin.wallet_address, 1), headers=admin_headers)
        assert cast.status_code == status.HTTP_201_CREATED

        after = client.get(f"/api/v1/polls/{active_poll.id}/vote-status", headers=admin_headers).json()
        assert after["has_voted"] is True
        assert after["vote"]["option_index"] == 1
        assert after["vote"]["transaction_signature"] == SIGNATURE


class TestResultsAndHistory:

    def test_results_in_option_order(self, client, blockchain, admin, admin_headers, voter_headers, voter_with_token, active_poll):
        blockchain.add_transaction("admin-sig", admin.wallet_address)
        blockchain.add_transaction("voter-sig", voter_with_token.wallet_address)
        client.post("/api/v1/polls/vote", json=vote_body(active_poll, admin.wallet_address, 1, "admin-sig"), headers=admin_headers)
        client.post("/api/v1/polls/vote", json=vote_body(active_poll, voter_with_token.wallet_address, 1, "voter-sig"), headers=voter_headers)

        response = client.get(f"/api/v1/polls/{active_poll.id}/results")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["poll"]["total_votes"] == 2
        assert [r["vote_count"] for r in data["results"]] == [0, 2]
        assert [r["option_text"] for r in data["results"]] == ["Yes", "No"]

    def test_results_missing_poll(self, client):
        assert client.get("/api/v1/polls/999/results").status_code == status.HTTP_404_NOT_FOUND

    def test_history_lists_closed_polls(self, client, active_poll, closed_poll):
        response = client.get("/api/v1/polls/history/closed")

        assert response.status_code == status.HTTP_200_OK
        history = response.json()["history"]
        assert [entry["id"] for entry in history] == [closed_poll.id]
        assert history[0]["winners"] == []
        assert history[0]["is_tie"] is False
        assert history[0]["total_votes"] == 0


class TestDeletion:

    def test_delete_pending_poll(self, client, admin_headers, pending_poll):
        response = client.delete(f"/api/v1/polls/{pending_poll.id}", headers=admin_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["poll_id"] == pending_poll.id
        assert client.get(f"/api/v1/polls/{pending_poll.id}").status_code == status.HTTP_404_NOT_FOUND

    def test_cannot_delete_started_poll(self, client, admin_headers, active_poll):
        response = client.delete(f"/api/v1/polls/{active_poll.id}", headers=admin_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "Cannot delete a poll that has already started"

    def test_only_creator_deletes(self, client, other_admin_headers, pending_poll):
        response = client.delete(f"/api/v1/polls/{pending_poll.id}", headers=other_admin_headers)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["message"] == "You are not authorized to delete this poll"

    def test_voter_cannot_delete(self, client, voter_headers, pending_poll):
        response = client.delete(f"/api/v1/polls/{pending_poll.id}", headers=voter_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_purge_closed_poll(self, client, admin_headers, closed_poll):
        response = client.delete(f"/api/v1/polls/history/{closed_poll.id}", headers=admin_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["message"] == "Poll deleted from history successfully"
        assert client.get("/api/v1/polls/history/closed").json()["history"] == []

    def test_cannot_purge_open_poll(self, client, admin_headers, active_poll):
        response = client.delete(f"/api/v1/polls/history/{active_poll.id}", headers=admin_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "Can only delete closed polls from history"

    def test_purge_missing_poll(self, client, admin_headers):
        response = client.delete("/api/v1/polls/history/999", headers=admin_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestTransactionLookup:

    def test_confirmed_transaction(self, client, blockchain):
        blockchain.add_transaction(SIGNATURE, "Signer111", memo={"pollId": 3, "optionIndex": 1})

        response = client.get(f"/api/v1/polls/verify/{SIGNATURE}")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "confirmed"
        assert data["signers"] == ["Signer111"]
        assert data["vote_data"] == {"pollId": 3, "optionIndex": 1}

    def test_unknown_transaction(self, client):
        response = client.get("/api/v1/polls/verify/unknown-signature")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["message"] == "Transaction not found on blockchain"

    def test_rpc_unreachable(self, client, blockchain):
        blockchain.unreachable = True

        response = client.get(f"/api/v1/polls/verify/{SIGNATURE}")

        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        assert response.json()["error_code"] == "BLOCKCHAIN_ERROR"
