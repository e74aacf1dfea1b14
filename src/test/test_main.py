from unittest.mock import AsyncMock, MagicMock

import pytest
from eth_account import Account
from eth_account.messages import encode_defunct
from fastapi.testclient import TestClient
from web3 import Web3

import main
from main import COVENANT_AUTH_MESSAGE, verify_signature


def sign(account, message=COVENANT_AUTH_MESSAGE) -> str:
    signed = account.sign_message(encode_defunct(text=message))
    return Web3.to_hex(signed.signature)


@pytest.fixture()
def signer():
    return Account.create()


@pytest.fixture()
def dispatcher():
    dispatcher = MagicMock()
    dispatcher.tool_names = ["list-markets"]
    dispatcher.list_tools.return_value = [{"name": "list-markets", "description": "List", "input_schema": {}}]
    dispatcher.dispatch = AsyncMock(return_value="No markets found.")
    return dispatcher


@pytest.fixture()
def client(monkeypatch, signer, dispatcher):
    session_cls = MagicMock()
    session_cls.from_config.return_value.signer_address = signer.address
    dispatcher_cls = MagicMock()
    dispatcher_cls.from_session.return_value = dispatcher
    monkeypatch.setattr(main, "CovenantSession", session_cls)
    monkeypatch.setattr(main, "ToolDispatcher", dispatcher_cls)

    with TestClient(main.app) as test_client:
        yield test_client


def test_verify_signature(signer):
    assert verify_signature(COVENANT_AUTH_MESSAGE, sign(signer), signer.address)
    assert not verify_signature(COVENANT_AUTH_MESSAGE, sign(signer, "other message"), signer.address)
    assert not verify_signature(COVENANT_AUTH_MESSAGE, "0xdeadbeef", signer.address)


def test_list_tools(client):
    response = client.get("/tools")

    assert response.status_code == 200
    assert response.json()["tools"][0]["name"] == "list-markets"


def test_run_tool_as_signer(client, signer, dispatcher):
    response = client.post("/tools/list-markets", json={
        "wallet_address": signer.address,
        "signature": sign(signer),
    })

    assert response.status_code == 200
    assert response.json() == {"tool": "list-markets", "result": "No markets found."}
    dispatcher.dispatch.assert_awaited_once_with("list-markets", {})


def test_bad_signature_is_unauthorized(client, signer, dispatcher):
    other = Account.create()

    response = client.post("/tools/list-markets", json={
        "wallet_address": signer.address,
        "signature": sign(other),
    })

    assert response.status_code == 401
    dispatcher.dispatch.assert_not_awaited()


def test_other_wallet_is_forbidden(client, dispatcher):
    other = Account.create()

    response = client.post("/tools/list-markets", json={
        "wallet_address": other.address,
        "signature": sign(other),
    })

    assert response.status_code == 403
    dispatcher.dispatch.assert_not_awaited()


def test_unknown_tool(client, signer):
    response = client.post("/tools/nope", json={
        "wallet_address": signer.address,
        "signature": sign(signer),
    })

    assert response.status_code == 404
