"""Guest sessions and the one-way claim of guest trees."""


def test_start_returns_hex_token(client):
    token = client.post("/guest-sessions/start").json()["guest_session_id"]
    assert len(token) == 32
    int(token, 16)


def test_sessions_are_distinct(client):
    a = client.post("/guest-sessions/start").json()["guest_session_id"]
    b = client.post("/guest-sessions/start").json()["guest_session_id"]
    assert a != b


class TestClaim:
    def test_claim_transfers_ownership(self, client, guest_headers, auth_headers):
        tree = client.post("/trees", headers=guest_headers, json={"name": "Draft"}).json()
        token = guest_headers["X-Guest-Session-Id"]

        resp = client.post("/guest-sessions/claim", headers=auth_headers, json={"guest_session_id": token})
        assert resp.status_code == 200
        assert resp.json()["tree_ids"] == [tree["id"]]
        assert resp.json()["tree_names"] == ["Draft"]

        owned = client.get(f"/trees/{tree['id']}", headers=auth_headers).json()
        assert owned["owner_id"]
        assert owned["guest_session_id"] is None
        assert client.get("/auth/me", headers=auth_headers).json()["tree_ids"] == [tree["id"]]

    def test_guest_loses_access_after_claim(self, client, guest_headers, auth_headers):
        tree = client.post("/trees", headers=guest_headers, json={"name": "Draft"}).json()
        client.post("/guest-sessions/claim", headers=auth_headers,
                    json={"guest_session_id": guest_headers["X-Guest-Session-Id"]})
        assert client.get(f"/trees/{tree['id']}", headers=guest_headers).status_code == 403

    def test_claim_is_single_use(self, client, guest_headers, auth_headers, other_headers):
        client.post("/trees", headers=guest_headers, json={"name": "Draft"})
        body = {"guest_session_id": guest_headers["X-Guest-Session-Id"]}
        assert client.post("/guest-sessions/claim", headers=auth_headers, json=body).status_code == 200
        assert client.post("/guest-sessions/claim", headers=other_headers, json=body).status_code == 404
        assert client.post("/guest-sessions/claim", headers=auth_headers, json=body).status_code == 404

    def test_claim_takes_every_tree_of_the_session(self, client, guest_headers, auth_headers):
        a = client.post("/trees", headers=guest_headers, json={"name": "A"}).json()
        b = client.post("/trees", headers=guest_headers, json={"name": "B"}).json()
        resp = client.post("/guest-sessions/claim", headers=auth_headers,
                           json={"guest_session_id": guest_headers["X-Guest-Session-Id"]})
        assert sorted(resp.json()["tree_ids"]) == sorted([a["id"], b["id"]])
        assert client.get("/trees", headers=guest_headers).json() == []

    def test_unknown_token_is_not_found(self, client, auth_headers):
        resp = client.post("/guest-sessions/claim", headers=auth_headers, json={"guest_session_id": "nope"})
        assert resp.status_code == 404

    def test_claim_requires_authentication(self, client, guest_headers):
        client.post("/trees", headers=guest_headers, json={"name": "Draft"})
        resp = client.post("/guest-sessions/claim", headers=guest_headers,
                           json={"guest_session_id": guest_headers["X-Guest-Session-Id"]})
        assert resp.status_code == 401

    def test_missing_token_in_body_is_rejected(self, client, auth_headers):
        assert client.post("/guest-sessions/claim", headers=auth_headers, json={}).status_code == 422
