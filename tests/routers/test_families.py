from familink.services.membership import get_membership


def test_create_family(client, alice, alice_headers):
    response = client.post(
        "/families",
        headers=alice_headers,
        json={"name": "Dupont", "language": "EN", "gazette_day": 5},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Dupont"
    assert data["language"] == "EN"
    assert data["role"] == "ADMIN"
    assert len(data["members"]) == 1
    assert data["members"][0]["user"]["email"] == "alice@x.com"
    assert data["members"][0]["role"] == "ADMIN"


def test_create_family_requires_name(client, alice_headers):
    response = client.post("/families", headers=alice_headers, json={"name": ""})
    assert response.status_code == 422


def test_create_family_unauthenticated(client):
    response = client.post("/families", json={"name": "Nope"})
    assert response.status_code in (401, 403)


def test_list_my_families(client, family, bob_member, bob_headers):
    response = client.get("/families", headers=bob_headers)
    assert response.status_code == 200
    data = response.json()
    assert len(data) == 1
    assert data[0]["id"] == family.id
    assert data[0]["role"] == "MEMBER"


def test_get_family(client, family, alice_headers):
    response = client.get(f"/families/{family.id}", headers=alice_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Dupont"
    assert data["role"] == "ADMIN"


def test_get_family_as_non_member(client, family, carol_headers):
    response = client.get(f"/families/{family.id}", headers=carol_headers)
    assert response.status_code == 403
    assert response.json()["code"] == "forbidden"


def test_get_missing_family_looks_like_non_member(client, alice_headers):
    response = client.get("/families/99999", headers=alice_headers)
    assert response.status_code == 403


def test_update_family(client, family, alice_headers):
    response = client.patch(
        f"/families/{family.id}",
        headers=alice_headers,
        json={"name": "Renamed", "description": "Our family"},
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Renamed"
    assert response.json()["description"] == "Our family"


def test_update_family_as_member(client, family, bob_member, bob_headers):
    response = client.patch(
        f"/families/{family.id}", headers=bob_headers, json={"name": "Hacked"}
    )
    assert response.status_code == 403


def test_delete_family(client, family, alice_headers):
    response = client.delete(f"/families/{family.id}", headers=alice_headers)
    assert response.status_code == 204

    response = client.get(f"/families/{family.id}", headers=alice_headers)
    assert response.status_code == 403


def test_delete_family_as_member(client, family, bob_member, bob_headers):
    response = client.delete(f"/families/{family.id}", headers=bob_headers)
    assert response.status_code == 403


def test_list_members(client, family, bob_member, bob_headers):
    response = client.get(f"/families/{family.id}/members", headers=bob_headers)
    assert response.status_code == 200
    assert [m["role"] for m in response.json()] == ["ADMIN", "MEMBER"]


def test_remove_member(client, family, bob_member, alice_headers):
    response = client.delete(
        f"/families/{family.id}/members/{bob_member.id}", headers=alice_headers
    )
    assert response.status_code == 204

    response = client.get(f"/families/{family.id}/members", headers=alice_headers)
    assert len(response.json()) == 1


def test_remove_self(client, db, family, alice, alice_headers):
    admin = get_membership(db, alice.id, family.id)
    response = client.delete(
        f"/families/{family.id}/members/{admin.id}", headers=alice_headers
    )
    assert response.status_code == 403


def test_remove_unknown_member(client, family, alice_headers):
    response = client.delete(
        f"/families/{family.id}/members/99999", headers=alice_headers
    )
    assert response.status_code == 404
    assert response.json()["code"] == "not_found"


def test_update_member_role(client, family, bob_member, alice_headers):
    response = client.patch(
        f"/families/{family.id}/members/{bob_member.id}/role",
        headers=alice_headers,
        json={"role": "ADMIN"},
    )
    assert response.status_code == 200
    assert response.json()["role"] == "ADMIN"


def test_update_member_role_invalid(client, family, bob_member, alice_headers):
    response = client.patch(
        f"/families/{family.id}/members/{bob_member.id}/role",
        headers=alice_headers,
        json={"role": "OWNER"},
    )
    assert response.status_code == 422


def test_self_demotion(client, db, family, alice, alice_headers):
    admin = get_membership(db, alice.id, family.id)
    response = client.patch(
        f"/families/{family.id}/members/{admin.id}/role",
        headers=alice_headers,
        json={"role": "MEMBER"},
    )
    assert response.status_code == 403


def test_sole_admin_cannot_leave(client, family, bob_member, alice_headers):
    response = client.post(f"/families/{family.id}/leave", headers=alice_headers)
    assert response.status_code == 403
    assert response.json()["code"] == "forbidden"


def test_member_leaves(client, family, bob_member, bob_headers):
    response = client.post(f"/families/{family.id}/leave", headers=bob_headers)
    assert response.status_code == 200
    assert response.json() == {"family_id": family.id, "family_deleted": False}


def test_last_member_leaving_disbands(client, family, alice_headers):
    family_id = family.id
    response = client.post(f"/families/{family_id}/leave", headers=alice_headers)
    assert response.status_code == 200
    assert response.json()["family_deleted"] is True

    response = client.get("/families", headers=alice_headers)
    assert response.json() == []


def test_leave_as_non_member(client, family, carol_headers):
    response = client.post(f"/families/{family.id}/leave", headers=carol_headers)
    assert response.status_code == 404


def test_leave_locks_family_before_reading_it(client, family, bob_member, bob_headers, lock_states):
    lock_states.clear()

    response = client.post(f"/families/{family.id}/leave", headers=bob_headers)

    assert response.status_code == 200
    assert lock_states == [False]
