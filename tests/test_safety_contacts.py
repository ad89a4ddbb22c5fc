from app import crud
from app.models.safety_contact import SafetyContact
from tests.conftest import ALICE, BOB


def primaries(db, user_id):
    db.expire_all()
    return db.query(SafetyContact).filter(
        SafetyContact.user_id == user_id, SafetyContact.is_primary.is_(True)
    ).all()


def test_first_contact_becomes_primary(db, add_contact):
    first = add_contact(name="Sam")
    second = add_contact(name="Riley")

    assert first.is_primary is True
    assert second.is_primary is False


def test_set_primary_leaves_exactly_one(db, add_contact):
    sam = add_contact(name="Sam")
    riley = add_contact(name="Riley")
    jo = add_contact(name="Jo")

    crud.safety_contact.set_primary(db, contact_id=riley.id, user_id=ALICE.id)
    assert [c.id for c in primaries(db, ALICE.id)] == [riley.id]

    crud.safety_contact.set_primary(db, contact_id=jo.id, user_id=ALICE.id)
    crud.safety_contact.set_primary(db, contact_id=sam.id, user_id=ALICE.id)
    assert [c.id for c in primaries(db, ALICE.id)] == [sam.id]


def test_set_primary_does_not_touch_other_users(db, add_contact):
    alice_contact = add_contact(user_id=ALICE.id, name="Sam")
    bob_contact = add_contact(user_id=BOB.id, name="Lee")

    assert crud.safety_contact.set_primary(db, contact_id=bob_contact.id, user_id=ALICE.id) is None
    assert [c.id for c in primaries(db, ALICE.id)] == [alice_contact.id]
    assert [c.id for c in primaries(db, BOB.id)] == [bob_contact.id]


def test_list_puts_primary_first(alice_client, db, add_contact):
    add_contact(name="Sam")
    riley = add_contact(name="Riley")
    crud.safety_contact.set_primary(db, contact_id=riley.id, user_id=ALICE.id)

    response = alice_client.get("/api/v1/safety-contacts/")

    assert response.status_code == 200
    names = [c["name"] for c in response.json()]
    assert names == ["Riley", "Sam"]


def test_create_contact_via_api(alice_client):
    response = alice_client.post(
        "/api/v1/safety-contacts/",
        json={"name": " Sam ", "phone": "+15550111", "relationship": "Friend"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "Sam"
    assert body["is_primary"] is True
    assert body["user_id"] == ALICE.id


def test_create_contact_requires_all_fields(alice_client):
    response = alice_client.post(
        "/api/v1/safety-contacts/",
        json={"name": "Sam", "phone": "", "relationship": "Friend"},
    )
    assert response.status_code == 422


def test_primary_endpoint(alice_client, db, add_contact):
    add_contact(name="Sam")
    riley = add_contact(name="Riley")

    response = alice_client.post(f"/api/v1/safety-contacts/{riley.id}/primary")

    assert response.status_code == 200
    assert response.json()["is_primary"] is True
    assert [c.id for c in primaries(db, ALICE.id)] == [riley.id]


def test_cannot_delete_someone_elses_contact(alice_client, db, add_contact):
    bob_contact = add_contact(user_id=BOB.id, name="Lee")

    response = alice_client.delete(f"/api/v1/safety-contacts/{bob_contact.id}")

    assert response.status_code == 404
    db.expire_all()
    assert db.get(SafetyContact, bob_contact.id) is not None


def test_delete_contact(alice_client, db, add_contact):
    sam_id = add_contact(name="Sam").id

    response = alice_client.delete(f"/api/v1/safety-contacts/{sam_id}")

    assert response.status_code == 200
    db.expire_all()
    assert db.get(SafetyContact, sam_id) is None
