import pytest

from deskcrm.result import FORBIDDEN, INVALID, IO_ERROR, NOT_FOUND, Err, Ok
from deskcrm.services.handlers import (
    DEFAULT_ADMIN_ID,
    AdvertisementHandler,
    Caller,
    EnquiryHandler,
    UserHandler,
)
from deskcrm.services.security import hash_password, is_hashed

ADMIN = Caller(id=DEFAULT_ADMIN_ID, username="admin", role="admin")
STAFF = Caller(id="user-2", username="staff", role="user")


@pytest.fixture
def enquiries(store):
    return EnquiryHandler(store)


@pytest.fixture
def ads(store):
    return AdvertisementHandler(store)


@pytest.fixture
def users(store):
    return UserHandler(store)


# ---------- enquiries ----------

def test_add_then_get_all_round_trip(enquiries, make_enquiry):
    form = make_enquiry()

    added = enquiries.add(form, ADMIN)

    assert isinstance(added, Ok)
    record = added.data
    assert record["id"].startswith("ENQ-")
    assert record["createdAt"] == record["updatedAt"]
    stored = enquiries.get_all().data
    assert stored == [record]
    assert {k: record[k] for k in form} == form


def test_add_ignores_unknown_fields(enquiries, make_enquiry):
    record = enquiries.add({**make_enquiry(), "isAdmin": True}, ADMIN).data
    assert "isAdmin" not in record


def test_add_rejects_wrong_types(enquiries, make_enquiry):
    result = enquiries.add({**make_enquiry(), "mobile": ["9876543210"]}, ADMIN)
    assert isinstance(result, Err)
    assert result.code == INVALID
    assert enquiries.get_all().data == []


def test_update_changes_only_field_and_updated_at(enquiries, make_enquiry):
    before = enquiries.add(make_enquiry(), ADMIN).data

    result = enquiries.update(before["id"], {"status": "Confirmed"})

    assert isinstance(result, Ok)
    after = enquiries.get_all().data[0]
    assert after["status"] == "Confirmed"
    assert after["updatedAt"] >= before["updatedAt"]
    unchanged = {k: v for k, v in before.items() if k not in ("status", "updatedAt")}
    assert {k: after[k] for k in unchanged} == unchanged


def test_update_cannot_touch_identity_or_creation_time(enquiries, make_enquiry):
    before = enquiries.add(make_enquiry(), ADMIN).data

    enquiries.update(before["id"], {"id": "ENQ-hijack", "createdAt": "1999-01-01T00:00:00.000Z"})

    after = enquiries.get_all().data[0]
    assert after["id"] == before["id"]
    assert after["createdAt"] == before["createdAt"]


def test_update_missing_id_is_not_found(enquiries):
    result = enquiries.update("ENQ-nope", {"status": "Confirmed"})
    assert isinstance(result, Err)
    assert result.code == NOT_FOUND
    assert result.reason == "Enquiry not found"


def test_delete_missing_id_is_a_no_op(enquiries, make_enquiry):
    enquiries.add(make_enquiry(), ADMIN)

    result = enquiries.delete("ENQ-nope", ADMIN)

    assert result == Ok({"id": "ENQ-nope", "deleted": False})
    assert len(enquiries.get_all().data) == 1


def test_delete_requires_admin_before_touching_the_store(enquiries, make_enquiry, count_io):
    record = enquiries.add(make_enquiry(), ADMIN).data
    count_io.update(read=0, write=0)

    result = enquiries.delete(record["id"], STAFF)

    assert isinstance(result, Err)
    assert result.code == FORBIDDEN
    assert count_io == {"read": 0, "write": 0}
    assert [e["id"] for e in enquiries.get_all().data] == [record["id"]]


def test_delete_without_caller_is_refused(enquiries, make_enquiry):
    record = enquiries.add(make_enquiry(), ADMIN).data
    assert enquiries.delete(record["id"], None).code == FORBIDDEN


def test_admin_delete_removes_record(enquiries, make_enquiry):
    keep = enquiries.add(make_enquiry(mobile="9000000001"), ADMIN).data
    drop = enquiries.add(make_enquiry(mobile="9000000002"), ADMIN).data

    assert enquiries.delete(drop["id"], ADMIN) == Ok({"id": drop["id"], "deleted": True})
    assert [e["id"] for e in enquiries.get_all().data] == [keep["id"]]


def test_write_failure_surfaces_as_io_error(enquiries, store, make_enquiry, monkeypatch):
    monkeypatch.setattr(store, "write", lambda doc: False)
    result = enquiries.add(make_enquiry(), ADMIN)
    assert isinstance(result, Err)
    assert result.code == IO_ERROR


def test_malformed_store_gives_empty_collection(enquiries, store):
    store.path.write_text("{{{", encoding="utf-8")
    assert enquiries.get_all() == Ok([])


# ---------- advertisements ----------

def test_bulk_add_reads_and_writes_once(ads, store, count_io):
    rows = [
        {"name": f"Lead {i}", "phoneNo": f"98765432{i:02d}", "email": f"l{i}@example.com"}
        for i in range(5)
    ]
    store.write({"enquiries": [], "users": [], "advertisements": []})
    count_io.update(read=0, write=0)

    result = ads.bulk_add(rows, STAFF)

    assert isinstance(result, Ok)
    assert count_io == {"read": 1, "write": 1}
    assert len(result.data) == 5
    assert all(r["id"].startswith("ADV-") and r["importedAt"] for r in result.data)
    assert {r["importedBy"] for r in result.data} == {"staff"}


def test_advertisement_update_merges(ads):
    record = ads.add({"name": "Asha", "phoneNo": "9123456789", "email": "a@example.com"}, STAFF).data

    ads.update(record["id"], {"panNo": "ABCDE1234F"})

    stored = ads.get_all().data[0]
    assert stored["panNo"] == "ABCDE1234F"
    assert stored["name"] == "Asha"
    assert stored["importedAt"] == record["importedAt"]


def test_advertisement_update_not_found_message(ads):
    assert ads.update("ADV-x", {"name": "x"}).reason == "Advertisement not found"


# ---------- users ----------

def test_first_get_all_seeds_and_persists_default_admin(users):
    first = users.get_all().data
    second = users.get_all().data

    assert len(first) == 1
    assert first[0]["id"] == DEFAULT_ADMIN_ID
    assert first[0]["role"] == "admin"
    assert second == first
    assert "password" not in first[0]


def test_seeded_admin_password_is_hashed(users, store):
    users.get_all()
    stored = store.read()["users"][0]
    assert is_hashed(stored["password"])


def test_add_user_hashes_password_and_records_creator(users, store):
    created = users.add({"username": "asha", "password": "secret1", "fullName": "Asha"}, ADMIN).data

    assert "password" not in created
    assert created["createdBy"] == ADMIN.id
    assert created["isActive"] is True
    stored = next(u for u in store.read()["users"] if u["username"] == "asha")
    assert is_hashed(stored["password"])


def test_update_user_blank_password_keeps_current(users, store):
    created = users.add({"username": "asha", "password": "secret1", "fullName": "Asha"}, ADMIN).data
    before = next(u for u in store.read()["users"] if u["id"] == created["id"])["password"]

    users.update(created["id"], {"fullName": "Asha R", "password": ""}, ADMIN)

    after = next(u for u in store.read()["users"] if u["id"] == created["id"])
    assert after["password"] == before
    assert after["fullName"] == "Asha R"


def test_user_delete_is_soft(users, store):
    created = users.add({"username": "asha", "password": "secret1", "fullName": "Asha"}, ADMIN).data

    assert users.delete(created["id"], ADMIN) == Ok({"id": created["id"], "deleted": True})

    stored = next(u for u in store.read()["users"] if u["id"] == created["id"])
    assert stored["isActive"] is False
    assert users.authenticate("asha", "secret1") is None


def test_user_cannot_delete_own_account(users):
    users.get_all()
    result = users.delete(DEFAULT_ADMIN_ID, ADMIN)
    assert result.code == FORBIDDEN
    assert users.find(DEFAULT_ADMIN_ID)["isActive"] is True


def test_non_admin_cannot_delete_users(users):
    users.get_all()
    assert users.delete(DEFAULT_ADMIN_ID, STAFF).code == FORBIDDEN


def test_authenticate_upgrades_legacy_plaintext_password(users, store):
    store.write({
        "enquiries": [],
        "advertisements": [],
        "users": [{"id": "user-1", "username": "old", "password": "plain123", "fullName": "Old", "role": "user"}],
    })

    user = users.authenticate("old", "plain123")

    assert user is not None
    assert is_hashed(store.read()["users"][0]["password"])
    assert users.authenticate("old", "plain123") is not None
    assert users.authenticate("old", "wrong") is None


def test_authenticate_checks_hash(users, store):
    store.write({
        "enquiries": [],
        "advertisements": [],
        "users": [{"id": "user-1", "username": "asha", "password": hash_password("secret1"), "role": "admin"}],
    })
    assert users.authenticate("asha", "secret1")["id"] == "user-1"
    assert users.authenticate("asha", "secret2") is None
    assert users.authenticate("nobody", "secret1") is None


def test_add_ignores_client_supplied_id_and_timestamps(enquiries, make_enquiry):
    first = enquiries.add(make_enquiry(), ADMIN).data

    second = enquiries.add(
        make_enquiry(
            id=first["id"],
            mobile="9000000001",
            createdAt="1999-01-01T00:00:00Z",
            updatedAt="1999-01-01T00:00:00Z",
        ),
        ADMIN,
    ).data

    assert second["id"] != first["id"]
    assert second["createdAt"] != "1999-01-01T00:00:00Z"
    assert second["updatedAt"] == second["createdAt"]
    ids = [e["id"] for e in enquiries.get_all().data]
    assert len(ids) == len(set(ids)) == 2


def test_bulk_add_ignores_client_supplied_import_stamps(ads):
    rows = ads.bulk_add(
        [{"id": "ADV-fixed", "name": "Asha", "phoneNo": "9123456789", "email": "a@example.com",
          "importedAt": "1999-01-01T00:00:00Z", "importedBy": "someone-else"}],
        STAFF,
    ).data

    assert rows[0]["id"] != "ADV-fixed"
    assert rows[0]["importedAt"] != "1999-01-01T00:00:00Z"
    assert rows[0]["importedBy"] == "staff"


def test_user_add_cannot_reuse_admin_id(users):
    users.get_all()

    created = users.add(
        {"id": DEFAULT_ADMIN_ID, "username": "asha", "password": "secret1", "fullName": "Asha", "createdBy": "x"},
        ADMIN,
    ).data

    assert created["id"] != DEFAULT_ADMIN_ID
    assert created["createdBy"] == ADMIN.id
    assert users.find(DEFAULT_ADMIN_ID)["username"] == "admin"


def test_only_admins_add_users(users, count_io):
    users.get_all()
    count_io.update(read=0, write=0)

    result = users.add({"username": "boss", "password": "secret1", "fullName": "Boss", "role": "admin"}, STAFF)

    assert result.code == FORBIDDEN
    assert count_io["write"] == 0


def test_user_may_edit_own_profile_but_not_role_or_status(users):
    users.get_all()
    staff = users.add({"username": "staff", "password": "secret1", "fullName": "Staff"}, ADMIN).data
    me = Caller(id=staff["id"], username="staff", role="user")

    assert isinstance(users.update(staff["id"], {"fullName": "Staff Member", "role": "user"}, me), Ok)
    assert users.update(staff["id"], {"role": "admin"}, me).code == FORBIDDEN
    assert users.update(staff["id"], {"isActive": False}, me).code == FORBIDDEN
    assert users.update(DEFAULT_ADMIN_ID, {"fullName": "Hacked"}, me).code == FORBIDDEN

    stored = users.find(staff["id"])
    assert stored["role"] == "user"
    assert stored["fullName"] == "Staff Member"
    assert users.find(DEFAULT_ADMIN_ID)["fullName"] == "System Administrator"


def test_admin_may_change_roles(users):
    users.get_all()
    staff = users.add({"username": "staff", "password": "secret1", "fullName": "Staff"}, ADMIN).data

    assert isinstance(users.update(staff["id"], {"role": "admin"}, ADMIN), Ok)
    assert users.find(staff["id"])["role"] == "admin"
