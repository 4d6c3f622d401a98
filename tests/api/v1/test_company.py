import base64
import json

from fastapi.testclient import TestClient

from app.main import app
from app.models.company import Company
from app.security.auth.jwt_handler import get_jwt_handler
from app.security.encryption.field_encryption import get_field_encryptor
from app.utils.error_handler import ConfigurationError

PROFILE = {"industry": "SaaS", "region": "US", "size": "11-50"}


def _user_id(headers) -> int:
    token = headers["Authorization"].split(" ", 1)[1]
    return int(get_jwt_handler().verify_token(token)["sub"])


def test_requires_bearer_token(client: TestClient) -> None:
    res = client.get("/api/v1/company")
    assert res.status_code == 401
    assert res.json()["detail"] == "Missing bearer token"

    res = client.get("/api/v1/company", headers={"Authorization": "Bearer nope"})
    assert res.status_code == 401
    assert res.json()["detail"] == "Invalid token"


def test_missing_profile_is_404(client: TestClient, auth_headers) -> None:
    res = client.get("/api/v1/company", headers=auth_headers)
    assert res.status_code == 404
    assert res.json()["detail"] == "Not found"


def test_save_and_read_profile(client: TestClient, auth_headers) -> None:
    res = client.post("/api/v1/company", json=PROFILE, headers=auth_headers)
    assert res.status_code == 201
    assert isinstance(res.json()["id"], int)

    res = client.get("/api/v1/company", headers=auth_headers)
    assert res.status_code == 200
    assert res.json() == {"profile": PROFILE}
    assert res.headers["Cache-Control"] == "no-store"


def test_profile_is_encrypted_at_rest(client: TestClient, auth_headers, db_session) -> None:
    client.post("/api/v1/company", json=PROFILE, headers=auth_headers)

    row = db_session.query(Company).filter(Company.user_id == _user_id(auth_headers)).one()
    stored = json.dumps({"iv": row.iv, "tag": row.tag, "ciphertext": row.ciphertext})
    for value in PROFILE.values():
        assert value not in stored
    assert len(base64.b64decode(row.iv)) == 12
    assert len(base64.b64decode(row.tag)) == 16


def test_save_replaces_envelope(client: TestClient, auth_headers, db_session) -> None:
    first = client.post("/api/v1/company", json=PROFILE, headers=auth_headers).json()
    user_id = _user_id(auth_headers)
    before = db_session.query(Company).filter(Company.user_id == user_id).one().iv

    updated = {**PROFILE, "size": "51-200"}
    second = client.post("/api/v1/company", json=updated, headers=auth_headers).json()
    assert second["id"] == first["id"]

    db_session.expire_all()
    rows = db_session.query(Company).filter(Company.user_id == user_id).all()
    assert len(rows) == 1
    assert rows[0].iv != before
    assert client.get("/api/v1/company", headers=auth_headers).json()["profile"] == updated


def test_profile_validation(client: TestClient, auth_headers) -> None:
    res = client.post(
        "/api/v1/company",
        json={"industry": "S", "region": "US", "size": "1-10"},
        headers=auth_headers,
    )
    assert res.status_code == 422

    res = client.post(
        "/api/v1/company", json={"industry": "SaaS", "region": "US"}, headers=auth_headers
    )
    assert res.status_code == 422


def test_profiles_are_per_user(client: TestClient, make_token) -> None:
    alice = {"Authorization": f"Bearer {make_token()}"}
    bob = {"Authorization": f"Bearer {make_token()}"}
    client.post("/api/v1/company", json=PROFILE, headers=alice)

    assert client.get("/api/v1/company", headers=bob).status_code == 404
    assert client.get("/api/v1/company", headers=alice).json()["profile"] == PROFILE


def test_tampered_row_reports_integrity_error(client: TestClient, auth_headers, db_session) -> None:
    client.post("/api/v1/company", json=PROFILE, headers=auth_headers)
    row = db_session.query(Company).filter(Company.user_id == _user_id(auth_headers)).one()
    raw = bytearray(base64.b64decode(row.ciphertext))
    raw[0] ^= 0xFF
    row.ciphertext = base64.b64encode(bytes(raw)).decode()
    db_session.commit()

    res = client.get("/api/v1/company", headers=auth_headers)
    assert res.status_code == 500
    error = res.json()["error"]
    assert error["category"] == "integrity"
    assert "SaaS" not in res.text


def test_unconfigured_key_reports_configuration_error(client: TestClient, auth_headers) -> None:
    def _missing_key():
        raise ConfigurationError("FIELD_ENCRYPTION_KEY is not set")

    app.dependency_overrides[get_field_encryptor] = _missing_key
    try:
        res = client.post("/api/v1/company", json=PROFILE, headers=auth_headers)
    finally:
        app.dependency_overrides = {}

    assert res.status_code == 500
    assert res.json()["error"]["category"] == "configuration"


def test_profile_values_are_stored_verbatim(client: TestClient, auth_headers) -> None:
    profile = {"industry": " FinTech ", "region": " a ", "size": "1-10"}
    res = client.post("/api/v1/company", json=profile, headers=auth_headers)
    assert res.status_code == 201
    assert client.get("/api/v1/company", headers=auth_headers).json()["profile"] == profile
