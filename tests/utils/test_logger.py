from app.utils.logger import REDACTED, redact_sensitive


def test_sensitive_keys_are_masked():
    event = redact_sensitive(
        None,
        "info",
        {"event": "saved", "password": "hunter22", "ciphertext": "abc", "user_id": 3},
    )
    assert event["password"] == REDACTED
    assert event["ciphertext"] == REDACTED
    assert event["user_id"] == 3
    assert event["event"] == "saved"


def test_nested_values_are_masked():
    event = redact_sensitive(
        None,
        "error",
        {"event": "failed", "technical_details": {"tag": "zzz", "field": "tag"}},
    )
    assert event["technical_details"] == {"tag": REDACTED, "field": "tag"}
