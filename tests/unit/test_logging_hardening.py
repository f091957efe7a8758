import logging

from rotator.logging_hardening import SecretRedactionFilter, redact


def test_redacts_semp_password_element():
    body = "<rpc><username><name>u</name><change-password><password>s3cr3t!</password></change-password></username></rpc>"
    assert "s3cr3t!" not in redact(body)
    assert "<password>[REDACTED]</password>" in redact(body)


def test_redacts_json_and_basic_auth():
    assert redact('{"admin_password": "hunter2"}') == '{"admin_password": "[REDACTED]"}'
    assert "YWRtaW46YWRtaW4=" not in redact("Authorization: Basic YWRtaW46YWRtaW4=")


def test_manual_recovery_record_is_kept():
    line = "manual recovery required: account=a new_password=Abc123!@#xyz"
    assert redact(line) == line


def test_filter_redacts_msg_and_args():
    record = logging.LogRecord(
        "test", logging.ERROR, __file__, 1,
        "body=%s", ("<password>p</password>",), None
    )
    assert SecretRedactionFilter().filter(record) is True
    assert record.getMessage() == "body=<password>[REDACTED]</password>"
