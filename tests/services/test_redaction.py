import logging

from dualrotate.services.redaction import (
    RedactingFilter,
    describe_command,
    mask_argv,
    mask_statement,
    redact,
)


def test_redact_replaces_connection_string_credentials():
    text = "cannot connect to mysql://root:hunter2@db:3306"

    assert redact(text) == "cannot connect to mysql:*****@db:3306"


def test_redact_leaves_text_without_credentials_untouched():
    assert redact("all good") == "all good"
    assert redact("") == ""


def test_mask_statement_hides_escaped_password_literal():
    statement = "ALTER USER 'app'@'%' IDENTIFIED BY 'p@ss\\'w\\\"rd' RETAIN CURRENT PASSWORD"

    assert (
        mask_statement(statement)
        == "ALTER USER 'app'@'%' IDENTIFIED BY '*****' RETAIN CURRENT PASSWORD"
    )


def test_mask_argv_hides_inline_password_flags():
    argv = ["mysql", "-psecret", "--password=secret", "-u", "root", "-p"]

    assert mask_argv(argv) == ["mysql", "-p*****", "--password=*****", "-u", "root", "-p"]


def test_describe_command_masks_and_redacts():
    described = describe_command(["mysql", "-psecret", "-h", "user:pw@host"])

    assert "secret" not in described
    assert "pw" not in described
    assert ":*****@" in described


def test_redacting_filter_scrubs_formatted_records():
    record = logging.LogRecord(
        name="dualrotate",
        level=logging.ERROR,
        pathname=__file__,
        lineno=1,
        msg="connect to %s",
        args=("root:hunter2@db",),
        exc_info=None,
    )

    assert RedactingFilter().filter(record) is True
    assert record.getMessage() == "connect to root:*****@db"


def test_redact_spans_from_first_colon_to_last_at_sign():
    assert redact("ERROR 1045: access denied for user@host") == "ERROR 1045:*****@host"
