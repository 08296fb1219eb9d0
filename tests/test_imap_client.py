from __future__ import annotations

import imaplib

import pytest

from imap_dmarc_extractor.domain.errors import MailboxError
from imap_dmarc_extractor.infrastructure.email.providers.imap.client import (
    ImapConfig,
    ImapMailboxSession,
    parse_server,
)


class FakeConn:
    def __init__(self, select_result=("OK", [b"2"]), fetch_result=None, logout_error=None) -> None:
        self.select_result = select_result
        self.fetch_result = fetch_result
        self.logout_error = logout_error
        self.calls: list[tuple] = []

    def select(self, mailbox, readonly=False):
        self.calls.append(("select", mailbox, readonly))
        return self.select_result

    def fetch(self, message_set, parts):
        self.calls.append(("fetch", message_set, parts))
        return self.fetch_result

    def logout(self):
        self.calls.append(("logout",))
        if self.logout_error:
            raise self.logout_error
        return "BYE", [b"logging out"]


class FakeAuthenticator:
    def __init__(self, conn) -> None:
        self.conn = conn

    def login(self):
        return self.conn


def _session(conn, folder="INBOX") -> ImapMailboxSession:
    cfg = ImapConfig(host="mail.example.com", account="dmarc@example.com", password="pw", folder=folder)
    return ImapMailboxSession(cfg, authenticator=FakeAuthenticator(conn))


@pytest.mark.parametrize(
    "server, expected",
    [
        ("mail.example.com", ("mail.example.com", 993)),
        ("mail.example.com:143", ("mail.example.com", 143)),
        (" imap.example.org:993 ", ("imap.example.org", 993)),
    ],
)
def test_parse_server(server, expected):
    assert parse_server(server) == expected


@pytest.mark.parametrize("server", ["mail.example.com:imap", ":993", "mail.example.com:0", "mail.example.com:70000"])
def test_parse_server_rejects_bad_addresses(server):
    with pytest.raises(ValueError):
        parse_server(server)


def test_fetch_all_returns_messages_in_mailbox_order():
    conn = FakeConn(
        fetch_result=(
            "OK",
            [
                (b"1 (RFC822 {5}", b"first"),
                b")",
                (b"2 (RFC822 {6}", b"second"),
                b")",
            ],
        )
    )

    with _session(conn, folder="Reports") as session:
        raws = session.fetch_all()

    assert [(r.seq, r.rfc822_bytes) for r in raws] == [(1, b"first"), (2, b"second")]
    assert all(r.folder == "Reports" and r.account == "dmarc@example.com" for r in raws)
    assert ("select", "Reports", True) in conn.calls
    assert ("fetch", "1:*", "(RFC822)") in conn.calls
    assert conn.calls[-1] == ("logout",)


def test_empty_mailbox_skips_fetch():
    conn = FakeConn(select_result=("OK", [b"0"]))
    session = _session(conn)
    session.open()

    assert session.fetch_all() == []
    assert not any(c[0] == "fetch" for c in conn.calls)


def test_failed_select_raises_and_logs_out():
    conn = FakeConn(select_result=("NO", [b"Mailbox does not exist"]))

    with pytest.raises(MailboxError):
        _session(conn, folder="Missing").open()
    assert conn.calls[-1] == ("logout",)


def test_failed_fetch_raises_mailbox_error():
    conn = FakeConn(fetch_result=("NO", [b"fetch failed"]))
    session = _session(conn)
    session.open()

    with pytest.raises(MailboxError):
        session.fetch_all()


def test_fetch_before_open_raises():
    with pytest.raises(MailboxError):
        _session(FakeConn()).fetch_all()


def test_close_ignores_logout_errors():
    session = _session(FakeConn(logout_error=imaplib.IMAP4.abort("socket closed")))
    session.open()
    session.close()
    session.close()


def test_unexpected_select_response_raises_and_logs_out():
    conn = FakeConn(select_result=("OK", [b"not-a-number"]))

    with pytest.raises(MailboxError):
        _session(conn).open()
    assert conn.calls[-1] == ("logout",)
