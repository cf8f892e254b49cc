"""Tests for local mail sources."""

import pytest

from mailtrace.services.email_parser.base import InvalidFormatError
from mailtrace.services.sources import (
    EmlFileSource,
    MaildirSource,
    MboxSource,
    open_source,
)


MESSAGE_ONE = (
    "Received: by mx.example.net with SMTP id 1; Mon, 1 Jan 2024 10:00:01 +0000\n"
    "Subject: first\n"
    "Date: Mon, 1 Jan 2024 10:00:00 +0000\n"
    "\n"
    "one\n"
)
MESSAGE_TWO = "Subject: second\n\ntwo\n"


@pytest.fixture
def mbox_file(tmp_path):
    """Create an mbox with two messages."""
    path = tmp_path / "inbox.mbox"
    path.write_text(
        "From sender@example.com Mon Jan  1 10:00:00 2024\n"
        + MESSAGE_ONE
        + "\n"
        + "From other@example.com Mon Jan  1 11:00:00 2024\n"
        + MESSAGE_TWO,
        encoding="utf-8",
    )
    return path


@pytest.fixture
def maildir(tmp_path):
    """Create a Maildir with one new and one read message."""
    root = tmp_path / "Maildir"
    for sub in ("cur", "new", "tmp"):
        (root / sub).mkdir(parents=True)
    (root / "new" / "1704103200.M1P1.host").write_text(MESSAGE_ONE, encoding="utf-8")
    (root / "cur" / "1704106800.M2P1.host:2,S").write_text(MESSAGE_TWO, encoding="utf-8")
    return root


class TestMboxSource:
    """Test mbox reading."""

    def test_detect_format(self, mbox_file, tmp_path):
        other = tmp_path / "plain.eml"
        other.write_text(MESSAGE_TWO, encoding="utf-8")

        assert MboxSource().detect_format(mbox_file) == "mbox"
        assert MboxSource().detect_format(other) == "unknown"
        assert MboxSource().detect_format(tmp_path) == "unknown"

    def test_iter_messages(self, mbox_file):
        """Test ids are stable and the separator line is not part of the text."""
        messages = list(MboxSource().iter_messages(mbox_file))

        assert [email_id for email_id, _ in messages] == ["inbox.mbox:0", "inbox.mbox:1"]
        assert messages[0][1].startswith("Received: by mx.example.net")
        assert "Subject: second" in messages[1][1]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            list(MboxSource().iter_messages(tmp_path / "missing.mbox"))


class TestMaildirSource:
    """Test Maildir reading."""

    def test_detect_format(self, maildir, tmp_path):
        """Test only directories with cur/new/tmp are Maildirs."""
        assert MaildirSource().detect_format(maildir) == "maildir"
        assert MaildirSource().detect_format(tmp_path) == "unknown"

    def test_iter_messages_sorted_by_key(self, maildir):
        """Test messages from new/ and cur/ are yielded in key order."""
        messages = list(MaildirSource().iter_messages(maildir))

        assert [email_id for email_id, _ in messages] == [
            "1704103200.M1P1.host",
            "1704106800.M2P1.host",
        ]
        assert "Subject: first" in messages[0][1]

    def test_not_a_maildir(self, tmp_path):
        with pytest.raises(InvalidFormatError):
            list(MaildirSource().iter_messages(tmp_path))


class TestOpenSource:
    """Test source selection."""

    def test_picks_each_format(self, mbox_file, maildir, fixture_path):
        assert isinstance(open_source(maildir), MaildirSource)
        assert isinstance(open_source(mbox_file), MboxSource)
        assert isinstance(open_source(fixture_path("gmail_three_hops.eml")), EmlFileSource)

    def test_eml_uses_file_name_as_id(self, fixture_path):
        """Test a single file yields one message named after the file."""
        path = fixture_path("sendgrid_newsletter.eml")
        messages = list(open_source(path).iter_messages(path))

        assert len(messages) == 1
        assert messages[0][0] == "sendgrid_newsletter.eml"

    def test_missing_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            open_source(tmp_path / "missing")

    def test_plain_directory_is_rejected(self, tmp_path):
        """Test a directory that is not a Maildir is unsupported."""
        (tmp_path / "folder").mkdir()

        with pytest.raises(InvalidFormatError):
            open_source(tmp_path / "folder")
