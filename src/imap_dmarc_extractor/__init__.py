"""Extract DMARC reports from zip and gzip attachments in an IMAP mailbox."""

__version__ = "0.1.0"
