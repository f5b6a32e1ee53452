from .client import MailClient, OutgoingEmail, SmtpMailClient, get_mail_client

__all__ = ["MailClient", "OutgoingEmail", "SmtpMailClient", "get_mail_client"]
