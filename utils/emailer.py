import smtplib
from email.message import EmailMessage
from email.utils import formataddr


class SmtpMailer:
    """SMTP transport. ``send`` returns ``(ok, error)`` and never raises."""

    def __init__(self, host, port=587, username=None, password=None,
                 from_email=None, from_name=None, use_tls=True, timeout=10):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_email = from_email or username
        self.from_name = from_name
        self.use_tls = use_tls
        self.timeout = timeout

    @classmethod
    def from_config(cls, config):
        return cls(
            host=config.get("SMTP_HOST"),
            port=config.get("SMTP_PORT", 587),
            username=config.get("SMTP_USERNAME"),
            password=config.get("SMTP_PASSWORD"),
            from_email=config.get("SMTP_FROM_EMAIL"),
            from_name=config.get("EMAIL_FROM_NAME"),
            use_tls=config.get("SMTP_USE_TLS", True),
        )

    @property
    def configured(self):
        return bool(self.host and self.from_email)

    def send(self, to_email: str, subject: str, html: str):
        if not self.configured:
            return False, "Email not configured"

        msg = EmailMessage()
        msg["From"] = formataddr((self.from_name, self.from_email)) if self.from_name else self.from_email
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.set_content("This message requires an HTML capable email client.")
        msg.add_alternative(html, subtype="html")

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.send_message(msg)
            return True, None
        except (smtplib.SMTPException, OSError) as exc:
            return False, str(exc)
