import logging

from flask import Flask, send_from_directory, current_app
from config import Config
from routes import ALL_BLUEPRINTS

from models import db
from flask_migrate import Migrate
from security.access import load_current_user
from services.payment_gateway import build_gateway
from utils.emailer import SmtpMailer
from utils.errors import register_error_handlers

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _configure_logging(app):
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
    app.logger.setLevel(level)


def create_app(overrides=None, gateway=None, mailer=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    _configure_logging(app)

    # Register routes
    for bp in ALL_BLUEPRINTS:
        app.register_blueprint(bp)
    register_error_handlers(app)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    # Outside collaborators live on the app, tests pass their own
    app.extensions["payment_gateway"] = gateway or build_gateway(app.config)
    app.extensions["mailer"] = mailer or SmtpMailer.from_config(app.config)

    @app.before_request
    def _load_user():
        load_current_user()

    @app.get("/uploads/<path:filename>")
    def uploaded_file(filename):
        return send_from_directory(current_app.config["UPLOAD_FOLDER"], filename)

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        return resp

    register_cli(app)

    app.logger.info("App started (env=%s, gateway=%s)", app.config["APP_ENV"], app.extensions["payment_gateway"].name)
    return app

#-------------------------
import click
from models.user import User
from security.credentials import hash_password, password_problems
from services.notifications import dispatch_pending

def register_cli(app):
    @app.cli.command("make-admin")
    @click.argument("email")
    def make_admin(email):
        """Promote an existing user to admin by email."""
        user = User.query.filter_by(email=email.strip().lower()).first()
        if not user:
            click.echo("User not found")
            return

        if not user.is_admin:
            user.is_admin = True
            db.session.commit()

        click.echo(f"{user.email} promoted to admin")

    @app.cli.command("create-admin")
    @click.argument("email")
    @click.password_option()
    @click.option("--first-name", default="Admin")
    @click.option("--last-name", default="User")
    def create_admin(email, password, first_name, last_name):
        """Create the first admin account (bootstrap)."""
        email = email.strip().lower()
        if User.query.filter_by(email=email).first():
            click.echo("User already exists, use make-admin")
            return
        problems = password_problems(password)
        if problems:
            click.echo("; ".join(problems))
            return

        user = User(
            email=email,
            first_name=first_name,
            last_name=last_name,
            password_hash=hash_password(password),
            is_admin=True,
        )
        db.session.add(user)
        db.session.commit()
        click.echo(f"Admin {user.email} created")

    @app.cli.command("send-pending-emails")
    @click.option("--limit", default=100, show_default=True)
    def send_pending_emails(limit):
        """Deliver outbox emails still waiting to be sent."""
        sent = dispatch_pending(limit=limit)
        click.echo(f"{sent} email(s) sent")

#-------------------------




if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
