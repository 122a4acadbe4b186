#!/usr/bin/env python3
"""
Run club membership app - invitation and onboarding service.
A Flask application that invites members by email and tracks their registration.
"""

import logging
import os
from dotenv import load_dotenv
from flask import Flask
from flask_mail import Mail
from flask_migrate import Migrate

# Import our modules
from models import db
from routes import register_blueprints
from services import init_invitation_services
from cli import invitations_cli

# Load environment variables from .env file
load_dotenv()


def create_app(config=None, transport=None, accounts=None, **service_options):
    """Application factory pattern

    config overrides app.config after the environment is read; transport, accounts
    and service_options (clock, sleep) are passed to the invitation services.
    """
    app = Flask(__name__)

    # Configuration
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')
    app.config['SQLALCHEMY_DATABASE_URI'] = os.environ.get('DATABASE_URL', 'sqlite:///runclub.db')
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    # Handle PostgreSQL URL format for SQLAlchemy 2.0+
    if app.config['SQLALCHEMY_DATABASE_URI'].startswith('postgres://'):
        app.config['SQLALCHEMY_DATABASE_URI'] = (
            app.config['SQLALCHEMY_DATABASE_URI'].replace('postgres://', 'postgresql://', 1)
        )

    # Invitation workflow
    app.config['APP_ORIGIN'] = os.environ.get('APP_ORIGIN', os.environ.get('BASE_URL', 'http://localhost:5000'))
    app.config['CLUB_NAME'] = os.environ.get('CLUB_NAME', 'Run Alcester')
    app.config['INVITATION_TTL_DAYS'] = int(os.environ.get('INVITATION_TTL_DAYS', '30'))
    app.config['INVITATION_SEND_DELAY'] = float(os.environ.get('INVITATION_SEND_DELAY', '1.0'))
    app.config['GUEST_EMAIL_DOMAIN'] = os.environ.get('GUEST_EMAIL_DOMAIN', 'runalcester.temp')
    app.config['EMAIL_API_URL'] = os.environ.get('EMAIL_API_URL', '')

    # Mail (Flask-Mail reads MAIL_* keys)
    app.config['MAIL_SERVER'] = os.environ.get('MAIL_SERVER', '')
    app.config['MAIL_PORT'] = int(os.environ.get('MAIL_PORT', '587'))
    app.config['MAIL_USE_TLS'] = os.environ.get('MAIL_USE_TLS', 'true').lower() == 'true'
    app.config['MAIL_USERNAME'] = os.environ.get('MAIL_USERNAME')
    app.config['MAIL_PASSWORD'] = os.environ.get('MAIL_PASSWORD')
    app.config['MAIL_DEFAULT_SENDER'] = os.environ.get('MAIL_DEFAULT_SENDER', 'noreply@runalcester.co.uk')

    if config:
        app.config.update(config)

    logging.basicConfig(
        level=os.environ.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s %(name)s %(message)s'
    )

    # Initialize extensions
    db.init_app(app)
    Mail(app)
    Migrate(app, db)

    init_invitation_services(app, transport=transport, accounts=accounts, **service_options)

    # Register blueprints
    register_blueprints(app)
    app.cli.add_command(invitations_cli)

    # Database migrations are handled by Flask-Migrate
    # Run: flask db upgrade (in production)

    return app


if __name__ == '__main__':
    create_app().run(debug=True, host='0.0.0.0', port=5000)
