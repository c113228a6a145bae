"""Application factory and extension initialization for SpendFlow."""
from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv
from flask import Flask
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

from config import config_by_name

# Global extension instances -------------------------------------------------

db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()


def create_app(config_name: Optional[str] = None) -> Flask:
    """Flask application factory."""
    load_dotenv()

    app = Flask(__name__, instance_relative_config=True)

    config_name = config_name or os.getenv("FLASK_CONFIG", "development")
    config_class = config_by_name.get(config_name.lower())
    if config_class is None:
        raise ValueError(f"Unknown Flask configuration '{config_name}'")

    app.config.from_object(config_class)
    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Ensure instance folder exists for SQLite DBs or uploads
    os.makedirs(app.instance_path, exist_ok=True)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    from spendflow.auth.principal import init_principal_loader
    from spendflow.errors import register_error_handlers

    init_principal_loader(login_manager)
    register_error_handlers(app)

    # Register blueprints
    from spendflow.approvals import approvals_bp
    from spendflow.auth import auth_bp
    from spendflow.companies import companies_bp
    from spendflow.expenses import expenses_bp
    from spendflow.main import main_bp
    from spendflow.rules import rules_bp
    from spendflow.uploads import uploads_bp
    from spendflow.users import users_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(companies_bp)
    app.register_blueprint(expenses_bp)
    app.register_blueprint(approvals_bp)
    app.register_blueprint(rules_bp)
    app.register_blueprint(uploads_bp)

    # Import all models to ensure they are registered with SQLAlchemy
    from spendflow.models import (  # noqa: F401
        ApprovalHistory, ApprovalRule, Attachment, Company, Expense, ExpenseLine, User
    )

    @app.shell_context_processor
    def shell_context():
        return {"db": db, "User": User, "Expense": Expense}

    return app
