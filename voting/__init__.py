# voting/__init__.py

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
import os


MIGRATIONS_DIR = os.path.join(os.path.dirname(__file__), 'database', 'migrations')

# Initialize extensions, bound to an app in create_app()
db = SQLAlchemy()  # Database ORM
migrate = Migrate()  # DB migrations


def _default_database_uri():
    # Absolute path so the file lands in the working directory, not the instance folder
    return 'sqlite:///' + os.path.abspath('voting.db')


def create_app(test_config=None):
    app = Flask(__name__)
    # No environment variables are read; test_config is the only override
    app.config['SQLALCHEMY_DATABASE_URI'] = _default_database_uri()
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['AUDIT_LOG_DIR'] = ''  # audit trail off unless a directory is given
    app.config['LOG_LEVEL'] = 'INFO'

    if test_config:
        app.config.update(test_config)

    # app.logger is the "voting" logger, parent of every module logger in this package
    app.logger.setLevel(str(app.config['LOG_LEVEL']).upper())

    db.init_app(app)
    migrate.init_app(app, db, directory=MIGRATIONS_DIR)

    # Ensure model modules are imported so SQLAlchemy metadata is populated
    # before create_all() or `flask db upgrade` runs.
    from voting.database import models  # noqa: F401

    from voting.cli import register_commands
    register_commands(app)

    return app
