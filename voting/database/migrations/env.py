# voting/database/migrations/env.py

from logging.config import fileConfig
from alembic import context

from voting import db
from voting.database.models import User, Vote, Candidate  # noqa: F401

config = context.config
fileConfig(config.config_file_name, disable_existing_loggers=False)
target_metadata = db.metadata

def run_migrations_offline():
    url = db.engine.url.render_as_string(hide_password=False)
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()

def run_migrations_online():
    connectable = db.engine
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=True,  # SQLite cannot ALTER most constraints in place
        )
        with context.begin_transaction():
            context.run_migrations()

if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
