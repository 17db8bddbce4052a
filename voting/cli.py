# voting/cli.py

# Command-line access to each store operation:
#   flask --app voting register-user user1 hash123
#   flask --app voting vote 1 1

import click
from flask import current_app
from flask.cli import with_appcontext

from voting import db
from voting.demo import run_demo
from voting.errors import VotingStoreError
from voting.store import build_store


def _open_store():
    """Open the store and make sure the tables exist; fatal errors exit with 1."""
    store = build_store(current_app, db)
    try:
        store.check_connection()
        store.create_tables()
    except VotingStoreError as e:
        click.echo(f"Error opening the voting database: {e}", err=True)
        raise click.exceptions.Exit(1)
    return store


def _finish(status):
    click.echo(status.value)
    if not status.ok:
        raise click.exceptions.Exit(1)


@click.command('init-db')
@with_appcontext
def init_db_command():
    """Create the users, candidates and votes tables if absent."""
    _open_store()
    click.echo("Initialized the database.")


@click.command('reset-db')
@with_appcontext
def reset_db_command():
    """Delete all rows and restart candidate ids at 1."""
    _finish(_open_store().clear_all())


@click.command('register-user')
@click.argument('username')
@click.argument('password_hash')
@with_appcontext
def register_user_command(username, password_hash):
    _finish(_open_store().register_user(username, password_hash))


@click.command('add-candidate')
@click.argument('name')
@with_appcontext
def add_candidate_command(name):
    _finish(_open_store().add_candidate(name))


@click.command('vote')
@click.argument('user_id', type=int)
@click.argument('candidate_id', type=int)
@with_appcontext
def vote_command(user_id, candidate_id):
    _finish(_open_store().cast_vote(user_id, candidate_id))


@click.command('list-candidates')
@with_appcontext
def list_candidates_command():
    for candidate_id, name in _open_store().list_candidates():
        click.echo(f"Candidate: ID={candidate_id}, Name={name}")


@click.command('tally')
@with_appcontext
def tally_command():
    for candidate_id, name, votes in _open_store().tally():
        click.echo(f"{candidate_id}\t{name}\t{votes}")


@click.command('demo')
@with_appcontext
def demo_command():
    """Reset the database and run the fixed demo sequence."""
    run_demo(_open_store())


def register_commands(app):
    for command in (init_db_command, reset_db_command, register_user_command,
                    add_candidate_command, vote_command, list_candidates_command,
                    tally_command, demo_command):
        app.cli.add_command(command)
