#!/usr/bin/env python3
"""
Print fresh values for the secrets Weekly Picks reads from the environment:
SECRET_KEY signs auth tokens, ADMIN_API_KEY unlocks the /api/admin endpoints.
"""

import secrets

import click


@click.command()
@click.option("--length", default=32, show_default=True, help="Random bytes per secret")
def generate_secrets(length):
    """Generate secure random keys for the application"""
    click.echo(f"SECRET_KEY={secrets.token_urlsafe(length)}")
    click.echo(f"ADMIN_API_KEY={secrets.token_urlsafe(length)}")
    click.echo("# Copy these values to your .env file and keep them out of version control", err=True)


if __name__ == "__main__":
    generate_secrets()
