import random
import click
from flask.cli import with_appcontext
from flask_migrate import upgrade, migrate, init
from attendance_app.extensions import db
from attendance_app.seed import seed_data


def register_commands(app):

    @app.cli.command("db-init")
    @with_appcontext
    def db_init():
        """Initializes migrations directory"""
        init()

    @app.cli.command("db-migrate")
    @with_appcontext
    def db_migrate():
        """Creates a new migration"""
        migrate()

    @app.cli.command("db-upgrade")
    @with_appcontext
    def db_upgrade():
        """Applies migrations"""
        upgrade()

    @app.cli.command("seed")
    @click.option("--forms", default=5, show_default=True, help="Number of forms; each gets an A and a B classroom.")
    @click.option("--days", default=30, show_default=True, help="Days of attendance history to generate.")
    @click.option("--seed", "random_seed", type=int, default=None, help="Random seed for reproducible data.")
    @with_appcontext
    def seed(forms, days, random_seed):
        """Replaces all data with sample classrooms, students and attendance"""
        click.echo("🌱 Starting database seeding...")
        summary = seed_data(db.session, forms=forms, days=days, rng=random.Random(random_seed))
        click.echo("✅ Seed data inserted successfully.")
        click.echo(f"   • Classrooms: {summary['classrooms']}")
        click.echo(f"   • Students: {summary['students']}")
        click.echo(f"   • Attendance records: {summary['attendance']}")
