import logging

import click
from flask import Flask
from config import Config
from app.extensions import db

def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize Flask extensions
    db.init_app(app)

    # Register Blueprints
    from app.routes import main, admin, auth
    app.register_blueprint(main.bp)
    app.register_blueprint(admin.bp)
    app.register_blueprint(auth.bp)

    # Note: In production we should use migrations.
    with app.app_context():
        db.create_all()

    from app.importer import ConfigurationError, ImportOrchestrator, ImportOptions, ParseError, SQLAlchemyStore, SCHEMAS

    @app.cli.command('init-db')
    def init_db_command():
        """Create all database tables."""
        db.create_all()
        print('Initialized the database.')

    @app.cli.command('import-csv')
    @click.argument('kind', type=click.Choice(sorted(SCHEMAS)))
    @click.argument('path', type=click.Path(exists=True, dir_okay=False))
    @click.option('--dry-run', is_flag=True, help='Validate only; write nothing.')
    @click.option('--allow-duplicates', is_flag=True, help='Plain insert instead of skipping known rows.')
    @click.option('--batch-size', type=int, default=None, help='Rows per write (default from config).')
    def import_csv_command(kind, path, dry_run, allow_duplicates, batch_size):
        """Import teams, players, matches or player_stats from a CSV file."""
        logging.basicConfig(level=logging.INFO)
        with open(path, newline='', encoding='utf-8-sig') as f:
            text = f.read()

        options = ImportOptions(
            dry_run=dry_run,
            skip_duplicates=not allow_duplicates,
            batch_size=batch_size or app.config['IMPORT_BATCH_SIZE'],
        )
        orchestrator = ImportOrchestrator(
            SQLAlchemyStore(db.session),
            comment_prefix=app.config['IMPORT_COMMENT_PREFIX'],
        )
        try:
            summary = orchestrator.run(kind, text, options)
        except (ParseError, ConfigurationError) as e:
            raise click.ClickException(str(e))

        print(summary.message)
        print(f"Rows read: {summary.total_rows}, valid: {summary.records_processed}, "
              f"imported: {summary.records_imported}")
        for error in summary.errors:
            print(f"  - {error}")

    return app
