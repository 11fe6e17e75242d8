import os
import logging
from dotenv import load_dotenv
load_dotenv() # Load env vars before anything else

from flask import Flask, jsonify
from werkzeug.middleware.proxy_fix import ProxyFix
from flask_migrate import Migrate

from waiver_intake.models import db
from waiver_intake.routes.waiver import waiver_bp
from waiver_intake.services.supabase_service import init_supabase
from waiver_intake.services.storage_service import SupabaseBlobStorage, LocalBlobStorage
from waiver_intake.services.record_service import SupabaseWaiverStore, SqlWaiverStore


def create_app(test_config=None):
    app = Flask(__name__, instance_path='/tmp')
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)
    app.logger.setLevel(logging.INFO)

    # --- CONFIGURATION ---
    # Supabase (primary store for records + images)
    app.config['SUPABASE_URL'] = os.environ.get('SUPABASE_URL')
    app.config['SUPABASE_KEY'] = os.environ.get('SUPABASE_KEY')
    app.config['SUPABASE_SERVICE_ROLE_KEY'] = os.environ.get('SUPABASE_SERVICE_ROLE_KEY')
    app.config['WAIVER_BUCKET'] = os.environ.get('WAIVER_BUCKET', 'waivers')

    # Local fallback
    database_url = os.environ.get('DATABASE_URL') or 'sqlite:////tmp/waivers.db'
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)
    app.config['SQLALCHEMY_DATABASE_URI'] = database_url
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['WAIVER_UPLOAD_FOLDER'] = os.environ.get('WAIVER_UPLOAD_FOLDER', 'static/uploads')

    # Email (Resend)
    app.config['RESEND_API_KEY'] = os.environ.get('RESEND_API_KEY')
    app.config['FROM_EMAIL'] = os.environ.get('FROM_EMAIL', 'Broken Art Tattoo <no-reply@brokenarttattoo.com>')
    app.config['REPLY_TO'] = os.environ.get('REPLY_TO')

    if test_config:
        app.config.update(test_config)

    # --- BACKENDS ---
    try:
        app.supabase = init_supabase(app)
    except Exception as supabase_e:
        app.logger.error(f"Supabase Init Error: {supabase_e}")
        app.supabase = None

    db.init_app(app)
    Migrate(app, db)

    if app.supabase:
        app.waiver_storage = SupabaseBlobStorage(app.supabase, app.config['WAIVER_BUCKET'])
        app.waiver_store = SupabaseWaiverStore(app.supabase)
        app.logger.info("Waiver backend: Supabase")
    else:
        upload_folder = app.config['WAIVER_UPLOAD_FOLDER']
        # Read-only filesystem (Vercel): fall back to /tmp
        try:
            os.makedirs(upload_folder, exist_ok=True)
        except OSError:
            upload_folder = '/tmp/uploads'
            os.makedirs(upload_folder, exist_ok=True)
        app.config['WAIVER_UPLOAD_FOLDER'] = upload_folder

        app.waiver_storage = LocalBlobStorage(upload_folder)
        app.waiver_store = SqlWaiverStore()
        app.logger.warning(f"Supabase not configured. Using {upload_folder} and {app.config['SQLALCHEMY_DATABASE_URI']}")

        with app.app_context():
            db.create_all()

    # --- BLUEPRINTS ---
    app.register_blueprint(waiver_bp)

    @app.route('/ping')
    def ping():
        return "pong"

    # --- ERROR HANDLERS ---
    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({"ok": False, "error": "Not found"}), 404

    @app.errorhandler(500)
    def internal_error(error):
        try:
            db.session.rollback()
        except Exception as rollback_e:
            app.logger.error(f"Rollback failed: {rollback_e}")
        return jsonify({"ok": False, "error": "Server error"}), 500

    return app


if __name__ == '__main__':
    create_app().run(debug=True, port=5001)
