import os
import sys

# Add ROOT to sys.path (to find the 'waiver_intake' package when not installed)
root_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if root_dir not in sys.path:
    sys.path.append(root_dir)

try:
    from waiver_intake.app import create_app
    app = create_app()

except Exception as e:
    # Diagnostic Fail-Safe
    from flask import Flask
    import traceback
    tb = traceback.format_exc()
    app = Flask(__name__)
    app.logger.error(f"Boot error: {e}\n{tb}")

    @app.route('/', defaults={'path': ''})
    @app.route('/<path:path>')
    def catch_all(path):
        return f"""
        <html>
        <head><title>Boot Error</title></head>
        <body style="font-family: monospace; padding: 20px;">
            <h1 style="color: red;">CRITICAL BOOT ERROR</h1>
            <p>The waiver service could not start due to an error during import.</p>

            <h3>Exception:</h3>
            <pre style="background: #eee; padding: 10px;">{str(e)}</pre>

            <h3>Traceback:</h3>
            <pre style="background: #eee; padding: 10px;">{tb}</pre>
        </body>
        </html>
        """, 500
