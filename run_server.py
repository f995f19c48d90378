"""Development server that stays alive"""

import sys

if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8")

from app import create_app, socketio

app = create_app(bootstrap_runtime=True)
config = app.config["CONTAINER"].config

print(f"Server starting on http://{config.host}:{config.port}")
print("Press Ctrl+C to stop\n")

if __name__ == "__main__":
    try:
        # socketio.run() instead of app.run() for WebSocket support
        socketio.run(
            app,
            host=config.host,
            port=config.port,
            debug=False,
            use_reloader=False,
            allow_unsafe_werkzeug=True,
        )
    except KeyboardInterrupt:
        print("\nServer stopped by user")
