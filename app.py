import os

from src.access_control.main import create_app

app = create_app()


if __name__ == "__main__":
    # threaded: each stream subscriber holds a worker thread
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "3000")), threaded=True)
