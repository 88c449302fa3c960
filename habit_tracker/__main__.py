import os

from . import app
from .reminders import start_scheduler

if __name__ == "__main__":
    if app.config["SCHEDULER_ENABLED"]:
        start_scheduler(app)
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", 5000)))
