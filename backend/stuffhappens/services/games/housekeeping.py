import time

from stuffhappens import socketio


def run_cleanup(app, days=None) -> int:
    """Remove stale playing games once, inside an app context."""
    with app.app_context():
        if days is None:
            days = int(app.config.get('STALE_GAME_DAYS', 7))
        return app.extensions['game_engine'].cleanup_stale_games(days)


def schedule_cleanup(app) -> bool:
    """Start the periodic stale-game cleanup as a background task.

    - No-ops in TESTING mode or when CLEANUP_INTERVAL_SEC is 0
    - Holds no game lock; a cleanup racing a live request only ever deletes
      games that have sat untouched for days
    """
    interval = int(app.config.get('CLEANUP_INTERVAL_SEC', 0))
    if app.config.get('TESTING') or interval <= 0:
        return False

    def _worker(delay: int):
        while True:
            time.sleep(delay)
            try:
                run_cleanup(app)
            except Exception:
                # Keep the loop alive; the next tick retries
                app.logger.exception("[cleanup] failed")

    app.logger.info(f"[cleanup-set] interval={interval}s days={app.config.get('STALE_GAME_DAYS', 7)}")
    socketio.start_background_task(_worker, interval)
    return True
