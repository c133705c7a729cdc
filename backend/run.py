from stuffhappens import create_app, socketio
from stuffhappens.services.games.housekeeping import schedule_cleanup

app = create_app()

if __name__ == '__main__':
    schedule_cleanup(app)
    # Use SocketIO server to enable websockets in dev
    socketio.run(app, debug=True)
