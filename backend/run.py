from tkd_scoring import create_app, socketio

app = create_app()

if __name__ == '__main__':
    # Bind on all interfaces so judge phones on the LAN can connect
    socketio.run(app, host=app.config['HOST'], port=app.config['PORT'], allow_unsafe_werkzeug=True)
