def test_message_is_echoed(app):
    socketio = app.extensions["socketio"]
    client = socketio.test_client(app)

    assert client.is_connected()
    client.send("hello")

    received = client.get_received()
    assert any(packet["name"] == "message" and "Server received: hello" in str(packet["args"]) for packet in received)
    client.disconnect()
