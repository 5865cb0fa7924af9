import json
import time

from moturn.realtime import chat_rooms


def wait_for_room(chat_id, size):
    deadline = time.monotonic() + 2
    while chat_rooms.room_size(chat_id) != size:
        assert time.monotonic() < deadline, f"room {chat_id} never reached {size} members"
        time.sleep(0.01)


def open_chat(client, item, headers):
    return client.post("/api/chats", json={"itemId": item.id}, headers=headers).json()


def test_new_message_pushed_to_joined_socket(client, make_item, login):
    buyer = login("buyer")
    chat = open_chat(client, make_item(), buyer)

    with client.websocket_connect("/ws") as ws:
        ws.send_json({"type": "join_chat", "chatId": chat["id"]})
        wait_for_room(chat["id"], 1)

        sent = client.post(f"/api/chats/{chat['id']}/messages", json={"content": "아직 판매중인가요?"}, headers=buyer)
        assert sent.status_code == 200

        event = ws.receive_json()
        assert event["type"] == "new_message"
        assert event["message"]["id"] == sent.json()["id"]
        assert event["message"]["content"] == "아직 판매중인가요?"
        assert event["message"]["chatId"] == chat["id"]


def test_message_only_reaches_its_room(client, make_item, login):
    alice, bob = login("alice"), login("bob")
    item = make_item()
    alice_chat = open_chat(client, item, alice)
    bob_chat = open_chat(client, item, bob)

    with client.websocket_connect("/ws") as alice_ws, client.websocket_connect("/ws") as bob_ws:
        alice_ws.send_json({"type": "join_chat", "chatId": alice_chat["id"]})
        bob_ws.send_json({"type": "join_chat", "chatId": str(bob_chat["id"])})
        wait_for_room(alice_chat["id"], 1)
        wait_for_room(bob_chat["id"], 1)

        client.post(f"/api/chats/{alice_chat['id']}/messages", json={"content": "for alice"}, headers=alice)
        client.post(f"/api/chats/{bob_chat['id']}/messages", json={"content": "for bob"}, headers=bob)

        assert alice_ws.receive_json()["message"]["content"] == "for alice"
        # bob's first frame is his own message, so alice's never reached him
        assert bob_ws.receive_json()["message"]["content"] == "for bob"


def test_malformed_frames_are_ignored(client, make_item, login):
    buyer = login("buyer")
    chat = open_chat(client, make_item(), buyer)

    with client.websocket_connect("/ws") as ws:
        ws.send_text("not json")
        ws.send_json(["join_chat"])
        ws.send_json({"type": "something_else", "chatId": chat["id"]})
        ws.send_json({"type": "join_chat", "chatId": chat["id"]})
        wait_for_room(chat["id"], 1)

        client.post(f"/api/chats/{chat['id']}/messages", json={"content": "still works"}, headers=buyer)
        assert ws.receive_json()["message"]["content"] == "still works"


def test_disconnect_leaves_rooms(client, make_item, login):
    chat = open_chat(client, make_item(), login("buyer"))

    with client.websocket_connect("/ws") as ws:
        ws.send_json({"type": "join_chat", "chatId": chat["id"]})
        wait_for_room(chat["id"], 1)

    wait_for_room(chat["id"], 0)
    assert str(chat["id"]) not in chat_rooms.rooms


def test_binary_join_frame_is_accepted(client, make_item, login):
    buyer = login("buyer")
    chat = open_chat(client, make_item(), buyer)

    with client.websocket_connect("/ws") as ws:
        ws.send_bytes(b"\xff\xfe not utf-8")
        ws.send_bytes(json.dumps({"type": "join_chat", "chatId": chat["id"]}).encode("utf-8"))
        wait_for_room(chat["id"], 1)

        client.post(f"/api/chats/{chat['id']}/messages", json={"content": "네고 되나요?"}, headers=buyer)
        assert ws.receive_json()["message"]["content"] == "네고 되나요?"
