import base64
from io import BytesIO

from PIL import Image
from sqlalchemy.exc import OperationalError

from moturn.models.category import CategoryCreate
from moturn.storage import storage


def test_list_items_newest_first_with_details(client, make_item):
    first = make_item(title="first")
    second = make_item(title="second")

    response = client.get("/api/items")
    assert response.status_code == 200
    body = response.json()
    assert [i["id"] for i in body] == [second.id, first.id]

    item = body[0]
    assert item["sellerId"] == "seller"
    assert item["seller"]["nickname"] == "seller"
    assert item["category"]["slug"] == "digital"
    assert item["_count"] == {"likes": 0, "chats": 0}
    assert item["isLiked"] is False
    assert item["regionCode"] == "성수동"
    assert item["isNegotiable"] is False


def test_list_items_hides_sold_and_hidden(client, make_item):
    active = make_item(title="active")
    make_item(title="sold", status="sold")
    make_item(title="hidden", status="hidden")

    body = client.get("/api/items").json()
    assert [i["id"] for i in body] == [active.id]


def test_filter_by_category_and_region(client, make_item):
    books = storage.create_category(CategoryCreate(name="도서", slug="books"))

    laptop = make_item(title="laptop", region_code="성수동")
    book = make_item(title="book", category_id=books.id, region_code="뚝섬동")

    by_category = client.get("/api/items", params={"categoryId": books.id}).json()
    assert [i["id"] for i in by_category] == [book.id]

    by_region = client.get("/api/items", params={"regionCode": "성수동"}).json()
    assert [i["id"] for i in by_region] == [laptop.id]


def test_search_matches_title_or_description_case_insensitive(client, make_item):
    by_title = make_item(title="MacBook Air")
    by_description = make_item(title="laptop", description="barely used macbook")
    make_item(title="chair", description="herman miller")

    body = client.get("/api/items", params={"search": "MACBOOK"}).json()
    assert {i["id"] for i in body} == {by_title.id, by_description.id}


def test_pagination(client, make_item):
    items = [make_item(title=f"item {n}") for n in range(5)]
    newest_first = [i.id for i in reversed(items)]

    page_two = client.get("/api/items", params={"page": 2, "limit": 2}).json()
    assert [i["id"] for i in page_two] == newest_first[2:4]

    page_three = client.get("/api/items", params={"page": 3, "limit": 2}).json()
    assert [i["id"] for i in page_three] == newest_first[4:]


def test_bad_query_parameters(client):
    response = client.get("/api/items", params={"limit": 0})
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid request data"


def test_get_item_counts_views(client, make_item):
    item = make_item()

    first = client.get(f"/api/items/{item.id}")
    assert first.status_code == 200
    assert first.json()["views"] == 0

    second = client.get(f"/api/items/{item.id}")
    assert second.json()["views"] == 1


def test_get_item_not_found(client):
    response = client.get("/api/items/999")
    assert response.status_code == 404
    assert response.json() == {"message": "Item not found"}


def test_get_item_reports_liked_for_viewer(client, make_item, login):
    item = make_item()
    headers = login("buyer")
    storage.toggle_like("buyer", item.id)

    liked = client.get(f"/api/items/{item.id}", headers=headers).json()
    assert liked["isLiked"] is True
    assert liked["_count"]["likes"] == 1

    anonymous = client.get(f"/api/items/{item.id}").json()
    assert anonymous["isLiked"] is False


def test_create_item_with_images(client, login, category, png_bytes):
    response = client.post(
        "/api/items",
        data={
            "title": "아이폰 14 프로",
            "description": "케이스 끼고 사용",
            "price": "950000",
            "categoryId": str(category.id),
            "isNegotiable": "true",
        },
        files=[
            ("images", ("front.png", png_bytes(), "image/png")),
            ("images", ("back.png", png_bytes((300, 900)), "image/png")),
        ],
        headers=login("seller"),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["sellerId"] == "seller"
    assert body["price"] == 950000
    assert body["isNegotiable"] is True
    assert body["regionCode"] == "성수동"
    assert body["status"] == "active"
    assert len(body["images"]) == 2

    prefix = "data:image/jpeg;base64,"
    assert body["images"][0].startswith(prefix)
    thumbnail = Image.open(BytesIO(base64.b64decode(body["images"][0][len(prefix):])))
    assert thumbnail.format == "JPEG"
    assert thumbnail.size == (512, 512)


def test_create_item_without_images(client, login, category):
    response = client.post(
        "/api/items",
        data={"title": "책상", "price": "65000", "categoryId": str(category.id), "regionCode": "서울숲"},
        headers=login("seller"),
    )
    assert response.status_code == 200
    assert response.json()["images"] == []
    assert response.json()["regionCode"] == "서울숲"


def test_create_item_requires_login(client, category):
    response = client.post("/api/items", data={"title": "책상", "price": "1", "categoryId": str(category.id)})
    assert response.status_code == 401


def test_create_item_invalid_data(client, login, category):
    response = client.post(
        "/api/items",
        data={"title": "", "price": "free", "categoryId": str(category.id)},
        headers=login("seller"),
    )
    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Invalid item data"
    assert {e["loc"][0] for e in body["errors"]} == {"title", "price"}


def test_create_item_unknown_category(client, login):
    response = client.post(
        "/api/items",
        data={"title": "책상", "price": "1000", "categoryId": "999"},
        headers=login("seller"),
    )
    assert response.status_code == 400
    assert response.json()["errors"][0]["msg"] == "Category not found"


def test_create_item_rejects_non_image(client, login, category):
    response = client.post(
        "/api/items",
        data={"title": "책상", "price": "1000", "categoryId": str(category.id)},
        files=[("images", ("notes.txt", b"not an image", "text/plain"))],
        headers=login("seller"),
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid item data"


def test_create_item_rejects_too_many_images(client, login, category, png_bytes):
    image = png_bytes((10, 10))
    response = client.post(
        "/api/items",
        data={"title": "책상", "price": "1000", "categoryId": str(category.id)},
        files=[("images", (f"{n}.png", image, "image/png")) for n in range(11)],
        headers=login("seller"),
    )
    assert response.status_code == 400
    assert response.json()["errors"][0]["loc"] == ["images"]


def test_my_items_include_every_status(client, make_item, login):
    headers = login("seller")
    active = make_item()
    sold = make_item(status="sold")
    make_item(seller_id="someone-else")

    body = client.get("/api/items/mine", headers=headers).json()
    assert {i["id"] for i in body} == {active.id, sold.id}


def test_seller_marks_item_sold(client, make_item, login):
    item = make_item()
    response = client.patch(f"/api/items/{item.id}/status", json={"status": "sold"}, headers=login("seller"))
    assert response.status_code == 200
    assert response.json()["status"] == "sold"
    assert client.get("/api/items").json() == []


def test_only_seller_changes_status(client, make_item, login):
    item = make_item()
    response = client.patch(f"/api/items/{item.id}/status", json={"status": "hidden"}, headers=login("buyer"))
    assert response.status_code == 403


def test_status_must_be_known(client, make_item, login):
    item = make_item()
    response = client.patch(f"/api/items/{item.id}/status", json={"status": "reserved"}, headers=login("seller"))
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid item data"


def test_my_items_database_error_is_json(client, login, monkeypatch):
    headers = login("seller")

    def broken(seller_id):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(storage, "get_items_by_seller", broken)
    response = client.get("/api/items/mine", headers=headers)
    assert response.status_code == 500
    assert response.json() == {"message": "Failed to fetch items"}


def test_status_change_database_error_is_json(client, make_item, login, monkeypatch):
    item = make_item()
    headers = login("seller")

    def broken(item_id, status):
        raise OperationalError("UPDATE", {}, Exception("database is locked"))

    monkeypatch.setattr(storage, "update_item_status", broken)
    response = client.patch(f"/api/items/{item.id}/status", json={"status": "sold"}, headers=headers)
    assert response.status_code == 500
    assert response.json() == {"message": "Failed to update item"}
