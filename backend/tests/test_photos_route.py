from fastapi.testclient import TestClient

from gallery.main import app

client = TestClient(app)

PHOTO = {
    "id": "abc123",
    "url": "https://cdn.example.com/photo-abc123.jpg",
    "aspectRatio": 1.5,
    "blurData": "data:image/jpeg;base64,/9j/",
    "title": "Harbor Dusk",
}


def test_thumbnail_link_with_camera_selected():
    response = client.post("/api/photos/thumbnail-link", json={
        "photo": PHOTO,
        "camera": {"make": "FUJIFILM", "model": "X-T5"},
        "selected": True,
    })

    assert response.status_code == 200
    assert response.json() == {
        "href": "/shot-on/fujifilm-x-t5/abc123",
        "className": "active:brightness-75 brightness-50",
        "image": {
            "src": PHOTO["url"],
            "aspectRatio": 1.5,
            "blurData": PHOTO["blurData"],
            "className": "w-full",
            "alt": "Harbor Dusk",
        },
    }


def test_thumbnail_link_untitled_photo():
    photo = {key: value for key, value in PHOTO.items() if key != "title"}

    response = client.post("/api/photos/thumbnail-link", json={"photo": photo})

    assert response.status_code == 200
    assert response.json()["href"] == "/p/abc123"
    assert response.json()["image"]["alt"] == "Untitled"


def test_thumbnail_link_rejects_missing_photo():
    response = client.post("/api/photos/thumbnail-link", json={"tag": "harbor"})
    assert response.status_code == 422


def test_thumbnail_link_rejects_bad_aspect_ratio():
    response = client.post("/api/photos/thumbnail-link", json={
        "photo": {**PHOTO, "aspectRatio": 0},
    })
    assert response.status_code == 422
