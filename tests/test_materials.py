import hashlib

import pytest

from app.models.material import Material
from app.services.file_service import FileStorage

from conftest import API, create_folder, create_quiz, create_text_material, get_quiz


def _upload(client, folder_id, *files):
    return client.post(
        f"{API}/folders/{folder_id}/materials/upload",
        files=[("files", f) for f in files],
    )


def test_upload_text_file_is_processed_in_background(client):
    folder = create_folder(client)

    response = _upload(client, folder["id"], ("notes.txt", b"Students will learn recursion.", "text/plain"))

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["errors"] == []
    material = body["materials"][0]
    assert material["type"] == "txt"
    assert material["checksum"] == hashlib.md5(b"Students will learn recursion.").hexdigest()

    status = client.get(f"{API}/materials/{material['id']}/status").json()
    assert status["processing_status"] == "completed"
    assert status["processing_error"] is None


def test_extracted_text_is_stored(client, db):
    folder = create_folder(client)
    material_id = _upload(
        client, folder["id"], ("notes.txt", b"Recursion needs a base case.", "text/plain")
    ).json()["materials"][0]["id"]

    stored = db.query(Material).filter(Material.id == material_id).one()
    assert stored.content == "Recursion needs a base case."


def test_duplicate_upload_in_same_folder_conflicts(client, db):
    folder = create_folder(client)
    _upload(client, folder["id"], ("a.txt", b"same bytes", "text/plain"))

    response = _upload(client, folder["id"], ("b.txt", b"same bytes", "text/plain"))

    assert response.status_code == 409
    assert response.json()["code"] == "DUPLICATE_FILE"
    assert db.query(Material).filter(Material.folder_id == folder["id"]).count() == 1


def test_same_file_in_two_folders_is_allowed(client):
    first = create_folder(client, "CS101")
    second = create_folder(client, "CS102")

    _upload(client, first["id"], ("a.txt", b"same bytes", "text/plain"))
    response = _upload(client, second["id"], ("a.txt", b"same bytes", "text/plain"))

    assert response.status_code == 201


def test_batch_upload_reports_rejected_files(client):
    folder = create_folder(client)

    response = _upload(
        client,
        folder["id"],
        ("good.txt", b"Some useful notes", "text/plain"),
        ("image.png", b"\x89PNG", "image/png"),
        ("empty.txt", b"", "text/plain"),
    )

    assert response.status_code == 201
    body = response.json()
    assert [m["name"] for m in body["materials"]] == ["good.txt"]
    assert {e["code"] for e in body["errors"]} == {"INVALID_FILE_TYPE", "EMPTY_FILE"}


def test_upload_with_only_invalid_files_fails(client):
    folder = create_folder(client)

    response = _upload(client, folder["id"], ("image.png", b"\x89PNG", "image/png"))

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_FILE_TYPE"


def test_url_material_is_fetched(client):
    folder = create_folder(client)

    response = client.post(
        f"{API}/folders/{folder['id']}/materials/url", json={"url": "HTTPS://Example.com/intro"}
    )

    assert response.status_code == 201
    material = response.json()
    assert material["url"] == "https://example.com/intro"
    status = client.get(f"{API}/materials/{material['id']}/status").json()
    assert status["processing_status"] == "completed"


def test_duplicate_and_invalid_urls(client):
    folder = create_folder(client)
    url = f"{API}/folders/{folder['id']}/materials/url"
    client.post(url, json={"url": "https://example.com/intro"})

    duplicate = client.post(url, json={"url": "https://example.com/intro"})
    invalid = client.post(url, json={"url": "ftp://example.com/file"})

    assert duplicate.status_code == 409
    assert duplicate.json()["code"] == "DUPLICATE_URL"
    assert invalid.status_code == 400
    assert invalid.json()["code"] == "INVALID_URL"


def test_unreachable_url_fails_and_can_be_reprocessed(client):
    folder = create_folder(client)
    material = client.post(
        f"{API}/folders/{folder['id']}/materials/url", json={"url": "https://example.com/missing"}
    ).json()

    status = client.get(f"{API}/materials/{material['id']}/status").json()
    assert status["processing_status"] == "failed"
    assert "missing" in status["processing_error"]["message"]
    assert status["processing_error"]["timestamp"]

    response = client.post(f"{API}/materials/{material['id']}/reprocess")

    # Processing runs again right after the reset and fails the same way
    assert response.status_code == 200
    assert response.json()["processing_status"] == "pending"
    assert response.json()["processing_error"] is None
    status = client.get(f"{API}/materials/{material['id']}/status").json()
    assert status["processing_status"] == "failed"


def test_reprocess_requires_failed_material(client):
    folder = create_folder(client)
    material = create_text_material(client, folder["id"])

    response = client.post(f"{API}/materials/{material['id']}/reprocess")

    assert response.status_code == 400
    assert response.json()["code"] == "MATERIAL_NOT_FAILED"


def test_text_material_is_immediately_completed(client):
    folder = create_folder(client)

    material = create_text_material(client, folder["id"], content="Students will learn graphs.")

    assert material["processing_status"] == "completed"
    assert material["checksum"] == hashlib.md5("Students will learn graphs.".encode()).hexdigest()

    duplicate = client.post(
        f"{API}/folders/{folder['id']}/materials/text",
        json={"name": "Copy", "content": "Students will learn graphs."},
    )
    assert duplicate.status_code == 409
    assert duplicate.json()["code"] == "DUPLICATE_CONTENT"


def test_manual_status_transitions(client):
    folder = create_folder(client)
    material = client.post(
        f"{API}/folders/{folder['id']}/materials/url", json={"url": "https://example.com/missing"}
    ).json()
    url = f"{API}/materials/{material['id']}/status"

    # failed -> completed skips the lifecycle
    invalid = client.patch(url, json={"status": "completed"})
    reset = client.patch(url, json={"status": "pending"})
    processing = client.patch(url, json={"status": "processing"})
    failed = client.patch(url, json={"status": "failed", "error": "Parser crashed"})

    assert invalid.status_code == 400
    assert invalid.json()["code"] == "INVALID_STATUS_TRANSITION"
    assert reset.json()["processing_status"] == "pending"
    assert processing.json()["processing_status"] == "processing"
    assert failed.json()["processing_error"]["message"] == "Parser crashed"


def test_rename_and_list_materials(client):
    folder = create_folder(client)
    material = create_text_material(client, folder["id"], name="Notes")

    renamed = client.patch(f"{API}/materials/{material['id']}", json={"name": "Lecture notes"})
    listed = client.get(f"{API}/folders/{folder['id']}/materials").json()

    assert renamed.json()["name"] == "Lecture notes"
    assert [m["name"] for m in listed] == ["Lecture notes"]


def test_delete_material_detaches_it_from_quizzes(client, storage):
    folder = create_folder(client)
    uploaded = _upload(client, folder["id"], ("notes.txt", b"Students will learn trees.", "text/plain"))
    material = uploaded.json()["materials"][0]
    quiz = create_quiz(client, folder["id"], material_ids=[material["id"]])
    assert quiz["status"] == "materials-assigned"

    response = client.delete(f"{API}/materials/{material['id']}")

    assert response.status_code == 204
    quiz = get_quiz(client, quiz["id"])
    assert quiz["materials"] == []
    assert quiz["status"] == "draft"
    assert quiz["progress"]["materials_assigned"] is False
    assert not any(storage.base_dir.rglob("*notes.txt"))
    folder = client.get(f"{API}/folders/{folder['id']}").json()
    assert folder["total_materials"] == 0


def test_material_of_other_instructor_is_not_found(client, other_user, act_as):
    folder = create_folder(client)
    material = create_text_material(client, folder["id"])
    act_as(other_user)

    assert client.get(f"{API}/materials/{material['id']}/status").status_code == 404
    assert client.delete(f"{API}/materials/{material['id']}").status_code == 404


def test_storage_backends_implement_every_operation(storage):
    class ReadOnlyStorage(FileStorage):
        def read(self, reference):
            return b""

    with pytest.raises(TypeError):
        ReadOnlyStorage()

    stored = storage.save(b"notes", "notes.txt", 1)
    assert storage.read(stored.reference) == b"notes"
    assert storage.delete(stored.reference) is True
    assert storage.delete(stored.reference) is False
