import json
import os

from app.models.quiz import GenerationRecord

from conftest import API, approve_plan, create_folder, create_quiz, generate_plan


def _quiz_with_questions(client, quiz_id):
    plan = generate_plan(client, quiz_id)
    approve_plan(client, plan["id"])
    response = client.post(f"{API}/quizzes/{quiz_id}/questions/generate", json={"plan_id": plan["id"]})
    assert response.status_code == 201, response.text
    return response.json()


def test_export_needs_questions(client):
    folder = create_folder(client)
    quiz = create_quiz(client, folder["id"])

    response = client.post(f"{API}/quizzes/{quiz['id']}/exports")

    assert response.status_code == 400
    assert response.json()["code"] == "NO_QUESTIONS"


def test_export_writes_question_set(client, quiz_with_objectives, exporter):
    _, quiz, objectives = quiz_with_objectives
    questions = _quiz_with_questions(client, quiz["id"])

    response = client.post(f"{API}/quizzes/{quiz['id']}/exports")

    assert response.status_code == 201, response.text
    export = response.json()
    assert export["format"] == "h5p"
    assert export["download_count"] == 0
    assert len(export["export_id"]) == 32
    assert export["filename"] == f"Quiz_1_{export['export_id'][:8]}.h5p.json"

    path = os.path.join(exporter.export_dir, export["filename"])
    with open(path, encoding="utf-8") as f:
        document = json.load(f)
    assert document["title"] == "Quiz 1"
    assert [o["id"] for o in document["learningObjectives"]] == [o["id"] for o in objectives]
    assert len(document["questions"]) == len(questions)
    assert document["questions"][0]["library"] == "H5P.MultiChoice 1.16"
    assert document["questions"][0]["params"]["answers"][0]["correct"] is True
    assert os.path.getsize(path) == export["content_length"]


def test_download_counts_and_returns_file(client, quiz_with_objectives):
    _, quiz, _ = quiz_with_objectives
    _quiz_with_questions(client, quiz["id"])
    export = client.post(f"{API}/quizzes/{quiz['id']}/exports").json()

    first = client.get(f"{API}/exports/{export['export_id']}/download")
    second = client.get(f"{API}/exports/{export['export_id']}/download")

    assert first.status_code == 200
    assert second.json()["title"] == "Quiz 1"
    listed = client.get(f"{API}/quizzes/{quiz['id']}/exports").json()
    assert [(e["export_id"], e["download_count"]) for e in listed] == [(export["export_id"], 2)]


def test_download_of_missing_file(client, quiz_with_objectives, exporter):
    _, quiz, _ = quiz_with_objectives
    _quiz_with_questions(client, quiz["id"])
    export = client.post(f"{API}/quizzes/{quiz['id']}/exports").json()
    os.remove(os.path.join(exporter.export_dir, export["filename"]))

    response = client.get(f"{API}/exports/{export['export_id']}/download")

    assert response.status_code == 404


def test_delete_export_removes_file(client, quiz_with_objectives, exporter):
    _, quiz, _ = quiz_with_objectives
    _quiz_with_questions(client, quiz["id"])
    export = client.post(f"{API}/quizzes/{quiz['id']}/exports").json()

    response = client.delete(f"{API}/exports/{export['export_id']}")

    assert response.status_code == 204
    assert client.get(f"{API}/quizzes/{quiz['id']}/exports").json() == []
    assert not os.path.exists(os.path.join(exporter.export_dir, export["filename"]))


def test_export_of_other_instructor_is_not_found(client, quiz_with_objectives, other_user, act_as):
    _, quiz, _ = quiz_with_objectives
    _quiz_with_questions(client, quiz["id"])
    export = client.post(f"{API}/quizzes/{quiz['id']}/exports").json()
    act_as(other_user)

    assert client.get(f"{API}/exports/{export['export_id']}/download").status_code == 404
    assert client.delete(f"{API}/exports/{export['export_id']}").status_code == 404


def test_failed_export_is_recorded(client, quiz_with_objectives, exporter, db):
    _, quiz, _ = quiz_with_objectives
    _quiz_with_questions(client, quiz["id"])
    # A plain file where the export directory should be
    with open(exporter.export_dir, "w") as f:
        f.write("not a directory")

    response = client.post(f"{API}/quizzes/{quiz['id']}/exports")

    assert response.status_code == 503
    assert response.json()["code"] == "EXPORT_ERROR"
    assert client.get(f"{API}/quizzes/{quiz['id']}/exports").json() == []
    failed = (
        db.query(GenerationRecord)
        .filter(GenerationRecord.quiz_id == quiz["id"], GenerationRecord.success.is_(False))
        .one()
    )
    assert failed.error_message == "Failed to write export file"
    assert failed.questions_generated == 0
