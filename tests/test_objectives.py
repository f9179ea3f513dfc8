from app.models.quiz import GenerationRecord

from conftest import (
    API,
    FailingAIService,
    add_objectives,
    create_folder,
    create_quiz,
    create_text_material,
    get_quiz,
    manual_question,
)


def test_manual_objectives_are_appended_densely(client):
    folder = create_folder(client)
    quiz = create_quiz(client, folder["id"])

    first = add_objectives(client, quiz["id"], "Explain recursion", "Trace a call stack")
    second = add_objectives(client, quiz["id"], "Write a base case")

    assert [o["order"] for o in first + second] == [0, 1, 2]
    assert all(o["is_ai_generated"] is False for o in first)
    assert get_quiz(client, quiz["id"])["status"] == "objectives-set"


def test_blank_or_too_long_objectives_are_rejected(client):
    folder = create_folder(client)
    quiz = create_quiz(client, folder["id"])

    blank = client.post(f"{API}/quizzes/{quiz['id']}/objectives", json={"texts": ["   "]})
    too_long = client.post(f"{API}/quizzes/{quiz['id']}/objectives", json={"texts": ["x" * 501]})

    assert blank.status_code == 400
    assert too_long.status_code == 400
    assert client.get(f"{API}/quizzes/{quiz['id']}/objectives").json() == []


def test_generate_objectives_from_completed_materials(client, db):
    folder = create_folder(client)
    material = create_text_material(
        client, folder["id"], content="Students will understand recursion. Learners can demonstrate sorting."
    )
    quiz = create_quiz(client, folder["id"])
    add_objectives(client, quiz["id"], "Existing objective")

    response = client.post(
        f"{API}/quizzes/{quiz['id']}/objectives/generate", json={"material_ids": [material["id"]]}
    )

    assert response.status_code == 201, response.text
    generated = response.json()
    assert [o["text"] for o in generated] == ["understand recursion", "can demonstrate sorting"]
    assert [o["order"] for o in generated] == [1, 2]
    assert all(o["is_ai_generated"] for o in generated)
    assert generated[0]["llm_model"] == "fake-model"
    assert generated[0]["generated_from"] == [material["id"]]
    assert generated[0]["confidence"] == 0.75
    record = db.query(GenerationRecord).filter(GenerationRecord.quiz_id == quiz["id"]).one()
    assert record.success is True
    assert record.questions_generated == 2
    assert record.llm_model == "fake-model"


def test_generate_objectives_requires_processed_materials(client):
    folder = create_folder(client)
    pending = client.post(
        f"{API}/folders/{folder['id']}/materials/url", json={"url": "https://example.com/missing"}
    ).json()
    quiz = create_quiz(client, folder["id"])

    response = client.post(
        f"{API}/quizzes/{quiz['id']}/objectives/generate", json={"material_ids": [pending["id"]]}
    )

    assert response.status_code == 400
    assert response.json()["code"] == "MATERIALS_NOT_READY"


def test_generate_objectives_rejects_foreign_materials(client):
    folder = create_folder(client)
    other = create_folder(client, "Other")
    material = create_text_material(client, other["id"])
    quiz = create_quiz(client, folder["id"])

    response = client.post(
        f"{API}/quizzes/{quiz['id']}/objectives/generate", json={"material_ids": [material["id"]]}
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_MATERIALS"


def test_failed_objective_generation_is_recorded(client, use_ai, db):
    folder = create_folder(client)
    material = create_text_material(client, folder["id"])
    quiz = create_quiz(client, folder["id"])
    use_ai(FailingAIService())

    response = client.post(
        f"{API}/quizzes/{quiz['id']}/objectives/generate", json={"material_ids": [material["id"]]}
    )

    assert response.status_code == 503
    assert response.json()["code"] == "AI_GENERATION_ERROR"
    assert client.get(f"{API}/quizzes/{quiz['id']}/objectives").json() == []
    record = db.query(GenerationRecord).filter(GenerationRecord.quiz_id == quiz["id"]).one()
    assert record.success is False
    assert record.llm_model == "failing-model"
    assert record.error_message == "AI provider timed out"


def test_classify_text_appends_statements(client):
    folder = create_folder(client)
    quiz = create_quiz(client, folder["id"])

    response = client.post(
        f"{API}/quizzes/{quiz['id']}/objectives/classify",
        json={"text": "Students will be able to compare algorithms. The room is large."},
    )

    assert response.status_code == 201
    assert [o["text"] for o in response.json()] == ["compare algorithms"]
    assert response.json()[0]["llm_model"] == "text-classification"


def test_classify_text_without_objectives(client):
    folder = create_folder(client)
    quiz = create_quiz(client, folder["id"])

    response = client.post(
        f"{API}/quizzes/{quiz['id']}/objectives/classify", json={"text": "Nothing relevant here at all."}
    )

    assert response.status_code == 400
    assert response.json()["code"] == "NO_OBJECTIVES_FOUND"


def test_edit_objective_text_keeps_history(client, quiz_with_objectives):
    _, _, objectives = quiz_with_objectives
    url = f"{API}/objectives/{objectives[0]['id']}"

    unchanged = client.patch(url, json={"text": "Explain recursion"})
    edited = client.patch(url, json={"text": "Explain recursion with examples", "changes": "Clarified"})

    assert unchanged.json()["edit_history"] == []
    body = edited.json()
    assert body["text"] == "Explain recursion with examples"
    assert [(e["previous_text"], e["changes"]) for e in body["edit_history"]] == [
        ("Explain recursion", "Clarified")
    ]


def test_reorder_objectives(client, quiz_with_objectives):
    _, quiz, objectives = quiz_with_objectives
    ids = [o["id"] for o in objectives]
    url = f"{API}/quizzes/{quiz['id']}/objectives/reorder"

    response = client.put(url, json={"objective_ids": list(reversed(ids))})
    rejected = client.put(url, json={"objective_ids": [ids[0], ids[0]]})

    assert [o["id"] for o in response.json()] == list(reversed(ids))
    assert [o["order"] for o in response.json()] == [0, 1]
    assert rejected.status_code == 400
    assert rejected.json()["code"] == "INVALID_OBJECTIVES"
    listed = client.get(f"{API}/quizzes/{quiz['id']}/objectives").json()
    assert [o["id"] for o in listed] == list(reversed(ids))


def test_deleting_objective_removes_its_questions(client, quiz_with_objectives):
    _, quiz, objectives = quiz_with_objectives
    doomed, kept = objectives
    for i in range(3):
        manual_question(client, quiz["id"], doomed["id"], f"Question {i}?")
    assert get_quiz(client, quiz["id"])["progress"]["questions_generated"] is True

    response = client.delete(f"{API}/objectives/{doomed['id']}")

    assert response.status_code == 204
    body = get_quiz(client, quiz["id"])
    assert body["questions"] == []
    assert body["progress"]["questions_generated"] is False
    assert body["status"] == "objectives-set"
    assert [(o["id"], o["order"]) for o in body["objectives"]] == [(kept["id"], 0)]


def test_deleting_objective_compacts_question_order(client, quiz_with_objectives):
    _, quiz, objectives = quiz_with_objectives
    manual_question(client, quiz["id"], objectives[1]["id"], "Keep 1?")
    manual_question(client, quiz["id"], objectives[0]["id"], "Drop?")
    manual_question(client, quiz["id"], objectives[1]["id"], "Keep 2?")

    client.delete(f"{API}/objectives/{objectives[0]['id']}")

    questions = client.get(f"{API}/quizzes/{quiz['id']}/questions").json()
    assert [(q["question_text"], q["order"]) for q in questions] == [("Keep 1?", 0), ("Keep 2?", 1)]


def test_objective_of_other_instructor_is_not_found(client, quiz_with_objectives, other_user, act_as):
    _, _, objectives = quiz_with_objectives
    act_as(other_user)

    response = client.delete(f"{API}/objectives/{objectives[0]['id']}")

    assert response.status_code == 404
