from app.models.quiz import GenerationRecord

from conftest import API, FailingAIService, approve_plan, generate_plan, get_quiz, manual_question


def _approved_plan(client, quiz_id, **kwargs):
    plan = generate_plan(client, quiz_id, **kwargs)
    approve_plan(client, plan["id"])
    return plan


def test_generate_questions_from_approved_plan(client, quiz_with_objectives, ai, db):
    _, quiz, objectives = quiz_with_objectives
    plan = _approved_plan(client, quiz["id"])

    response = client.post(f"{API}/quizzes/{quiz['id']}/questions/generate", json={"plan_id": plan["id"]})

    assert response.status_code == 201, response.text
    questions = response.json()
    assert len(questions) == 6
    assert [q["order"] for q in questions] == list(range(6))
    assert [q["type"] for q in questions[:3]] == ["multiple-choice", "true-false", "flashcard"]
    assert {q["learning_objective_id"] for q in questions} == {o["id"] for o in objectives}
    assert all(q["generation_plan_id"] == plan["id"] for q in questions)
    assert all(q["review_status"] == "pending" for q in questions)
    assert questions[0]["generation_metadata"]["llm_model"] == "fake-model"
    assert len(ai.question_calls) == 6

    body = get_quiz(client, quiz["id"])
    assert body["status"] == "completed"
    assert body["progress"]["questions_generated"] is True
    assert client.get(f"{API}/plans/{plan['id']}").json()["status"] == "used"
    record = db.query(GenerationRecord).filter(GenerationRecord.quiz_id == quiz["id"]).one()
    assert record.success is True
    assert record.questions_generated == 6
    assert record.approach == "support"


def test_questions_are_appended_after_existing_ones(client, quiz_with_objectives):
    _, quiz, objectives = quiz_with_objectives
    manual_question(client, quiz["id"], objectives[0]["id"])
    plan = _approved_plan(client, quiz["id"])

    generated = client.post(
        f"{API}/quizzes/{quiz['id']}/questions/generate", json={"plan_id": plan["id"]}
    ).json()

    assert [q["order"] for q in generated] == list(range(1, 7))


def test_used_plan_can_generate_again(client, quiz_with_objectives):
    _, quiz, _ = quiz_with_objectives
    plan = _approved_plan(client, quiz["id"])
    url = f"{API}/quizzes/{quiz['id']}/questions/generate"
    client.post(url, json={"plan_id": plan["id"]})

    response = client.post(url, json={"plan_id": plan["id"]})

    assert response.status_code == 201
    assert len(client.get(f"{API}/quizzes/{quiz['id']}/questions").json()) == 12


def test_generation_needs_approved_plan(client, quiz_with_objectives):
    _, quiz, _ = quiz_with_objectives
    plan = generate_plan(client, quiz["id"])

    response = client.post(f"{API}/quizzes/{quiz['id']}/questions/generate", json={"plan_id": plan["id"]})

    assert response.status_code == 404
    assert get_quiz(client, quiz["id"])["questions"] == []


def test_generation_with_stale_plan(client, quiz_with_objectives):
    _, quiz, objectives = quiz_with_objectives
    plan = _approved_plan(client, quiz["id"])
    client.delete(f"{API}/objectives/{objectives[1]['id']}")

    response = client.post(f"{API}/quizzes/{quiz['id']}/questions/generate", json={"plan_id": plan["id"]})

    assert response.status_code == 400
    assert response.json()["code"] == "PLAN_OUTDATED"


def test_failed_generation_stores_nothing_but_a_record(client, quiz_with_objectives, use_ai, db):
    _, quiz, _ = quiz_with_objectives
    plan = _approved_plan(client, quiz["id"])
    use_ai(FailingAIService())

    response = client.post(f"{API}/quizzes/{quiz['id']}/questions/generate", json={"plan_id": plan["id"]})

    assert response.status_code == 503
    assert response.json()["code"] == "AI_GENERATION_ERROR"
    body = get_quiz(client, quiz["id"])
    assert body["questions"] == []
    assert body["status"] == "plan-approved"
    assert client.get(f"{API}/plans/{plan['id']}").json()["status"] == "approved"
    record = db.query(GenerationRecord).filter(GenerationRecord.quiz_id == quiz["id"]).one()
    assert record.success is False
    assert record.questions_generated == 0
    assert record.approach == "support"


def test_manual_question_uses_quiz_difficulty(client, quiz_with_objectives):
    _, quiz, objectives = quiz_with_objectives

    question = manual_question(client, quiz["id"], objectives[0]["id"])

    assert question["order"] == 0
    assert question["difficulty"] == "moderate"
    assert question["generation_metadata"] == {"is_manual": True}
    assert question["generation_plan_id"] is None


def test_manual_question_needs_objective_of_the_quiz(client, quiz_with_objectives):
    folder, quiz, _ = quiz_with_objectives
    other = client.post(f"{API}/folders/{folder['id']}/quizzes", json={"name": "Quiz 2"}).json()
    foreign = client.post(f"{API}/quizzes/{other['id']}/objectives", json={"texts": ["Elsewhere"]}).json()[0]

    response = client.post(
        f"{API}/quizzes/{quiz['id']}/questions",
        json={"learning_objective_id": foreign["id"], "type": "summary", "question_text": "Summarize"},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_OBJECTIVES"


def test_edit_question_keeps_previous_version(client, quiz_with_objectives):
    _, quiz, objectives = quiz_with_objectives
    question = manual_question(client, quiz["id"], objectives[0]["id"], "Old wording?")

    response = client.patch(
        f"{API}/questions/{question['id']}",
        json={"question_text": "New wording?", "difficulty": "hard", "changes": "Reworded"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["question_text"] == "New wording?"
    assert body["difficulty"] == "hard"
    assert len(body["edit_history"]) == 1
    entry = body["edit_history"][0]
    assert entry["changes"] == "Reworded"
    assert entry["previous_version"]["question_text"] == "Old wording?"


def test_edit_cannot_clear_required_fields(client, quiz_with_objectives):
    _, quiz, objectives = quiz_with_objectives
    question = manual_question(client, quiz["id"], objectives[0]["id"], "Old wording?")
    url = f"{API}/questions/{question['id']}"

    cleared = [
        client.patch(url, json={"content": None}),
        client.patch(url, json={"question_text": None}),
        client.patch(url, json={"difficulty": None}),
    ]

    for response in cleared:
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"
    stored = client.get(f"{API}/quizzes/{quiz['id']}/questions").json()[0]
    assert stored["content"] == question["content"]
    assert stored["question_text"] == "Old wording?"
    assert stored["edit_history"] == []
    assert get_quiz(client, quiz["id"])["questions"][0]["content"] == question["content"]


def test_regenerate_question(client, quiz_with_objectives, db):
    _, quiz, objectives = quiz_with_objectives
    question = manual_question(client, quiz["id"], objectives[0]["id"], "Old wording?")

    response = client.post(f"{API}/questions/{question['id']}/regenerate")

    assert response.status_code == 200
    body = response.json()
    assert body["question_text"] == "Review this concept"
    assert body["content"]["back"] == "Explain recursion"
    assert body["generation_metadata"]["llm_model"] == "fake-model"
    assert [e["changes"] for e in body["edit_history"]] == ["AI regeneration"]
    record = db.query(GenerationRecord).filter(GenerationRecord.quiz_id == quiz["id"]).one()
    assert record.success is True
    assert record.questions_generated == 1
    assert record.approach is None


def test_failed_regeneration_leaves_question_untouched(client, quiz_with_objectives, use_ai, db):
    _, quiz, objectives = quiz_with_objectives
    question = manual_question(client, quiz["id"], objectives[0]["id"], "Old wording?")
    use_ai(FailingAIService())

    response = client.post(f"{API}/questions/{question['id']}/regenerate")

    assert response.status_code == 503
    stored = client.get(f"{API}/quizzes/{quiz['id']}/questions").json()[0]
    assert stored["question_text"] == "Old wording?"
    assert stored["edit_history"] == []
    record = db.query(GenerationRecord).filter(GenerationRecord.quiz_id == quiz["id"]).one()
    assert record.success is False
    assert record.questions_generated == 0
    assert record.llm_model == "failing-model"
    assert record.error_message == "AI provider timed out"


def test_reorder_questions(client, quiz_with_objectives):
    _, quiz, objectives = quiz_with_objectives
    ids = [manual_question(client, quiz["id"], objectives[0]["id"], f"Q{i}?")["id"] for i in range(3)]
    url = f"{API}/quizzes/{quiz['id']}/questions/reorder"

    response = client.put(url, json={"question_ids": [ids[2], ids[0], ids[1]]})
    missing = client.put(url, json={"question_ids": ids[:2]})

    assert [(q["id"], q["order"]) for q in response.json()] == [(ids[2], 0), (ids[0], 1), (ids[1], 2)]
    assert missing.status_code == 400
    assert missing.json()["code"] == "INVALID_QUESTIONS"


def test_review_status_moves_freely(client, quiz_with_objectives):
    _, quiz, objectives = quiz_with_objectives
    question = manual_question(client, quiz["id"], objectives[0]["id"])
    url = f"{API}/questions/{question['id']}/review-status"

    assert client.put(url, json={"review_status": "rejected"}).json()["review_status"] == "rejected"
    assert client.put(url, json={"review_status": "approved"}).json()["review_status"] == "approved"
    assert client.put(url, json={"review_status": "published"}).status_code == 422


def test_delete_question_compacts_order(client, quiz_with_objectives):
    folder, quiz, objectives = quiz_with_objectives
    ids = [manual_question(client, quiz["id"], objectives[0]["id"], f"Q{i}?")["id"] for i in range(3)]

    response = client.delete(f"{API}/questions/{ids[1]}")

    assert response.status_code == 204
    questions = client.get(f"{API}/quizzes/{quiz['id']}/questions").json()
    assert [(q["id"], q["order"]) for q in questions] == [(ids[0], 0), (ids[2], 1)]
    assert client.get(f"{API}/folders/{folder['id']}").json()["total_questions"] == 2


def test_question_of_other_instructor_is_not_found(client, quiz_with_objectives, other_user, act_as):
    _, quiz, objectives = quiz_with_objectives
    question = manual_question(client, quiz["id"], objectives[0]["id"])
    act_as(other_user)

    assert client.patch(f"{API}/questions/{question['id']}", json={"question_text": "Mine?"}).status_code == 404
    assert client.delete(f"{API}/questions/{question['id']}").status_code == 404
