from conftest import (
    API,
    approve_plan,
    create_folder,
    create_quiz,
    create_text_material,
    generate_plan,
    get_quiz,
    manual_question,
)


def test_new_quiz_is_draft_with_default_settings(client):
    folder = create_folder(client)

    quiz = create_quiz(client, folder["id"])

    assert quiz["status"] == "draft"
    assert quiz["progress"] == {
        "materials_assigned": False,
        "objectives_set": False,
        "plan_generated": False,
        "plan_approved": False,
        "questions_generated": False,
    }
    assert quiz["settings"]["pedagogical_approach"] == "support"
    assert quiz["settings"]["questions_per_objective"] == 3
    assert quiz["settings"]["difficulty"] == "moderate"


def test_quiz_name_unique_within_folder(client):
    folder = create_folder(client)
    other_folder = create_folder(client, "CS102")
    create_quiz(client, folder["id"], "Quiz 1")

    clash = client.post(f"{API}/folders/{folder['id']}/quizzes", json={"name": "Quiz 1"})
    elsewhere = client.post(f"{API}/folders/{other_folder['id']}/quizzes", json={"name": "Quiz 1"})

    assert clash.status_code == 409
    assert clash.json()["code"] == "DUPLICATE_QUIZ"
    assert elsewhere.status_code == 201


def test_quiz_materials_must_come_from_its_folder(client):
    folder = create_folder(client)
    other_folder = create_folder(client, "CS102")
    foreign = create_text_material(client, other_folder["id"])

    response = client.post(
        f"{API}/folders/{folder['id']}/quizzes",
        json={"name": "Quiz 1", "material_ids": [foreign["id"]]},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_MATERIALS"


def test_assign_materials_replaces_set_and_tracks_usage(client):
    folder = create_folder(client)
    first = create_text_material(client, folder["id"], "One", "Students will learn lists.")
    second = create_text_material(client, folder["id"], "Two", "Students will learn maps.")
    quiz = create_quiz(client, folder["id"])

    response = client.put(f"{API}/quizzes/{quiz['id']}/materials", json={"material_ids": [first["id"], second["id"]]})
    assert response.status_code == 200
    assert response.json()["status"] == "materials-assigned"

    response = client.put(f"{API}/quizzes/{quiz['id']}/materials", json={"material_ids": [second["id"]]})
    assert [m["id"] for m in response.json()["materials"]] == [second["id"]]

    materials = {m["id"]: m for m in client.get(f"{API}/folders/{folder['id']}/materials").json()}
    assert materials[first["id"]]["times_used_in_quiz"] == 1
    assert materials[second["id"]]["times_used_in_quiz"] == 1
    assert materials[second["id"]]["last_used"] is not None

    response = client.put(f"{API}/quizzes/{quiz['id']}/materials", json={"material_ids": []})
    assert response.json()["status"] == "draft"


def test_update_quiz_merges_settings_and_renames(client):
    folder = create_folder(client)
    quiz = create_quiz(client, folder["id"])
    create_quiz(client, folder["id"], "Quiz 2")

    clash = client.patch(f"{API}/quizzes/{quiz['id']}", json={"name": "Quiz 2"})
    response = client.patch(
        f"{API}/quizzes/{quiz['id']}",
        json={"name": "Midterm", "settings": {"difficulty": "hard"}},
    )

    assert clash.status_code == 409
    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Midterm"
    assert body["settings"]["difficulty"] == "hard"
    assert body["settings"]["pedagogical_approach"] == "support"


def test_invalid_settings_are_rejected(client):
    folder = create_folder(client)
    quiz = create_quiz(client, folder["id"])

    response = client.patch(
        f"{API}/quizzes/{quiz['id']}", json={"settings": {"questions_per_objective": 11}}
    )

    assert response.status_code == 422


def test_progress_endpoint_counts_collections(client, quiz_with_objectives):
    _, quiz, _ = quiz_with_objectives
    generate_plan(client, quiz["id"])

    response = client.get(f"{API}/quizzes/{quiz['id']}/progress")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "plan-generated"
    assert body["counts"] == {"materials": 0, "objectives": 2, "plans": 1, "questions": 0}
    assert body["progress"]["plan_generated"] is True
    assert body["active_plan_id"] is None


def test_duplicate_quiz_copies_materials_and_settings_only(client, quiz_with_objectives):
    folder, quiz, _ = quiz_with_objectives
    material = create_text_material(client, folder["id"])
    client.put(f"{API}/quizzes/{quiz['id']}/materials", json={"material_ids": [material["id"]]})
    client.patch(f"{API}/quizzes/{quiz['id']}", json={"settings": {"difficulty": "easy"}})

    response = client.post(f"{API}/quizzes/{quiz['id']}/duplicate", json={})
    clash = client.post(f"{API}/quizzes/{quiz['id']}/duplicate", json={})

    assert response.status_code == 201
    copy = response.json()
    assert copy["name"] == "Quiz 1 (Copy)"
    assert [m["id"] for m in copy["materials"]] == [material["id"]]
    assert copy["settings"]["difficulty"] == "easy"
    assert copy["objectives"] == []
    assert copy["status"] == "materials-assigned"
    assert clash.status_code == 409


def test_delete_quiz_removes_everything_it_owns(client, quiz_with_objectives, db):
    from app.models.objective import LearningObjective
    from app.models.plan import GenerationPlan
    from app.models.question import Question

    folder, quiz, objectives = quiz_with_objectives
    plan = generate_plan(client, quiz["id"])
    approve_plan(client, plan["id"])
    client.post(f"{API}/quizzes/{quiz['id']}/questions/generate", json={"plan_id": plan["id"]})
    client.post(f"{API}/quizzes/{quiz['id']}/exports")

    response = client.delete(f"{API}/quizzes/{quiz['id']}")

    assert response.status_code == 204
    assert client.get(f"{API}/quizzes/{quiz['id']}").status_code == 404
    assert db.query(Question).count() == 0
    assert db.query(LearningObjective).count() == 0
    assert db.query(GenerationPlan).count() == 0
    folder = client.get(f"{API}/folders/{folder['id']}").json()
    assert folder["total_quizzes"] == 0
    assert folder["total_questions"] == 0


def test_quiz_of_other_instructor_is_not_found(client, quiz_with_objectives, other_user, act_as):
    _, quiz, _ = quiz_with_objectives
    act_as(other_user)

    assert client.get(f"{API}/quizzes/{quiz['id']}").status_code == 404
    assert client.patch(f"{API}/quizzes/{quiz['id']}", json={"name": "Mine"}).status_code == 404
    assert client.delete(f"{API}/quizzes/{quiz['id']}").status_code == 404


def test_quiz_read_model_orders_collections(client, quiz_with_objectives):
    _, quiz, objectives = quiz_with_objectives
    first = manual_question(client, quiz["id"], objectives[0]["id"], "First?")
    second = manual_question(client, quiz["id"], objectives[1]["id"], "Second?")
    older = generate_plan(client, quiz["id"])
    newer = generate_plan(client, quiz["id"], approach="assess")

    body = get_quiz(client, quiz["id"])

    assert [o["order"] for o in body["objectives"]] == [0, 1]
    assert [q["id"] for q in body["questions"]] == [first["id"], second["id"]]
    assert [p["id"] for p in body["plans"]] == [newer["id"], older["id"]]
    assert body["status"] == "completed"
